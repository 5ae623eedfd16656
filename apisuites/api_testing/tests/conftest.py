"""
================================================================================
API Testing Pytest Configuration
================================================================================

Shared fixtures for the live suites against JSONPlaceholder and reqres.

Fixtures:
    - config / harness_config: Configuration loader and its HarnessConfig
    - jsonplaceholder_client / reqres_client: Timed HTTP clients per backend
    - apis: Users / posts / comments resource clients
    - test_data / auth_credentials: Fixture records from config.yaml

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import uuid
from typing import Any, AsyncGenerator, Dict

import allure
import pytest
import pytest_asyncio

from apisuites.api_testing.clients import ApiClients
from apisuites.api_testing.framework import ConfigLoader, HarnessConfig, TimedHttpClient


# =============================================================================
# Session-Scoped Fixtures (Shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def config() -> ConfigLoader:
    """
    Provide configuration loader instance.

    Session-scoped to ensure configuration is loaded only once.
    """
    return ConfigLoader()


@pytest.fixture(scope="session")
def harness_config(config: ConfigLoader) -> HarnessConfig:
    return config.harness_config()


@pytest.fixture(scope="session")
def test_data(config: ConfigLoader) -> Dict[str, Any]:
    """Fixture records from the `test_data` section of config.yaml."""
    return config.get_section("test_data")


@pytest.fixture(scope="session")
def auth_credentials(test_data: Dict[str, Any]) -> Dict[str, str]:
    return test_data.get("auth", {})


# =============================================================================
# Function-Scoped Fixtures (Fresh for each test)
# =============================================================================

@pytest_asyncio.fixture
async def jsonplaceholder_client(
    harness_config: HarnessConfig,
) -> AsyncGenerator[TimedHttpClient, None]:
    """
    Timed HTTP client bound to JSONPlaceholder.

    Usage:
        async def test_example(jsonplaceholder_client):
            response = await jsonplaceholder_client.get("/users/1")
            assert response.status == 200
    """
    async with TimedHttpClient(config=harness_config, backend="jsonplaceholder") as client:
        yield client


@pytest_asyncio.fixture
async def reqres_client(harness_config: HarnessConfig) -> AsyncGenerator[TimedHttpClient, None]:
    """Timed HTTP client bound to reqres (API key header included)."""
    async with TimedHttpClient(config=harness_config, backend="reqres") as client:
        yield client


@pytest.fixture
def apis(jsonplaceholder_client: TimedHttpClient, harness_config: HarnessConfig) -> ApiClients:
    return ApiClients.create(jsonplaceholder_client, harness_config.performance)


@pytest.fixture
def unique_id() -> str:
    """
    Generate unique identifier for test isolation.

    Use this to create unique test data that won't conflict
    with other tests running in parallel.
    """
    return f"autotest_{uuid.uuid4().hex[:8]}"


# =============================================================================
# Allure Reporting Hooks
# =============================================================================

def pytest_exception_interact(node, call, report):
    """Attach additional info on test failure."""
    if report.failed:
        allure.attach(
            str(call.excinfo.value),
            name="Error Details",
            attachment_type=allure.attachment_type.TEXT,
        )
