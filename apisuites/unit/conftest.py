"""
Fixtures for the offline unit suite.

Every client here is wired to an in-memory fake through httpx.MockTransport.
"""

from __future__ import annotations

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from apisuites.api_testing.clients import ApiClients
from apisuites.api_testing.framework import HarnessConfig, TimedHttpClient
from apisuites.unit.fakes import FakeJsonPlaceholder, FakeReqres


# Top-level config sections; ConfigLoader maps "a.b" to the env var "A_B"
CONFIG_ENV_PREFIXES = ("API_", "BASE_URLS_", "PERFORMANCE_", "LOGGING_", "TEST_DATA_", "BACKEND_HEADERS_")


@pytest.fixture
def clean_config_env(monkeypatch):
    """Drop env vars that would override values read by ConfigLoader."""
    for name in list(os.environ):
        if name.upper().startswith(CONFIG_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def harness_config() -> HarnessConfig:
    """Library defaults with retries made instant."""
    return HarnessConfig(
        retry_delay_ms=0,
        backend_headers={"reqres": {"x-api-key": "reqres-free-v1"}},
    )


@pytest.fixture
def fake_api() -> FakeJsonPlaceholder:
    return FakeJsonPlaceholder()


@pytest.fixture
def fake_reqres() -> FakeReqres:
    return FakeReqres()


@pytest_asyncio.fixture
async def jsonplaceholder_client(
    harness_config: HarnessConfig, fake_api: FakeJsonPlaceholder
) -> AsyncGenerator[TimedHttpClient, None]:
    async with TimedHttpClient(config=harness_config, transport=fake_api.transport()) as client:
        yield client


@pytest_asyncio.fixture
async def reqres_client(
    harness_config: HarnessConfig, fake_reqres: FakeReqres
) -> AsyncGenerator[TimedHttpClient, None]:
    async with TimedHttpClient(
        config=harness_config, backend="reqres", transport=fake_reqres.transport()
    ) as client:
        yield client


@pytest.fixture
def apis(jsonplaceholder_client: TimedHttpClient) -> ApiClients:
    return ApiClients.create(jsonplaceholder_client)
