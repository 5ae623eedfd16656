"""
Repository-level pytest configuration.

Registers the `--live` option (suites that call the public demo services are
skipped without it) and configures loguru once per session.
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from apisuites.api_testing.framework.log_config import init_logger


def pytest_addoption(parser):
    """Add command-line options."""
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run suites that call the live JSONPlaceholder / reqres services",
    )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _configure_logging() -> Generator[None, None, None]:
    """Configure loguru sinks from config.yaml before any test runs."""
    init_logger()
    yield
