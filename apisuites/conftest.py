"""
================================================================================
Suite Pytest Configuration
================================================================================

Registers the markers shared by every suite and skips live-network tests
unless `--live` is given.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line("markers", "smoke: Quick verification tests")
    config.addinivalue_line("markers", "regression: Full regression test suite")
    config.addinivalue_line(
        "markers", "integration: Cross-resource scenarios and concurrency"
    )
    config.addinivalue_line("markers", "unit: Offline tests against fake transports")

    # Domain markers
    config.addinivalue_line("markers", "api: API-specific tests")
    config.addinivalue_line("markers", "auth: Tests related to authentication")
    config.addinivalue_line("markers", "mutation: Negative / invalid data tests")
    config.addinivalue_line(
        "markers", "live: Calls the public demo services (needs --live)"
    )


def pytest_collection_modifyitems(config, items):
    """
    Tag tests by directory and skip live tests unless requested.
    """
    run_live = config.getoption("--live", default=False)
    skip_live = pytest.mark.skip(reason="live-network test: pass --live to run")

    for item in items:
        path = str(item.fspath)

        if "api_testing" in path:
            item.add_marker(pytest.mark.api)
            item.add_marker(pytest.mark.live)

        if "unit" in path.replace("\\", "/").split("/"):
            item.add_marker(pytest.mark.unit)

        if "live" in item.keywords and not run_live:
            item.add_marker(skip_live)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    mode = "live services" if config.getoption("--live", default=False) else "offline only"
    return [
        "",
        "=" * 60,
        f"API Automation Suites ({mode})",
        "=" * 60,
        "",
    ]
