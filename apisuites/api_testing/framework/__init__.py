"""
================================================================================
API Testing Framework
================================================================================

Core components of the API automation harness.

Modules:
    - models: Request/response envelopes and classified errors
    - http_client: Timed async HTTP client with Allure logging
    - response_validator: Envelope and entity schema assertions
    - retry_helpers: Exponential-backoff retry
    - data_generators: Randomized and invalid fixture records
    - config_loader: YAML configuration management
    - log_config: Loguru set-up

Author: Automation Team
License: MIT
================================================================================
"""

from .config_loader import (
    ConfigLoader,
    ConfigurationError,
    HarnessConfig,
    PerformanceThresholds,
)
from .http_client import TimedHttpClient, merge_headers
from .log_config import init_logger
from .models import (
    ApiRequestError,
    ApiResult,
    ErrorKind,
    HttpClientError,
    RequestDescriptor,
    ResponseEnvelope,
)
from .response_validator import ResponseValidationError
from .retry_helpers import retry

__all__ = [
    "ApiRequestError",
    "ApiResult",
    "ConfigLoader",
    "ConfigurationError",
    "ErrorKind",
    "HarnessConfig",
    "HttpClientError",
    "PerformanceThresholds",
    "RequestDescriptor",
    "ResponseEnvelope",
    "ResponseValidationError",
    "TimedHttpClient",
    "init_logger",
    "merge_headers",
    "retry",
]
