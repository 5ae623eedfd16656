"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Hierarchical YAML configuration loading
    - Environment variable override (API_TIMEOUT_MS overrides api.timeout_ms)
    - Dot notation path access
    - Default value support
    - Immutable HarnessConfig snapshot handed to the HTTP layer

The HTTP client never reads the environment itself: it is given a
HarnessConfig, and only this loader consults env vars while building one.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


# Default configuration file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

DEFAULT_BASE_URLS = {
    "jsonplaceholder": "https://jsonplaceholder.typicode.com",
    "reqres": "https://reqres.in/api",
}

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


@dataclass(frozen=True)
class PerformanceThresholds:
    """Named response-time budgets in milliseconds."""
    fast: int = 500
    medium: int = 1500
    slow: int = 3000


@dataclass(frozen=True)
class HarnessConfig:
    """
    In-process configuration consumed by the HTTP client and resource clients.

    Attributes:
        base_urls: Named backends (jsonplaceholder, reqres)
        timeout_ms: Per-request timeout
        default_headers: Headers sent with every request
        performance: Response-time thresholds
        retry_count: Default retry budget for request_with_retry
        retry_delay_ms: Base backoff delay for request_with_retry
        backend_headers: Extra headers per named backend (e.g. reqres API key)
    """
    base_urls: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_BASE_URLS))
    timeout_ms: int = 10000
    default_headers: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HEADERS))
    performance: PerformanceThresholds = field(default_factory=PerformanceThresholds)
    retry_count: int = 3
    retry_delay_ms: int = 1000
    backend_headers: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def base_url(self, name: str) -> str:
        """Return the base URL registered under `name`."""
        try:
            return self.base_urls[name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown backend '{name}'. Known backends: {sorted(self.base_urls)}"
            ) from None


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (API_TIMEOUT_MS)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("base_urls.jsonplaceholder")
        'https://jsonplaceholder.typicode.com'

        >>> config.harness_config().performance.fast
        500

    Environment Variable Mapping:
        - api.timeout_ms -> API_TIMEOUT_MS
        - base_urls.reqres -> BASE_URLS_REQRES
        - logging.level -> LOGGING_LEVEL
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """
        Singleton pattern - return existing instance if available.

        Configuration is loaded only once per process.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from: {self._config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "api.timeout_ms")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        # Check environment variable first
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        # Navigate YAML config by dot notation
        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "api", "test_data")

        Returns:
            Section dictionary or empty dict if not found
        """
        return self._config.get(section) or {}

    def harness_config(self) -> HarnessConfig:
        """
        Build an immutable HarnessConfig from the loaded values.

        Raises:
            ConfigurationError: If a numeric setting cannot be parsed
        """
        defaults = HarnessConfig()

        names = set(defaults.base_urls) | set(self.get_section("base_urls"))
        base_urls = {
            name: str(self.get(f"base_urls.{name}", defaults.base_urls.get(name, "")))
            for name in sorted(names)
        }

        headers = dict(defaults.default_headers)
        headers.update(self.get("api.default_headers", {}) or {})

        try:
            performance = PerformanceThresholds(
                fast=int(self.get("performance.fast", defaults.performance.fast)),
                medium=int(self.get("performance.medium", defaults.performance.medium)),
                slow=int(self.get("performance.slow", defaults.performance.slow)),
            )
            return HarnessConfig(
                base_urls=base_urls,
                timeout_ms=int(self.get("api.timeout_ms", defaults.timeout_ms)),
                default_headers=headers,
                performance=performance,
                retry_count=int(self.get("api.retry_count", defaults.retry_count)),
                retry_delay_ms=int(self.get("api.retry_delay_ms", defaults.retry_delay_ms)),
                backend_headers={
                    name: dict(headers or {})
                    for name, headers in self.get_section("backend_headers").items()
                },
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid numeric configuration value: {e}") from e

    def reload(self) -> None:
        """
        Reload configuration from file.

        Useful when configuration file has been updated during runtime.
        """
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "HarnessConfig",
    "PerformanceThresholds",
]
