"""
================================================================================
Timed HTTP Client with Allure Integration
================================================================================

The single point through which every network call of the harness passes:
    - Default headers merged with per-call overrides (override wins)
    - Per-call timeout applied to the transport
    - Elapsed time measured and attached to every outcome
    - Uniform error classification (client-error / server-error / timeout / network)
    - Allure reporting with redacted headers/body and a cURL command

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Mapping, Optional

import allure
import httpx
from allure_commons.types import AttachmentType
from loguru import logger

from .config_loader import HarnessConfig
from .models import (
    ApiRequestError,
    ErrorKind,
    HttpClientError,
    RequestDescriptor,
    ResponseEnvelope,
)


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

# Verbs that always carry a JSON payload
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH"})

SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie", "set-cookie"}
SENSITIVE_BODY_TOKENS = ("password", "secret", "token", "api_key", "authorization", "session")


def merge_headers(
    defaults: Optional[Mapping[str, str]],
    overrides: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Merge header mappings, right-biased and case-insensitive on keys.

    >>> merge_headers({"A": "1"}, {"A": "2", "B": "3"})
    {'A': '2', 'B': '3'}
    """
    merged: Dict[str, str] = dict(defaults or {})
    for key, value in (overrides or {}).items():
        for existing in [k for k in merged if k.lower() == key.lower()]:
            del merged[existing]
        merged[key] = value
    return merged


class TimedHttpClient:
    """
    Async HTTP client that times and classifies every call.

    Default headers are instance-owned state. They are snapshotted into the
    RequestDescriptor when a call is dispatched, so concurrent calls on one
    client are safe; changing them while calls are in flight is not locked.

    Usage:
        >>> async with TimedHttpClient(config=HarnessConfig()) as client:
        ...     response = await client.get("/users/1")
        ...     print(response.status, response.duration_ms)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        config: Optional[HarnessConfig] = None,
        backend: str = "jsonplaceholder",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize HTTP client with configuration.

        Args:
            base_url: Base URL prepended to every endpoint. Taken from
                      config.base_urls[backend] if not specified.
            config: Harness configuration. Library defaults if None.
            backend: Named backend used when base_url is not given; its
                     backend_headers are added to the defaults.
            transport: Optional httpx transport (fake transports in tests).
        """
        if config is None:
            config = HarnessConfig()

        self.config = config
        self.base_url = base_url if base_url is not None else config.base_url(backend)
        self.timeout_ms = int(config.timeout_ms)
        self.default_headers: Dict[str, str] = merge_headers(
            config.default_headers,
            config.backend_headers.get(backend) if base_url is None else None,
        )

        self._transport = transport
        self.session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "TimedHttpClient":
        """Enter context manager - initialize HTTP session."""
        self.session = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_ms / 1000),
            transport=self._transport,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - close HTTP session."""
        if self.session:
            await self.session.aclose()
            self.session = None

    # ------------------------------------------------------------------
    # Header state
    # ------------------------------------------------------------------

    def set_default_headers(self, headers: Mapping[str, str]) -> None:
        """Merge `headers` into the defaults used by subsequent calls."""
        self.default_headers = merge_headers(self.default_headers, headers)

    def set_auth_token(self, token: str) -> None:
        """Send `Authorization: Bearer <token>` on subsequent calls."""
        self.set_default_headers({"Authorization": f"Bearer {token}"})

    def clear_auth_token(self) -> None:
        """Stop sending the Authorization header."""
        self.default_headers = {
            k: v for k, v in self.default_headers.items() if k.lower() != "authorization"
        }

    def build_url(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Concatenate base URL and endpoint, appending query params if any."""
        url = f"{self.base_url}{endpoint}"
        if params:
            url = str(httpx.URL(url).copy_merge_params(
                {k: v for k, v in params.items() if v is not None}
            ))
        return url

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        endpoint: str,
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ResponseEnvelope:
        """
        Execute an HTTP request and return its timed envelope.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            endpoint: Path appended verbatim to base_url
            body: JSON payload for write verbs (defaults to {})
            headers: Per-call header overrides
            params: Optional query parameters

        Returns:
            ResponseEnvelope with duration_ms attached

        Raises:
            ValueError: If endpoint is missing
            ApiRequestError: On 4xx/5xx status, timeout or network failure
        """
        if self.session is None:
            raise HttpClientError(
                "TimedHttpClient must be used within an async context manager. "
                "Use 'async with TimedHttpClient() as client:'"
            )
        if not endpoint:
            raise ValueError("endpoint is required")

        method = method.upper()
        if method in WRITE_METHODS and body is None:
            body = {}

        descriptor = RequestDescriptor(
            method=method,
            url=self.build_url(endpoint, params),
            headers=merge_headers(self.default_headers, headers),
            body=body if method in WRITE_METHODS else None,
            timeout_ms=self.timeout_ms,
        )

        start = time.perf_counter()
        try:
            response = await self.session.request(
                method,
                descriptor.url,
                headers=dict(descriptor.headers),
                json=descriptor.body,
                timeout=self.timeout_ms / 1000,
            )
        except httpx.TimeoutException as e:
            duration = self._elapsed_ms(start)
            self._log_failure(descriptor, ErrorKind.TIMEOUT, duration)
            raise ApiRequestError(
                ErrorKind.TIMEOUT,
                f"Request timeout after {self.timeout_ms}ms",
                request=descriptor,
                duration_ms=duration,
            ) from e
        except httpx.RequestError as e:
            duration = self._elapsed_ms(start)
            self._log_failure(descriptor, ErrorKind.NETWORK, duration)
            raise ApiRequestError(
                ErrorKind.NETWORK,
                f"Network error: {e}",
                request=descriptor,
                duration_ms=duration,
            ) from e

        duration = self._elapsed_ms(start)
        envelope = ResponseEnvelope(
            status=response.status_code,
            headers=response.headers,
            body=self._parse_body(response),
            duration_ms=duration,
            request=descriptor,
        )

        logger.debug(f"{method} {descriptor.url} -> {envelope.status} ({duration}ms)")
        self._log_to_allure(descriptor, envelope)

        if response.status_code >= 400:
            raise ApiRequestError(
                ErrorKind.for_status(response.status_code),
                f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                request=descriptor,
                response=envelope,
                duration_ms=duration,
            )
        return envelope

    async def get(
        self,
        endpoint: str,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ResponseEnvelope:
        """Execute GET request."""
        return await self.request("GET", endpoint, headers=headers, params=params)

    async def post(
        self, endpoint: str, body: Any = None, headers: Optional[Mapping[str, str]] = None
    ) -> ResponseEnvelope:
        """Execute POST request."""
        return await self.request("POST", endpoint, body=body, headers=headers)

    async def put(
        self, endpoint: str, body: Any = None, headers: Optional[Mapping[str, str]] = None
    ) -> ResponseEnvelope:
        """Execute PUT request."""
        return await self.request("PUT", endpoint, body=body, headers=headers)

    async def patch(
        self, endpoint: str, body: Any = None, headers: Optional[Mapping[str, str]] = None
    ) -> ResponseEnvelope:
        """Execute PATCH request."""
        return await self.request("PATCH", endpoint, body=body, headers=headers)

    async def delete(
        self, endpoint: str, headers: Optional[Mapping[str, str]] = None
    ) -> ResponseEnvelope:
        """Execute DELETE request."""
        return await self.request("DELETE", endpoint, headers=headers)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return max(0, int((time.perf_counter() - start) * 1000))

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """Parse JSON body; fall back to text, and to {} for an empty body."""
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    def _log_failure(self, descriptor: RequestDescriptor, kind: ErrorKind, duration: int) -> None:
        logger.error(f"{descriptor.method} {descriptor.url} -> {kind.value} ({duration}ms)")
        with allure.step(f"❌ {descriptor.method} {descriptor.url} → {kind.value}"):
            allure.attach(
                self._build_curl(
                    descriptor.method,
                    descriptor.url,
                    self._redact_headers(descriptor.headers),
                    self._redact_body(descriptor.body),
                ),
                name="🔧 cURL Command",
                attachment_type=AttachmentType.TEXT,
            )

    def _log_to_allure(self, descriptor: RequestDescriptor, envelope: ResponseEnvelope) -> None:
        """
        Log HTTP request/response to Allure report.

        Attaches:
            - Request URL
            - Request headers and body (redacted)
            - cURL command for reproduction
            - Response status and timing
            - Response body (truncated if too long)
        """
        status_emoji = "✅" if envelope.status < 400 else "❌"
        step_title = (
            f"{status_emoji} {descriptor.method} {descriptor.url} → "
            f"{envelope.status} ({envelope.duration_ms}ms)"
        )

        with allure.step(step_title):
            allure.attach(
                descriptor.url,
                name="🔗 Request URL",
                attachment_type=AttachmentType.TEXT,
            )

            safe_headers = self._redact_headers(descriptor.headers)
            if safe_headers:
                allure.attach(
                    json.dumps(safe_headers, ensure_ascii=False, indent=2),
                    name="📤 Request Headers",
                    attachment_type=AttachmentType.JSON,
                )

            safe_body = self._redact_body(descriptor.body)
            if safe_body:
                allure.attach(
                    json.dumps(safe_body, ensure_ascii=False, indent=2),
                    name="📤 Request Body",
                    attachment_type=AttachmentType.JSON,
                )

            allure.attach(
                self._build_curl(descriptor.method, descriptor.url, safe_headers, safe_body),
                name="🔧 cURL Command",
                attachment_type=AttachmentType.TEXT,
            )

            allure.attach(
                f"{status_emoji} {envelope.status} in {envelope.duration_ms}ms",
                name="📥 Response Status",
                attachment_type=AttachmentType.TEXT,
            )

            if isinstance(envelope.body, str):
                response_content = envelope.body or "<empty>"
            else:
                response_content = json.dumps(envelope.body, ensure_ascii=False, indent=2)

            if len(response_content) > MAX_RESPONSE_LENGTH:
                response_content = (
                    f"{response_content[:MAX_RESPONSE_LENGTH]}\n\n"
                    f"... [Truncated, full length: {len(response_content)} chars] ..."
                )

            allure.attach(
                response_content,
                name="📥 Response Body",
                attachment_type=AttachmentType.JSON,
            )

    def _redact_headers(self, headers: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Mask sensitive header values before logging.
        """
        masked = {}
        for key, value in headers.items():
            if key.lower() in SENSITIVE_HEADERS:
                masked[key] = "***MASKED***"
            else:
                masked[key] = value
        return masked

    def _redact_body(self, payload: Any) -> Any:
        """
        Recursively mask sensitive fields in request bodies.
        """
        if isinstance(payload, dict):
            redacted = {}
            for key, value in payload.items():
                if any(token in str(key).lower() for token in SENSITIVE_BODY_TOKENS):
                    redacted[key] = "***MASKED***"
                else:
                    redacted[key] = self._redact_body(value)
            return redacted
        if isinstance(payload, list):
            return [self._redact_body(item) for item in payload]
        return payload

    def _build_curl(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Any,
    ) -> str:
        """
        Build cURL command for request reproduction.

        Expects already-redacted headers and body.
        """
        parts = [f"curl -X {method}"]

        for key, value in headers.items():
            parts.append(f"-H '{key}: {value}'")

        if body:
            body_json = json.dumps(body, ensure_ascii=False)
            parts.append(f"-d '{body_json}'")

        parts.append(f"'{url}'")

        return " \\\n  ".join(parts)


__all__ = [
    "TimedHttpClient",
    "merge_headers",
]
