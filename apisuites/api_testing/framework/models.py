"""
================================================================================
Request / Response Envelopes
================================================================================

Typed containers for everything that crosses the HTTP boundary:

    - RequestDescriptor: what was sent (built fresh for every call)
    - ResponseEnvelope: what came back, plus the measured duration
    - ApiRequestError: classified failure (client/server error, timeout, network)
    - ApiResult: success value or classified error, for negative scenarios

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Mapping, Optional, TypeVar

import httpx


T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of a failed HTTP call."""
    CLIENT_ERROR = "client-error"
    SERVER_ERROR = "server-error"
    TIMEOUT = "timeout"
    NETWORK = "network"

    @classmethod
    def for_status(cls, status: int) -> "ErrorKind":
        """Map an HTTP error status to its kind (4xx client, everything above server)."""
        if 400 <= status < 500:
            return cls.CLIENT_ERROR
        return cls.SERVER_ERROR


@dataclass(frozen=True)
class RequestDescriptor:
    """
    A single outgoing request.

    Attributes:
        method: HTTP verb (GET, POST, PUT, PATCH, DELETE)
        url: Full target URL including any query string
        headers: Merged request headers
        body: JSON payload for write verbs, None otherwise
        timeout_ms: Timeout applied to the transport call
    """
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    timeout_ms: int = 10000


@dataclass(frozen=True)
class ResponseEnvelope:
    """
    A received response with the elapsed time attached by the client.

    `headers` is an `httpx.Headers` instance when produced by the client,
    so lookups are case-insensitive.
    """
    status: int
    headers: Mapping[str, str]
    body: Any
    duration_ms: int
    request: Optional[RequestDescriptor] = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup that also works for plain dicts."""
        if isinstance(self.headers, httpx.Headers):
            return self.headers.get(name, default)
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class ApiRequestError(HttpClientError):
    """
    Classified failure of an HTTP call.

    Client and server errors carry the full ResponseEnvelope; timeouts and
    network failures carry none.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        request: Optional[RequestDescriptor] = None,
        response: Optional[ResponseEnvelope] = None,
        duration_ms: int = 0,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.request = request
        self.response = response
        self.duration_ms = duration_ms

    @property
    def status(self) -> Optional[int]:
        return self.response.status if self.response is not None else None

    def __str__(self) -> str:
        parts = [f"[{self.kind.value}] {self.message}"]
        if self.request is not None:
            parts.append(f"{self.request.method} {self.request.url}")
        if self.response is not None:
            parts.append(f"status={self.response.status}")
        parts.append(f"duration={self.duration_ms}ms")
        return " | ".join(parts)


@dataclass
class ApiResult(Generic[T]):
    """Either the value of a successful call or the classified error."""
    value: Optional[T] = None
    error: Optional[ApiRequestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> Optional[int]:
        if self.error is not None:
            return self.error.status
        if isinstance(self.value, ResponseEnvelope):
            return self.value.status
        return None


__all__ = [
    "ApiRequestError",
    "ApiResult",
    "ErrorKind",
    "HttpClientError",
    "RequestDescriptor",
    "ResponseEnvelope",
]
