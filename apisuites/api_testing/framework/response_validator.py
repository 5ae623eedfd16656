# ================================================================================
# Response Validator
# ================================================================================
#
# Side-effect-free assertion helpers over response envelopes and entity values.
# Each helper either returns silently or raises ResponseValidationError, an
# AssertionError carrying the field, the expected condition and the actual value.
#
# Key Features:
#   - Envelope checks: shape, status, content type, response time
#   - Body checks: pagination envelope, error envelope
#   - Entity schema checks (User / Post / Comment): presence and type only
#
# Content checks such as email/URL syntax live in data_generators.
#
# ================================================================================

from typing import Any, Collection, Dict, Iterable, Mapping, Optional, Union

import allure
from loguru import logger

from .models import ApiRequestError, ResponseEnvelope


class ResponseValidationError(AssertionError):
    """
    Raised when a validation predicate fails.

    Attributes:
        field: The field or property that was checked
        expected: The expected condition
        actual: The value actually observed
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message)
        self.field = field
        self.expected = expected
        self.actual = actual


# Entity contracts: field name -> type name
USER_SCHEMA: Dict[str, str] = {
    "id": "number",
    "name": "string",
    "username": "string",
    "email": "string",
    "phone": "string",
    "website": "string",
    "address": "object",
    "company": "object",
}

POST_SCHEMA: Dict[str, str] = {
    "id": "number",
    "title": "string",
    "body": "string",
    "userId": "number",
}

COMMENT_SCHEMA: Dict[str, str] = {
    "id": "number",
    "name": "string",
    "email": "string",
    "body": "string",
    "postId": "number",
}


def assert_that(
    condition: bool,
    message: Optional[str] = None,
    *,
    field: str,
    expected: Any,
    actual: Any,
) -> None:
    """Raise ResponseValidationError unless `condition` holds."""
    if condition:
        return
    text = message or f"{field}: expected {expected}, got {actual!r}"
    logger.warning(f"❌ {text}")
    raise ResponseValidationError(text, field=field, expected=expected, actual=actual)


def type_name(value: Any) -> str:
    """JSON-flavoured name of a value's type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def matches_type(value: Any, expected: str) -> bool:
    """Check a value against a JSON type name (number excludes booleans)."""
    return type_name(value) == expected.lower()


def _envelope(resp: Union[ResponseEnvelope, ApiRequestError, Any]) -> Any:
    if isinstance(resp, ApiRequestError):
        return resp.response
    return resp


# ------------------------------------------------------------------------------
# Envelope validators
# ------------------------------------------------------------------------------

def validate_basic_response(resp: Any) -> None:
    """Response exists and exposes status, body and headers."""
    assert_that(resp is not None, field="response", expected="a response", actual=resp)
    for attr in ("status", "body", "headers"):
        assert_that(
            hasattr(resp, attr),
            field=attr,
            expected="property present",
            actual="missing",
        )


def validate_status(resp: ResponseEnvelope, expected: Union[int, Collection[int]]) -> None:
    """Status equals `expected`, or is one of them when a collection is given."""
    allowed = {expected} if isinstance(expected, int) else set(expected)
    assert_that(
        resp.status in allowed,
        field="status",
        expected=expected if isinstance(expected, int) else sorted(allowed),
        actual=resp.status,
    )


def validate_success_status(resp: ResponseEnvelope) -> None:
    """Status is 2xx."""
    assert_that(
        200 <= resp.status < 300,
        f"expected status to be success (2xx) but got {resp.status}",
        field="status",
        expected="2xx",
        actual=resp.status,
    )


def validate_client_error_status(resp: ResponseEnvelope) -> None:
    """Status is 4xx."""
    assert_that(
        400 <= resp.status < 500,
        f"expected status to be client error (4xx) but got {resp.status}",
        field="status",
        expected="4xx",
        actual=resp.status,
    )


def validate_json_content_type(resp: ResponseEnvelope) -> None:
    """A content-type header (any case) contains application/json."""
    content_type = None
    for key, value in resp.headers.items():
        if key.lower() == "content-type":
            content_type = value
            break
    assert_that(
        content_type is not None,
        field="headers.content-type",
        expected="present",
        actual="missing",
    )
    assert_that(
        "application/json" in content_type,
        field="headers.content-type",
        expected="contains 'application/json'",
        actual=content_type,
    )


@allure.step("Validate response time <= {max_ms}ms")
def validate_response_time(resp: ResponseEnvelope, max_ms: int = 3000) -> None:
    """Recorded duration does not exceed `max_ms` (equality passes)."""
    duration = getattr(resp, "duration_ms", None)
    assert_that(
        duration is not None and duration <= max_ms,
        f"expected response time to be <= {max_ms}ms but got {duration}ms",
        field="duration_ms",
        expected=f"<= {max_ms}",
        actual=duration,
    )


# ------------------------------------------------------------------------------
# Body validators
# ------------------------------------------------------------------------------

def validate_pagination_response(
    resp: ResponseEnvelope,
    has_next_page: bool = False,
    has_previous_page: bool = False,
) -> None:
    """
    Validate a paginated list envelope.

    The body must expose `data` (array) and numeric `page`, `per_page`,
    `total`, `total_pages`.

    Args:
        resp: Response to check
        has_next_page: Also require page < total_pages
        has_previous_page: Also require page > 1
    """
    body = resp.body
    assert_that(isinstance(body, dict), field="body", expected="object", actual=type_name(body))

    assert_that("data" in body, field="data", expected="present", actual="missing")
    assert_that(
        matches_type(body["data"], "array"),
        field="data",
        expected="array",
        actual=type_name(body["data"]),
    )
    for key in ("page", "per_page", "total", "total_pages"):
        assert_that(key in body, field=key, expected="present", actual="missing")
        assert_that(
            matches_type(body[key], "number"),
            field=key,
            expected="number",
            actual=type_name(body[key]),
        )

    if has_next_page:
        assert_that(
            body["page"] < body["total_pages"],
            field="page",
            expected=f"< total_pages ({body['total_pages']})",
            actual=body["page"],
        )

    if has_previous_page:
        assert_that(body["page"] > 1, field="page", expected="> 1", actual=body["page"])


def validate_error_response(resp: Union[ResponseEnvelope, ApiRequestError]) -> None:
    """Body exposes a non-empty string `error` field."""
    envelope = _envelope(resp)
    assert_that(envelope is not None, field="response", expected="a response", actual=None)
    body = envelope.body
    assert_that(
        isinstance(body, dict) and "error" in body,
        field="error",
        expected="present",
        actual="missing",
    )
    assert_that(
        matches_type(body["error"], "string"),
        field="error",
        expected="string",
        actual=type_name(body["error"]),
    )
    assert_that(len(body["error"]) > 0, field="error", expected="non-empty", actual=body["error"])


# ------------------------------------------------------------------------------
# Schema validators
# ------------------------------------------------------------------------------

def validate_schema(value: Any, schema: Mapping[str, str], entity: str = "object") -> None:
    """
    Check presence and type of every field in `schema`.

    Extra fields are ignored; value semantics are not checked.
    """
    assert_that(
        isinstance(value, dict),
        field=entity,
        expected="object",
        actual=type_name(value),
    )
    for field_name, expected_type in schema.items():
        path = f"{entity}.{field_name}"
        assert_that(field_name in value, field=path, expected="present", actual="missing")
        assert_that(
            matches_type(value[field_name], expected_type),
            field=path,
            expected=expected_type,
            actual=type_name(value[field_name]),
        )


def validate_user_schema(user: Any) -> None:
    validate_schema(user, USER_SCHEMA, "user")


def validate_post_schema(post: Any) -> None:
    validate_schema(post, POST_SCHEMA, "post")


def validate_comment_schema(comment: Any) -> None:
    validate_schema(comment, COMMENT_SCHEMA, "comment")


def validate_exact_keys(value: Mapping[str, Any], keys: Iterable[str]) -> None:
    """Value has exactly `keys`, no more and no fewer."""
    expected = sorted(keys)
    actual = sorted(value.keys())
    assert_that(actual == expected, field="keys", expected=expected, actual=actual)


__all__ = [
    "COMMENT_SCHEMA",
    "POST_SCHEMA",
    "USER_SCHEMA",
    "ResponseValidationError",
    "assert_that",
    "matches_type",
    "type_name",
    "validate_basic_response",
    "validate_client_error_status",
    "validate_comment_schema",
    "validate_error_response",
    "validate_exact_keys",
    "validate_json_content_type",
    "validate_pagination_response",
    "validate_post_schema",
    "validate_response_time",
    "validate_schema",
    "validate_status",
    "validate_success_status",
    "validate_user_schema",
]
