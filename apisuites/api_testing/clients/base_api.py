"""
================================================================================
Base API Client
================================================================================

Common composition layer for the REST resource clients. A resource client
builds endpoint paths, calls the TimedHttpClient, and runs the relevant
validators over the result.

Shared operations:
    get_all, get_by_id, create, update, patch, delete,
    get_with_pagination, get_sorted, get_all_with_performance_check,
    verify_not_found, create_with_invalid_data

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Collection, Dict, List, Mapping, Optional

import allure
from loguru import logger

from ..framework import response_validator as rv
from ..framework.config_loader import PerformanceThresholds
from ..framework.http_client import TimedHttpClient
from ..framework.models import ApiRequestError, ApiResult, ResponseEnvelope
from ..framework.retry_helpers import retry


# Number of leading items checked by get_sorted
SORT_CHECK_WINDOW = 10

# Value types get_sorted can compare
SORTABLE_TYPES = ("number", "string")


class BaseApiClient:
    """
    Base class for resource clients.

    Subclasses set `resource_name` and `schema`; everything else is shared.
    """

    resource_name: str = "resource"
    schema: Mapping[str, str] = {}

    def __init__(
        self,
        http_client: TimedHttpClient,
        endpoint: str,
        performance: Optional[PerformanceThresholds] = None,
    ) -> None:
        self.client = http_client
        self.endpoint = endpoint
        self.performance = performance or http_client.config.performance

    # ------------------------------------------------------------------
    # Header passthroughs
    # ------------------------------------------------------------------

    def set_auth_token(self, token: str) -> None:
        self.client.set_auth_token(token)

    def set_headers(self, headers: Mapping[str, str]) -> None:
        self.client.set_default_headers(headers)

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def validate_entity(self, entity: Any) -> None:
        rv.validate_schema(entity, self.schema, self.resource_name)

    def validate_success_response(
        self, response: ResponseEnvelope, expected_status: int = 200
    ) -> Any:
        """
        Validate a successful response and return its body.

        Args:
            response: Response envelope
            expected_status: Expected status code

        Returns:
            Parsed response body
        """
        rv.validate_basic_response(response)
        rv.validate_status(response, expected_status)

        if expected_status < 400:
            rv.validate_json_content_type(response)

        return response.body

    def validate_response_time(self, response: ResponseEnvelope, max_ms: int = 3000) -> None:
        rv.validate_response_time(response, max_ms)

    def _validate_list(self, items: Any, what: str) -> List[Dict[str, Any]]:
        rv.assert_that(
            isinstance(items, list),
            field=what,
            expected="array",
            actual=rv.type_name(items),
        )
        return items

    def _validate_object(self, item: Any, what: str) -> Dict[str, Any]:
        rv.assert_that(
            isinstance(item, dict),
            field=what,
            expected="object",
            actual=rv.type_name(item),
        )
        return item

    def _assert_echo(self, entity: Mapping[str, Any], data: Mapping[str, Any]) -> None:
        for key, value in data.items():
            if key == "id":
                continue
            rv.assert_that(
                entity.get(key) == value,
                field=f"{self.resource_name}.{key}",
                expected=value,
                actual=entity.get(key),
            )

    # ------------------------------------------------------------------
    # Error handling helpers
    # ------------------------------------------------------------------

    @staticmethod
    async def capture(request_fn: Callable[[], Awaitable[Any]]) -> ApiResult:
        """Run `request_fn` and return its value or classified error as an ApiResult."""
        try:
            return ApiResult(value=await request_fn())
        except ApiRequestError as error:
            return ApiResult(error=error)

    async def expect_client_error(
        self,
        request_fn: Callable[[], Awaitable[Any]],
        expected_status: int = 400,
    ) -> ApiRequestError:
        """
        Run a request expected to fail with a 4xx status.

        Args:
            request_fn: Function that makes the request
            expected_status: Expected error status

        Returns:
            The ApiRequestError carrying the error response

        Raises:
            ResponseValidationError: If the request succeeded or the status differs
            ApiRequestError: If the request failed without a response (timeout/network)
        """
        result = await self.capture(request_fn)

        if result.ok:
            raise rv.ResponseValidationError(
                "Expected request to fail but it succeeded",
                field="status",
                expected=expected_status,
                actual=result.status,
            )

        error = result.error
        if error.response is None:
            raise error

        rv.validate_client_error_status(error.response)
        rv.validate_status(error.response, expected_status)
        return error

    async def expect_status_in(
        self,
        request_fn: Callable[[], Awaitable[ResponseEnvelope]],
        statuses: Collection[int],
    ) -> ApiResult:
        """
        Run a raw client request whose status may be any of `statuses`.

        Used where the backend's behaviour is not pinned down (e.g. updating
        a record that does not exist may answer 200 or 500). `request_fn`
        must return the ResponseEnvelope itself (e.g. `client.put(...)`),
        not a resource-client result such as `get_all()`.
        """
        result = await self.capture(request_fn)
        if not result.ok and result.error.response is None:
            raise result.error
        if result.ok:
            rv.assert_that(
                isinstance(result.value, ResponseEnvelope),
                field="request_fn",
                expected="ResponseEnvelope",
                actual=type(result.value).__name__,
            )
        rv.assert_that(
            result.status in set(statuses),
            field="status",
            expected=sorted(statuses),
            actual=result.status,
        )
        return result

    async def request_with_retry(
        self,
        request_fn: Callable[[], Awaitable[Any]],
        max_retries: Optional[int] = None,
        base_delay_ms: Optional[int] = None,
    ) -> Any:
        """Run `request_fn` through the exponential-backoff retry helper."""
        config = self.client.config
        return await retry(
            request_fn,
            max_retries=config.retry_count if max_retries is None else max_retries,
            base_delay_ms=config.retry_delay_ms if base_delay_ms is None else base_delay_ms,
            description=f"{self.resource_name} request",
        )

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def item_path(self, item_id: Any) -> str:
        return f"{self.endpoint}/{item_id}"

    async def get_all(self) -> List[Dict[str, Any]]:
        """Get every record and validate each against the schema."""
        with allure.step(f"Get all {self.resource_name} records"):
            response = await self.client.get(self.endpoint)
            items = self._validate_list(self.validate_success_response(response), self.endpoint)
            rv.assert_that(len(items) > 0, field=self.endpoint, expected="non-empty", actual=0)

            for item in items:
                self.validate_entity(item)

            return items

    async def get_by_id(self, item_id: int) -> Dict[str, Any]:
        with allure.step(f"Get {self.resource_name} {item_id}"):
            response = await self.client.get(self.item_path(item_id))
            item = self.validate_success_response(response)

            self.validate_entity(item)
            rv.assert_that(
                item["id"] == item_id,
                field=f"{self.resource_name}.id",
                expected=item_id,
                actual=item["id"],
            )
            return item

    async def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Create a record; expects 201, a numeric id and every submitted field echoed."""
        with allure.step(f"Create {self.resource_name}"):
            response = await self.client.post(self.endpoint, dict(data))
            item = self.validate_success_response(response, 201)

            rv.assert_that(
                isinstance(item, dict) and rv.matches_type(item.get("id"), "number"),
                field=f"{self.resource_name}.id",
                expected="number",
                actual=item.get("id") if isinstance(item, dict) else item,
            )
            self._assert_echo(item, data)
            return item

    async def update(self, item_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Replace a record (PUT)."""
        with allure.step(f"Update {self.resource_name} {item_id}"):
            response = await self.client.put(self.item_path(item_id), dict(data))
            item = self._validate_object(
                self.validate_success_response(response), self.item_path(item_id)
            )

            rv.assert_that(
                item.get("id") == item_id,
                field=f"{self.resource_name}.id",
                expected=item_id,
                actual=item.get("id"),
            )
            self._assert_echo(item, data)
            return item

    async def patch(self, item_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Partially update a record; only the provided fields are checked."""
        with allure.step(f"Patch {self.resource_name} {item_id}"):
            response = await self.client.patch(self.item_path(item_id), dict(data))
            item = self._validate_object(
                self.validate_success_response(response), self.item_path(item_id)
            )

            rv.assert_that(
                item.get("id") == item_id,
                field=f"{self.resource_name}.id",
                expected=item_id,
                actual=item.get("id"),
            )
            self._assert_echo(item, data)
            return item

    async def delete(self, item_id: int) -> ResponseEnvelope:
        with allure.step(f"Delete {self.resource_name} {item_id}"):
            response = await self.client.delete(self.item_path(item_id))
            self.validate_success_response(response)
            return response

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    async def get_with_pagination(self, page: int = 1, limit: int = 10) -> List[Dict[str, Any]]:
        response = await self.client.get(self.endpoint, params={"_page": page, "_limit": limit})
        items = self._validate_list(self.validate_success_response(response), self.endpoint)

        rv.assert_that(
            len(items) <= limit,
            field=f"{self.endpoint} length",
            expected=f"<= {limit}",
            actual=len(items),
        )
        for item in items:
            self.validate_entity(item)
        return items

    async def get_sorted(self, sort_field: str = "id", sort_order: str = "asc") -> List[Dict[str, Any]]:
        """Get records sorted server-side; the first items are checked for order."""
        response = await self.client.get(
            self.endpoint, params={"_sort": sort_field, "_order": sort_order}
        )
        items = self._validate_list(self.validate_success_response(response), self.endpoint)

        window = items[:SORT_CHECK_WINDOW]
        for item in window:
            rv.assert_that(
                isinstance(item, dict) and sort_field in item,
                field=f"{self.resource_name}.{sort_field}",
                expected="present",
                actual="missing",
            )
        for previous, current in zip(window, window[1:]):
            before, after = previous[sort_field], current[sort_field]
            before_type, after_type = rv.type_name(before), rv.type_name(after)
            rv.assert_that(
                before_type == after_type and after_type in SORTABLE_TYPES,
                field=f"{self.resource_name}.{sort_field}",
                expected=f"number or string matching {before_type}",
                actual=after_type,
            )
            in_order = before <= after if sort_order == "asc" else before >= after
            rv.assert_that(
                in_order,
                field=f"{self.resource_name}.{sort_field}",
                expected=f"{sort_order} order after {before!r}",
                actual=after,
            )
        return items

    async def get_all_with_performance_check(
        self, max_response_time: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        max_ms = self.performance.fast if max_response_time is None else max_response_time
        response = await self.client.get(self.endpoint)
        items = self.validate_success_response(response)

        self.validate_response_time(response, max_ms)
        logger.info(f"{self.endpoint} answered in {response.duration_ms}ms (budget {max_ms}ms)")
        return items

    async def search(self, field: str, text: str) -> List[Dict[str, Any]]:
        """Case-insensitive substring search over `field` of every record."""
        needle = text.lower()
        return [
            item for item in await self.get_all()
            if needle in str(item.get(field, "")).lower()
        ]

    async def get_related(
        self,
        path: str,
        foreign_key: str,
        owner_id: int,
        params: Optional[Mapping[str, Any]] = None,
        validate: Optional[Callable[[Any], None]] = None,
    ) -> List[Dict[str, Any]]:
        """Get records that belong to `owner_id` and check each one's foreign key."""
        response = await self.client.get(path, params=params)
        items = self._validate_list(self.validate_success_response(response), path)

        for item in items:
            if validate is not None:
                validate(item)
            rv.assert_that(
                item.get(foreign_key) == owner_id,
                field=foreign_key,
                expected=owner_id,
                actual=item.get(foreign_key),
            )
        return items

    # ------------------------------------------------------------------
    # Negative checks
    # ------------------------------------------------------------------

    async def verify_not_found(self, item_id: Any) -> ApiRequestError:
        return await self.expect_client_error(
            lambda: self.client.get(self.item_path(item_id)), 404
        )

    async def create_with_invalid_data(self, invalid_data: Mapping[str, Any]) -> ApiRequestError:
        return await self.expect_client_error(
            lambda: self.client.post(self.endpoint, dict(invalid_data)), 400
        )


__all__ = ["BaseApiClient"]
