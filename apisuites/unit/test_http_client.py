import asyncio
import json

import httpx
import pytest

from apisuites.api_testing.framework import (
    ApiRequestError,
    ErrorKind,
    HarnessConfig,
    HttpClientError,
    TimedHttpClient,
    merge_headers,
)


def recording_transport(captured, status=200, payload=None, **response_kwargs):
    def handler(request):
        captured.append(request)
        if payload is None and not response_kwargs:
            return httpx.Response(status, json={"ok": True})
        if payload is None:
            return httpx.Response(status, **response_kwargs)
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler)


def test_merge_headers_is_right_biased_and_case_insensitive():
    merged = merge_headers(
        {"Content-Type": "application/json", "Accept": "application/json"},
        {"content-type": "text/plain", "X-Trace": "1"},
    )

    assert merged == {
        "Accept": "application/json",
        "content-type": "text/plain",
        "X-Trace": "1",
    }


def test_merge_headers_handles_missing_mappings():
    assert merge_headers(None) == {}
    assert merge_headers({"A": "1"}, None) == {"A": "1"}


@pytest.mark.asyncio
async def test_request_outside_context_manager_raises():
    client = TimedHttpClient(config=HarnessConfig())

    with pytest.raises(HttpClientError):
        await client.get("/users")


@pytest.mark.asyncio
async def test_empty_endpoint_raises_value_error_without_dispatch():
    captured = []
    async with TimedHttpClient(transport=recording_transport(captured)) as client:
        with pytest.raises(ValueError):
            await client.get("")

    assert captured == []


@pytest.mark.asyncio
async def test_endpoint_is_appended_to_base_url_with_params():
    captured = []
    async with TimedHttpClient(
        base_url="https://api.example.test/v1", transport=recording_transport(captured)
    ) as client:
        await client.get("/posts", params={"_page": 2, "_limit": 5})

    assert str(captured[0].url) == "https://api.example.test/v1/posts?_page=2&_limit=5"


@pytest.mark.asyncio
async def test_default_and_per_call_headers_are_merged():
    captured = []
    async with TimedHttpClient(transport=recording_transport(captured)) as client:
        await client.get("/users", headers={"Accept": "text/html", "X-Trace": "abc"})

    sent = captured[0].headers
    assert sent["accept"] == "text/html"
    assert sent["x-trace"] == "abc"
    assert sent["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_auth_token_is_added_and_cleared():
    captured = []
    async with TimedHttpClient(transport=recording_transport(captured)) as client:
        client.set_auth_token("abc123")
        await client.get("/users/1")
        client.clear_auth_token()
        await client.get("/users/1")

    assert captured[0].headers["authorization"] == "Bearer abc123"
    assert "authorization" not in captured[1].headers


@pytest.mark.asyncio
async def test_backend_headers_are_added_for_named_backend():
    captured = []
    config = HarnessConfig(backend_headers={"reqres": {"x-api-key": "k"}})
    async with TimedHttpClient(
        config=config, backend="reqres", transport=recording_transport(captured)
    ) as client:
        await client.get("/users")

    assert str(captured[0].url).startswith("https://reqres.in/api/users")
    assert captured[0].headers["x-api-key"] == "k"


@pytest.mark.asyncio
async def test_write_verb_without_body_sends_empty_object():
    captured = []
    async with TimedHttpClient(transport=recording_transport(captured, status=201)) as client:
        response = await client.post("/posts")

    assert json.loads(captured[0].content) == {}
    assert response.request.body == {}


@pytest.mark.asyncio
async def test_get_sends_no_body():
    captured = []
    async with TimedHttpClient(transport=recording_transport(captured)) as client:
        response = await client.get("/posts/1")

    assert captured[0].content == b""
    assert response.request.body is None


@pytest.mark.asyncio
async def test_configured_timeout_is_applied_to_transport():
    captured = []
    config = HarnessConfig(timeout_ms=2500)
    async with TimedHttpClient(config=config, transport=recording_transport(captured)) as client:
        response = await client.get("/users")

    assert captured[0].extensions["timeout"]["read"] == 2.5
    assert response.request.timeout_ms == 2500


@pytest.mark.asyncio
async def test_duration_reflects_server_delay():
    async def slow_handler(request):
        await asyncio.sleep(0.05)
        return httpx.Response(200, json=[])

    async with TimedHttpClient(transport=httpx.MockTransport(slow_handler)) as client:
        response = await client.get("/users")

    assert response.duration_ms >= 45


@pytest.mark.asyncio
async def test_success_envelope_fields():
    captured = []
    async with TimedHttpClient(
        transport=recording_transport(captured, payload={"id": 1})
    ) as client:
        response = await client.get("/users/1")

    assert response.status == 200
    assert response.body == {"id": 1}
    assert response.duration_ms >= 0
    assert response.header("CONTENT-TYPE") == "application/json"
    assert response.request.method == "GET"
    assert response.is_success


@pytest.mark.asyncio
async def test_empty_body_parses_as_empty_object():
    captured = []
    async with TimedHttpClient(
        transport=recording_transport(captured, status=200, content=b"")
    ) as client:
        response = await client.delete("/posts/1")

    assert response.body == {}


@pytest.mark.asyncio
async def test_non_json_body_is_kept_as_text():
    captured = []
    async with TimedHttpClient(
        transport=recording_transport(captured, status=200, text="plain text")
    ) as client:
        response = await client.get("/health")

    assert response.body == "plain text"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, kind",
    [
        (400, ErrorKind.CLIENT_ERROR),
        (404, ErrorKind.CLIENT_ERROR),
        (499, ErrorKind.CLIENT_ERROR),
        (500, ErrorKind.SERVER_ERROR),
        (503, ErrorKind.SERVER_ERROR),
    ],
)
async def test_error_status_is_classified_and_carries_response(status, kind):
    captured = []
    async with TimedHttpClient(
        transport=recording_transport(captured, status=status, payload={"error": "nope"})
    ) as client:
        with pytest.raises(ApiRequestError) as excinfo:
            await client.get("/users/9999")

    error = excinfo.value
    assert error.kind is kind
    assert error.response is not None
    assert error.response.status == status
    assert error.status == status
    assert error.response.body == {"error": "nope"}
    assert error.duration_ms >= 0
    assert "GET https://jsonplaceholder.typicode.com/users/9999" in str(error)


@pytest.mark.asyncio
async def test_timeout_is_classified_without_response():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    config = HarnessConfig(timeout_ms=50)
    async with TimedHttpClient(config=config, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiRequestError) as excinfo:
            await client.get("/users")

    error = excinfo.value
    assert error.kind is ErrorKind.TIMEOUT
    assert error.response is None
    assert error.status is None
    assert error.message == "Request timeout after 50ms"
    assert isinstance(error.__cause__, httpx.ReadTimeout)


@pytest.mark.asyncio
async def test_connection_failure_is_classified_as_network():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with TimedHttpClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ApiRequestError) as excinfo:
            await client.post("/posts", {"title": "t"})

    error = excinfo.value
    assert error.kind is ErrorKind.NETWORK
    assert error.response is None
    assert error.message.startswith("Network error:")
    assert error.request.body == {"title": "t"}


@pytest.mark.asyncio
async def test_concurrent_requests_share_one_client():
    captured = []
    async with TimedHttpClient(transport=recording_transport(captured)) as client:
        responses = await asyncio.gather(*(client.get(f"/posts/{i}") for i in range(1, 6)))

    assert [r.status for r in responses] == [200] * 5
    assert sorted(str(r.url) for r in captured) == sorted(
        f"https://jsonplaceholder.typicode.com/posts/{i}" for i in range(1, 6)
    )


def test_build_curl_includes_method_headers_body_and_url():
    client = object.__new__(TimedHttpClient)  # bypass __init__
    curl = client._build_curl(
        "POST",
        "https://example.test/posts",
        {"Content-Type": "application/json"},
        {"title": "hello"},
    )

    assert curl.startswith("curl -X POST")
    assert "-H 'Content-Type: application/json'" in curl
    assert "-d '{\"title\": \"hello\"}'" in curl
    assert curl.endswith("'https://example.test/posts'")
