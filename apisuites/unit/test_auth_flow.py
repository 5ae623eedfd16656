import pytest

from apisuites.api_testing.framework import (
    ApiRequestError,
    ConfigLoader,
    HarnessConfig,
    TimedHttpClient,
)
from apisuites.api_testing.framework import response_validator as rv
from apisuites.unit.fakes import FakeReqres


CREDENTIALS = {"email": "eve.holt@reqres.in", "password": "cityslicka"}


@pytest.mark.asyncio
async def test_login_token_is_attached_then_cleared(reqres_client, fake_reqres):
    response = await reqres_client.post("/login", CREDENTIALS)
    rv.validate_success_status(response)
    token = response.body["token"]

    reqres_client.set_auth_token(token)
    await reqres_client.get("/users/2")
    reqres_client.clear_auth_token()
    await reqres_client.get("/users/2")

    assert fake_reqres.requests[1].headers["authorization"] == f"Bearer {token}"
    assert "authorization" not in fake_reqres.requests[2].headers


@pytest.mark.asyncio
async def test_register_returns_id_and_token(reqres_client):
    response = await reqres_client.post(
        "/register", {"email": "eve.holt@reqres.in", "password": "pistol"}
    )

    rv.validate_exact_keys(response.body, ["id", "token"])


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, message",
    [
        ({"email": "eve.holt@reqres.in"}, "Missing password"),
        ({"password": "pistol"}, "Missing email or username"),
    ],
)
async def test_login_without_credentials_fails_with_error_body(reqres_client, payload, message):
    with pytest.raises(ApiRequestError) as excinfo:
        await reqres_client.post("/login", payload)

    error = excinfo.value
    rv.validate_status(error.response, [400, 401])
    rv.validate_error_response(error)
    assert error.response.body["error"] == message


@pytest.mark.asyncio
async def test_users_page_is_a_pagination_envelope(reqres_client):
    first = await reqres_client.get("/users", params={"page": 1})
    second = await reqres_client.get("/users", params={"page": 2})

    rv.validate_pagination_response(first, has_next_page=True)
    rv.validate_pagination_response(second, has_previous_page=True)
    assert len(second.body["data"]) == 6


@pytest.mark.asyncio
async def test_missing_api_key_is_rejected(fake_reqres):
    async with TimedHttpClient(
        config=HarnessConfig(), backend="reqres", transport=fake_reqres.transport()
    ) as client:
        with pytest.raises(ApiRequestError) as excinfo:
            await client.get("/users")

    assert excinfo.value.status == 401
    rv.validate_error_response(excinfo.value)


@pytest.mark.usefixtures("clean_config_env")
def test_fake_reqres_default_key_matches_shipped_config():
    ConfigLoader.reset()
    try:
        config = ConfigLoader().harness_config()
    finally:
        ConfigLoader.reset()

    assert config.backend_headers["reqres"]["x-api-key"] == FakeReqres().api_key
