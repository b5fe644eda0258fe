from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs

import httpx
import pytest

from _fakes import make_id_token

from setoran_auth.clients.keycloak import KeycloakClient
from setoran_auth.core.config import IdentitySettings
from setoran_auth.core.errors import (
    ClientError,
    InvalidTokenResponseError,
    NetworkError,
    ServerError,
    UnauthorizedError,
)
from setoran_auth.utils.http import ApiGateway, RetryConfig


async def _no_sleep(_: float) -> None:
    return None


def _client(handler) -> KeycloakClient:
    settings = IdentitySettings(
        KEYCLOAK_BASE_URL="https://id.example",
        KEYCLOAK_REALM="dev",
        KEYCLOAK_CLIENT_ID="setoran-mobile-dev",
        KEYCLOAK_CLIENT_SECRET="client-secret",
    )
    gateway = ApiGateway(
        httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        retry_config=RetryConfig(attempts=2),
        sleep=_no_sleep,
    )
    return KeycloakClient(gateway, settings)


def _tokens(**extra) -> dict:
    body = {
        "access_token": "access-1",
        "refresh_token": "refresh-1",
        "id_token": make_id_token(name="Dosen Test"),
        "expires_in": 300,
        "token_type": "Bearer",
    }
    body.update(extra)
    return body


@pytest.mark.asyncio
async def test_password_grant_posts_form_to_realm_token_endpoint() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_tokens())

    tokens = await _client(handler).password_grant("dosen", "rahasia")

    assert tokens.access_token == "access-1"
    request = seen[0]
    assert str(request.url) == (
        "https://id.example/realms/dev/protocol/openid-connect/token"
    )
    form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
    assert form == {
        "client_id": "setoran-mobile-dev",
        "client_secret": "client-secret",
        "grant_type": "password",
        "username": "dosen",
        "password": "rahasia",
        "scope": "openid profile email",
    }


@pytest.mark.asyncio
async def test_refresh_grant_sends_refresh_token() -> None:
    forms: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        forms.append(parse_qs(request.content.decode()))
        return httpx.Response(200, json=_tokens(access_token="access-2"))

    tokens = await _client(handler).refresh_grant("refresh-1")

    assert tokens.access_token == "access-2"
    assert forms[0]["grant_type"] == ["refresh_token"]
    assert forms[0]["refresh_token"] == ["refresh-1"]


@pytest.mark.asyncio
async def test_rejected_credentials_raise_unauthorized() -> None:
    client = _client(lambda request: httpx.Response(401, json={"error": "invalid_grant"}))

    with pytest.raises(UnauthorizedError):
        await client.password_grant("dosen", "salah")


@pytest.mark.asyncio
async def test_bad_request_carries_server_detail() -> None:
    client = _client(
        lambda request: httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Token is not active"},
        )
    )

    with pytest.raises(ClientError) as excinfo:
        await client.refresh_grant("refresh-old")

    assert excinfo.value.status_code == 400
    assert excinfo.value.detail == "Token is not active"


@pytest.mark.asyncio
async def test_missing_id_token_is_invalid_response() -> None:
    body = _tokens()
    del body["id_token"]
    client = _client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(InvalidTokenResponseError):
        await client.password_grant("dosen", "rahasia")


@pytest.mark.asyncio
async def test_non_json_success_is_invalid_response() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

    with pytest.raises(InvalidTokenResponseError):
        await client.password_grant("dosen", "rahasia")


@pytest.mark.asyncio
async def test_timeout_becomes_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(NetworkError) as excinfo:
        await _client(handler).password_grant("dosen", "rahasia")

    assert "timed out" in excinfo.value.message


@pytest.mark.asyncio
async def test_persistent_server_error_is_server_error() -> None:
    client = _client(lambda request: httpx.Response(503))

    with pytest.raises(ServerError) as excinfo:
        await client.password_grant("dosen", "rahasia")

    assert excinfo.value.status_code == 503
