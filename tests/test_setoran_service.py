from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
from datetime import date

import httpx
import pytest

from _fakes import FakeBiometricBackend, no_sleep

from setoran_auth.clients.setoran_api import SetoranApiClient
from setoran_auth.core.errors import ClientError, SessionError, SessionExpiredError
from setoran_auth.schemas.setoran import SetoranItem, SetoranRequest
from setoran_auth.services.biometric import BiometricGate
from setoran_auth.services.session_manager import SessionManager
from setoran_auth.services.setoran import SetoranService
from setoran_auth.utils.http import ApiGateway

BASE_URL = "https://api.example/setoran-dev/v1/"


class SetoranBackend:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.reply = httpx.Response(200, json={"response": True, "data": {}})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.reply


@pytest.fixture
def backend() -> SetoranBackend:
    return SetoranBackend()


@pytest.fixture
def session(credential_store, credential_vault, identity) -> SessionManager:
    return SessionManager(
        store=credential_store,
        vault=credential_vault,
        identity=identity,
        biometric=BiometricGate(FakeBiometricBackend()),
    )


@pytest.fixture
def service(session, backend) -> SetoranService:
    gateway = ApiGateway(
        httpx.AsyncClient(transport=httpx.MockTransport(backend)), sleep=no_sleep
    )
    return SetoranService(session, SetoranApiClient(gateway, BASE_URL))


def _request() -> SetoranRequest:
    return SetoranRequest(
        data_setoran=[
            SetoranItem(id_komponen_setoran="k-78", nama_komponen_setoran="An-Naba")
        ],
        tgl_setoran=date(2025, 3, 1),
    )


@pytest.mark.asyncio
async def test_dosen_info_uses_bearer_token(session, service, backend) -> None:
    await session.login("dosen", "rahasia")
    backend.reply = httpx.Response(200, json={"data": {"nama": "Dosen Test"}})

    result = await service.get_dosen_info()

    assert result.value == {"data": {"nama": "Dosen Test"}}
    request = backend.requests[0]
    assert request.method == "GET"
    assert str(request.url) == f"{BASE_URL}dosen/pa-saya"
    assert request.headers["Authorization"] == "Bearer access-1"


@pytest.mark.asyncio
async def test_add_setoran_posts_payload(session, service, backend) -> None:
    await session.login("dosen", "rahasia")

    result = await service.add_setoran("12150110001", _request())

    assert result.ok
    request = backend.requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}mahasiswa/setoran/12150110001"
    assert json.loads(request.content) == {
        "data_setoran": [
            {"id_komponen_setoran": "k-78", "nama_komponen_setoran": "An-Naba"}
        ],
        "tgl_setoran": "2025-03-01",
    }


@pytest.mark.asyncio
async def test_delete_setoran_sends_id_and_body(session, service, backend) -> None:
    await session.login("dosen", "rahasia")

    await service.delete_setoran("12150110001", "s-1", _request())

    request = backend.requests[0]
    assert request.method == "DELETE"
    assert request.url.params["id"] == "s-1"
    assert json.loads(request.content)["data_setoran"][0]["id_komponen_setoran"] == "k-78"


@pytest.mark.asyncio
async def test_rejected_request_is_typed(session, service, backend) -> None:
    await session.login("dosen", "rahasia")
    backend.reply = httpx.Response(404, json={"message": "Mahasiswa tidak ditemukan"})

    result = await service.get_setoran("000")

    assert isinstance(result.error, ClientError)
    assert result.error.detail == "Mahasiswa tidak ditemukan"


@pytest.mark.asyncio
async def test_unreadable_body_is_reported(session, service, backend) -> None:
    await session.login("dosen", "rahasia")
    backend.reply = httpx.Response(200, text="<html>gateway</html>")

    result = await service.get_dosen_info()

    assert isinstance(result.error, SessionError)
    assert result.message == "The server returned an unreadable response."


@pytest.mark.asyncio
async def test_logged_out_service_sends_nothing(service, backend) -> None:
    result = await service.get_dosen_info()

    assert isinstance(result.error, SessionExpiredError)
    assert backend.requests == []
