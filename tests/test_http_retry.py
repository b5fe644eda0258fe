try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import httpx
import pytest

from setoran_auth.utils.http import ApiGateway, RetryConfig, request_with_retry


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _gateway(handler, sleep: RecordingSleep) -> ApiGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ApiGateway(client, retry_config=RetryConfig(), sleep=sleep)


def test_backoff_grows_quadratically_and_is_capped() -> None:
    config = RetryConfig(attempts=5, backoff_seconds=1.0, max_backoff_seconds=5.0)

    assert [config.delay_for(k) for k in (1, 2, 3, 4)] == [1.0, 4.0, 5.0, 5.0]


@pytest.mark.asyncio
async def test_timeouts_are_retried_until_attempts_run_out() -> None:
    calls = 0
    sleep = RecordingSleep()

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("slow", request=request)

    gateway = _gateway(handler, sleep)
    with pytest.raises(httpx.ReadTimeout):
        await gateway.request("GET", "https://api.example/dosen/pa-saya")
    await gateway.aclose()

    assert calls == 3
    assert sleep.delays == [1.0, 4.0]


@pytest.mark.asyncio
async def test_server_error_then_success_returns_success() -> None:
    statuses = iter([503, 200])
    sleep = RecordingSleep()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses), json={"ok": True})

    gateway = _gateway(handler, sleep)
    response = await gateway.request("GET", "https://api.example/dosen/pa-saya")
    await gateway.aclose()

    assert response.status_code == 200
    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_client_errors_are_not_retried() -> None:
    calls = 0
    sleep = RecordingSleep()

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(404, json={"message": "not found"})

    gateway = _gateway(handler, sleep)
    response = await gateway.request("GET", "https://api.example/mahasiswa/setoran/1")
    await gateway.aclose()

    assert response.status_code == 404
    assert calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_unauthorized_is_returned_without_retry() -> None:
    calls = 0

    async def send() -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(401)

    response = await request_with_retry(send, sleep=RecordingSleep())

    assert response.status_code == 401
    assert calls == 1


@pytest.mark.asyncio
async def test_persistent_server_error_returns_last_response() -> None:
    sleep = RecordingSleep()
    statuses = iter([500, 502, 504])

    async def send() -> httpx.Response:
        return httpx.Response(next(statuses))

    response = await request_with_retry(send, sleep=sleep)

    assert response.status_code == 504
    assert sleep.delays == [1.0, 4.0]


@pytest.mark.asyncio
async def test_single_attempt_config_never_sleeps() -> None:
    sleep = RecordingSleep()

    async def send() -> httpx.Response:
        raise httpx.ConnectError("refused")

    with pytest.raises(httpx.ConnectError):
        await request_with_retry(send, retry_config=RetryConfig(attempts=1), sleep=sleep)
    assert sleep.delays == []
