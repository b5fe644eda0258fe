"""HTTP utilities providing timeout, retry and backoff semantics."""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import Any, Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

SleepCallable = Callable[[float], Awaitable[None]]


class RetryConfig:
    def __init__(
        self,
        *,
        attempts: int = 3,
        backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 5.0,
    ) -> None:
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds

    def delay_for(self, attempt: int) -> float:
        """Delay before retrying after failed attempt number ``attempt`` (1-based)."""
        return min(self.backoff_seconds * attempt * attempt, self.max_backoff_seconds)


def _is_server_error(response: httpx.Response) -> bool:
    return response.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR


async def request_with_retry(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    retry_config: RetryConfig | None = None,
    sleep: SleepCallable = asyncio.sleep,
    **kwargs,
) -> httpx.Response:
    """
    Call ``func`` until it yields a non-5xx response or attempts run out.

    Transport errors and 5xx responses are retried; any other response is
    returned as-is. Once attempts are exhausted the last response received is
    returned, or the last transport error is raised when none was received.
    """
    config = retry_config or RetryConfig()
    attempt = 0
    last_response: httpx.Response | None = None
    last_exception: Exception | None = None

    while attempt < config.attempts:
        try:
            response = await func(*args, **kwargs)
        except httpx.TransportError as exc:
            last_exception = exc
            logger.warning(
                "Transport failure on attempt %s/%s: %s",
                attempt + 1,
                config.attempts,
                exc.__class__.__name__,
            )
        else:
            if not _is_server_error(response):
                return response
            last_response = response
            logger.warning(
                "Server error %s on attempt %s/%s",
                response.status_code,
                attempt + 1,
                config.attempts,
            )

        attempt += 1
        if attempt >= config.attempts:
            break
        await sleep(config.delay_for(attempt))

    if last_response is not None:
        return last_response
    if last_exception is not None:
        raise last_exception
    raise RuntimeError("Request failed without raising an exception")


def build_async_client(*, timeout_seconds: float, **kwargs: Any) -> httpx.AsyncClient:
    """Create the shared client with one timeout for connect/read/write/pool."""
    return httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds), **kwargs)


class ApiGateway:
    """Outbound HTTP entry point shared by the identity and resource clients."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        retry_config: RetryConfig | None = None,
        sleep: SleepCallable = asyncio.sleep,
    ) -> None:
        self._client = client
        self._retry = retry_config or RetryConfig()
        self._sleep = sleep

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return await request_with_retry(
            self._client.request,
            method,
            url,
            retry_config=self._retry,
            sleep=self._sleep,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = [
    "ApiGateway",
    "RetryConfig",
    "SleepCallable",
    "build_async_client",
    "request_with_retry",
]
