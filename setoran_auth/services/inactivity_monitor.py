"""Periodic session policing: expiry, inactivity and forced logout."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from datetime import timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from setoran_auth.models.session import SessionState
from setoran_auth.services.credential_store import CredentialStore
from setoran_auth.services.session_manager import SessionManager
from setoran_auth.utils.http import SleepCallable

logger = logging.getLogger(__name__)

ExpiredCallback = Callable[[], Optional[Awaitable[Any]]]


class CheckOutcome(str, Enum):
    SKIPPED = "skipped"
    ACTIVE = "active"
    GRACE = "grace"
    EXPIRED = "expired"


class InactivityMonitor:
    """Background check started and stopped by the host's foreground lifecycle."""

    def __init__(
        self,
        *,
        session: SessionManager,
        store: CredentialStore,
        on_session_expired: ExpiredCallback,
        inactivity_threshold: timedelta,
        interval_seconds: float = 30.0,
        refresh_on_grace: bool = True,
        is_on_login_screen: Callable[[], bool] | None = None,
        sleep: SleepCallable = asyncio.sleep,
    ) -> None:
        self._session = session
        self._store = store
        self._on_session_expired = on_session_expired
        self._threshold = inactivity_threshold
        self._interval = interval_seconds
        self._refresh_on_grace = refresh_on_grace
        self._is_on_login_screen = is_on_login_screen or (
            lambda: session.state is SessionState.LOGGED_OUT
        )
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._fired = False
        session.add_listener(self._on_state_change)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Begin periodic checks, replacing any loop already running."""
        if self._task is not None:
            self._task.cancel()
        self._fired = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("Inactivity monitor started (interval=%ss)", self._interval)

    async def stop(self) -> None:
        """Cancel the loop and wait for it so no timer outlives the host."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("Inactivity monitor stopped")

    def _on_state_change(self, old: SessionState, new: SessionState) -> None:
        # A new session after a forced logout is policed again.
        if new is SessionState.AUTHENTICATED:
            self._fired = False

    def record_interaction(self) -> None:
        """Called for every raw input event from the host."""
        self._session.touch_activity()

    async def _run(self) -> None:
        while True:
            try:
                await self.check_once()
            except Exception:  # noqa: BLE001
                logger.exception("Session check failed")
            await self._sleep(self._interval)

    async def check_once(self) -> CheckOutcome:
        if self._fired or self._is_on_login_screen():
            return CheckOutcome.SKIPPED

        record = self._store.snapshot()
        now = self._store.now()
        if record is not None and not record.is_access_expired(now):
            return CheckOutcome.ACTIVE

        if (
            record is None
            or record.is_refresh_expired(now)
            or record.is_inactive(now, self._threshold)
        ):
            await self._force_logout()
            return CheckOutcome.EXPIRED

        if self._refresh_on_grace:
            outcome = await self._session.refresh()
            if not outcome.ok:
                await self._force_logout()
                return CheckOutcome.EXPIRED
        else:
            self._session.touch_activity()
        return CheckOutcome.GRACE

    async def _force_logout(self) -> None:
        self._fired = True
        logger.info("Session expired by inactivity policy; forcing logout")
        self._session.expire()
        try:
            result = self._on_session_expired()
            if inspect.isawaitable(result):
                await result
        except Exception:  # noqa: BLE001
            logger.exception("Session-expired callback failed")


__all__ = ["CheckOutcome", "ExpiredCallback", "InactivityMonitor"]
