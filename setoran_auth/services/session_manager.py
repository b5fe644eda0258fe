"""
Session state machine: login, refresh, authenticated calls and logout.

The manager is the only writer of the token record. Every operation returns an
``OperationResult``; typed ``SessionError`` values describe failures and no
transport exception escapes.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from http import HTTPStatus
from typing import Awaitable, Callable, List, Optional, Protocol

import httpx

from setoran_auth.clients.keycloak import KeycloakClient
from setoran_auth.core.errors import (
    BiometricError,
    LoginInProgressError,
    NoSavedCredentialError,
    SessionError,
    SessionExpiredError,
    UnauthorizedError,
    classify_exception,
    classify_response,
)
from setoran_auth.models.session import OperationResult, SessionState, TokenRecord
from setoran_auth.services.biometric import BiometricGate
from setoran_auth.services.credential_store import CredentialStore
from setoran_auth.services.credential_vault import CredentialVault
from setoran_auth.services.identity_claims import IdentityClaimsReader

logger = logging.getLogger(__name__)

AuthenticatedOperation = Callable[[str], Awaitable[httpx.Response]]
StateListener = Callable[[SessionState, SessionState], None]


class ProfileArtifactCache(Protocol):
    def clear(self) -> None:
        ...


class SessionManager:
    """Owns session state transitions and the token record."""

    def __init__(
        self,
        *,
        store: CredentialStore,
        vault: CredentialVault,
        identity: KeycloakClient,
        biometric: BiometricGate,
        claims: IdentityClaimsReader | None = None,
        profile_cache: ProfileArtifactCache | None = None,
    ) -> None:
        self._store = store
        self._vault = vault
        self._identity = identity
        self._biometric = biometric
        self._claims = claims or IdentityClaimsReader()
        self._profile_cache = profile_cache
        self._listeners: List[StateListener] = []
        self._refresh_task: Optional[asyncio.Task] = None

        record = store.snapshot()
        if record is not None and not record.is_refresh_expired(store.now()):
            self._state = SessionState.AUTHENTICATED
        else:
            self._state = SessionState.LOGGED_OUT

    @property
    def state(self) -> SessionState:
        return self._state

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def _transition(self, new_state: SessionState) -> None:
        old_state = self._state
        if old_state is new_state:
            return
        self._state = new_state
        logger.info("Session state %s -> %s", old_state.value, new_state.value)
        for listener in list(self._listeners):
            try:
                listener(old_state, new_state)
            except Exception:  # noqa: BLE001
                logger.exception("Session state listener failed")

    # Login ----------------------------------------------------------------

    async def login(
        self, identifier: str, secret: str, persist_credential: bool = False
    ) -> OperationResult[None]:
        if self._state in (SessionState.AUTHENTICATING, SessionState.REFRESHING):
            logger.info("Login ignored; session is %s", self._state.value)
            return OperationResult.failure(LoginInProgressError())

        self._transition(SessionState.AUTHENTICATING)
        try:
            tokens = await self._identity.password_grant(identifier, secret)
        except SessionError as exc:
            self._transition(SessionState.LOGGED_OUT)
            return OperationResult.failure(self._login_error(exc))

        if self._state is not SessionState.AUTHENTICATING:
            # Logged out while the password grant was in flight.
            logger.info("Login discarded; session is now %s", self._state.value)
            return OperationResult.failure(SessionError("Login was cancelled."))

        try:
            self._store.save(tokens)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Unable to persist tokens after login: %s", exc.__class__.__name__)
            self._transition(SessionState.LOGGED_OUT)
            return OperationResult.failure(SessionError("Unable to store the session locally."))

        if persist_credential:
            self._vault.save(identifier, secret)

        self._transition(SessionState.AUTHENTICATED)
        return OperationResult.success()

    @staticmethod
    def _login_error(exc: SessionError) -> SessionError:
        if isinstance(exc, UnauthorizedError):
            return UnauthorizedError("Login failed: invalid username or password.")
        return exc

    async def biometric_login(self) -> OperationResult[None]:
        """Replay the saved credential after a successful biometric challenge."""
        if not self._vault.has():
            return OperationResult.failure(NoSavedCredentialError())
        if not self._biometric.can_challenge():
            return OperationResult.failure(
                BiometricError("biometric authentication is not available on this device")
            )

        outcome = await self._biometric.challenge()
        if not outcome.success:
            return OperationResult.failure(BiometricError(outcome.reason or "unknown reason"))

        identifier = self._vault.get_identifier()
        secret = self._vault.get_secret()
        if not identifier or not secret:
            return OperationResult.failure(NoSavedCredentialError())
        return await self.login(identifier, secret, persist_credential=False)

    def biometric_available(self) -> bool:
        return self._vault.has() and self._biometric.can_challenge()

    # Refresh --------------------------------------------------------------

    async def refresh(self) -> OperationResult[None]:
        """Refresh the token record; concurrent callers share one network call."""
        if self._refresh_task is None:
            if self._state is SessionState.AUTHENTICATING:
                return OperationResult.failure(LoginInProgressError())
            if self._state is not SessionState.AUTHENTICATED:
                return OperationResult.failure(SessionExpiredError())
            self._refresh_task = asyncio.ensure_future(self._run_refresh())
        return await asyncio.shield(self._refresh_task)

    async def _run_refresh(self) -> OperationResult[None]:
        try:
            record = self._store.snapshot()
            if record is None or record.is_refresh_expired(self._store.now()):
                logger.info("Refresh token missing or expired; refresh skipped")
                self._transition(SessionState.EXPIRED)
                return OperationResult.failure(SessionExpiredError())

            self._transition(SessionState.REFRESHING)
            try:
                tokens = await self._identity.refresh_grant(record.refresh_token)
            except SessionError as exc:
                logger.warning("Token refresh failed: %s", exc.kind)
                if self._state is SessionState.REFRESHING:
                    self._transition(SessionState.EXPIRED)
                return OperationResult.failure(SessionExpiredError())

            if self._state is not SessionState.REFRESHING:
                # Logged out while the refresh was in flight.
                return OperationResult.failure(SessionExpiredError())

            try:
                self._store.save(tokens)
            except (sqlite3.Error, OSError) as exc:
                logger.error(
                    "Unable to persist refreshed tokens: %s", exc.__class__.__name__
                )
                self._transition(SessionState.EXPIRED)
                return OperationResult.failure(SessionExpiredError())

            self._transition(SessionState.AUTHENTICATED)
            return OperationResult.success()
        finally:
            self._refresh_task = None

    # Authenticated calls --------------------------------------------------

    async def authenticated_request(
        self, operation: AuthenticatedOperation
    ) -> OperationResult[httpx.Response]:
        """
        Run ``operation`` with the current access token.

        A locally expired token is refreshed first; a 401 triggers one refresh
        and one retry. Any refresh failure, or a second 401, expires the
        session.
        """
        record = self._store.snapshot()
        if record is None or self._state is SessionState.LOGGED_OUT:
            return self._expire_session()

        refreshed = False
        if self._refresh_task is not None or record.is_access_expired(self._store.now()):
            record = await self._refreshed_record()
            if record is None:
                return self._expire_session()
            refreshed = True

        used_token = record.access_token
        result = await self._call(operation, used_token)
        if not self._is_unauthorized(result):
            return result
        if refreshed:
            logger.warning("Request rejected right after a refresh; expiring session")
            return self._expire_session()

        current = self._store.snapshot()
        if current is None:
            return self._expire_session()
        if current.access_token == used_token:
            current = await self._refreshed_record()
            if current is None:
                return self._expire_session()

        retried = await self._call(operation, current.access_token)
        if self._is_unauthorized(retried):
            logger.warning("Request still unauthorized after refresh; expiring session")
            return self._expire_session()
        return retried

    async def _refreshed_record(self) -> Optional[TokenRecord]:
        outcome = await self.refresh()
        if not outcome.ok:
            return None
        return self._store.snapshot()

    @staticmethod
    async def _call(
        operation: AuthenticatedOperation, access_token: str
    ) -> OperationResult[httpx.Response]:
        try:
            response = await operation(access_token)
        except httpx.HTTPError as exc:
            return OperationResult.failure(classify_exception(exc))
        error = classify_response(response)
        if error is not None:
            return OperationResult(value=response, error=error)
        return OperationResult.success(response)

    @staticmethod
    def _is_unauthorized(result: OperationResult[httpx.Response]) -> bool:
        return (
            result.value is not None
            and result.value.status_code == HTTPStatus.UNAUTHORIZED
        )

    def _expire_session(self) -> OperationResult[httpx.Response]:
        self.expire()
        return OperationResult.failure(SessionExpiredError())

    # Logout ---------------------------------------------------------------

    def expire(self) -> None:
        """Forced logout: clear the token record and land in ``LOGGED_OUT``."""
        self._store.clear()
        if self._state is SessionState.LOGGED_OUT:
            return
        self._transition(SessionState.EXPIRED)
        self._transition(SessionState.LOGGED_OUT)

    def logout(self, *, forget_credential: bool = False, clear_profile: bool = False) -> None:
        self._store.clear()
        if forget_credential:
            self._vault.clear()
        if clear_profile and self._profile_cache is not None:
            self._profile_cache.clear()
        self._transition(SessionState.LOGGED_OUT)

    # Activity and identity -----------------------------------------------

    def touch_activity(self) -> None:
        self._store.touch_activity()

    def display_name(self) -> Optional[str]:
        return self._claims.display_name(self._store.get_id_token())


__all__ = [
    "AuthenticatedOperation",
    "ProfileArtifactCache",
    "SessionManager",
    "StateListener",
]
