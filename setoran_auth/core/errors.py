"""
Error taxonomy shared by the gateway, the identity client and the session.

Every failure that leaves the session manager is one of these types, carried
inside an ``OperationResult`` rather than raised.
"""

from __future__ import annotations

from http import HTTPStatus

import httpx


class SessionError(Exception):
    """Base class for typed session failures."""

    kind = "session_error"
    default_message = "Something went wrong, please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NetworkError(SessionError):
    """Timeout or unreachable host after the gateway exhausted its retries."""

    kind = "network"
    default_message = "Unable to reach the server, check your connection."


class ServerError(SessionError):
    """5xx response after the gateway exhausted its retries."""

    kind = "server"

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"Server error (code {status_code}), please try again later.")


class ClientError(SessionError):
    """4xx response other than 401; never retried."""

    kind = "client"

    def __init__(self, status_code: int, detail: str | None = None) -> None:
        self.status_code = status_code
        self.detail = detail
        message = f"Request rejected (code {status_code})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnauthorizedError(SessionError):
    """401 response; intercepted by the session manager for one refresh."""

    kind = "unauthorized"
    default_message = "Your credentials were rejected."


class SessionExpiredError(SessionError):
    """Refresh token missing/expired or the refresh itself failed."""

    kind = "session_expired"
    default_message = "Your session has ended, please log in again."


class InvalidTokenResponseError(SessionError):
    """The token endpoint answered 200 without the expected tokens."""

    kind = "invalid_token_response"
    default_message = "The login server returned an incomplete response."


class CredentialVaultError(SessionError):
    """The encrypted credential vault could not be read or written."""

    kind = "credential_vault"
    default_message = "Saved credentials are unavailable."


class NoSavedCredentialError(SessionError):
    """Biometric login requested without a stored credential."""

    kind = "no_saved_credential"
    default_message = "No saved credential found, log in with your password first."


class BiometricError(SessionError):
    """Biometric capability missing, not enrolled, or challenge failed."""

    kind = "biometric"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Biometric authentication failed: {reason}")


class LoginInProgressError(SessionError):
    """A login or refresh is already running for this session."""

    kind = "login_in_progress"
    default_message = "A login is already in progress."


def _extract_detail(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        text = response.text.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("error_description", "message", "error", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def classify_response(response: httpx.Response) -> SessionError | None:
    """Map a non-success response to its error type; ``None`` for 2xx/3xx."""
    status_code = response.status_code
    if status_code < HTTPStatus.BAD_REQUEST:
        return None
    if status_code == HTTPStatus.UNAUTHORIZED:
        return UnauthorizedError()
    if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        return ServerError(status_code)
    return ClientError(status_code, _extract_detail(response))


def classify_exception(exc: Exception) -> SessionError:
    """Map a transport exception to its error type."""
    if isinstance(exc, SessionError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        return NetworkError("Connection timed out, check your connection and try again.")
    if isinstance(exc, httpx.TransportError):
        return NetworkError()
    return SessionError(str(exc) or None)


__all__ = [
    "BiometricError",
    "ClientError",
    "CredentialVaultError",
    "InvalidTokenResponseError",
    "LoginInProgressError",
    "NetworkError",
    "NoSavedCredentialError",
    "ServerError",
    "SessionError",
    "SessionExpiredError",
    "UnauthorizedError",
    "classify_exception",
    "classify_response",
]
