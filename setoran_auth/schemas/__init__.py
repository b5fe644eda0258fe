"""Public schema exports."""

from .auth import LoginRequest, LogoutRequest, SessionStatus, TokenResponse
from .setoran import SetoranItem, SetoranRequest

__all__ = [
    "LoginRequest",
    "LogoutRequest",
    "SessionStatus",
    "SetoranItem",
    "SetoranRequest",
    "TokenResponse",
]
