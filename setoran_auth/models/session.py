"""
Domain models for the persisted token record and the derived session state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from setoran_auth.core.errors import SessionError

T = TypeVar("T")


class SessionState(str, Enum):
    LOGGED_OUT = "logged_out"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"
    EXPIRED = "expired"


class TokenRecord(BaseModel):
    """Snapshot of the stored tokens; always complete or absent."""

    access_token: str
    refresh_token: str
    id_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime
    last_activity_at: datetime = Field(
        ..., description="Updated on user interaction and on every token save."
    )

    def is_access_expired(self, now: datetime) -> bool:
        return now >= self.access_expires_at

    def is_refresh_expired(self, now: datetime) -> bool:
        return now >= self.refresh_expires_at

    def is_inactive(self, now: datetime, threshold: timedelta) -> bool:
        return now - self.last_activity_at >= threshold


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a session operation: a value, or a typed error."""

    value: Optional[T] = None
    error: Optional[SessionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "OperationResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SessionError) -> "OperationResult[T]":
        return cls(error=error)


__all__ = ["OperationResult", "SessionState", "TokenRecord"]
