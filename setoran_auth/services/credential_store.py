"""
Durable storage for the session token record.

The record lives in one SQLite row with its tokens encrypted. It is written
and cleared as a unit; readers get a complete snapshot or nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from setoran_auth.clients.sqlite_store import SQLiteStore
from setoran_auth.models.session import TokenRecord
from setoran_auth.schemas.auth import TokenResponse
from setoran_auth.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

NowCallable = Callable[[], datetime]

_NAMESPACE = "session"
_KEY = "tokens"
_ENCRYPTED_FIELDS = ("access_token", "refresh_token", "id_token")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CredentialStore:
    """Persist, inspect and clear the token record."""

    def __init__(
        self,
        store: SQLiteStore,
        cipher: TokenCipherService,
        *,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        now: NowCallable = _utc_now,
    ) -> None:
        self._store = store
        self._cipher = cipher
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._now = now

    def save(self, tokens: TokenResponse) -> TokenRecord:
        """Store a full token set with fresh expiries and activity timestamp."""
        now = self._now()
        record = TokenRecord(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            id_token=tokens.id_token,
            access_expires_at=now + self._access_ttl,
            refresh_expires_at=now + self._refresh_ttl,
            last_activity_at=now,
        )
        data = record.model_dump(mode="json")
        for field in _ENCRYPTED_FIELDS:
            data[field] = self._cipher.encrypt(data[field])
        self._store.put_record(_NAMESPACE, _KEY, data)
        logger.debug("Token record saved; access expires at %s", record.access_expires_at)
        return record

    def snapshot(self) -> Optional[TokenRecord]:
        """Read the whole record at once, or ``None`` when logged out."""
        data = self._store.get_record(_NAMESPACE, _KEY)
        if not data:
            return None
        try:
            for field in _ENCRYPTED_FIELDS:
                data[field] = self._cipher.decrypt(data[field])
            return TokenRecord.model_validate(data)
        except (KeyError, ValueError):
            logger.error("Stored token record is unreadable; treating session as absent")
            return None

    def get_access_token(self) -> Optional[str]:
        record = self.snapshot()
        return record.access_token if record else None

    def get_refresh_token(self) -> Optional[str]:
        record = self.snapshot()
        return record.refresh_token if record else None

    def get_id_token(self) -> Optional[str]:
        record = self.snapshot()
        return record.id_token if record else None

    def is_access_expired(self) -> bool:
        record = self.snapshot()
        return record is None or record.is_access_expired(self._now())

    def is_refresh_expired(self) -> bool:
        record = self.snapshot()
        return record is None or record.is_refresh_expired(self._now())

    def touch_activity(self) -> None:
        """Mark the user as active now; tokens stay untouched."""
        self._store.update_record(
            _NAMESPACE, _KEY, {"last_activity_at": self._now().isoformat()}
        )

    def is_inactive(self, threshold: timedelta) -> bool:
        record = self.snapshot()
        return record is None or record.is_inactive(self._now(), threshold)

    def clear(self) -> None:
        self._store.delete_record(_NAMESPACE, _KEY)

    def now(self) -> datetime:
        return self._now()


__all__ = ["CredentialStore", "NowCallable"]
