"""Encrypted storage for the login credential replayed by biometric login."""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from setoran_auth.clients.sqlite_store import SQLiteStore
from setoran_auth.core.errors import CredentialVaultError
from setoran_auth.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)

_NAMESPACE = "vault"
_IDENTIFIER = "identifier"
_SECRET = "secret"
_PRESENT = "present"

# Everything the storage or crypto layer can raise while reading a value.
_STORAGE_ERRORS = (sqlite3.Error, OSError, ValueError, KeyError, TypeError)


class CredentialVault:
    """Fail-closed vault: any storage or decryption failure reads as "absent"."""

    def __init__(self, store: SQLiteStore, cipher: TokenCipherService) -> None:
        self._store = store
        self._cipher = cipher

    def save(self, identifier: str, secret: str) -> bool:
        """Replace any saved credential. Returns whether the write succeeded."""
        if not identifier or not secret:
            raise ValueError("Both identifier and secret are required.")
        try:
            self._store.replace_namespace(
                _NAMESPACE,
                {
                    _IDENTIFIER: {"value": self._cipher.encrypt(identifier)},
                    _SECRET: {"value": self._cipher.encrypt(secret)},
                    _PRESENT: {"value": True},
                },
            )
        except _STORAGE_ERRORS as exc:
            logger.error(
                "%s Saving failed: %s",
                CredentialVaultError.default_message,
                exc.__class__.__name__,
            )
            return False
        logger.info("Credential saved for biometric login")
        return True

    def _read(self, key: str) -> Optional[str]:
        try:
            record = self._store.get_record(_NAMESPACE, key)
            if not record:
                return None
            return self._cipher.decrypt(record["value"]) or None
        except _STORAGE_ERRORS as exc:
            logger.error("Reading saved %s failed: %s", key, exc.__class__.__name__)
            return None

    def get_identifier(self) -> Optional[str]:
        return self._read(_IDENTIFIER)

    def get_secret(self) -> Optional[str]:
        return self._read(_SECRET)

    def has(self) -> bool:
        try:
            flag = self._store.get_record(_NAMESPACE, _PRESENT)
        except _STORAGE_ERRORS as exc:
            logger.error("Checking saved credential failed: %s", exc.__class__.__name__)
            return False
        if not flag or flag.get("value") is not True:
            return False
        return bool(self.get_identifier()) and bool(self.get_secret())

    def clear(self) -> None:
        try:
            self._store.delete_namespace(_NAMESPACE)
        except _STORAGE_ERRORS as exc:
            logger.error("Clearing saved credential failed: %s", exc.__class__.__name__)
            return
        logger.info("Saved credential cleared")


__all__ = ["CredentialVault"]
