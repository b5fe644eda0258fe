"""Expose constructed client wrappers."""

from .keycloak import KeycloakClient
from .setoran_api import SetoranApiClient
from .sqlite_store import SQLiteStore

__all__ = [
    "KeycloakClient",
    "SQLiteStore",
    "SetoranApiClient",
]
