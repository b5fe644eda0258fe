"""Pytest configuration shared across the suite."""

from datetime import timedelta

import pytest

from _fakes import FakeClock, FakeIdentityClient

from setoran_auth.clients.sqlite_store import SQLiteStore
from setoran_auth.services.credential_store import CredentialStore
from setoran_auth.services.credential_vault import CredentialVault
from setoran_auth.services.token_cipher import TokenCipherService


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sqlite_store(tmp_path) -> SQLiteStore:
    return SQLiteStore(str(tmp_path / "session.db"))


@pytest.fixture
def credential_store(sqlite_store: SQLiteStore, clock: FakeClock) -> CredentialStore:
    return CredentialStore(
        sqlite_store,
        TokenCipherService(secret="test-secret", purpose="tokens"),
        access_ttl=timedelta(seconds=10),
        refresh_ttl=timedelta(seconds=60),
        now=clock,
    )


@pytest.fixture
def credential_vault(sqlite_store: SQLiteStore) -> CredentialVault:
    return CredentialVault(sqlite_store, TokenCipherService(secret="test-secret", purpose="vault"))


@pytest.fixture
def identity() -> FakeIdentityClient:
    return FakeIdentityClient()
