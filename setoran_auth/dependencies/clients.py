"""
Factory functions to provide shared clients and services as FastAPI dependencies.

Each factory builds one instance per process and injects its collaborators
explicitly; tests replace them through ``app.dependency_overrides``.
"""

from datetime import timedelta
from functools import lru_cache

import jwt

from setoran_auth.clients import KeycloakClient, SetoranApiClient, SQLiteStore
from setoran_auth.core.config import get_settings
from setoran_auth.services import (
    BiometricGate,
    CredentialStore,
    CredentialVault,
    IdentityClaimsReader,
    InactivityMonitor,
    ProfilePhotoCache,
    SessionManager,
    SessionNotice,
    SetoranService,
    TokenCipherService,
    UnavailableBiometricBackend,
)
from setoran_auth.utils.http import ApiGateway, RetryConfig, build_async_client


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_api_gateway() -> ApiGateway:
    """Shared HTTP client with uniform timeouts and retry policy."""
    api = _settings().api
    return ApiGateway(
        build_async_client(timeout_seconds=api.timeout_seconds),
        retry_config=RetryConfig(
            attempts=api.max_attempts,
            backoff_seconds=api.backoff_base_seconds,
            max_backoff_seconds=api.backoff_max_seconds,
        ),
    )


@lru_cache()
def get_sqlite_store() -> SQLiteStore:
    """Provide shared SQLite record store."""
    return SQLiteStore(_settings().session.db_path)


def _encryption_secret() -> str:
    settings = _settings()
    return settings.security.token_encryption_secret or settings.identity.client_secret


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    return TokenCipherService(secret=_encryption_secret(), purpose="tokens")


@lru_cache()
def get_vault_cipher_service() -> TokenCipherService:
    """Separate key for the saved login credential."""
    return TokenCipherService(secret=_encryption_secret(), purpose="vault")


@lru_cache()
def get_credential_store() -> CredentialStore:
    session = _settings().session
    return CredentialStore(
        get_sqlite_store(),
        get_token_cipher_service(),
        access_ttl=timedelta(seconds=session.access_token_ttl_seconds),
        refresh_ttl=timedelta(seconds=session.refresh_token_ttl_seconds),
    )


@lru_cache()
def get_credential_vault() -> CredentialVault:
    return CredentialVault(get_sqlite_store(), get_vault_cipher_service())


@lru_cache()
def get_keycloak_client() -> KeycloakClient:
    return KeycloakClient(get_api_gateway(), _settings().identity)


@lru_cache()
def get_biometric_gate() -> BiometricGate:
    """Hosts with a sensor swap the backend through dependency overrides."""
    return BiometricGate(UnavailableBiometricBackend())


@lru_cache()
def get_identity_claims_reader() -> IdentityClaimsReader:
    identity = _settings().identity
    if not identity.verify_id_token:
        return IdentityClaimsReader()
    return IdentityClaimsReader(
        jwks_client=jwt.PyJWKClient(identity.jwks_url),
        audience=identity.client_id,
    )


@lru_cache()
def get_profile_cache() -> ProfilePhotoCache:
    return ProfilePhotoCache(_settings().session.profile_cache_dir)


@lru_cache()
def get_session_manager() -> SessionManager:
    """Provide the process-wide session state machine."""
    return SessionManager(
        store=get_credential_store(),
        vault=get_credential_vault(),
        identity=get_keycloak_client(),
        biometric=get_biometric_gate(),
        claims=get_identity_claims_reader(),
        profile_cache=get_profile_cache(),
    )


@lru_cache()
def get_session_notice() -> SessionNotice:
    return SessionNotice()


@lru_cache()
def get_inactivity_monitor() -> InactivityMonitor:
    """Monitor whose forced-logout hook raises the session notice."""
    session = _settings().session
    return InactivityMonitor(
        session=get_session_manager(),
        store=get_credential_store(),
        on_session_expired=get_session_notice().show_expired,
        inactivity_threshold=timedelta(seconds=session.inactivity_threshold_seconds),
        interval_seconds=session.check_interval_seconds,
        refresh_on_grace=session.refresh_on_grace,
    )


@lru_cache()
def get_setoran_api_client() -> SetoranApiClient:
    return SetoranApiClient(get_api_gateway(), str(_settings().api.base_url))


def get_setoran_service() -> SetoranService:
    """Build a setoran service bound to the shared session."""
    return SetoranService(get_session_manager(), get_setoran_api_client())


__all__ = [
    "get_api_gateway",
    "get_biometric_gate",
    "get_credential_store",
    "get_credential_vault",
    "get_identity_claims_reader",
    "get_inactivity_monitor",
    "get_keycloak_client",
    "get_profile_cache",
    "get_session_manager",
    "get_session_notice",
    "get_setoran_api_client",
    "get_setoran_service",
    "get_sqlite_store",
    "get_token_cipher_service",
    "get_vault_cipher_service",
]
