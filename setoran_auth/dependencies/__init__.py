"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_api_gateway,
    get_biometric_gate,
    get_credential_store,
    get_credential_vault,
    get_identity_claims_reader,
    get_inactivity_monitor,
    get_keycloak_client,
    get_profile_cache,
    get_session_manager,
    get_session_notice,
    get_setoran_api_client,
    get_setoran_service,
    get_sqlite_store,
    get_token_cipher_service,
    get_vault_cipher_service,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_api_gateway",
    "get_app_settings",
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
