"""Service layer exports."""

from .biometric import (
    BiometricBackend,
    BiometricGate,
    BiometricPrompt,
    BiometricResult,
    BiometricStatus,
    UnavailableBiometricBackend,
)
from .credential_store import CredentialStore
from .credential_vault import CredentialVault
from .identity_claims import IdentityClaimsReader
from .inactivity_monitor import CheckOutcome, InactivityMonitor
from .profile_cache import ProfilePhotoCache
from .session_manager import SessionManager
from .session_notice import SessionNotice
from .setoran import SetoranService
from .token_cipher import TokenCipherService

__all__ = [
    "BiometricBackend",
    "BiometricGate",
    "BiometricPrompt",
    "BiometricResult",
    "BiometricStatus",
    "CheckOutcome",
    "CredentialStore",
    "CredentialVault",
    "IdentityClaimsReader",
    "InactivityMonitor",
    "ProfilePhotoCache",
    "SessionManager",
    "SessionNotice",
    "SetoranService",
    "TokenCipherService",
    "UnavailableBiometricBackend",
]
