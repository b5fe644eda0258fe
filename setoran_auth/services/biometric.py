"""
Biometric capability probe and user-verification challenge.

The platform prompt lives behind ``BiometricBackend``; this module turns its
statuses and outcomes into a boolean capability check and a single awaitable
result per challenge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class BiometricStatus(str, Enum):
    SUCCESS = "success"
    NO_HARDWARE = "no_hardware"
    HARDWARE_UNAVAILABLE = "hardware_unavailable"
    NONE_ENROLLED = "none_enrolled"
    SECURITY_UPDATE_REQUIRED = "security_update_required"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class BiometricPrompt:
    title: str = "Log in with fingerprint"
    subtitle: str = "Use your fingerprint to sign in to your account"
    negative_button: str = "Cancel"


@dataclass(frozen=True)
class BiometricResult:
    success: bool
    reason: Optional[str] = None

    @classmethod
    def passed(cls) -> "BiometricResult":
        return cls(success=True)

    @classmethod
    def failed(cls, reason: str) -> "BiometricResult":
        return cls(success=False, reason=reason)


class BiometricBackend(Protocol):
    def probe(self) -> BiometricStatus:
        ...

    async def authenticate(self, prompt: BiometricPrompt) -> BiometricResult:
        ...


class UnavailableBiometricBackend:
    """Backend for hosts without a biometric sensor."""

    def probe(self) -> BiometricStatus:
        return BiometricStatus.NO_HARDWARE

    async def authenticate(self, prompt: BiometricPrompt) -> BiometricResult:
        return BiometricResult.failed("Biometric hardware is not available")


class BiometricGate:
    """Capability check plus one-shot verification challenge."""

    def __init__(self, backend: BiometricBackend, prompt: BiometricPrompt | None = None) -> None:
        self._backend = backend
        self._prompt = prompt or BiometricPrompt()

    def can_challenge(self) -> bool:
        try:
            status = self._backend.probe()
        except Exception:  # noqa: BLE001 - platform probes fail in many ways
            logger.exception("Biometric capability probe failed")
            return False
        if status is not BiometricStatus.SUCCESS:
            logger.info("Biometric authentication unavailable: %s", status.value)
            return False
        return True

    async def challenge(self) -> BiometricResult:
        """Prompt the user once; always resolves to exactly one result."""
        try:
            result = await self._backend.authenticate(self._prompt)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Biometric prompt raised %s", exc.__class__.__name__)
            return BiometricResult.failed(str(exc) or "Authentication failed")
        if result.success:
            logger.info("Biometric authentication succeeded")
            return result
        reason = result.reason or "Authentication failed"
        logger.info("Biometric authentication failed: %s", reason)
        return BiometricResult.failed(reason)


__all__ = [
    "BiometricBackend",
    "BiometricGate",
    "BiometricPrompt",
    "BiometricResult",
    "BiometricStatus",
    "UnavailableBiometricBackend",
]
