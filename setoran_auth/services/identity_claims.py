"""Read display claims from the OIDC identity token."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import jwt

logger = logging.getLogger(__name__)


class IdentityClaimsReader:
    """Decode identity tokens, optionally verifying them against the realm JWKS.

    Without a JWKS client the claims are read unverified; they are only used
    for display, never for authorization.
    """

    def __init__(
        self,
        *,
        jwks_client: jwt.PyJWKClient | None = None,
        audience: str | None = None,
    ) -> None:
        self._jwks_client = jwks_client
        self._audience = audience

    def claims(self, id_token: str) -> Dict[str, Any]:
        if self._jwks_client is None:
            return jwt.decode(
                id_token,
                options={"verify_signature": False, "verify_exp": False},
            )
        signing_key = self._jwks_client.get_signing_key_from_jwt(id_token)
        return jwt.decode(
            id_token,
            signing_key.key,
            algorithms=["RS256"],
            audience=self._audience,
            options={"verify_exp": False},
        )

    def display_name(self, id_token: Optional[str]) -> Optional[str]:
        if not id_token:
            return None
        try:
            claims = self.claims(id_token)
        except jwt.PyJWTError as exc:
            logger.warning("Unable to decode identity token: %s", exc.__class__.__name__)
            return None
        return claims.get("name") or claims.get("preferred_username")


__all__ = ["IdentityClaimsReader"]
