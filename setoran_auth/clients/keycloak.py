"""
Keycloak OpenID Connect client.

Handles the password and refresh_token grants against the realm token
endpoint. Transport retries come from the shared gateway.
"""

from __future__ import annotations

import logging
from typing import Dict

import httpx
from pydantic import ValidationError

from setoran_auth.core.config import IdentitySettings
from setoran_auth.core.errors import (
    InvalidTokenResponseError,
    SessionError,
    classify_exception,
    classify_response,
)
from setoran_auth.schemas.auth import TokenResponse
from setoran_auth.utils.http import ApiGateway

logger = logging.getLogger(__name__)


class KeycloakClient:
    """Exchange user credentials or refresh tokens for a new token set."""

    def __init__(self, gateway: ApiGateway, settings: IdentitySettings) -> None:
        self._gateway = gateway
        self._settings = settings

    async def password_grant(self, username: str, password: str) -> TokenResponse:
        """
        Log in with a username and password.

        Raises a ``SessionError`` subclass describing the failure.
        """
        payload = {
            "grant_type": "password",
            "username": username,
            "password": password,
            "scope": self._settings.scope,
        }
        return await self._request_tokens(payload)

    async def refresh_grant(self, refresh_token: str) -> TokenResponse:
        """Obtain a fresh token set from a refresh token."""
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        return await self._request_tokens(payload)

    async def _request_tokens(self, payload: Dict[str, str]) -> TokenResponse:
        form = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            **payload,
        }
        try:
            response = await self._gateway.request(
                "POST", self._settings.token_url, data=form
            )
        except httpx.HTTPError as exc:
            logger.warning("Token endpoint unreachable for %s grant", payload["grant_type"])
            raise classify_exception(exc) from exc

        error: SessionError | None = classify_response(response)
        if error is not None:
            logger.info(
                "Token endpoint rejected %s grant with status %s",
                payload["grant_type"],
                response.status_code,
            )
            raise error

        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise InvalidTokenResponseError() from exc


__all__ = ["KeycloakClient"]
