"""Schemas related to the login and session flows."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """Token endpoint payload for the password and refresh_token grants."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    id_token: str = Field(..., min_length=1)
    expires_in: Optional[int] = Field(
        None, description="Lifetime reported by Keycloak; informational only."
    )


class LoginRequest(BaseModel):
    """Manual login submitted by the host UI."""

    username: str = Field(..., min_length=1, description="Campus email or username.")
    password: str = Field(..., min_length=1)
    remember_for_biometric: bool = Field(
        False,
        description="Store the credential encrypted so biometric login can replay it.",
    )


class LogoutRequest(BaseModel):
    """Options for an explicit logout."""

    forget_credential: bool = False
    clear_profile: bool = False


class SessionStatus(BaseModel):
    """Current session snapshot exposed to the host UI."""

    state: str
    display_name: Optional[str] = None
    biometric_available: bool = False
    expired_notice: Optional[str] = Field(
        None,
        description="Non-dismissable notice set when the session was force-closed.",
    )
