"""
FastAPI routes exposing the session lifecycle to the host UI.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from setoran_auth.core.config import AppSettings
from setoran_auth.core.errors import ClientError, SessionError
from setoran_auth.dependencies import (
    SettingsDependency,
    get_inactivity_monitor,
    get_session_manager,
    get_session_notice,
    get_setoran_service,
)
from setoran_auth.models.session import OperationResult, SessionState
from setoran_auth.schemas import LoginRequest, LogoutRequest, SessionStatus, SetoranRequest
from setoran_auth.services import (
    InactivityMonitor,
    SessionManager,
    SessionNotice,
    SetoranService,
)

router = APIRouter()
logger = logging.getLogger(__name__)

SessionDep = Annotated[SessionManager, Depends(get_session_manager)]
NoticeDep = Annotated[SessionNotice, Depends(get_session_notice)]
SetoranDep = Annotated[SetoranService, Depends(get_setoran_service)]
MonitorDep = Annotated[InactivityMonitor, Depends(get_inactivity_monitor)]

_STATUS_BY_KIND = {
    "session_expired": HTTPStatus.UNAUTHORIZED,
    "unauthorized": HTTPStatus.UNAUTHORIZED,
    "network": HTTPStatus.SERVICE_UNAVAILABLE,
    "server": HTTPStatus.BAD_GATEWAY,
    "invalid_token_response": HTTPStatus.BAD_GATEWAY,
    "biometric": HTTPStatus.BAD_REQUEST,
    "no_saved_credential": HTTPStatus.BAD_REQUEST,
    "credential_vault": HTTPStatus.BAD_REQUEST,
    "login_in_progress": HTTPStatus.CONFLICT,
}


def _raise_for(error: SessionError) -> None:
    if isinstance(error, ClientError):
        status_code = error.status_code
    else:
        status_code = _STATUS_BY_KIND.get(error.kind, HTTPStatus.INTERNAL_SERVER_ERROR)
    logger.info("Responding %s for %s error", int(status_code), error.kind)
    raise HTTPException(
        status_code=status_code,
        detail={"kind": error.kind, "message": error.message},
    )


def _unwrap(result: OperationResult[Any]) -> Any:
    if result.error is not None:
        _raise_for(result.error)
    return result.value


def _status(session: SessionManager, notice: SessionNotice) -> SessionStatus:
    authenticated = session.state is SessionState.AUTHENTICATED
    return SessionStatus(
        state=session.state.value,
        display_name=session.display_name() if authenticated else None,
        biometric_available=session.biometric_available(),
        expired_notice=notice.message,
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(settings: AppSettings = SettingsDependency) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.post("/auth/login", status_code=HTTPStatus.OK, response_model=SessionStatus)
async def login(payload: LoginRequest, session: SessionDep, notice: NoticeDep) -> SessionStatus:
    """Password login; optionally remembers the credential for biometric login."""
    result = await session.login(
        payload.username,
        payload.password,
        persist_credential=payload.remember_for_biometric,
    )
    _unwrap(result)
    notice.resolve()
    return _status(session, notice)


@router.post("/auth/biometric", status_code=HTTPStatus.OK, response_model=SessionStatus)
async def biometric_login(session: SessionDep, notice: NoticeDep) -> SessionStatus:
    _unwrap(await session.biometric_login())
    notice.resolve()
    return _status(session, notice)


@router.post("/auth/logout", status_code=HTTPStatus.OK, response_model=SessionStatus)
async def logout(
    session: SessionDep,
    notice: NoticeDep,
    payload: Optional[LogoutRequest] = None,
) -> SessionStatus:
    options = payload or LogoutRequest()
    session.logout(
        forget_credential=options.forget_credential,
        clear_profile=options.clear_profile,
    )
    return _status(session, notice)


@router.get("/session", status_code=HTTPStatus.OK, response_model=SessionStatus)
async def session_status(session: SessionDep, notice: NoticeDep) -> SessionStatus:
    return _status(session, notice)


@router.post("/session/activity", status_code=HTTPStatus.NO_CONTENT)
async def record_activity(monitor: MonitorDep) -> Response:
    """Called by the host for user input events."""
    monitor.record_interaction()
    return Response(status_code=HTTPStatus.NO_CONTENT)


@router.get("/dosen", status_code=HTTPStatus.OK)
async def dosen_info(service: SetoranDep) -> Any:
    return _unwrap(await service.get_dosen_info())


@router.get("/mahasiswa/{nim}/setoran", status_code=HTTPStatus.OK)
async def list_setoran(nim: str, service: SetoranDep) -> Any:
    return _unwrap(await service.get_setoran(nim))


@router.post("/mahasiswa/{nim}/setoran", status_code=HTTPStatus.OK)
async def add_setoran(nim: str, payload: SetoranRequest, service: SetoranDep) -> Any:
    return _unwrap(await service.add_setoran(nim, payload))


@router.delete("/mahasiswa/{nim}/setoran/{setoran_id}", status_code=HTTPStatus.OK)
async def delete_setoran(
    nim: str, setoran_id: str, payload: SetoranRequest, service: SetoranDep
) -> Any:
    return _unwrap(await service.delete_setoran(nim, setoran_id, payload))


__all__ = ["router"]
