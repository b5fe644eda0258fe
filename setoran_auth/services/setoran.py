"""
Setoran operations for the signed-in lecturer.

Each call goes through ``SessionManager.authenticated_request`` so token
refresh and forced logout apply uniformly.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from setoran_auth.clients.setoran_api import SetoranApiClient
from setoran_auth.core.errors import SessionError
from setoran_auth.models.session import OperationResult
from setoran_auth.schemas.setoran import SetoranRequest
from setoran_auth.services.session_manager import AuthenticatedOperation, SessionManager

logger = logging.getLogger(__name__)


class SetoranService:
    """Resource API calls returning decoded JSON bodies."""

    def __init__(self, session: SessionManager, api: SetoranApiClient) -> None:
        self._session = session
        self._api = api

    async def get_dosen_info(self) -> OperationResult[Dict[str, Any]]:
        return await self._run("dosen info", self._api.get_dosen_info)

    async def get_setoran(self, nim: str) -> OperationResult[Dict[str, Any]]:
        return await self._run(
            f"setoran of {nim}",
            lambda token: self._api.get_setoran_mahasiswa(token, nim),
        )

    async def add_setoran(
        self, nim: str, request: SetoranRequest
    ) -> OperationResult[Dict[str, Any]]:
        return await self._run(
            f"add setoran for {nim}",
            lambda token: self._api.post_setoran_mahasiswa(token, nim, request),
        )

    async def delete_setoran(
        self, nim: str, setoran_id: str, request: SetoranRequest
    ) -> OperationResult[Dict[str, Any]]:
        return await self._run(
            f"delete setoran {setoran_id} for {nim}",
            lambda token: self._api.delete_setoran_mahasiswa(token, nim, setoran_id, request),
        )

    async def _run(
        self, label: str, operation: AuthenticatedOperation
    ) -> OperationResult[Dict[str, Any]]:
        result = await self._session.authenticated_request(operation)
        if result.error is not None:
            logger.warning("Request for %s failed: %s", label, result.error.kind)
            return OperationResult.failure(result.error)

        response = result.value
        try:
            body = response.json()
        except ValueError:
            logger.error("Request for %s returned a non-JSON body", label)
            return OperationResult.failure(
                SessionError("The server returned an unreadable response.")
            )
        return OperationResult.success(body)


__all__ = ["SetoranService"]
