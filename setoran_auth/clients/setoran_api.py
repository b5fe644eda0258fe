"""Thin wrapper over the Setoran resource API endpoints."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from setoran_auth.schemas.setoran import SetoranRequest
from setoran_auth.utils.http import ApiGateway


class SetoranApiClient:
    """Issue bearer-authenticated calls; callers pass the current access token."""

    def __init__(self, gateway: ApiGateway, base_url: str) -> None:
        self._gateway = gateway
        self._base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path}"

    @staticmethod
    def _headers(access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    async def get_dosen_info(self, access_token: str) -> httpx.Response:
        """Advisor profile plus the advised students and their progress."""
        return await self._gateway.request(
            "GET", self._url("dosen/pa-saya"), headers=self._headers(access_token)
        )

    async def get_setoran_mahasiswa(self, access_token: str, nim: str) -> httpx.Response:
        return await self._gateway.request(
            "GET",
            self._url(f"mahasiswa/setoran/{quote(nim)}"),
            headers=self._headers(access_token),
        )

    async def post_setoran_mahasiswa(
        self, access_token: str, nim: str, request: SetoranRequest
    ) -> httpx.Response:
        return await self._gateway.request(
            "POST",
            self._url(f"mahasiswa/setoran/{quote(nim)}"),
            headers=self._headers(access_token),
            json=request.to_payload(),
        )

    async def delete_setoran_mahasiswa(
        self, access_token: str, nim: str, setoran_id: str, request: SetoranRequest
    ) -> httpx.Response:
        # DELETE with a JSON body; httpx only allows that through request().
        return await self._gateway.request(
            "DELETE",
            self._url(f"mahasiswa/setoran/{quote(nim)}"),
            headers=self._headers(access_token),
            params={"id": setoran_id},
            json=request.to_payload(),
        )


__all__ = ["SetoranApiClient"]
