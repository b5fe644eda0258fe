"""
FastAPI application entrypoint for the setoran session service.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from setoran_auth.api.routes import router as api_router
from setoran_auth.core.config import get_settings
from setoran_auth.core.logging import configure_logging
from setoran_auth.dependencies import get_api_gateway, get_inactivity_monitor


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the inactivity monitor while the host is in the foreground."""
    monitor = get_inactivity_monitor()
    monitor.start()
    try:
        yield
    finally:
        await monitor.stop()
        await get_api_gateway().aclose()


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Setoran Session Service",
        version="0.1.0",
        description="Session, token and inactivity handling for the Setoran dosen app.",
        lifespan=lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app", "lifespan"]
