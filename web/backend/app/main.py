"""FastAPI application for the chat mediator.

Provides:
- ``/ws`` -- the pairing and relay channel for chat clients
- ``/api/report`` and ``/api/sanction/me`` -- public endpoints
- ``/api/admin/*`` -- report review and mute/ban management
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mediator import __version__
from mediator.config import load_settings
from web.backend.app.routers import chat, reports, sanctions
from web.backend.app.services import get_services

logger = logging.getLogger(__name__)


async def _sweep_expired(interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        get_services().sanctions.purge_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    services = get_services()
    logger.info("Mediator starting (snapshot: %s)", services.snapshot.path)
    sweeper = None
    if services.settings.sweep_interval > 0:
        sweeper = asyncio.create_task(_sweep_expired(services.settings.sweep_interval))

    yield

    logger.info("Mediator shutting down")
    if sweeper is not None:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
    get_services().writer.close()


app = FastAPI(
    title="Mediator API",
    description="Anonymous 1:1 chat relay with report intake and mute/ban moderation.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_settings().cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "x-admin-key"],
)

# ---------------------------------------------------------------------------
# Include routers
# ---------------------------------------------------------------------------
app.include_router(chat.router)
app.include_router(reports.router)
app.include_router(sanctions.router)


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "Mediator API",
        "version": __version__,
        "websocket": "/ws",
        "docs": "/docs",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
