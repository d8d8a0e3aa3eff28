"""FastAPI application exposing the local account caches.

Serves read access to the device, smarthome and notification caches, plus
a webhook through which a push transport can deliver notification changes.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel

from echoremote.core.config import Settings
from echoremote.remote import EchoRemote
from echoremote.web.notification_router import router as notification_router

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str = "0.1.0"
    notification_state: str
    pending_updates: int


def create_app(
    settings: Settings | None = None,
    remote: EchoRemote | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Uses the factory pattern so tests can create isolated app instances
    with a pre-built EchoRemote. The remote is initialised on startup, which
    loads the caches and subscribes the reconciler to pushes, and closed on
    shutdown.
    """
    if settings is None:
        settings = Settings()
    if remote is None:
        remote = EchoRemote(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await app.state.remote.initialize()
        logger.info("Account caches loaded")
        yield
        await app.state.remote.close()

    app = FastAPI(
        title="echoremote",
        description="Local caches over a voice-assistant cloud account",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.remote = remote

    app.include_router(notification_router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        reconciler = request.app.state.remote.notifications.reconciler
        return HealthResponse(
            status="ok",
            service="echoremote",
            notification_state=reconciler.state,
            pending_updates=reconciler.pending_count,
        )

    @app.get("/api/devices")
    async def list_devices(request: Request) -> list[dict[str, Any]]:
        return [d.to_payload() for d in request.app.state.remote.devices.store.list_all()]

    @app.get("/api/devices/{ref}")
    async def get_device(ref: str, request: Request) -> dict[str, Any]:
        device = request.app.state.remote.find(ref)
        if device is None:
            raise HTTPException(status_code=404, detail=f"Device {ref!r} not found")
        return device.to_payload()

    @app.get("/api/smarthome/entities")
    async def list_smarthome_entities(request: Request) -> list[dict[str, Any]]:
        entities = request.app.state.remote.smarthome.entities.values()
        return [e.model_dump(mode="json", exclude={"children"}) for e in entities]

    return app
