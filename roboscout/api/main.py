"""RoboScout Web API - FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from roboscout.config import load_settings
from roboscout.data.event import load_event
from roboscout.data.robotevents_client import RobotEventsClient

from .routes import matches
from .services.projector_registry import ProjectorRegistry

logger = logging.getLogger(__name__)


def default_registry() -> ProjectorRegistry:
    settings = load_settings()
    client = RobotEventsClient(settings=settings)
    return ProjectorRegistry(lambda sku: load_event(client, sku), tz=settings.display_tz)


def create_app(registry: Optional[ProjectorRegistry] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        if getattr(app.state, "registry", None) is None:
            app.state.registry = default_registry()
            logger.info("RoboScout API ready")
        yield

    app = FastAPI(title="RoboScout API", lifespan=lifespan)
    if registry is not None:
        app.state.registry = registry

    app.include_router(matches.router)

    @app.get("/api/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
