"""
CheckIn Core API
================
FastAPI application entry point. Mount routers here.

The app owns the service container: the lifespan builds it from settings
(unless one is passed in), and on shutdown ends the activity session so
buffered events are flushed before the process exits.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from checkin.config import Settings, get_settings
from checkin.dependencies import AppServices
from checkin.routers import activity, celebrities, contacts, emotions, following

logger = logging.getLogger(__name__)


def create_app(
    services: Optional[AppServices] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or (services.settings if services else get_settings())
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.services = services or AppServices.from_settings(settings)
        logger.info("CheckIn core started (%s)", settings.environment)
        yield
        await app.state.services.activity.end_session()
        logger.info("CheckIn core stopped")

    app = FastAPI(
        title="CheckIn Core API",
        description="Contact emotions, following sync, celebrity moods and behaviour tracking",
        version="0.1.0",
        docs_url="/api/docs" if settings.environment != "production" else None,
        redoc_url="/api/redoc" if settings.environment != "production" else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(emotions.router)
    app.include_router(contacts.router)
    app.include_router(following.router)
    app.include_router(activity.router)
    app.include_router(celebrities.router)

    @app.get("/api/v1/health")
    async def health_check() -> dict:
        return {"status": "ok", "service": "checkin-core"}

    return app


app = create_app()
