"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_pagination import add_pagination

from app.config import get_facebook_config, get_settings
from app.exceptions import ConfigurationError, NotFoundError, TransportError
from app.infra.logging_config import LoggingConfig, get_logger
from app.routers import (
    conversations_router,
    health,
    integrations_router,
    outbound,
    webhooks,
)

logger = get_logger("main")


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    # The Facebook app secret is required to serve anything
    get_facebook_config()
    logger.info("Facebook app configuration loaded")
    yield


def setup_exception_handlers(app: FastAPI) -> None:
    """Map inbox errors to HTTP status codes."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(TransportError)
    async def transport_error_handler(
        request: Request, exc: TransportError
    ) -> JSONResponse:
        logger.error("Graph API error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=502, content={"detail": "Facebook Graph API request failed"}
        )


def create_app(testing: bool = False) -> FastAPI:
    """
    Create the API application.

    Args:
        testing: Skip the startup check of the Facebook app secret.
    """
    LoggingConfig()
    settings = get_settings()

    app = FastAPI(
        title="Page Inbox API",
        description="Facebook page Messenger and feed ingestion",
        lifespan=None if testing else _lifespan,
    )

    setup_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(webhooks.router)
    app.include_router(outbound.router)
    app.include_router(conversations_router.router)
    app.include_router(integrations_router.router)

    add_pagination(app)
    logger.debug("Application %s created (env=%s)", settings.app_name, settings.environment)
    return app
