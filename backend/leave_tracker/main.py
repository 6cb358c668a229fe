from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from leave_tracker.api.health import router as health_router
from leave_tracker.api.router import api_router
from leave_tracker.config import get_settings
from leave_tracker.db import dispose_engine
from leave_tracker.exceptions import setup_exception_handlers
from leave_tracker.middleware import setup_middleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from leave_tracker.config import Settings

logger = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    """Set the package log level; handlers are left to the server (uvicorn) or basicConfig."""
    logging.getLogger("leave_tracker").setLevel(settings.log_level)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)
    yield
    await dispose_engine()
    logger.info("Stopped %s", settings.app_name)


def create_app() -> FastAPI:
    """Build the FastAPI application: middleware, error envelope, and routers."""
    settings = get_settings()
    _configure_logging(settings)

    show_docs = settings.environment != "production"
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Leave entitlements, balances and applications",
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if show_docs else None,
        redoc_url="/redoc" if show_docs else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
