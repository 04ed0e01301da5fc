"""Application factory helpers to keep app/main.py lightweight."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.router import api_router
from app.core.config import settings
from app.core.database import get_db
from app.core.error_handlers import register_exception_handlers
from app.core.exceptions import DependencyFailureException
from app.core.logging_config import setup_logging
from app.core.middleware import LoggingMiddleware

logger = logging.getLogger(__name__)


def _configure_app(app: FastAPI) -> None:
    # Logs all requests and responses with timing
    app.add_middleware(LoggingMiddleware)

    origins = settings.cors_allow_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)


def _register_routes(app: FastAPI) -> None:
    # Liveness Check (Is the app process running?)
    @app.get("/livez", tags=["Health"])
    async def livez():
        return {"status": "ok"}

    # Readiness Check (Can we reach the record store?)
    @app.get("/readyz", tags=["Health"])
    def readyz(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Readiness check failed (Database): {e}")
            raise DependencyFailureException("database")

        return {"status": "ready", "details": {"database": "connected"}}


def _lifespan_factory():
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting IdeaHub API ({settings.environment})")

        yield

        logger.info("Shutting down IdeaHub API")

    return lifespan


def create_app() -> FastAPI:
    """
    Application Factory to create and configure the FastAPI application.
    Integrates Logging, Error Handling and Middleware.
    """

    # Setup Logging System first
    setup_logging(
        log_level=getattr(settings, "log_level", "INFO"),
        log_dir=getattr(settings, "log_dir", None),
        app_name="ideahub",
        max_bytes=10 * 1024 * 1024,  # 10 MB
        backup_count=5,
        use_json=getattr(settings, "use_json_logs", False),
    )

    app = FastAPI(
        title="IdeaHub API",
        description="Idea collaboration: contribution requests, invitations and skill matching",
        version="1.0.0",
        lifespan=_lifespan_factory(),
        default_response_class=ORJSONResponse,
    )

    # Read by the exception handlers to decide how much detail to expose.
    app.state.environment = settings.environment

    _configure_app(app)
    _register_routes(app)

    # Register Unified Exception Handlers
    register_exception_handlers(app)

    logger.info("Application startup complete")

    return app


__all__ = ["create_app"]
