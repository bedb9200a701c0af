"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
lifespan events for database initialization, the dashboard error handlers
and the v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from src.dealboard.api.errors import register_exception_handlers
from src.dealboard.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.dealboard.api.v1.router import router as v1_router
from src.dealboard.config import get_settings
from src.dealboard.core.database import close_db, get_session, init_db
from src.dealboard.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from src.dealboard.deals.repository import DealRepository

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: init DB and Sentry on startup, close on shutdown."""
    settings = get_settings()
    configure_structlog()
    await init_db()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    logger.info(
        "lifespan.ready",
        environment=settings.ENVIRONMENT.value,
        database_url=settings.DATABASE_URL.split("@")[-1],
    )
    yield

    logger.info("lifespan.shutdown")
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="SponsorCX Deals Dashboard API",
        version="0.1.0",
        description="Sponsorship deals grouped by organization and account",
        lifespan=lifespan,
    )

    # The repository opens a session per call, so it is safe to build eagerly
    app.state.deal_repository = DealRepository(get_session)

    # Middleware is added in reverse order (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    register_exception_handlers(app)
    app.include_router(v1_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()


def run() -> None:
    """Serve the module-level app with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "src.dealboard.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
