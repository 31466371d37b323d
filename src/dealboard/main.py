"""FastAPI application factory.

Creates the app with logging middleware, metrics middleware, CORS, Sentry,
a lifespan that installs the deal repository, and the v1 API router.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import Response

from dealboard.api.middleware.logging import LoggingMiddleware, configure_structlog
from dealboard.api.v1.router import router as v1_router
from dealboard.config import get_settings
from dealboard.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry
from dealboard.pipeline.repository import InMemoryDealRepository
from dealboard.pipeline.seed import demo_deals


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: logging, Sentry and the deal repository."""
    log = structlog.get_logger(__name__)
    settings = get_settings()
    configure_structlog()

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    # A repository installed before startup (tests, embedding apps) wins.
    if getattr(app.state, "deal_repository", None) is None:
        seed = demo_deals() if settings.SEED_DEMO_DEALS else []
        app.state.deal_repository = InMemoryDealRepository(seed)
        log.info("pipeline.repository_initialized", backend="memory", seeded=len(seed))

    yield

    log.info("pipeline.shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        version="0.1.0",
        description="Deal pipeline board, stage moves and pipeline metrics",
        lifespan=lifespan,
    )

    # Middleware is added in reverse order (last added = outermost)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins() or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Logging middleware (logs every request with timing)
    app.add_middleware(LoggingMiddleware)

    # Metrics middleware (outermost -- records Prometheus metrics for all requests)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    # Prometheus metrics endpoint (infrastructure route, outside v1 router)
    @app.get("/metrics", include_in_schema=False)
    async def metrics(request: Request) -> Response:
        """Prometheus metrics endpoint."""
        return get_metrics_response()

    return app


# Module-level app for uvicorn
app = create_app()
