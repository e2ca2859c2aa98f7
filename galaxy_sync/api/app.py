"""
FastAPI application factory.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from galaxy_sync import __version__
from galaxy_sync.api.dependencies import (
    cleanup_dependencies,
    get_subscription_service,
    init_dependencies,
)
from galaxy_sync.api.routes import health, readme, subscription, sync
from galaxy_sync.config.settings import get_settings

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("galaxy-sync API starting up")

    settings = get_settings()
    scheduler = init_dependencies(settings=settings)

    if settings.scheduler_enabled:
        await scheduler.start()
    else:
        logger.info("Scheduler disabled, syncs run only when triggered")

    subscription_service = get_subscription_service()
    if subscription_service is not None:
        await subscription_service.start()

    yield

    logger.info("galaxy-sync API shutting down")
    await cleanup_dependencies()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    openapi_tags = [
        {"name": "health", "description": "Service health checks"},
        {"name": "sync", "description": "Collection sync status and triggers"},
        {"name": "subscription", "description": "Automation platform subscription"},
        {"name": "scm", "description": "Read-only SCM file access"},
    ]

    app = FastAPI(
        title="galaxy-sync API",
        description="""
Discovers Ansible collections in GitHub and GitLab organizations and
automation hub repositories, and keeps the catalog in sync.

## Authentication

Requires `X-API-KEY` header for all requests except `/health` when
`API_KEYS` is set.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )

    # CORS origins from CORS_ORIGINS env var, comma-separated
    cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Request logging and correlation ID
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time
            response.headers["X-Request-ID"] = request_id

            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
            return response
        finally:
            structlog.contextvars.clear_contextvars()

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "error_type": "internal"},
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(sync.router, tags=["sync"])
    app.include_router(subscription.router, tags=["subscription"])
    app.include_router(readme.router, tags=["scm"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "galaxy-sync API",
            "version": __version__,
            "docs": "/docs",
        }

    return app
