"""
FastAPI application factory for the kubesearch service.

Uses lifespan handler for startup/shutdown with async resource management.
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from kubesearch import __version__
from kubesearch.config import settings
from kubesearch.logging_config import configure_logging, get_logger
from kubesearch.snapshot import close_snapshot, init_snapshot

from .health import router as health_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan handler for startup and shutdown."""
    configure_logging(json_logs=settings.json_logs, log_level=settings.log_level)
    logger.info("Starting kubesearch API server", version=__version__)

    await init_snapshot()

    yield

    logger.info("Shutting down kubesearch API server")
    await close_snapshot()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="kubesearch API",
        description="Search over cached Kubernetes ClusterRoles",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Ensure every request has a request ID for logging correlation."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        structlog.contextvars.unbind_contextvars("request_id")

        return response

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler for unhandled errors."""
        logger.error("Unhandled exception", exc_info=exc, path=str(request.url.path))
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # Health endpoints (no prefix)
    app.include_router(health_router)

    from kubesearch.api.routers.clusterroles import router as clusterroles_router

    app.include_router(clusterroles_router, prefix=settings.api_prefix)

    return app


# Application instance
app = create_app()
