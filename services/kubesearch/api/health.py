"""
Health check endpoints for the kubesearch service.

Provides /health (liveness) and /ready (readiness) endpoints.
"""

from fastapi import APIRouter, Response, status

from kubesearch.logging_config import get_logger
from kubesearch.snapshot import get_snapshot_or_none

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    """Liveness probe endpoint.

    Returns 200 if the API server is running.
    """
    return {"status": "healthy"}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def ready(response: Response) -> dict[str, str | dict[str, str]]:
    """Readiness probe endpoint.

    Ready once the snapshot provider is initialized and reports itself healthy.
    """
    provider = get_snapshot_or_none()
    healthy = provider is not None and provider.healthy
    checks = {"snapshot": "healthy" if healthy else "unhealthy"}

    if checks["snapshot"] != "healthy":
        logger.warning("Readiness check failed", checks=checks)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not ready", "checks": checks}

    return {"status": "ready", "checks": checks}
