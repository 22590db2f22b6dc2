"""ClusterRole search endpoints (read only).

Endpoints:
    GET    /api/v1/clusterroles         : search roles (conditions, orderBy, reverse, paging)
    GET    /api/v1/clusterroles/{name}  : show role
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from fastapi.responses import JSONResponse
from kubernetes.client import ApiClient, V1ClusterRole

from kubesearch.logging_config import get_logger
from kubesearch.resources import conditions as cond
from kubesearch.resources.clusterroles import ClusterRoleSearcher
from kubesearch.snapshot import get_snapshot
from kubesearch.snapshot.protocol import (
    ProviderUnavailableError,
    RoleNotFoundError,
    RoleSnapshotProvider,
)

router = APIRouter(tags=["clusterroles"])
logger = get_logger(__name__)

_serializer = ApiClient()


def _role_json(role: V1ClusterRole) -> dict:
    return _serializer.sanitize_for_serialization(role)


def get_searcher(provider: RoleSnapshotProvider = Depends(get_snapshot)) -> ClusterRoleSearcher:
    return ClusterRoleSearcher(provider)


@router.get("/clusterroles")
async def search_cluster_roles(
    conditions: str | None = Query(default=None),
    order_by: str | None = Query(default=None, alias="orderBy"),
    reverse: str | None = Query(default=None),
    paging: str | None = Query(default=None),
    searcher: ClusterRoleSearcher = Depends(get_searcher),
) -> JSONResponse:
    """Search ClusterRoles in the snapshot."""
    query = cond.Query.from_params(conditions=conditions, order_by=order_by, reverse=reverse)

    try:
        roles = await searcher.search(query)
    except ProviderUnavailableError as e:
        logger.warning("ClusterRole snapshot unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=str(e)) from e

    window = cond.parse_paging(paging)
    items = window.apply(roles) if window is not None else roles

    return JSONResponse(
        content={"items": [_role_json(r) for r in items], "total_count": len(roles)}
    )


@router.get("/clusterroles/{name}")
async def show_cluster_role(
    name: str = Path(...),
    searcher: ClusterRoleSearcher = Depends(get_searcher),
) -> JSONResponse:
    """Show a ClusterRole by name."""
    try:
        role = await searcher.get(name)
    except RoleNotFoundError as e:
        raise HTTPException(status_code=404, detail="ClusterRole not found") from e
    except ProviderUnavailableError as e:
        logger.warning("ClusterRole snapshot unavailable", error=str(e))
        raise HTTPException(status_code=503, detail=str(e)) from e

    return JSONResponse(content=_role_json(role))
