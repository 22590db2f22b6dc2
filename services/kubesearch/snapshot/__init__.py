"""
Role snapshot layer for kubesearch.

Provides init_snapshot() / close_snapshot() for app lifespan and
get_snapshot() as a FastAPI dependency.
"""

from __future__ import annotations

from kubesearch.config import SnapshotBackend, settings
from kubesearch.logging_config import get_logger
from kubesearch.snapshot.protocol import RoleSnapshotProvider

logger = get_logger(__name__)

# Module-level provider instance
_provider: RoleSnapshotProvider | None = None


async def init_snapshot() -> None:
    """Initialize the snapshot provider based on configuration.

    Called during app startup (lifespan).
    """
    global _provider  # noqa: PLW0603
    cfg = settings.snapshot

    match cfg.backend:
        case SnapshotBackend.MEMORY:
            from kubesearch.snapshot.memory import StaticSnapshot

            path = cfg.memory.manifest_path
            snapshot = StaticSnapshot.from_file(path) if path else StaticSnapshot()
            _provider = snapshot
            logger.info(
                "Snapshot initialized", backend="memory", manifest=path, count=len(snapshot)
            )

        case SnapshotBackend.KUBERNETES:
            from kubesearch.snapshot.k8s_cache import ClusterRoleCache, create_rbac_api

            k8s = cfg.kubernetes
            cache = ClusterRoleCache(
                rbac_api=create_rbac_api(k8s),
                label_selector=k8s.label_selector,
                watch_timeout_seconds=k8s.watch_timeout_seconds,
                sync_timeout_seconds=k8s.sync_timeout_seconds,
                retry_backoff_seconds=k8s.retry_backoff_seconds,
            )
            await cache.start()
            _provider = cache
            logger.info(
                "Snapshot initialized", backend="kubernetes", label_selector=k8s.label_selector
            )


async def close_snapshot() -> None:
    """Close the snapshot provider and release resources.

    Called during app shutdown (lifespan).
    """
    global _provider  # noqa: PLW0603
    if _provider is not None:
        await _provider.close()
        _provider = None
        logger.info("Snapshot closed")


def get_snapshot() -> RoleSnapshotProvider:
    """FastAPI dependency that returns the snapshot provider.

    Raises RuntimeError if the snapshot has not been initialized.
    """
    if _provider is None:
        raise RuntimeError("Snapshot not initialized; call init_snapshot() first")
    return _provider


def get_snapshot_or_none() -> RoleSnapshotProvider | None:
    """Return the snapshot provider if initialized, otherwise None."""
    return _provider
