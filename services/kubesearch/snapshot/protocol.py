"""
Snapshot provider protocol and exceptions for kubesearch.

A snapshot provider serves a point-in-time, read-only view of all
cluster-scoped role objects. The search engine never mutates what it returns.
"""

from typing import Protocol, runtime_checkable

from kubernetes.client import V1ClusterRole

# --- Exceptions ---


class SnapshotError(Exception):
    """Base exception for snapshot provider operations."""


class ProviderUnavailableError(SnapshotError):
    """Raised when the snapshot cannot be obtained."""


class RoleNotFoundError(SnapshotError):
    """Raised when no role with the requested name exists in the snapshot."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"ClusterRole not found: {name}")


# --- Protocol ---


@runtime_checkable
class RoleSnapshotProvider(Protocol):
    """Protocol defining the snapshot interface.

    Implementations must be safe to call concurrently and satisfy this
    interface structurally; no inheritance required.
    """

    @property
    def healthy(self) -> bool:
        """Whether the snapshot is current enough to serve readiness."""
        ...

    async def list_all(self) -> list[V1ClusterRole]:
        """Return every role in the current snapshot.

        Raises:
            ProviderUnavailableError: If the snapshot cannot be obtained.
        """
        ...

    async def get(self, name: str) -> V1ClusterRole:
        """Return a single role by name.

        Raises:
            RoleNotFoundError: If no such role exists.
            ProviderUnavailableError: If the snapshot cannot be obtained.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the provider."""
        ...
