"""Static in-memory snapshot provider.

Serves a fixed set of roles. Used for local development (seeded from a
manifest file) and in tests.
"""

from collections.abc import Iterable

from kubernetes.client import V1ClusterRole

from kubesearch.resources.meta import object_name
from kubesearch.snapshot.manifests import cluster_role_from_manifest, load_manifests
from kubesearch.snapshot.protocol import RoleNotFoundError


class StaticSnapshot:
    """Immutable snapshot over a sequence of roles, preserving insertion order."""

    def __init__(self, roles: Iterable[V1ClusterRole] = ()) -> None:
        self._roles: tuple[V1ClusterRole, ...] = tuple(roles)
        self._by_name = {object_name(r): r for r in self._roles}

    @classmethod
    def from_manifests(cls, docs: Iterable[dict]) -> "StaticSnapshot":
        return cls(cluster_role_from_manifest(d) for d in docs)

    @classmethod
    def from_file(cls, path: str) -> "StaticSnapshot":
        return cls(load_manifests(path))

    def __len__(self) -> int:
        return len(self._roles)

    @property
    def healthy(self) -> bool:
        return True

    async def list_all(self) -> list[V1ClusterRole]:
        return list(self._roles)

    async def get(self, name: str) -> V1ClusterRole:
        try:
            return self._by_name[name]
        except KeyError:
            raise RoleNotFoundError(name) from None

    async def close(self) -> None:
        pass
