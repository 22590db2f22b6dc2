"""
ClusterRole search engine.

Filters a role snapshot by exact (match) and fuzzy predicates, then orders the
result. All predicates in a query must hold; evaluation never raises, missing
metadata reads as empty.
"""

from functools import cmp_to_key

from kubernetes.client import V1ClusterRole

from kubesearch.config import MetadataKeys, settings
from kubesearch.logging_config import get_logger
from kubesearch.resources import constants as c
from kubesearch.resources.conditions import Query
from kubesearch.resources.meta import (
    creation_time,
    is_controlled_by,
    object_annotations,
    object_labels,
    object_name,
    substring_in_map,
)
from kubesearch.snapshot.protocol import RoleSnapshotProvider

logger = get_logger(__name__)

DEFAULT_KEYS = MetadataKeys()


def is_user_facing(role: V1ClusterRole, keys: MetadataKeys = DEFAULT_KEYS) -> bool:
    """A role is user-facing when a user created it outside of any workspace."""
    creator = object_annotations(role).get(keys.creator_annotation) or ""
    workspace = object_labels(role).get(keys.workspace_label) or ""
    return creator != "" and workspace == ""


def matches(
    predicates: dict[str, str], role: V1ClusterRole, keys: MetadataKeys = DEFAULT_KEYS
) -> bool:
    """Exact-match predicate evaluation.

    owner_kind and owner_name form a single predicate against the controller
    reference; a component that is not given matches any value.
    """
    if c.OWNER_KIND in predicates or c.OWNER_NAME in predicates:
        if not is_controlled_by(
            role, predicates.get(c.OWNER_KIND), predicates.get(c.OWNER_NAME)
        ):
            return False

    name = object_name(role)
    labels = object_labels(role)

    for key, value in predicates.items():
        match key:
            case c.OWNER_KIND | c.OWNER_NAME:
                continue
            case c.NAME:
                if name not in set(value.split("|")):
                    return False
            case c.KEYWORD:
                if (
                    value not in name
                    and not substring_in_map(labels, "", value)
                    and not substring_in_map(object_annotations(role), "", value)
                ):
                    return False
            case c.USER_FACING:
                if value == "true" and not is_user_facing(role, keys):
                    return False
            case _:
                if (labels.get(key) or "") != value:
                    return False
    return True


def fuzzy_matches(
    predicates: dict[str, str], role: V1ClusterRole, keys: MetadataKeys = DEFAULT_KEYS
) -> bool:
    """Case-sensitive substring predicate evaluation."""
    labels = object_labels(role)
    annotations = object_annotations(role)

    for key, value in predicates.items():
        match key:
            case c.NAME:
                display_name = annotations.get(keys.display_name_annotation) or ""
                if value not in object_name(role) and value not in display_name:
                    return False
            case c.LABEL:
                if not substring_in_map(labels, "", value):
                    return False
            case c.ANNOTATION:
                if not substring_in_map(annotations, "", value):
                    return False
            case _:
                if not substring_in_map(labels, key, value) and not substring_in_map(
                    annotations, key, value
                ):
                    return False
    return True


def less(a: V1ClusterRole, b: V1ClusterRole, order_by: str) -> bool:
    """Strict ordering; unknown order_by values order by name."""
    if order_by == c.ORDER_BY_CREATE_TIME:
        return creation_time(a) < creation_time(b)
    return object_name(a) < object_name(b)


def sort_roles(roles: list[V1ClusterRole], order_by: str, reverse: bool) -> list[V1ClusterRole]:
    """Stable sort; equal keys keep their input order in both directions."""

    def compare(a: V1ClusterRole, b: V1ClusterRole) -> int:
        if less(a, b, order_by):
            return -1
        if less(b, a, order_by):
            return 1
        return 0

    return sorted(roles, key=cmp_to_key(compare), reverse=reverse)


class ClusterRoleSearcher:
    """Search façade over a ClusterRole snapshot. Holds no per-request state."""

    def __init__(
        self, provider: RoleSnapshotProvider, keys: MetadataKeys | None = None
    ) -> None:
        self.provider = provider
        self.keys = keys or settings.keys

    async def get(self, name: str) -> V1ClusterRole:
        return await self.provider.get(name)

    async def search(self, query: Query) -> list[V1ClusterRole]:
        roles = await self.provider.list_all()

        if query.conditions.is_empty():
            result = list(roles)
        else:
            result = [
                r
                for r in roles
                if matches(query.match, r, self.keys) and fuzzy_matches(query.fuzzy, r, self.keys)
            ]

        logger.debug(
            "ClusterRole search",
            match_keys=sorted(query.match),
            label_filters=sorted(k for k in query.match if not c.is_reserved_match_key(k)),
            fuzzy_keys=sorted(query.fuzzy),
            order_by=query.order_by,
            reverse=query.reverse,
            scanned=len(roles),
            matched=len(result),
        )
        return sort_roles(result, query.order_by, query.reverse)
