"""Build V1ClusterRole objects from plain manifest dicts (as found in YAML files)."""

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import yaml
from kubernetes.client import (
    V1AggregationRule,
    V1ClusterRole,
    V1LabelSelector,
    V1ObjectMeta,
    V1OwnerReference,
    V1PolicyRule,
)

CLUSTER_ROLE_KIND = "ClusterRole"
API_VERSION = "rbac.authorization.k8s.io/v1"


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=UTC)


def _owner_reference(doc: dict) -> V1OwnerReference:
    return _build(
        V1OwnerReference,
        doc,
        ("controller", "blockOwnerDeletion"),
        api_version=doc.get("apiVersion", ""),
        kind=doc.get("kind", ""),
        name=doc.get("name", ""),
        uid=doc.get("uid", ""),
    )


def model_kwarg(model_cls: type, json_key: str) -> str:
    """Resolve the constructor keyword a model accepts for a manifest (JSON) key.

    Generated client models name some fields unpredictably (`nonResourceURLs`
    is `non_resource_ur_ls` in the classic models), so the name is read from
    the model rather than hard-coded. Alias-based models take the JSON key itself.
    """
    for attr, key in (getattr(model_cls, "attribute_map", None) or {}).items():
        if key == json_key:
            return attr
    for attr, info in (getattr(model_cls, "model_fields", None) or {}).items():
        if json_key in (attr, getattr(info, "alias", None)):
            return json_key
    raise KeyError(f"{model_cls.__name__} has no field for {json_key!r}")


def _build(model_cls: type, doc: dict, json_keys: tuple[str, ...], **fields: Any) -> Any:
    """Instantiate model_cls from the given manifest keys, skipping unset ones."""
    kwargs = {
        model_kwarg(model_cls, key): doc[key] for key in json_keys if doc.get(key) is not None
    }
    kwargs.update(fields)
    return model_cls(**kwargs)


def _policy_rule(doc: dict) -> V1PolicyRule:
    return _build(
        V1PolicyRule,
        doc,
        ("apiGroups", "resources", "resourceNames", "nonResourceURLs"),
        verbs=doc.get("verbs") or [],
    )


def _aggregation_rule(doc: dict | None) -> V1AggregationRule | None:
    if not doc:
        return None
    selectors = [
        V1LabelSelector(match_labels=s.get("matchLabels"))
        for s in doc.get("clusterRoleSelectors") or []
    ]
    return V1AggregationRule(cluster_role_selectors=selectors)


def cluster_role_from_manifest(doc: dict) -> V1ClusterRole:
    """Convert a ClusterRole manifest dict into a V1ClusterRole.

    Missing fields are left unset; nothing beyond the rule verbs is validated.
    """
    meta = doc.get("metadata") or {}
    return V1ClusterRole(
        api_version=doc.get("apiVersion", API_VERSION),
        kind=doc.get("kind", CLUSTER_ROLE_KIND),
        metadata=V1ObjectMeta(
            name=meta.get("name"),
            labels=meta.get("labels"),
            annotations=meta.get("annotations"),
            creation_timestamp=_parse_timestamp(meta.get("creationTimestamp")),
            resource_version=meta.get("resourceVersion"),
            uid=meta.get("uid"),
            owner_references=[_owner_reference(r) for r in meta.get("ownerReferences") or []]
            or None,
        ),
        rules=[_policy_rule(r) for r in doc.get("rules") or []],
        aggregation_rule=_aggregation_rule(doc.get("aggregationRule")),
    )


def _iter_cluster_role_docs(docs: list[Any]):
    for doc in docs:
        if not isinstance(doc, dict):
            continue
        kind = doc.get("kind", "")
        if kind == CLUSTER_ROLE_KIND:
            yield doc
        elif kind.endswith("List"):
            yield from _iter_cluster_role_docs(doc.get("items") or [])


def load_manifests(path: str) -> list[V1ClusterRole]:
    """Read ClusterRole objects from a (multi-document) YAML file.

    Non-ClusterRole documents are ignored; `kind: List` documents are unpacked.
    """
    with open(Path(path)) as f:
        docs = list(yaml.safe_load_all(f))
    return [cluster_role_from_manifest(d) for d in _iter_cluster_role_docs(docs)]
