"""Tolerant accessors over Kubernetes object metadata.

Objects come from the API server as-is, so any metadata field may be missing.
Missing strings read as "", missing maps as {}, a missing creation timestamp
as the earliest representable time.
"""

from datetime import UTC, datetime
from typing import Any

EPOCH_MIN = datetime.min.replace(tzinfo=UTC)


def _metadata(obj: Any) -> Any:
    return getattr(obj, "metadata", None)


def object_name(obj: Any) -> str:
    return getattr(_metadata(obj), "name", None) or ""


def object_labels(obj: Any) -> dict[str, str]:
    return getattr(_metadata(obj), "labels", None) or {}


def object_annotations(obj: Any) -> dict[str, str]:
    return getattr(_metadata(obj), "annotations", None) or {}


def creation_time(obj: Any) -> datetime:
    """Return the creation timestamp as an aware datetime."""
    ts = getattr(_metadata(obj), "creation_timestamp", None)
    if ts is None:
        return EPOCH_MIN
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts


def controller_reference(obj: Any) -> Any | None:
    """Return the owner reference marked as controller, if any."""
    for ref in getattr(_metadata(obj), "owner_references", None) or []:
        if getattr(ref, "controller", None) is True:
            return ref
    return None


def is_controlled_by(obj: Any, kind: str | None, name: str | None) -> bool:
    """
    Check whether obj's controller reference matches kind and name.

    A None kind or name matches any value. Objects without a controller
    reference never match.
    """
    ref = controller_reference(obj)
    if ref is None:
        return False
    if kind is not None and (getattr(ref, "kind", None) or "") != kind:
        return False
    if name is not None and (getattr(ref, "name", None) or "") != name:
        return False
    return True


def substring_in_map(mapping: dict[str, str], key_filter: str, needle: str) -> bool:
    """
    Case-sensitive substring search over a string map.

    With an empty key_filter, any key or value containing needle matches.
    Otherwise only mapping[key_filter] is searched, and a missing key fails.
    """
    if not key_filter:
        return any(needle in k or needle in (v or "") for k, v in mapping.items())
    if key_filter not in mapping:
        return False
    return needle in (mapping[key_filter] or "")
