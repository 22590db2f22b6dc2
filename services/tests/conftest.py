"""
Top-level test configuration for kubesearch.
"""

import os
from datetime import UTC, datetime, timedelta

import pytest

# Ensure test-friendly defaults
os.environ.setdefault("KUBESEARCH_SNAPSHOT__BACKEND", "memory")
os.environ.setdefault("KUBESEARCH_JSON_LOGS", "false")
os.environ.setdefault("KUBESEARCH_LOG_LEVEL", "DEBUG")

DN = "kubesphere.io/alias-name"
CR = "kubesphere.io/creator"
WS = "kubesphere.io/workspace"

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def _ts(offset: int) -> str:
    return (T0 + timedelta(hours=offset)).strftime("%Y-%m-%dT%H:%M:%SZ")


@pytest.fixture
def seed_manifests() -> list[dict]:
    """admin, viewer, editor, system:bot in insertion order, created an hour apart."""
    return [
        {
            "kind": "ClusterRole",
            "metadata": {
                "name": "admin",
                "labels": {"tier": "system"},
                "annotations": {DN: "Administrator"},
                "creationTimestamp": _ts(0),
            },
        },
        {
            "kind": "ClusterRole",
            "metadata": {
                "name": "viewer",
                "labels": {"tier": "user", WS: "ws-a"},
                "annotations": {CR: "alice", DN: "Read Only"},
                "creationTimestamp": _ts(1),
            },
        },
        {
            "kind": "ClusterRole",
            "metadata": {
                "name": "editor",
                "labels": {"tier": "user"},
                "annotations": {CR: "bob", DN: "Editor"},
                "creationTimestamp": _ts(2),
            },
        },
        {
            "kind": "ClusterRole",
            "metadata": {
                "name": "system:bot",
                "labels": {},
                "annotations": {},
                "creationTimestamp": _ts(3),
                "ownerReferences": [
                    {
                        "apiVersion": "rbac.authorization.k8s.io/v1",
                        "kind": "Role",
                        "name": "admin",
                        "uid": "0b6f1c2e",
                        "controller": True,
                    }
                ],
            },
        },
    ]
