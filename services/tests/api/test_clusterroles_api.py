"""Tests for the ClusterRole search endpoints and health probes."""

from unittest.mock import AsyncMock, MagicMock, patch

from httpx import ASGITransport, AsyncClient

from kubesearch.api.app import create_app
from kubesearch.snapshot import get_snapshot
from kubesearch.snapshot.k8s_cache import ClusterRoleCache
from kubesearch.snapshot.memory import StaticSnapshot
from kubesearch.snapshot.protocol import ProviderUnavailableError


def _make_app(provider):
    """Create an app with the snapshot dependency overridden."""
    app = create_app()
    app.dependency_overrides[get_snapshot] = lambda: provider
    return app


async def _get(app, url: str, **params):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(url, params=params or None)


def _names(body: dict) -> list[str]:
    return [item["metadata"]["name"] for item in body["items"]]


class TestSearchEndpoint:
    async def test_empty_query(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(app, "/api/v1/clusterroles")

        assert response.status_code == 200
        body = response.json()
        assert _names(body) == ["admin", "editor", "system:bot", "viewer"]
        assert body["total_count"] == 4

    async def test_items_are_serialized_as_kubernetes_json(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(app, "/api/v1/clusterroles", conditions="name=system:bot")

        item = response.json()["items"][0]
        assert item["kind"] == "ClusterRole"
        assert item["metadata"]["creationTimestamp"].startswith("2024-01-01T03:00:00")
        assert item["metadata"]["ownerReferences"][0]["kind"] == "Role"

    async def test_conditions_and_ordering(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(
            app, "/api/v1/clusterroles", conditions="tier=user", orderBy="create_time", reverse="true"
        )

        assert _names(response.json()) == ["editor", "viewer"]

    async def test_fuzzy_conditions(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(app, "/api/v1/clusterroles", conditions="name~Read")

        assert _names(response.json()) == ["viewer"]

    async def test_conditions_are_not_decoded_twice(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(app, "/api/v1/clusterroles", conditions="name~%41dmin")

        assert response.json() == {"items": [], "total_count": 0}

    async def test_paging(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(app, "/api/v1/clusterroles", paging="limit=2,page=2")

        body = response.json()
        assert _names(body) == ["system:bot", "viewer"]
        assert body["total_count"] == 4

    async def test_unavailable_snapshot_returns_503(self):
        provider = AsyncMock()
        provider.list_all.side_effect = ProviderUnavailableError("ClusterRole cache has not synced")
        app = _make_app(provider)

        response = await _get(app, "/api/v1/clusterroles")

        assert response.status_code == 503
        assert response.json()["detail"] == "ClusterRole cache has not synced"


class TestShowEndpoint:
    async def test_show(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(app, "/api/v1/clusterroles/editor")

        assert response.status_code == 200
        assert response.json()["metadata"]["annotations"]["kubesphere.io/creator"] == "bob"

    async def test_show_missing(self, seed_manifests):
        app = _make_app(StaticSnapshot.from_manifests(seed_manifests))
        response = await _get(app, "/api/v1/clusterroles/nobody")

        assert response.status_code == 404
        assert response.json()["detail"] == "ClusterRole not found"


class TestHealth:
    async def test_health(self):
        response = await _get(create_app(), "/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_ready_without_snapshot(self):
        with patch("kubesearch.api.health.get_snapshot_or_none", return_value=None):
            response = await _get(create_app(), "/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "not ready"

    async def test_ready_with_snapshot(self):
        with patch("kubesearch.api.health.get_snapshot_or_none", return_value=StaticSnapshot()):
            response = await _get(create_app(), "/ready")
        assert response.status_code == 200
        assert response.json()["checks"] == {"snapshot": "healthy"}

    async def test_ready_with_unsynced_cache(self):
        cache = ClusterRoleCache(rbac_api=MagicMock())
        with patch("kubesearch.api.health.get_snapshot_or_none", return_value=cache):
            response = await _get(create_app(), "/ready")
        assert response.status_code == 503
        assert response.json()["checks"] == {"snapshot": "unhealthy"}

    async def test_ready_with_failing_watch(self):
        cache = ClusterRoleCache(rbac_api=MagicMock())
        cache.relist()
        cache._mark_watch_failed()
        with patch("kubesearch.api.health.get_snapshot_or_none", return_value=cache):
            response = await _get(create_app(), "/ready")
        assert response.status_code == 503

    async def test_request_id_echoed(self):
        app = create_app()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health", headers={"X-Request-ID": "req-1"})
        assert response.headers["X-Request-ID"] == "req-1"
