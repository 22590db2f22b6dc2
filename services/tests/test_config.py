"""Tests for settings loading: defaults, env overrides and YAML source."""

from unittest.mock import patch

import yaml

from kubesearch import config
from kubesearch.config import Settings, SnapshotBackend


class TestSettings:
    def test_metadata_key_defaults(self):
        keys = Settings().keys
        assert keys.display_name_annotation == "kubesphere.io/alias-name"
        assert keys.creator_annotation == "kubesphere.io/creator"
        assert keys.workspace_label == "kubesphere.io/workspace"

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("KUBESEARCH_KEYS__CREATOR_ANNOTATION", "example.com/creator")
        monkeypatch.setenv("KUBESEARCH_SNAPSHOT__BACKEND", "kubernetes")
        settings = Settings()
        assert settings.keys.creator_annotation == "example.com/creator"
        assert settings.snapshot.backend == SnapshotBackend.KUBERNETES

    def test_yaml_source_below_env(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {"api_prefix": "/kapis/v1", "keys": {"workspace_label": "example.com/ws"}}
            )
        )
        monkeypatch.setenv("KUBESEARCH_API_PREFIX", "/api/v9")

        with patch.object(config, "CONFIG_PATH", str(path)):
            settings = Settings()

        assert settings.api_prefix == "/api/v9"
        assert settings.keys.workspace_label == "example.com/ws"

    def test_missing_yaml_is_empty(self, tmp_path):
        with patch.object(config, "CONFIG_PATH", str(tmp_path / "absent.yaml")):
            assert config.yaml_config_settings_source() == {}

    def test_sync_timeout_default_and_override(self, monkeypatch):
        assert Settings().snapshot.kubernetes.sync_timeout_seconds == 30.0

        monkeypatch.setenv("KUBESEARCH_SNAPSHOT__KUBERNETES__SYNC_TIMEOUT_SECONDS", "2.5")
        assert Settings().snapshot.kubernetes.sync_timeout_seconds == 2.5
