"""
Configuration management for the kubesearch service.

Non-secret configuration loaded from YAML file, overridden by environment variables.
"""

from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = "/etc/kubesearch/config.yaml"


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path(CONFIG_PATH)
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Metadata Key Configuration ---


class MetadataKeys(BaseModel):
    """Annotation and label keys the search engine agrees on with the control plane."""

    display_name_annotation: str = Field(
        default="kubesphere.io/alias-name",
        description="Annotation holding the human-readable alias of a role",
    )
    creator_annotation: str = Field(
        default="kubesphere.io/creator",
        description="Annotation naming the principal that created a role",
    )
    workspace_label: str = Field(
        default="kubesphere.io/workspace",
        description="Label scoping a role to a named workspace",
    )


# --- Snapshot Configuration ---


class SnapshotBackend(StrEnum):
    """Supported snapshot providers."""

    MEMORY = "memory"
    KUBERNETES = "kubernetes"


class MemorySnapshotConfig(BaseModel):
    """Static snapshot seeded from ClusterRole manifests."""

    manifest_path: str = Field(
        default="",
        description="YAML file of ClusterRole manifests. Empty means an empty snapshot.",
    )


class KubernetesSnapshotConfig(BaseModel):
    """List/watch cache against the Kubernetes API server."""

    in_cluster: bool | None = Field(
        default=None,
        description="Force in-cluster (True) or kubeconfig (False) auth. None tries both.",
    )
    kubeconfig: str = Field(default="", description="Path to kubeconfig (default location if empty)")
    context: str = Field(default="", description="Kubeconfig context (current context if empty)")
    label_selector: str = Field(
        default="",
        description="Only cache ClusterRoles matching this label selector",
    )
    watch_timeout_seconds: int = Field(
        default=300,
        description="Server-side timeout of a single watch request before it is renewed",
    )
    sync_timeout_seconds: float = Field(
        default=30.0,
        description="Deadline for a full list of ClusterRoles, at startup and on relist",
    )
    retry_backoff_seconds: float = Field(
        default=5.0,
        description="Delay before re-establishing a failed watch",
    )


class SnapshotConfig(BaseModel):
    """Snapshot provider configuration."""

    backend: SnapshotBackend = Field(
        default=SnapshotBackend.KUBERNETES,
        description="Snapshot provider: memory or kubernetes",
    )
    memory: MemorySnapshotConfig = Field(default_factory=MemorySnapshotConfig)
    kubernetes: KubernetesSnapshotConfig = Field(default_factory=KubernetesSnapshotConfig)


# --- Main Settings ---


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="KUBESEARCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="kubesearch")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="JSON logging in production")

    # Search
    keys: MetadataKeys = Field(default_factory=MetadataKeys)

    # Snapshot
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)

    # API
    api_prefix: str = Field(default="/api/v1")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
