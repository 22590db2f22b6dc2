"""Search over cached Kubernetes ClusterRoles."""

__version__ = "0.1.0"
