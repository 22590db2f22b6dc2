"""ClusterRole cache backed by a Kubernetes list/watch.

Uses the kubernetes Python client. The initial list runs off the event loop;
afterwards a background thread keeps the cache current from a watch stream
and relists whenever the watch's resource version expires.
"""

import asyncio
import threading

from kubernetes import client, config, watch
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from kubesearch.config import KubernetesSnapshotConfig
from kubesearch.logging_config import get_logger
from kubesearch.resources.meta import object_name
from kubesearch.snapshot.protocol import ProviderUnavailableError, RoleNotFoundError

logger = get_logger(__name__)

HTTP_GONE = 410


def create_rbac_api(cfg: KubernetesSnapshotConfig) -> client.RbacAuthorizationV1Api:
    """Create an RBAC API client.

    Uses in-cluster config when running in K8s, falls back to kubeconfig for local dev.
    """
    if cfg.in_cluster is not False:
        try:
            config.load_incluster_config()
            logger.info("Loaded in-cluster K8s config")
            return client.RbacAuthorizationV1Api()
        except config.ConfigException:
            if cfg.in_cluster:
                logger.error("Failed to load in-cluster K8s config")
                raise

    try:
        config.load_kube_config(
            config_file=cfg.kubeconfig or None,
            context=cfg.context or None,
        )
        logger.info("Loaded kubeconfig", context=cfg.context or "current")
    except config.ConfigException:
        logger.error("Failed to load K8s config")
        raise

    return client.RbacAuthorizationV1Api()


class ClusterRoleCache:
    """Eventually-consistent, thread-safe cache of all ClusterRoles."""

    def __init__(
        self,
        rbac_api: client.RbacAuthorizationV1Api,
        label_selector: str = "",
        watch_timeout_seconds: int = 300,
        retry_backoff_seconds: float = 5.0,
        sync_timeout_seconds: float = 30.0,
    ) -> None:
        self._api = rbac_api
        self._label_selector = label_selector
        self._watch_timeout_seconds = watch_timeout_seconds
        self._retry_backoff_seconds = retry_backoff_seconds
        self._sync_timeout_seconds = sync_timeout_seconds

        self._lock = threading.Lock()
        self._roles: dict[str, client.V1ClusterRole] = {}
        self._resource_version = ""
        self._synced = False
        self._watch_failing = False

        self._stop = threading.Event()
        self._watch: watch.Watch | None = None
        self._thread: threading.Thread | None = None

    @property
    def synced(self) -> bool:
        with self._lock:
            return self._synced

    @property
    def resource_version(self) -> str:
        with self._lock:
            return self._resource_version

    @property
    def healthy(self) -> bool:
        """Synced, and the watch has not failed since the last list or event."""
        with self._lock:
            return self._synced and not self._watch_failing

    async def start(self) -> None:
        """List all ClusterRoles, then keep the cache current in the background."""
        loop = asyncio.get_running_loop()
        try:
            await asyncio.wait_for(
                loop.run_in_executor(None, self.relist), timeout=self._sync_timeout_seconds
            )
        except TimeoutError as e:
            logger.error(
                "Timed out listing ClusterRoles", timeout_seconds=self._sync_timeout_seconds
            )
            raise ProviderUnavailableError(
                f"Timed out listing ClusterRoles after {self._sync_timeout_seconds}s"
            ) from e

        self._thread = threading.Thread(
            target=self._run, name="clusterrole-watch", daemon=True
        )
        self._thread.start()

    def relist(self) -> None:
        """Replace the cache contents with a fresh list from the API server."""
        kwargs: dict = {"_request_timeout": self._sync_timeout_seconds}
        if self._label_selector:
            kwargs["label_selector"] = self._label_selector
        try:
            result = self._api.list_cluster_role(**kwargs)
        except ApiException as e:
            logger.error("Failed to list ClusterRoles", status=e.status, error=str(e.reason))
            raise ProviderUnavailableError(f"Failed to list ClusterRoles: {e.reason}") from e
        except HTTPError as e:
            logger.error("Failed to list ClusterRoles", error=str(e))
            raise ProviderUnavailableError(f"Failed to list ClusterRoles: {e}") from e

        roles = {object_name(r): r for r in result.items or []}
        resource_version = getattr(result.metadata, "resource_version", None) or ""
        with self._lock:
            self._roles = roles
            self._resource_version = resource_version
            self._synced = True
            self._watch_failing = False

        logger.info(
            "ClusterRole cache synced", count=len(roles), resource_version=resource_version
        )

    def apply_event(self, event_type: str, obj: client.V1ClusterRole) -> None:
        """Apply a single watch event to the cache."""
        name = object_name(obj)
        resource_version = getattr(obj.metadata, "resource_version", None) or ""

        with self._lock:
            match event_type:
                case "ADDED" | "MODIFIED":
                    self._roles[name] = obj
                case "DELETED":
                    self._roles.pop(name, None)
                case "BOOKMARK":
                    pass
                case _:
                    logger.warning("Ignoring unknown watch event", type=event_type, role=name)
                    return
            if resource_version:
                self._resource_version = resource_version
            self._watch_failing = False

        logger.debug("Applied watch event", type=event_type, role=name)

    def _watch_once(self) -> None:
        kwargs: dict = {
            "resource_version": self.resource_version,
            "timeout_seconds": self._watch_timeout_seconds,
            "allow_watch_bookmarks": True,
        }
        if self._label_selector:
            kwargs["label_selector"] = self._label_selector

        w = watch.Watch()
        self._watch = w
        try:
            for event in w.stream(self._api.list_cluster_role, **kwargs):
                if self._stop.is_set():
                    break
                self.apply_event(event["type"], event["object"])
        finally:
            w.stop()
            self._watch = None

    def _mark_watch_failed(self) -> None:
        with self._lock:
            self._watch_failing = True

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self._watch_once()
            except ApiException as e:
                self._mark_watch_failed()
                if e.status == HTTP_GONE:
                    logger.info("ClusterRole watch expired, relisting")
                    try:
                        self.relist()
                    except ProviderUnavailableError:
                        self._stop.wait(self._retry_backoff_seconds)
                else:
                    logger.warning("ClusterRole watch failed", status=e.status, error=str(e.reason))
                    self._stop.wait(self._retry_backoff_seconds)
            except Exception as e:
                # Connection resets and read timeouts surface as urllib3 errors
                self._mark_watch_failed()
                logger.warning("ClusterRole watch interrupted", error=str(e))
                self._stop.wait(self._retry_backoff_seconds)

    async def list_all(self) -> list[client.V1ClusterRole]:
        with self._lock:
            if not self._synced:
                raise ProviderUnavailableError("ClusterRole cache has not synced")
            return list(self._roles.values())

    async def get(self, name: str) -> client.V1ClusterRole:
        with self._lock:
            if not self._synced:
                raise ProviderUnavailableError("ClusterRole cache has not synced")
            role = self._roles.get(name)
        if role is None:
            raise RoleNotFoundError(name)
        return role

    async def close(self) -> None:
        self._stop.set()
        if self._watch is not None:
            self._watch.stop()
        if self._thread is not None:
            thread = self._thread
            self._thread = None
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, lambda: thread.join(timeout=1.0))
        logger.info("ClusterRole cache stopped")
