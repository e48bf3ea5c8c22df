"""Cluster resource client.

Lists core Kubernetes objects through ``kubectl`` and converts them into the
monitor's records. Implements both ``ResourceLister`` and
``ExtendedResourceLister``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from kubemonitor.constants.timeouts import CLUSTER_REQUEST_TIMEOUT
from kubemonitor.constants.values import DETAIL_SEPARATOR
from kubemonitor.controllers.base import BaseController
from kubemonitor.controllers.cluster.fetchers import (
    AccessReviewFetcher,
    EndpointFetcher,
    EventFetcher,
    LogFetcher,
    ResourceFetcher,
)
from kubemonitor.controllers.cluster.parsers import (
    EventParser,
    NodeParser,
    PodParser,
    ServiceParser,
    StorageParser,
    WorkloadParser,
)
from kubemonitor.models.core import (
    CronJobRecord,
    DaemonSetRecord,
    DeploymentRecord,
    EventRecord,
    JobRecord,
    NodeRecord,
    PersistentVolumeClaimRecord,
    PersistentVolumeRecord,
    PodRecord,
    ServiceRecord,
    StatefulSetRecord,
)
from kubemonitor.models.state.kubelet_access import KubeletAccessStatus

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _event_sort_key(event: EventRecord) -> datetime:
    return event.last_timestamp or event.first_timestamp or _EPOCH


class ClusterResourceClient(BaseController):
    """Lists cluster resources via an injected kubectl runner.

    Args:
        run_kubectl_func: Async callable ``(args, input_text=None) -> stdout``.
        request_timeout: ``--request-timeout`` value for list calls.
    """

    def __init__(
        self,
        run_kubectl_func: Any,
        request_timeout: str = CLUSTER_REQUEST_TIMEOUT,
    ) -> None:
        self._run_kubectl = run_kubectl_func
        self.request_timeout = request_timeout

        self._resource_fetcher = ResourceFetcher(run_kubectl_func)
        self._event_fetcher = EventFetcher(run_kubectl_func)
        self._endpoint_fetcher = EndpointFetcher(run_kubectl_func)
        self._access_fetcher = AccessReviewFetcher(run_kubectl_func)
        self._log_fetcher = LogFetcher(run_kubectl_func)

        self._node_parser = NodeParser()
        self._pod_parser = PodParser()
        self._event_parser = EventParser()
        self._service_parser = ServiceParser()
        self._storage_parser = StorageParser()
        self._workload_parser = WorkloadParser()

    async def check_connection(self) -> bool:
        """Return True when the API server answers a version request."""
        try:
            await self._run_kubectl(("version", "-o", "json"))
        except Exception as exc:
            logger.warning("Cluster connection check failed: %s", exc)
            return False
        return True

    # ------------------------------------------------------------------
    # Mandatory surface
    # ------------------------------------------------------------------

    async def list_nodes(self) -> list[NodeRecord]:
        items = await self._resource_fetcher.fetch_items("nodes", namespaced=False)
        return self._node_parser.parse_nodes(items)

    async def list_pods(self, namespace: str = "") -> list[PodRecord]:
        items = await self._resource_fetcher.fetch_items("pods", namespace=namespace)
        return self._pod_parser.parse_pods(items)

    async def list_events(
        self,
        namespace: str = "",
        types: Sequence[str] = (),
        limit: int = 0,
    ) -> list[EventRecord]:
        """List events newest first.

        Args:
            namespace: Namespace filter ("" for all namespaces).
            types: Event types to keep; empty keeps every type.
            limit: Maximum number of events returned; <= 0 means unlimited.
        """
        items = await self._event_fetcher.fetch_events_raw(
            namespace=namespace or None,
            types=tuple(types),
            request_timeout=self.request_timeout,
        )
        events = self._event_parser.parse_events(items)
        if types:
            wanted = set(types)
            events = [event for event in events if event.type in wanted]
        events.sort(key=_event_sort_key, reverse=True)
        if limit > 0:
            events = events[:limit]
        return events

    async def check_metrics_access(self) -> KubeletAccessStatus:
        """Ask the API server whether these credentials may read nodes/proxy.

        Raises:
            KubectlError: If the access review itself cannot be performed.
        """
        status = await self._access_fetcher.fetch_proxy_review_status()
        allowed = bool(status.get("allowed", False))
        message = ""
        if not allowed:
            details = [
                str(status[key]).strip()
                for key in ("reason", "evaluationError")
                if status.get(key)
            ]
            message = DETAIL_SEPARATOR.join(detail for detail in details if detail)
        return KubeletAccessStatus(
            proxy_allowed=allowed,
            proxy_message=message,
            checked_at=datetime.now(timezone.utc),
        )

    async def get_pod_logs(
        self,
        namespace: str,
        pod_name: str,
        container_name: str = "",
        tail_lines: int = 200,
    ) -> str:
        return await self._log_fetcher.fetch_logs(
            namespace, pod_name, container_name, tail_lines
        )

    # ------------------------------------------------------------------
    # Extended surface
    # ------------------------------------------------------------------

    async def list_services(self, namespace: str = "") -> list[ServiceRecord]:
        """List services with ready endpoint counts from one endpoints call."""
        items = await self._resource_fetcher.fetch_items("services", namespace=namespace)
        try:
            ready_counts = await self._endpoint_fetcher.fetch_ready_counts(
                namespace or None
            )
        except Exception as exc:
            logger.warning("Failed to list endpoints, counts left at 0: %s", exc)
            ready_counts = {}
        return [
            self._service_parser.parse_service(item, ready_counts) for item in items
        ]

    async def list_persistent_volumes(self) -> list[PersistentVolumeRecord]:
        items = await self._resource_fetcher.fetch_items(
            "persistentvolumes", namespaced=False
        )
        return [self._storage_parser.parse_pv(item) for item in items]

    async def list_persistent_volume_claims(
        self, namespace: str = ""
    ) -> list[PersistentVolumeClaimRecord]:
        items = await self._resource_fetcher.fetch_items(
            "persistentvolumeclaims", namespace=namespace
        )
        return [self._storage_parser.parse_pvc(item) for item in items]

    async def list_deployments(self, namespace: str = "") -> list[DeploymentRecord]:
        items = await self._resource_fetcher.fetch_items("deployments", namespace=namespace)
        return [self._workload_parser.parse_deployment(item) for item in items]

    async def list_stateful_sets(self, namespace: str = "") -> list[StatefulSetRecord]:
        items = await self._resource_fetcher.fetch_items("statefulsets", namespace=namespace)
        return [self._workload_parser.parse_stateful_set(item) for item in items]

    async def list_daemon_sets(self, namespace: str = "") -> list[DaemonSetRecord]:
        items = await self._resource_fetcher.fetch_items("daemonsets", namespace=namespace)
        return [self._workload_parser.parse_daemon_set(item) for item in items]

    async def list_jobs(self, namespace: str = "") -> list[JobRecord]:
        items = await self._resource_fetcher.fetch_items("jobs", namespace=namespace)
        return [self._workload_parser.parse_job(item) for item in items]

    async def list_cron_jobs(self, namespace: str = "") -> list[CronJobRecord]:
        items = await self._resource_fetcher.fetch_items("cronjobs", namespace=namespace)
        return [self._workload_parser.parse_cron_job(item) for item in items]
