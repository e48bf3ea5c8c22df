"""Aggregator - assembles one ClusterSnapshot per call.

Nodes and pods are mandatory. Every other source is best effort and
degrades to an empty collection or an error string on the records.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

from kubemonitor.constants.defaults import MAX_CONCURRENT_DEFAULT
from kubemonitor.constants.limits import EVENT_FETCH_LIMIT, MAX_CONCURRENT_MIN
from kubemonitor.controllers.aggregation.access_guard import KubeletAccessGuard
from kubemonitor.controllers.aggregation.summary_builder import SummaryBuilder, percent
from kubemonitor.controllers.cluster.protocols import (
    ExtendedResourceLister,
    ResourceLister,
)
from kubemonitor.controllers.metrics import (
    KubeletMetricsAdapter,
    NodeMetricsSample,
    NPUExporterAdapter,
    VolcanoAdapter,
)
from kubemonitor.models.core import NodeRecord, PodRecord
from kubemonitor.models.snapshot import ClusterSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EVENT_TYPES = ("Normal", "Warning")


class DataSourceError(RuntimeError):
    """Nodes or pods could not be listed; the cycle cannot produce a snapshot."""


@dataclass
class MetricAdapters:
    """Optional metric sources wired into the aggregator."""

    kubelet: KubeletMetricsAdapter | None = None
    npu_exporter: NPUExporterAdapter | None = None
    volcano: VolcanoAdapter | None = None

    @property
    def has_kubelet(self) -> bool:
        return self.kubelet is not None

    @property
    def has_npu_exporter(self) -> bool:
        return self.npu_exporter is not None

    @property
    def has_volcano(self) -> bool:
        return self.volcano is not None

    def all(self) -> list[Any]:
        return [
            adapter
            for adapter in (self.kubelet, self.npu_exporter, self.volcano)
            if adapter is not None
        ]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Aggregator:
    """Merges cluster resources and metrics into a ClusterSnapshot.

    Args:
        resource_client: Mandatory resource surface.
        adapters: Optional metric sources.
        extended_lister: Optional services/storage/workload surface.
        max_concurrent: Ceiling for in-flight kubelet summary calls.
        clock: Wall clock for alerts and durations.
        monotonic: Monotonic clock for the access-check cache.
    """

    def __init__(
        self,
        resource_client: ResourceLister,
        adapters: MetricAdapters | None = None,
        extended_lister: ExtendedResourceLister | None = None,
        max_concurrent: int = MAX_CONCURRENT_DEFAULT,
        clock: Callable[[], datetime] = _utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = resource_client
        self.adapters = adapters or MetricAdapters()
        self._extended = extended_lister
        self.max_concurrent = max(MAX_CONCURRENT_MIN, max_concurrent)
        self._summary_builder = SummaryBuilder(clock)
        self._access_guard = KubeletAccessGuard(resource_client, monotonic=monotonic)
        self._skip_reason = ""

    @property
    def skip_reason(self) -> str:
        """Access-denial reason recorded by the last cycle ("" when enriched)."""
        return self._skip_reason

    async def _best_effort(
        self, label: str, call: Callable[[], Awaitable[list[T]]]
    ) -> list[T]:
        try:
            return await call()
        except Exception as exc:
            logger.warning("Failed to get %s, continuing without them: %s", label, exc)
            return []

    async def get_cluster_data(self, namespace: str = "") -> ClusterSnapshot:
        """Run one aggregation cycle.

        Args:
            namespace: Namespace filter for namespaced resources ("" for all).

        Returns:
            A frozen ClusterSnapshot.

        Raises:
            DataSourceError: If nodes or pods cannot be listed.
        """
        logger.info("Fetching cluster data (namespace=%s)", namespace or "all")

        try:
            nodes = await self._client.list_nodes()
        except Exception as exc:
            raise DataSourceError(f"failed to get nodes: {exc}") from exc
        try:
            pods = await self._client.list_pods(namespace)
        except Exception as exc:
            raise DataSourceError(f"failed to get pods: {exc}") from exc

        events = await self._best_effort(
            "events",
            lambda: self._client.list_events(namespace, _EVENT_TYPES, EVENT_FETCH_LIMIT),
        )

        extended: dict[str, list[Any]] = {
            "services": [],
            "pvs": [],
            "pvcs": [],
            "deployments": [],
            "stateful_sets": [],
            "daemon_sets": [],
            "jobs": [],
            "cron_jobs": [],
        }
        if self._extended is not None:
            lister = self._extended
            calls: dict[str, Callable[[], Awaitable[list[Any]]]] = {
                "services": lambda: lister.list_services(namespace),
                "pvs": lister.list_persistent_volumes,
                "pvcs": lambda: lister.list_persistent_volume_claims(namespace),
                "deployments": lambda: lister.list_deployments(namespace),
                "stateful_sets": lambda: lister.list_stateful_sets(namespace),
                "daemon_sets": lambda: lister.list_daemon_sets(namespace),
                "jobs": lambda: lister.list_jobs(namespace),
                "cron_jobs": lambda: lister.list_cron_jobs(namespace),
            }
            for key, call in calls.items():
                extended[key] = await self._best_effort(key.replace("_", " "), call)

        skip_reason = ""
        if self.adapters.kubelet is not None:
            skip, reason = await self._access_guard.should_skip()
            if skip:
                logger.warning("Skipping kubelet metrics enrichment: %s", reason)
                skip_reason = self._apply_skip_reason(reason, nodes, pods)
            else:
                await self._enrich_with_kubelet(self.adapters.kubelet, nodes, pods)

        if self.adapters.npu_exporter is not None:
            try:
                await self.adapters.npu_exporter.enrich_nodes(nodes)
            except Exception as exc:
                logger.warning("Failed to enrich accelerator metrics: %s", exc)

        summary = self._summary_builder.build(
            nodes,
            pods,
            events,
            extended["services"],
            extended["pvs"],
            extended["pvcs"],
            metrics_configured=self.adapters.has_kubelet,
            skip_reason=skip_reason,
        )
        self._skip_reason = skip_reason

        volcano_jobs: list[Any] = []
        hyper_nodes: list[Any] = []
        queues: list[Any] = []
        volcano_summary = None
        volcano = self.adapters.volcano
        if volcano is not None and await volcano.probe():
            volcano_jobs = await self._best_effort(
                "Volcano jobs", lambda: volcano.list_jobs(namespace)
            )
            hyper_nodes = await self._best_effort("HyperNodes", volcano.list_hyper_nodes)
            queues = await self._best_effort("Volcano queues", volcano.list_queues)
            volcano_summary = volcano.build_summary(volcano_jobs, hyper_nodes, queues)

        snapshot = ClusterSnapshot(
            nodes=nodes,
            pods=pods,
            events=events,
            summary=summary,
            volcano_jobs=volcano_jobs,
            hyper_nodes=hyper_nodes,
            queues=queues,
            volcano_summary=volcano_summary,
            **extended,
        )
        logger.info(
            "Cluster data fetched: %d nodes, %d pods, %d events, %d services",
            len(nodes),
            len(pods),
            len(events),
            len(extended["services"]),
        )
        return snapshot

    def _apply_skip_reason(
        self, reason: str, nodes: list[NodeRecord], pods: list[PodRecord]
    ) -> str:
        """Zero kubelet-sourced usage so stale numbers never linger.

        Returns:
            The reason to report in this cycle's summary.
        """
        if not reason:
            return ""
        for node in nodes:
            node.has_metrics = False
            if not node.metrics_error:
                node.metrics_error = reason
            node.clear_usage()
        for pod in pods:
            pod.clear_usage()
        return reason

    async def _enrich_with_kubelet(
        self,
        kubelet: KubeletMetricsAdapter,
        nodes: list[NodeRecord],
        pods: list[PodRecord],
    ) -> None:
        started = time.monotonic()
        pods_by_node: dict[str, list[PodRecord]] = {}
        for pod in pods:
            if pod.node:
                pods_by_node.setdefault(pod.node, []).append(pod)

        semaphore = asyncio.Semaphore(self.max_concurrent)
        lock = asyncio.Lock()

        async def enrich_node(node: NodeRecord) -> None:
            async with semaphore:
                try:
                    sample = await kubelet.fetch_node_metrics(node.name)
                except Exception as exc:
                    async with lock:
                        node.has_metrics = False
                        node.metrics_error = str(exc)
                        node.clear_usage()
                    logger.debug("Failed to get node metrics for %s: %s", node.name, exc)
                    return

            async with lock:
                self._apply_sample(node, sample, pods_by_node.get(node.name, []))

        await asyncio.gather(*(enrich_node(node) for node in nodes))
        logger.info(
            "Kubelet metrics enrichment completed for %d nodes in %.2fs",
            len(nodes),
            time.monotonic() - started,
        )

    @staticmethod
    def _apply_sample(
        node: NodeRecord, sample: NodeMetricsSample, node_pods: list[PodRecord]
    ) -> None:
        node.cpu_usage = sample.cpu_usage
        node.memory_usage = sample.memory_usage
        node.network_rx_bytes = sample.network_rx_bytes
        node.network_tx_bytes = sample.network_tx_bytes
        node.network_timestamp = sample.network_timestamp
        node.has_metrics = True
        node.metrics_error = ""
        node.cpu_usage_percent = percent(node.cpu_usage, node.cpu_allocatable)
        node.memory_usage_percent = percent(node.memory_usage, node.memory_allocatable)
        node.pod_count = len(node_pods)
        node.pod_usage_percent = percent(node.pod_count, node.pod_allocatable)

        for pod in node_pods:
            pod_sample = sample.pods.get(pod.key)
            if pod_sample is None:
                continue
            pod.cpu_usage = pod_sample.cpu_usage
            pod.memory_usage = pod_sample.memory_usage
            pod.network_rx_bytes = pod_sample.network_rx_bytes
            pod.network_tx_bytes = pod_sample.network_tx_bytes
            pod.network_timestamp = pod_sample.network_timestamp
            usage_by_name = {c.name: c for c in pod_sample.containers}
            for container in pod.container_states:
                container_sample = usage_by_name.get(container.name)
                if container_sample is not None:
                    container.cpu_usage = container_sample.cpu_usage
                    container.memory_usage = container_sample.memory_usage

    async def get_pod_logs(
        self,
        namespace: str,
        pod_name: str,
        container_name: str = "",
        tail_lines: int = 200,
    ) -> str:
        return await self._client.get_pod_logs(namespace, pod_name, container_name, tail_lines)

    async def close(self) -> None:
        """Close every adapter; failures are logged."""
        logger.info("Closing aggregator")
        for adapter in self.adapters.all():
            try:
                await adapter.close()
            except Exception:
                logger.exception("Failed to close %s", type(adapter).__name__)
        close = getattr(self._client, "close", None)
        if close is not None:
            try:
                await close()
            except Exception:
                logger.exception("Failed to close resource client")
