"""Cluster summary builder.

One pass over nodes, one pass over pods, then short passes over events,
services and volumes. Every ratio is guarded against a zero denominator.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from kubemonitor.constants.enums import ContainerAnomaly, NodeStatus, PodPhase
from kubemonitor.constants.limits import HIGH_RESTART_THRESHOLD, TOP_RESTART_PODS_LIMIT
from kubemonitor.constants.values import (
    APP_NAME_LABEL,
    COMPONENT_LABEL,
    CRONJOB_LABEL,
    JOB_NAME_LABEL,
    KUBELET_DISABLED_MESSAGE,
)
from kubemonitor.controllers.aggregation.alerts import AlertEvaluator
from kubemonitor.controllers.aggregation.anomalies import (
    EXCLUSIVE_ANOMALY_ORDER,
    classify_reason,
)
from kubemonitor.models.core import (
    EventRecord,
    NodeRecord,
    PersistentVolumeClaimRecord,
    PersistentVolumeRecord,
    PodRecord,
    ServiceRecord,
)
from kubemonitor.models.summary import ClusterSummary, PodRestartInfo

logger = logging.getLogger(__name__)

_ACTIVE_PHASES = (PodPhase.RUNNING.value, PodPhase.PENDING.value)

# Reasons recorded as a high-restart pod's last failure; "Error" never
# overrides a more specific reason.
_LAST_REASON_ANOMALIES = (
    ContainerAnomaly.OOM_KILLED,
    ContainerAnomaly.CRASH_LOOP,
    ContainerAnomaly.IMAGE_PULL,
)


def percent(numerator: float, denominator: float) -> float:
    """Return ``numerator / denominator * 100``, or 0.0 for a zero denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SummaryBuilder:
    """Builds the ClusterSummary of one snapshot.

    Args:
        clock: Wall clock handed to the alert evaluator.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._alerts = AlertEvaluator(clock)

    def _add_nodes(
        self,
        summary: ClusterSummary,
        nodes: list[NodeRecord],
        pods: list[PodRecord],
    ) -> None:
        npu_allocated_per_node: dict[str, int] = {}
        for pod in pods:
            if pod.node and pod.phase in _ACTIVE_PHASES and pod.npu_request > 0:
                npu_allocated_per_node[pod.node] = (
                    npu_allocated_per_node.get(pod.node, 0) + pod.npu_request
                )

        hyper_node_ids: set[str] = set()
        super_pod_ids: set[str] = set()
        for node in nodes:
            if node.status == NodeStatus.READY.value:
                summary.ready_nodes += 1
            else:
                summary.not_ready_nodes += 1

            summary.memory_pressure_nodes += node.memory_pressure
            summary.disk_pressure_nodes += node.disk_pressure
            summary.pid_pressure_nodes += node.pid_pressure

            summary.cpu_capacity += node.cpu_capacity
            summary.memory_capacity += node.memory_capacity
            summary.pod_capacity += node.pod_capacity
            summary.cpu_allocatable += node.cpu_allocatable
            summary.memory_allocatable += node.memory_allocatable
            summary.pod_allocatable += node.pod_allocatable
            summary.cpu_used += node.cpu_usage
            summary.memory_used += node.memory_usage

            summary.network_rx_bytes += node.network_rx_bytes
            summary.network_tx_bytes += node.network_tx_bytes
            if node.network_timestamp is not None and (
                summary.network_timestamp is None
                or node.network_timestamp > summary.network_timestamp
            ):
                summary.network_timestamp = node.network_timestamp

            if node.has_metrics:
                summary.nodes_with_metrics += 1
            else:
                summary.nodes_without_metrics += 1
                if node.metrics_error and node.metrics_error not in summary.kubelet_errors:
                    summary.kubelet_errors.append(node.metrics_error)

            if node.npu_capacity > 0:
                summary.npu_capacity += node.npu_capacity
                summary.npu_allocatable += node.npu_allocatable
                summary.npu_nodes_count += 1
                if not summary.npu_resource_name and node.npu_resource_name:
                    summary.npu_resource_name = node.npu_resource_name
                if not summary.npu_chip_type and node.npu_chip_type:
                    summary.npu_chip_type = node.npu_chip_type
                if node.name in npu_allocated_per_node:
                    node.npu_allocated = npu_allocated_per_node[node.name]
                    summary.npu_allocated += node.npu_allocated
                if node.hyper_cluster_id and not summary.hyper_cluster_id:
                    summary.hyper_cluster_id = node.hyper_cluster_id
                if node.hyper_node_id:
                    hyper_node_ids.add(node.hyper_node_id)
                if node.super_pod_id:
                    super_pod_ids.add(node.super_pod_id)

        summary.hyper_node_count = len(hyper_node_ids)
        summary.super_pod_count = len(super_pod_ids)

    @staticmethod
    def _resolve_kubelet_error(
        summary: ClusterSummary,
        node_count: int,
        metrics_configured: bool,
        skip_reason: str,
    ) -> None:
        summary.kubelet_metrics_available = summary.nodes_with_metrics > 0
        if summary.kubelet_errors:
            summary.kubelet_error = summary.kubelet_errors[0]

        if summary.kubelet_metrics_available:
            return
        if not metrics_configured and node_count > 0:
            summary.kubelet_error = KUBELET_DISABLED_MESSAGE
            summary.kubelet_errors = [KUBELET_DISABLED_MESSAGE]
        elif not summary.kubelet_error and skip_reason:
            summary.kubelet_error = skip_reason
            summary.kubelet_errors = [skip_reason, *summary.kubelet_errors]

    def _add_pods(self, summary: ClusterSummary, pods: list[PodRecord]) -> None:
        workloads: dict[str, set[str]] = {
            "deployment": set(),
            "statefulset": set(),
            "daemonset": set(),
        }
        jobs: set[str] = set()
        cron_jobs: set[str] = set()
        candidates: list[PodRestartInfo] = []

        for pod in pods:
            if pod.phase == PodPhase.RUNNING.value:
                summary.running_pods += 1
            elif pod.phase == PodPhase.PENDING.value:
                summary.pending_pods += 1
            elif pod.phase == PodPhase.FAILED.value:
                summary.failed_pods += 1
            else:
                summary.unknown_pods += 1

            found: set[ContainerAnomaly] = set()
            last_reason = ""
            for container in pod.container_states:
                anomaly = classify_reason(container.reason)
                if anomaly is None:
                    continue
                found.add(anomaly)
                if anomaly in _LAST_REASON_ANOMALIES:
                    last_reason = container.reason
                elif anomaly is ContainerAnomaly.ERROR and not last_reason:
                    last_reason = container.reason

            for anomaly in EXCLUSIVE_ANOMALY_ORDER:
                if anomaly in found:
                    if anomaly is ContainerAnomaly.OOM_KILLED:
                        summary.oom_killed_pods += 1
                    elif anomaly is ContainerAnomaly.CRASH_LOOP:
                        summary.crash_loop_back_off_pods += 1
                    else:
                        summary.image_pull_back_off_pods += 1
                    break
            if (
                ContainerAnomaly.CONTAINER_CREATING in found
                and pod.phase == PodPhase.PENDING.value
            ):
                summary.container_creating_pods += 1

            if pod.restart_count >= HIGH_RESTART_THRESHOLD:
                candidates.append(
                    PodRestartInfo(
                        name=pod.name,
                        namespace=pod.namespace,
                        restart_count=pod.restart_count,
                        reason=last_reason,
                    )
                )

            if pod.phase in _ACTIVE_PHASES:
                summary.cpu_requested += pod.cpu_request
                summary.cpu_limited += pod.cpu_limit
                summary.memory_requested += pod.memory_request
                summary.memory_limited += pod.memory_limit

            component = pod.labels.get(COMPONENT_LABEL)
            if component in workloads:
                workloads[component].add(
                    f"{pod.namespace}/{pod.labels.get(APP_NAME_LABEL, '')}"
                )
            if JOB_NAME_LABEL in pod.labels:
                jobs.add(f"{pod.namespace}/{pod.labels[JOB_NAME_LABEL]}")
            if CRONJOB_LABEL in pod.labels:
                cron_jobs.add(f"{pod.namespace}/{pod.labels[CRONJOB_LABEL]}")

        summary.total_deployments = len(workloads["deployment"])
        summary.total_stateful_sets = len(workloads["statefulset"])
        summary.total_daemon_sets = len(workloads["daemonset"])
        summary.total_jobs = len(jobs)
        summary.total_cron_jobs = len(cron_jobs)

        # sorted() is stable, so tied restart counts keep encounter order
        ranked = sorted(candidates, key=lambda info: info.restart_count, reverse=True)
        summary.high_restart_pods = ranked[:TOP_RESTART_PODS_LIMIT]

    @staticmethod
    def _add_events(summary: ClusterSummary, events: list[EventRecord]) -> None:
        summary.total_events = len(events)
        for event in events:
            if event.type == "Warning":
                summary.warning_events += 1
            elif event.type == "Error":
                summary.error_events += 1

    @staticmethod
    def _add_services(summary: ClusterSummary, services: list[ServiceRecord]) -> None:
        summary.total_services = len(services)
        for service in services:
            if service.type == "ClusterIP":
                summary.cluster_ip_services += 1
            elif service.type == "NodePort":
                summary.node_port_services += 1
            elif service.type == "LoadBalancer":
                summary.load_balancer_services += 1
            summary.total_endpoints += service.endpoint_count
            if service.endpoint_count == 0:
                summary.no_endpoint_services += 1
        if summary.total_services > 0:
            summary.avg_endpoints_per_service = (
                summary.total_endpoints / summary.total_services
            )

    @staticmethod
    def _add_storage(
        summary: ClusterSummary,
        pvs: list[PersistentVolumeRecord],
        pvcs: list[PersistentVolumeClaimRecord],
    ) -> None:
        summary.total_pvs = len(pvs)
        for pv in pvs:
            summary.total_storage_size += pv.capacity
            if pv.status == "Bound":
                summary.bound_pvs += 1
                summary.used_storage_size += pv.capacity
            elif pv.status == "Available":
                summary.available_pvs += 1
            elif pv.status == "Released":
                summary.released_pvs += 1

        summary.total_pvcs = len(pvcs)
        for pvc in pvcs:
            if pvc.status == "Bound":
                summary.bound_pvcs += 1
            elif pvc.status == "Pending":
                summary.pending_pvcs += 1

    @staticmethod
    def _add_utilization(summary: ClusterSummary) -> None:
        summary.cpu_request_utilization = percent(summary.cpu_requested, summary.cpu_allocatable)
        summary.cpu_limit_utilization = percent(summary.cpu_limited, summary.cpu_allocatable)
        summary.cpu_usage_utilization = percent(summary.cpu_used, summary.cpu_capacity)
        summary.mem_request_utilization = percent(
            summary.memory_requested, summary.memory_allocatable
        )
        summary.mem_limit_utilization = percent(
            summary.memory_limited, summary.memory_allocatable
        )
        summary.mem_usage_utilization = percent(summary.memory_used, summary.memory_capacity)
        summary.pod_utilization = percent(summary.total_pods, summary.pod_allocatable)
        summary.storage_usage_percent = percent(
            summary.used_storage_size, summary.total_storage_size
        )
        summary.npu_utilization = percent(summary.npu_allocated, summary.npu_allocatable)

    def build(
        self,
        nodes: list[NodeRecord],
        pods: list[PodRecord],
        events: list[EventRecord],
        services: list[ServiceRecord],
        pvs: list[PersistentVolumeRecord],
        pvcs: list[PersistentVolumeClaimRecord],
        *,
        metrics_configured: bool = True,
        skip_reason: str = "",
    ) -> ClusterSummary:
        """Build the summary and its alert list.

        Args:
            nodes: Enriched nodes; ``npu_allocated`` is written back per node.
            pods: Enriched pods.
            events: Events of the cycle.
            services: Services with endpoint counts.
            pvs: Persistent volumes.
            pvcs: Persistent volume claims.
            metrics_configured: False when no kubelet adapter exists.
            skip_reason: Access-denial reason when enrichment was skipped.

        Returns:
            A new ClusterSummary. Its ``last_refresh_time`` is left unset; the
            cache stamps it on publication.
        """
        summary = ClusterSummary(total_nodes=len(nodes), total_pods=len(pods))
        self._add_nodes(summary, nodes, pods)
        self._resolve_kubelet_error(summary, len(nodes), metrics_configured, skip_reason)
        self._add_pods(summary, pods)
        self._add_events(summary, events)
        self._add_services(summary, services)
        self._add_storage(summary, pvs, pvcs)
        self._add_utilization(summary)
        summary.alerts = self._alerts.evaluate(nodes, pods, services, pvcs)
        logger.debug(
            "Summary built: %d nodes, %d pods, %d alerts",
            summary.total_nodes,
            summary.total_pods,
            len(summary.alerts),
        )
        return summary
