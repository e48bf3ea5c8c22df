"""Threshold alert evaluation.

Alerts are recomputed from scratch on every aggregation cycle; nothing is
carried between snapshots.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from kubemonitor.constants.enums import (
    AlertCategory,
    AlertSeverity,
    AlertType,
    ContainerAnomaly,
    NodeStatus,
    PodPhase,
)
from kubemonitor.constants.limits import (
    HIGH_RESTART_THRESHOLD,
    NODE_CPU_CRITICAL_THRESHOLD,
    NODE_CPU_WARNING_THRESHOLD,
    NODE_MEMORY_CRITICAL_THRESHOLD,
    NODE_MEMORY_WARNING_THRESHOLD,
    PENDING_WARNING_MINUTES,
)
from kubemonitor.controllers.aggregation.anomalies import classify_reason
from kubemonitor.models.core import (
    NodeRecord,
    PersistentVolumeClaimRecord,
    PodRecord,
    ServiceRecord,
)
from kubemonitor.models.summary import Alert

logger = logging.getLogger(__name__)

# alert type -> (cluster-scoped template, namespaced template)
_RECOMMENDED_ACTIONS: dict[AlertType, tuple[str, str]] = {
    AlertType.NODE_NOT_READY: (
        "kubectl describe node {name} # Check node conditions and events",
        "kubectl describe node {name} # Check node conditions and events",
    ),
    AlertType.NODE_MEMORY_PRESSURE: (
        "kubectl top pods --all-namespaces --sort-by=memory # Find memory-intensive pods",
        "kubectl top pods --all-namespaces --sort-by=memory # Find memory-intensive pods",
    ),
    AlertType.NODE_DISK_PRESSURE: (
        "kubectl describe node {name} # Check disk usage, consider cleanup or expansion",
        "kubectl describe node {name} # Check disk usage, consider cleanup or expansion",
    ),
    AlertType.NODE_PID_PRESSURE: (
        "kubectl top pods -A | Sort by running processes, check for process leaks",
        "kubectl top pods -A | Sort by running processes, check for process leaks",
    ),
    AlertType.NODE_CPU_CRITICAL: (
        "kubectl top pods --all-namespaces --sort-by=cpu # Find CPU-intensive pods",
        "kubectl top pods --all-namespaces --sort-by=cpu # Find CPU-intensive pods",
    ),
    AlertType.NODE_CPU_HIGH: (
        "kubectl top pods --all-namespaces --sort-by=cpu # Find CPU-intensive pods",
        "kubectl top pods --all-namespaces --sort-by=cpu # Find CPU-intensive pods",
    ),
    AlertType.NODE_MEMORY_CRITICAL: (
        "kubectl top pods --all-namespaces --sort-by=memory # Find memory-intensive pods",
        "kubectl top pods --all-namespaces --sort-by=memory # Find memory-intensive pods",
    ),
    AlertType.NODE_MEMORY_HIGH: (
        "kubectl top pods --all-namespaces --sort-by=memory # Find memory-intensive pods",
        "kubectl top pods --all-namespaces --sort-by=memory # Find memory-intensive pods",
    ),
    AlertType.POD_OOM_KILLED: (
        "kubectl logs {name} --previous # Check logs before OOM, consider increasing memory limits",
        "kubectl logs -n {namespace} {name} --previous # Check logs before OOM",
    ),
    AlertType.POD_CRASH_LOOP: (
        "kubectl logs {name} --previous # Check crash logs",
        "kubectl logs -n {namespace} {name} --previous # Check crash logs",
    ),
    AlertType.POD_IMAGE_PULL: (
        "kubectl describe pod {name} # Check image name and pull secrets",
        "kubectl describe pod -n {namespace} {name} # Check image name and pull secrets",
    ),
    AlertType.POD_HIGH_RESTARTS: (
        "kubectl logs {name} --previous # Check restart causes",
        "kubectl logs -n {namespace} {name} --previous # Check restart causes",
    ),
    AlertType.POD_PENDING_LONG: (
        "kubectl describe pod {name} # Check scheduling issues (resources, affinity, taints)",
        "kubectl describe pod -n {namespace} {name} # Check scheduling issues",
    ),
    AlertType.POD_FAILED: (
        "kubectl describe pod {name} # Check failure reason",
        "kubectl describe pod -n {namespace} {name} # Check failure reason",
    ),
    AlertType.SERVICE_NO_ENDPOINTS: (
        "kubectl get endpoints {name} # Check selector matches pod labels",
        "kubectl get endpoints -n {namespace} {name} # Check selector matches pod labels",
    ),
    AlertType.PVC_PENDING_LONG: (
        "kubectl describe pvc {name} # Check storage class and provisioner",
        "kubectl describe pvc -n {namespace} {name} # Check storage class and provisioner",
    ),
}

_TYPE_PRIORITY: dict[AlertType, int] = {
    AlertType.NODE_NOT_READY: 50,
    AlertType.POD_OOM_KILLED: 45,
    AlertType.POD_CRASH_LOOP: 40,
    AlertType.NODE_MEMORY_PRESSURE: 35,
    AlertType.NODE_DISK_PRESSURE: 30,
    AlertType.NODE_CPU_CRITICAL: 25,
    AlertType.NODE_MEMORY_CRITICAL: 25,
    AlertType.POD_IMAGE_PULL: 20,
    AlertType.SERVICE_NO_ENDPOINTS: 15,
    AlertType.POD_PENDING_LONG: 10,
    AlertType.POD_HIGH_RESTARTS: 10,
    AlertType.PVC_PENDING_LONG: 5,
}


def recommended_action(alert_type: AlertType, namespace: str, name: str) -> str:
    """Return the suggested command for an alert, or "" for unknown types."""
    templates = _RECOMMENDED_ACTIONS.get(alert_type)
    if templates is None:
        return ""
    template = templates[1] if namespace else templates[0]
    return template.format(namespace=namespace, name=name)


def alert_priority(alert_type: AlertType, severity: AlertSeverity) -> int:
    """Sort key for alerts: severity first, then alert type urgency."""
    return int(severity) * 100 + _TYPE_PRIORITY.get(alert_type, 0)


def sort_alerts(alerts: Iterable[Alert]) -> list[Alert]:
    """Order alerts by descending priority; equal priorities keep their order."""
    return sorted(
        alerts,
        key=lambda alert: alert_priority(alert.alert_type, alert.severity),
        reverse=True,
    )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AlertEvaluator:
    """Evaluates node, pod, service and claim thresholds.

    Args:
        clock: Wall clock used for alert timestamps and pending durations.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock

    @staticmethod
    def _alert(
        severity: AlertSeverity,
        category: AlertCategory,
        alert_type: AlertType,
        resource_type: str,
        name: str,
        message: str,
        now: datetime,
        *,
        namespace: str = "",
        value: str = "",
        threshold: str = "",
    ) -> Alert:
        return Alert(
            severity=severity,
            category=category,
            alert_type=alert_type,
            resource_type=resource_type,
            resource_name=name,
            namespace=namespace,
            message=message,
            value=value,
            threshold=threshold,
            recommended_action=recommended_action(alert_type, namespace, name),
            timestamp=now,
        )

    def _node_alerts(self, node: NodeRecord, now: datetime) -> list[Alert]:
        alerts: list[Alert] = []
        if node.status != NodeStatus.READY.value:
            alerts.append(
                self._alert(
                    AlertSeverity.CRITICAL, AlertCategory.NODE, AlertType.NODE_NOT_READY,
                    "Node", node.name, f"Node is {node.status}", now, value=node.status,
                )
            )

        pressure_checks = (
            (node.memory_pressure, AlertSeverity.CRITICAL, AlertType.NODE_MEMORY_PRESSURE,
             "memory", "MemoryPressure"),
            (node.disk_pressure, AlertSeverity.WARNING, AlertType.NODE_DISK_PRESSURE,
             "disk", "DiskPressure"),
            (node.pid_pressure, AlertSeverity.WARNING, AlertType.NODE_PID_PRESSURE,
             "PID", "PIDPressure"),
        )
        for active, severity, alert_type, label, value in pressure_checks:
            if active:
                alerts.append(
                    self._alert(
                        severity, AlertCategory.NODE, alert_type, "Node", node.name,
                        f"Node has {label} pressure", now, value=value,
                    )
                )

        usage_checks = (
            ("CPU", node.cpu_usage_percent, NODE_CPU_CRITICAL_THRESHOLD,
             NODE_CPU_WARNING_THRESHOLD, AlertType.NODE_CPU_CRITICAL, AlertType.NODE_CPU_HIGH),
            ("memory", node.memory_usage_percent, NODE_MEMORY_CRITICAL_THRESHOLD,
             NODE_MEMORY_WARNING_THRESHOLD, AlertType.NODE_MEMORY_CRITICAL,
             AlertType.NODE_MEMORY_HIGH),
        )
        for label, percent, critical, warning, critical_type, warning_type in usage_checks:
            if percent >= critical:
                severity, alert_type, threshold, level = (
                    AlertSeverity.CRITICAL, critical_type, critical, "critical"
                )
            elif percent >= warning:
                severity, alert_type, threshold, level = (
                    AlertSeverity.WARNING, warning_type, warning, "high"
                )
            else:
                continue
            alerts.append(
                self._alert(
                    severity, AlertCategory.RESOURCE, alert_type, "Node", node.name,
                    f"Node {label} usage {level}", now,
                    value=f"{percent:.1f}%", threshold=f"{threshold:.0f}%",
                )
            )
        return alerts

    def _pod_alerts(self, pod: PodRecord, now: datetime) -> list[Alert]:
        alerts: list[Alert] = []
        first_by_anomaly = {}
        for container in pod.container_states:
            anomaly = classify_reason(container.reason)
            if anomaly is not None and anomaly not in first_by_anomaly:
                first_by_anomaly[anomaly] = container

        container = first_by_anomaly.get(ContainerAnomaly.OOM_KILLED)
        if container is not None:
            alerts.append(
                self._alert(
                    AlertSeverity.CRITICAL, AlertCategory.POD, AlertType.POD_OOM_KILLED,
                    "Pod", pod.name, f"Container {container.name} was OOMKilled", now,
                    namespace=pod.namespace, value=f"{container.restart_count} restarts",
                )
            )
        container = first_by_anomaly.get(ContainerAnomaly.CRASH_LOOP)
        if container is not None:
            alerts.append(
                self._alert(
                    AlertSeverity.CRITICAL, AlertCategory.POD, AlertType.POD_CRASH_LOOP,
                    "Pod", pod.name, f"Container {container.name} in CrashLoopBackOff", now,
                    namespace=pod.namespace, value=container.reason,
                )
            )
        container = first_by_anomaly.get(ContainerAnomaly.IMAGE_PULL)
        if container is not None:
            alerts.append(
                self._alert(
                    AlertSeverity.WARNING, AlertCategory.POD, AlertType.POD_IMAGE_PULL,
                    "Pod", pod.name, f"Container {container.name} failed to pull image", now,
                    namespace=pod.namespace, value=container.reason,
                )
            )

        if pod.restart_count >= HIGH_RESTART_THRESHOLD:
            alerts.append(
                self._alert(
                    AlertSeverity.WARNING, AlertCategory.POD, AlertType.POD_HIGH_RESTARTS,
                    "Pod", pod.name, "Pod has high restart count", now,
                    namespace=pod.namespace, value=f"{pod.restart_count} restarts",
                    threshold=str(HIGH_RESTART_THRESHOLD),
                )
            )

        if pod.phase == PodPhase.PENDING.value:
            minutes = self._pending_minutes(pod.creation_timestamp, now)
            if minutes is not None and minutes >= PENDING_WARNING_MINUTES:
                alerts.append(
                    self._alert(
                        AlertSeverity.WARNING, AlertCategory.POD, AlertType.POD_PENDING_LONG,
                        "Pod", pod.name, "Pod pending for too long", now,
                        namespace=pod.namespace, value=f"{minutes:.0f}m",
                        threshold=f"{PENDING_WARNING_MINUTES}m",
                    )
                )

        if pod.phase == PodPhase.FAILED.value:
            alerts.append(
                self._alert(
                    AlertSeverity.WARNING, AlertCategory.POD, AlertType.POD_FAILED,
                    "Pod", pod.name, "Pod is in Failed state", now,
                    namespace=pod.namespace, value=pod.phase,
                )
            )
        return alerts

    @staticmethod
    def _pending_minutes(created: datetime | None, now: datetime) -> float | None:
        if created is None:
            return None
        return (now - created).total_seconds() / 60

    def evaluate(
        self,
        nodes: list[NodeRecord],
        pods: list[PodRecord],
        services: list[ServiceRecord],
        pvcs: list[PersistentVolumeClaimRecord],
    ) -> list[Alert]:
        """Evaluate every threshold and return alerts sorted by priority."""
        now = self._clock()
        alerts: list[Alert] = []

        for node in nodes:
            alerts.extend(self._node_alerts(node, now))
        for pod in pods:
            alerts.extend(self._pod_alerts(pod, now))

        for service in services:
            if service.endpoint_count == 0:
                alerts.append(
                    self._alert(
                        AlertSeverity.WARNING, AlertCategory.SERVICE,
                        AlertType.SERVICE_NO_ENDPOINTS, "Service", service.name,
                        "Service has no ready endpoints", now,
                        namespace=service.namespace, value="0 endpoints",
                    )
                )

        for pvc in pvcs:
            if pvc.status != "Pending":
                continue
            minutes = self._pending_minutes(pvc.creation_timestamp, now)
            if minutes is not None and minutes >= PENDING_WARNING_MINUTES:
                alerts.append(
                    self._alert(
                        AlertSeverity.WARNING, AlertCategory.STORAGE,
                        AlertType.PVC_PENDING_LONG, "PVC", pvc.name,
                        "PVC pending for too long", now,
                        namespace=pvc.namespace, value=f"{minutes:.0f}m",
                        threshold=f"{PENDING_WARNING_MINUTES}m",
                    )
                )

        logger.debug("Evaluated %d alerts", len(alerts))
        return sort_alerts(alerts)
