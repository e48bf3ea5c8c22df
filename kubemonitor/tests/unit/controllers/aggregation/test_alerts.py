"""Tests for threshold alert evaluation."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from kubemonitor.constants.enums import AlertSeverity, AlertType
from kubemonitor.controllers.aggregation.alerts import (
    AlertEvaluator,
    alert_priority,
    recommended_action,
    sort_alerts,
)
from kubemonitor.models.core import (
    ContainerState,
    NodeRecord,
    PersistentVolumeClaimRecord,
    PodRecord,
    ServiceRecord,
)

NOW = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


class TestRecommendedAction:
    """Tests for recommended_action function."""

    def test_namespaced_template(self) -> None:
        action = recommended_action(AlertType.POD_CRASH_LOOP, "prod", "api-0")
        assert action == "kubectl logs -n prod api-0 --previous # Check crash logs"

    def test_cluster_scoped_template(self) -> None:
        action = recommended_action(AlertType.POD_CRASH_LOOP, "", "api-0")
        assert action == "kubectl logs api-0 --previous # Check crash logs"

    def test_node_template(self) -> None:
        action = recommended_action(AlertType.NODE_NOT_READY, "", "worker-1")
        assert action == "kubectl describe node worker-1 # Check node conditions and events"

    def test_unknown_type_is_empty(self) -> None:
        assert recommended_action("not-a-type", "ns", "x") == ""  # type: ignore[arg-type]


class TestAlertPriority:
    """Tests for alert_priority and sort_alerts."""

    @pytest.mark.parametrize(
        ("alert_type", "severity", "expected"),
        [
            (AlertType.NODE_NOT_READY, AlertSeverity.CRITICAL, 250),
            (AlertType.POD_OOM_KILLED, AlertSeverity.CRITICAL, 245),
            (AlertType.POD_IMAGE_PULL, AlertSeverity.WARNING, 120),
            (AlertType.PVC_PENDING_LONG, AlertSeverity.WARNING, 105),
            (AlertType.NODE_PID_PRESSURE, AlertSeverity.WARNING, 100),
            (AlertType.POD_FAILED, AlertSeverity.INFO, 0),
        ],
    )
    def test_priority_values(self, alert_type, severity, expected) -> None:
        assert alert_priority(alert_type, severity) == expected

    def test_sort_is_stable_for_equal_priority(self) -> None:
        """Test alerts with equal priority keep input order."""
        evaluator = AlertEvaluator(lambda: NOW)
        services = [
            ServiceRecord(name=name, namespace="default", endpoint_count=0)
            for name in ("first", "second", "third")
        ]
        alerts = evaluator.evaluate([], [], services, [])

        assert [alert.resource_name for alert in sort_alerts(alerts)] == [
            "first",
            "second",
            "third",
        ]


class TestAlertEvaluator:
    """Tests for AlertEvaluator class."""

    @pytest.fixture
    def evaluator(self) -> AlertEvaluator:
        return AlertEvaluator(lambda: NOW)

    def test_healthy_cluster_has_no_alerts(self, evaluator: AlertEvaluator) -> None:
        nodes = [NodeRecord(name="n1", status="Ready", cpu_usage_percent=20.0)]
        pods = [PodRecord(name="p", namespace="d", phase="Running")]

        assert evaluator.evaluate(nodes, pods, [], []) == []

    def test_node_not_ready(self, evaluator: AlertEvaluator) -> None:
        alerts = evaluator.evaluate([NodeRecord(name="n1", status="Unknown")], [], [], [])

        assert len(alerts) == 1
        assert alerts[0].alert_type is AlertType.NODE_NOT_READY
        assert alerts[0].severity is AlertSeverity.CRITICAL
        assert alerts[0].value == "Unknown"
        assert alerts[0].timestamp == NOW

    def test_cpu_critical_formatting(self, evaluator: AlertEvaluator) -> None:
        node = NodeRecord(name="n1", status="Ready", cpu_usage_percent=95.2)

        alert = evaluator.evaluate([node], [], [], [])[0]

        assert alert.alert_type is AlertType.NODE_CPU_CRITICAL
        assert alert.value == "95.2%"
        assert alert.threshold == "90%"

    def test_memory_warning_band(self, evaluator: AlertEvaluator) -> None:
        node = NodeRecord(name="n1", status="Ready", memory_usage_percent=85.0)

        alert = evaluator.evaluate([node], [], [], [])[0]

        assert alert.alert_type is AlertType.NODE_MEMORY_HIGH
        assert alert.severity is AlertSeverity.WARNING
        assert alert.threshold == "80%"

    def test_pressure_severities(self, evaluator: AlertEvaluator) -> None:
        node = NodeRecord(name="n1", status="Ready", memory_pressure=True, disk_pressure=True)

        alerts = evaluator.evaluate([node], [], [], [])

        by_type = {alert.alert_type: alert.severity for alert in alerts}
        assert by_type[AlertType.NODE_MEMORY_PRESSURE] is AlertSeverity.CRITICAL
        assert by_type[AlertType.NODE_DISK_PRESSURE] is AlertSeverity.WARNING
        assert alerts[0].alert_type is AlertType.NODE_MEMORY_PRESSURE

    def test_pending_pod_duration(self, evaluator: AlertEvaluator) -> None:
        pod = PodRecord(
            name="waiting",
            namespace="d",
            phase="Pending",
            creation_timestamp=NOW - timedelta(minutes=12),
        )

        alert = evaluator.evaluate([], [pod], [], [])[0]

        assert alert.alert_type is AlertType.POD_PENDING_LONG
        assert alert.value == "12m"
        assert alert.threshold == "5m"

    def test_recent_pending_pod_is_quiet(self, evaluator: AlertEvaluator) -> None:
        pod = PodRecord(
            name="new", namespace="d", phase="Pending",
            creation_timestamp=NOW - timedelta(minutes=2),
        )

        assert evaluator.evaluate([], [pod], [], []) == []

    def test_container_anomalies_and_restarts(self, evaluator: AlertEvaluator) -> None:
        pod = PodRecord(
            name="api",
            namespace="prod",
            phase="Running",
            restart_count=7,
            container_states=[
                ContainerState(name="app", reason="OOMKilled", restart_count=7),
                ContainerState(name="sidecar", reason="CrashLoopBackOff"),
            ],
        )

        alerts = evaluator.evaluate([], [pod], [], [])

        assert [alert.alert_type for alert in alerts] == [
            AlertType.POD_OOM_KILLED,
            AlertType.POD_CRASH_LOOP,
            AlertType.POD_HIGH_RESTARTS,
        ]
        assert alerts[0].message == "Container app was OOMKilled"
        assert alerts[2].value == "7 restarts"
        assert alerts[2].threshold == "5"

    def test_service_without_endpoints(self, evaluator: AlertEvaluator) -> None:
        service = ServiceRecord(name="web", namespace="prod", endpoint_count=0)

        alert = evaluator.evaluate([], [], [service], [])[0]

        assert alert.value == "0 endpoints"
        assert alert.recommended_action.startswith("kubectl get endpoints -n prod web")

    def test_pending_claim(self, evaluator: AlertEvaluator) -> None:
        pvcs = [
            PersistentVolumeClaimRecord(
                name="data", namespace="prod", status="Pending",
                creation_timestamp=NOW - timedelta(minutes=6),
            ),
            PersistentVolumeClaimRecord(
                name="bound", namespace="prod", status="Bound",
                creation_timestamp=NOW - timedelta(hours=6),
            ),
        ]

        alerts = evaluator.evaluate([], [], [], pvcs)

        assert len(alerts) == 1
        assert alerts[0].alert_type is AlertType.PVC_PENDING_LONG
        assert alerts[0].value == "6m"
