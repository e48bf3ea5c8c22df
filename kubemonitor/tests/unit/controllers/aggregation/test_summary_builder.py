"""Tests for the cluster summary builder."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from kubemonitor.controllers.aggregation.summary_builder import SummaryBuilder, percent
from kubemonitor.models.core import (
    ContainerState,
    EventRecord,
    NodeRecord,
    PersistentVolumeClaimRecord,
    PersistentVolumeRecord,
    PodRecord,
    ServiceRecord,
)

NOW = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


def _pod(name: str, phase: str = "Running", restarts: int = 0, *reasons: str, **fields) -> PodRecord:
    return PodRecord(
        name=name,
        namespace="default",
        phase=phase,
        restart_count=restarts,
        container_states=[
            ContainerState(name=f"c{i}", reason=reason) for i, reason in enumerate(reasons)
        ],
        **fields,
    )


def _build(builder: SummaryBuilder, nodes=(), pods=(), events=(), services=(), pvs=(), pvcs=(), **kwargs):
    return builder.build(
        list(nodes), list(pods), list(events), list(services), list(pvs), list(pvcs), **kwargs
    )


class TestPercent:
    """Tests for the guarded percentage helper."""

    def test_zero_denominator(self) -> None:
        assert percent(5, 0) == 0.0
        assert percent(5, -1) == 0.0

    def test_ratio(self) -> None:
        assert percent(1, 4) == 25.0


class TestSummaryBuilder:
    """Tests for SummaryBuilder class."""

    @pytest.fixture
    def builder(self) -> SummaryBuilder:
        return SummaryBuilder(lambda: NOW)

    def test_empty_cluster_has_zero_ratios(self, builder: SummaryBuilder) -> None:
        """Test every ratio is 0.0 when denominators are zero."""
        summary = _build(builder)

        assert summary.cpu_request_utilization == 0.0
        assert summary.mem_usage_utilization == 0.0
        assert summary.pod_utilization == 0.0
        assert summary.storage_usage_percent == 0.0
        assert summary.npu_utilization == 0.0
        assert summary.avg_endpoints_per_service == 0.0
        assert summary.kubelet_error == ""

    def test_node_counts_and_capacity(self, builder: SummaryBuilder) -> None:
        """Test ready counts and resource sums."""
        nodes = [
            NodeRecord(name="n1", status="Ready", cpu_capacity=4000, cpu_allocatable=4000,
                       cpu_usage=1000, has_metrics=True, pod_allocatable=10),
            NodeRecord(name="n2", status="NotReady", cpu_capacity=4000, cpu_allocatable=4000,
                       disk_pressure=True, pod_allocatable=10),
            NodeRecord(name="n3", status="Unknown", pod_allocatable=0),
        ]
        pods = [_pod("p1", cpu_request=2000), _pod("p2", phase="Succeeded", cpu_request=500)]

        summary = _build(builder, nodes, pods)

        assert summary.ready_nodes + summary.not_ready_nodes == summary.total_nodes == 3
        assert summary.not_ready_nodes == 2
        assert summary.disk_pressure_nodes == 1
        assert summary.cpu_capacity == 8000
        assert summary.cpu_requested == 2000
        assert summary.cpu_request_utilization == pytest.approx(25.0)
        assert summary.cpu_usage_utilization == pytest.approx(12.5)
        assert summary.pod_utilization == pytest.approx(10.0)
        assert summary.nodes_with_metrics == 1
        assert summary.nodes_without_metrics == 2

    def test_pod_phases(self, builder: SummaryBuilder) -> None:
        pods = [
            _pod("a"), _pod("b", "Pending"), _pod("c", "Failed"),
            _pod("d", "Succeeded"), _pod("e", "Unknown"),
        ]

        summary = _build(builder, pods=pods)

        assert summary.running_pods == 1
        assert summary.pending_pods == 1
        assert summary.failed_pods == 1
        assert summary.unknown_pods == 2

    def test_anomalies_are_exclusive(self, builder: SummaryBuilder) -> None:
        """Test a pod counts under its most severe anomaly only."""
        pods = [
            _pod("oom-and-crash", "Running", 0, "CrashLoopBackOff", "OOMKilled"),
            _pod("crash-and-pull", "Running", 0, "ImagePullBackOff", "CrashLoopBackOff"),
            _pod("pull", "Pending", 0, "ErrImagePull"),
            _pod("creating", "Pending", 0, "ContainerCreating"),
            _pod("creating-running", "Running", 0, "ContainerCreating"),
        ]

        summary = _build(builder, pods=pods)

        assert summary.oom_killed_pods == 1
        assert summary.crash_loop_back_off_pods == 1
        assert summary.image_pull_back_off_pods == 1
        assert summary.container_creating_pods == 1

    def test_top_restart_pods_stable(self, builder: SummaryBuilder) -> None:
        """Test the top five restart pods keep encounter order on ties."""
        pods = [
            _pod("three", restarts=3),
            _pod("ten", restarts=10),
            _pod("seven", restarts=7),
            _pod("six-a", restarts=6),
            _pod("six-b", restarts=6),
            _pod("twenty", restarts=20),
        ]

        summary = _build(builder, pods=pods)

        assert [info.restart_count for info in summary.high_restart_pods] == [20, 10, 7, 6, 6]
        assert [info.name for info in summary.high_restart_pods][-2:] == ["six-a", "six-b"]

    def test_restart_reason_prefers_specific(self, builder: SummaryBuilder) -> None:
        """Test a generic Error reason never replaces a specific one."""
        pods = [_pod("p", "Running", 8, "OOMKilled", "Error")]

        summary = _build(builder, pods=pods)

        assert summary.high_restart_pods[0].reason == "OOMKilled"

    def test_requests_only_for_active_pods(self, builder: SummaryBuilder) -> None:
        pods = [
            _pod("run", memory_request=100),
            _pod("pend", "Pending", memory_request=50),
            _pod("done", "Succeeded", memory_request=1000),
        ]

        summary = _build(builder, pods=pods)

        assert summary.memory_requested == 150

    def test_workload_inference(self, builder: SummaryBuilder) -> None:
        pods = [
            _pod("a1", labels={"app.kubernetes.io/component": "deployment", "app.kubernetes.io/name": "api"}),
            _pod("a2", labels={"app.kubernetes.io/component": "deployment", "app.kubernetes.io/name": "api"}),
            _pod("j1", labels={"job-name": "migrate"}),
            _pod("c1", labels={"batch.kubernetes.io/cronjob": "nightly", "job-name": "nightly-1"}),
        ]

        summary = _build(builder, pods=pods)

        assert summary.total_deployments == 1
        assert summary.total_jobs == 2
        assert summary.total_cron_jobs == 1

    def test_accelerator_allocation_written_back(self, builder: SummaryBuilder) -> None:
        node = NodeRecord(name="npu-1", npu_capacity=8, npu_allocatable=8,
                          npu_resource_name="huawei.com/Ascend910")
        pods = [
            _pod("train", node="npu-1", npu_request=4),
            _pod("queued", "Pending", node="npu-1", npu_request=2),
            _pod("finished", "Succeeded", node="npu-1", npu_request=8),
        ]

        summary = _build(builder, [node], pods)

        assert node.npu_allocated == 6
        assert summary.npu_allocated == 6
        assert summary.npu_utilization == pytest.approx(75.0)
        assert summary.npu_nodes_count == 1
        assert summary.npu_resource_name == "huawei.com/Ascend910"

    def test_events_services_storage(self, builder: SummaryBuilder) -> None:
        events = [EventRecord(type="Warning"), EventRecord(type="Normal"), EventRecord(type="Error")]
        services = [
            ServiceRecord(name="a", namespace="d", type="ClusterIP", endpoint_count=3),
            ServiceRecord(name="b", namespace="d", type="NodePort", endpoint_count=0),
        ]
        pvs = [
            PersistentVolumeRecord(name="pv1", capacity=100, status="Bound"),
            PersistentVolumeRecord(name="pv2", capacity=300, status="Available"),
        ]
        pvcs = [
            PersistentVolumeClaimRecord(name="c1", namespace="d", status="Bound"),
            PersistentVolumeClaimRecord(name="c2", namespace="d", status="Pending"),
        ]

        summary = _build(builder, events=events, services=services, pvs=pvs, pvcs=pvcs)

        assert summary.warning_events == 1
        assert summary.error_events == 1
        assert summary.no_endpoint_services == 1
        assert summary.avg_endpoints_per_service == pytest.approx(1.5)
        assert summary.storage_usage_percent == pytest.approx(25.0)
        assert summary.bound_pvcs == 1
        assert summary.pending_pvcs == 1

    def test_kubelet_disabled_message(self, builder: SummaryBuilder) -> None:
        summary = _build(builder, [NodeRecord(name="n1")], metrics_configured=False)

        assert summary.kubelet_metrics_available is False
        assert summary.kubelet_error == "kubelet metrics disabled (client not initialized)"

    def test_skip_reason_used_when_no_node_error(self, builder: SummaryBuilder) -> None:
        summary = _build(builder, [NodeRecord(name="n1")], skip_reason="no proxy access")

        assert summary.kubelet_error == "no proxy access"
        assert summary.kubelet_errors == ["no proxy access"]

    def test_node_errors_are_deduplicated(self, builder: SummaryBuilder) -> None:
        nodes = [
            NodeRecord(name="n1", metrics_error="timeout"),
            NodeRecord(name="n2", metrics_error="timeout"),
            NodeRecord(name="n3", metrics_error="forbidden"),
        ]

        summary = _build(builder, nodes, skip_reason="ignored")

        assert summary.kubelet_errors == ["timeout", "forbidden"]
        assert summary.kubelet_error == "timeout"

    def test_network_timestamp_is_latest(self, builder: SummaryBuilder) -> None:
        nodes = [
            NodeRecord(name="n1", network_rx_bytes=10, network_timestamp=NOW - timedelta(seconds=5)),
            NodeRecord(name="n2", network_rx_bytes=20, network_timestamp=NOW),
        ]

        summary = _build(builder, nodes)

        assert summary.network_rx_bytes == 30
        assert summary.network_timestamp == NOW

    def test_build_is_deterministic(self, builder: SummaryBuilder) -> None:
        """Test identical input and clock give identical summaries."""
        nodes = [NodeRecord(name="n1", status="NotReady", cpu_allocatable=1000)]
        pods = [_pod("p", "Pending", 6, "CrashLoopBackOff", creation_timestamp=NOW - timedelta(minutes=30))]

        first = _build(builder, nodes, pods)
        second = _build(builder, nodes, pods)

        assert first.model_dump() == second.model_dump()
