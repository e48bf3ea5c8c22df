"""Tests for the aggregation cycle."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from kubemonitor.controllers.aggregation.aggregator import (
    Aggregator,
    DataSourceError,
    MetricAdapters,
)
from kubemonitor.controllers.metrics import NodeMetricsSample, PodMetricsSample, VolcanoAdapter
from kubemonitor.controllers.metrics.kubelet_adapter import ContainerMetricsSample
from kubemonitor.models.core import (
    ContainerState,
    EventRecord,
    NodeRecord,
    PodRecord,
    ServiceRecord,
)
from kubemonitor.models.state.kubelet_access import KubeletAccessStatus

NOW = datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


class FakeResourceClient:
    """In-memory resource surface."""

    def __init__(self, nodes=None, pods=None, events=None, access=True) -> None:
        self.nodes = nodes if nodes is not None else []
        self.pods = pods if pods is not None else []
        self.events = events if events is not None else []
        self.access = access
        self.fail_nodes: Exception | None = None
        self.fail_pods: Exception | None = None
        self.fail_events: Exception | None = None
        self.event_calls: list[tuple] = []

    async def list_nodes(self) -> list[NodeRecord]:
        if self.fail_nodes:
            raise self.fail_nodes
        return [node.model_copy(deep=True) for node in self.nodes]

    async def list_pods(self, namespace: str = "") -> list[PodRecord]:
        if self.fail_pods:
            raise self.fail_pods
        return [
            pod.model_copy(deep=True)
            for pod in self.pods
            if not namespace or pod.namespace == namespace
        ]

    async def list_events(self, namespace="", types=(), limit=0) -> list[EventRecord]:
        self.event_calls.append((namespace, tuple(types), limit))
        if self.fail_events:
            raise self.fail_events
        return list(self.events)

    async def check_metrics_access(self) -> KubeletAccessStatus:
        if self.access:
            return KubeletAccessStatus(proxy_allowed=True)
        return KubeletAccessStatus(proxy_allowed=False, proxy_message="forbidden")

    async def get_pod_logs(self, namespace, pod_name, container_name="", tail_lines=200) -> str:
        return f"{namespace}/{pod_name}:{container_name}:{tail_lines}"


class FakeKubelet:
    """Kubelet adapter returning canned samples and tracking concurrency."""

    def __init__(self, samples=None, failures=None, delay: float = 0.0) -> None:
        self.samples = samples or {}
        self.failures = failures or {}
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls: list[str] = []

    async def fetch_node_metrics(self, node_name: str) -> NodeMetricsSample:
        self.calls.append(node_name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if node_name in self.failures:
                raise self.failures[node_name]
            return self.samples.get(node_name, NodeMetricsSample(node_name=node_name))
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        pass


def _running_pod(name: str, node: str) -> PodRecord:
    return PodRecord(
        name=name,
        namespace="default",
        node=node,
        phase="Running",
        container_states=[ContainerState(name="app")],
    )


@pytest.fixture
def client() -> FakeResourceClient:
    return FakeResourceClient(
        nodes=[
            NodeRecord(name="n1", status="Ready", cpu_allocatable=4000,
                       memory_allocatable=8000, pod_allocatable=10),
            NodeRecord(name="n2", status="Ready", cpu_allocatable=2000,
                       memory_allocatable=4000, pod_allocatable=10),
        ],
        pods=[_running_pod("web", "n1"), _running_pod("db", "n2")],
        events=[EventRecord(type="Warning", reason="BackOff")],
    )


def _sample(node: str, cpu: int, memory: int, pod: str | None = None) -> NodeMetricsSample:
    pods = {}
    if pod is not None:
        pods[f"default/{pod}"] = PodMetricsSample(
            name=pod,
            namespace="default",
            cpu_usage=cpu // 2,
            memory_usage=memory // 2,
            containers=[ContainerMetricsSample(name="app", cpu_usage=cpu // 2, memory_usage=10)],
        )
    return NodeMetricsSample(
        node_name=node,
        cpu_usage=cpu,
        memory_usage=memory,
        network_rx_bytes=1000,
        network_timestamp=NOW,
        pods=pods,
    )


class TestAggregatorMandatorySources:
    """Tests for node and pod failures."""

    @pytest.mark.asyncio
    async def test_node_failure_aborts(self, client: FakeResourceClient) -> None:
        client.fail_nodes = RuntimeError("connection refused")
        aggregator = Aggregator(client)

        with pytest.raises(DataSourceError, match="failed to get nodes: connection refused"):
            await aggregator.get_cluster_data()

    @pytest.mark.asyncio
    async def test_pod_failure_aborts(self, client: FakeResourceClient) -> None:
        client.fail_pods = RuntimeError("timeout")
        aggregator = Aggregator(client)

        with pytest.raises(DataSourceError, match="failed to get pods: timeout"):
            await aggregator.get_cluster_data()

    @pytest.mark.asyncio
    async def test_event_failure_is_tolerated(self, client: FakeResourceClient) -> None:
        client.fail_events = RuntimeError("boom")
        aggregator = Aggregator(client)

        snapshot = await aggregator.get_cluster_data()

        assert snapshot.events == []
        assert len(snapshot.nodes) == 2

    @pytest.mark.asyncio
    async def test_events_requested_with_limit(self, client: FakeResourceClient) -> None:
        aggregator = Aggregator(client)

        await aggregator.get_cluster_data("prod")

        assert client.event_calls == [("prod", ("Normal", "Warning"), 100)]


class TestAggregatorEnrichment:
    """Tests for kubelet enrichment and the access guard."""

    @pytest.mark.asyncio
    async def test_no_kubelet_marks_metrics_disabled(self, client: FakeResourceClient) -> None:
        aggregator = Aggregator(client, clock=lambda: NOW)

        snapshot = await aggregator.get_cluster_data()

        assert snapshot.summary.kubelet_metrics_available is False
        assert snapshot.summary.kubelet_error == (
            "kubelet metrics disabled (client not initialized)"
        )

    @pytest.mark.asyncio
    async def test_success_sets_usage_and_matches_pods(
        self, client: FakeResourceClient
    ) -> None:
        kubelet = FakeKubelet(
            samples={
                "n1": _sample("n1", 1000, 2000, pod="web"),
                "n2": _sample("n2", 500, 1000),
            }
        )
        aggregator = Aggregator(client, MetricAdapters(kubelet=kubelet), clock=lambda: NOW)

        snapshot = await aggregator.get_cluster_data()

        n1 = next(node for node in snapshot.nodes if node.name == "n1")
        assert n1.has_metrics is True
        assert n1.cpu_usage_percent == pytest.approx(25.0)
        assert n1.memory_usage_percent == pytest.approx(25.0)
        assert n1.pod_count == 1
        assert n1.pod_usage_percent == pytest.approx(10.0)

        web = next(pod for pod in snapshot.pods if pod.name == "web")
        assert web.cpu_usage == 500
        assert web.container_states[0].cpu_usage == 500
        db = next(pod for pod in snapshot.pods if pod.name == "db")
        assert db.cpu_usage == 0

        assert snapshot.summary.nodes_with_metrics == 2
        assert snapshot.summary.network_rx_bytes == 2000
        assert snapshot.summary.kubelet_metrics_available is True
        assert aggregator.skip_reason == ""

    @pytest.mark.asyncio
    async def test_per_node_failure_is_isolated(self, client: FakeResourceClient) -> None:
        kubelet = FakeKubelet(
            samples={"n1": _sample("n1", 1000, 2000)},
            failures={"n2": RuntimeError("kubelet timeout")},
        )
        aggregator = Aggregator(client, MetricAdapters(kubelet=kubelet))

        snapshot = await aggregator.get_cluster_data()

        n1, n2 = snapshot.nodes
        assert n1.has_metrics is True
        assert n2.has_metrics is False
        assert n2.metrics_error == "kubelet timeout"
        assert n2.cpu_usage == 0
        assert snapshot.summary.nodes_without_metrics == 1
        assert snapshot.summary.kubelet_errors == ["kubelet timeout"]

    @pytest.mark.asyncio
    async def test_denied_access_skips_kubelet(self, client: FakeResourceClient) -> None:
        """Test denial zeroes usage and records the reason without kubelet calls."""
        client.access = False
        client.nodes[0].cpu_usage = 999
        kubelet = FakeKubelet()
        aggregator = Aggregator(client, MetricAdapters(kubelet=kubelet))

        snapshot = await aggregator.get_cluster_data()

        assert kubelet.calls == []
        assert aggregator.skip_reason.startswith("forbidden")
        for node in snapshot.nodes:
            assert node.has_metrics is False
            assert node.cpu_usage == 0
            assert node.metrics_error == aggregator.skip_reason
        assert snapshot.summary.kubelet_error == aggregator.skip_reason

    @pytest.mark.asyncio
    async def test_overlapping_cycles_keep_their_own_skip_reason(self) -> None:
        """Test a cycle that finishes first cannot clear another cycle's reason."""
        entered = asyncio.Event()
        release = asyncio.Event()
        calls = 0

        async def enrich_nodes(nodes: list[NodeRecord]) -> None:
            nonlocal calls
            calls += 1
            if calls == 1:
                entered.set()
                await release.wait()

        exporter = MagicMock()
        exporter.enrich_nodes = enrich_nodes
        # Without nodes the summary can only learn the reason from the cycle itself.
        client = FakeResourceClient()
        aggregator = Aggregator(
            client, MetricAdapters(kubelet=FakeKubelet(), npu_exporter=exporter)
        )
        aggregator._access_guard.should_skip = AsyncMock(
            side_effect=[(True, "forbidden"), (False, "")]
        )

        denied_cycle = asyncio.create_task(aggregator.get_cluster_data())
        await entered.wait()
        allowed = await aggregator.get_cluster_data()
        release.set()
        denied = await denied_cycle

        assert denied.summary.kubelet_error == "forbidden"
        assert denied.summary.kubelet_errors == ["forbidden"]
        assert allowed.summary.kubelet_error == ""
        assert aggregator.skip_reason == "forbidden"

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self) -> None:
        client = FakeResourceClient(
            nodes=[NodeRecord(name=f"n{i}", status="Ready") for i in range(50)]
        )
        kubelet = FakeKubelet(delay=0.01)
        aggregator = Aggregator(client, MetricAdapters(kubelet=kubelet), max_concurrent=10)

        snapshot = await aggregator.get_cluster_data()

        assert len(kubelet.calls) == 50
        assert 1 <= kubelet.max_in_flight <= 10
        assert all(node.has_metrics for node in snapshot.nodes)

    def test_max_concurrent_floor(self, client: FakeResourceClient) -> None:
        assert Aggregator(client, max_concurrent=0).max_concurrent == 1

    @pytest.mark.asyncio
    async def test_npu_enrichment_failure_is_tolerated(
        self, client: FakeResourceClient
    ) -> None:
        exporter = MagicMock()
        exporter.enrich_nodes = AsyncMock(side_effect=RuntimeError("exporter down"))
        aggregator = Aggregator(client, MetricAdapters(npu_exporter=exporter))

        snapshot = await aggregator.get_cluster_data()

        exporter.enrich_nodes.assert_awaited_once()
        assert len(snapshot.nodes) == 2


class TestAggregatorOptionalSources:
    """Tests for extended resources and Volcano."""

    @pytest.mark.asyncio
    async def test_extended_failures_degrade_to_empty(
        self, client: FakeResourceClient
    ) -> None:
        extended = MagicMock()
        extended.list_services = AsyncMock(
            return_value=[ServiceRecord(name="web", namespace="default", endpoint_count=0)]
        )
        extended.list_persistent_volumes = AsyncMock(side_effect=RuntimeError("forbidden"))
        for name in (
            "list_persistent_volume_claims",
            "list_deployments",
            "list_stateful_sets",
            "list_daemon_sets",
            "list_jobs",
            "list_cron_jobs",
        ):
            setattr(extended, name, AsyncMock(return_value=[]))
        aggregator = Aggregator(client, extended_lister=extended)

        snapshot = await aggregator.get_cluster_data()

        assert [service.name for service in snapshot.services] == ["web"]
        assert snapshot.pvs == []
        assert snapshot.summary.no_endpoint_services == 1

    @pytest.mark.asyncio
    async def test_volcano_disabled_when_probe_fails(
        self, client: FakeResourceClient
    ) -> None:
        run_kubectl = AsyncMock(side_effect=RuntimeError("the server doesn't have a resource type"))
        volcano = VolcanoAdapter(run_kubectl)
        aggregator = Aggregator(client, MetricAdapters(volcano=volcano))

        first = await aggregator.get_cluster_data()
        second = await aggregator.get_cluster_data()

        assert first.volcano_summary is None
        assert second.volcano_jobs == []
        assert run_kubectl.await_count == 1

    @pytest.mark.asyncio
    async def test_pod_logs_delegate(self, client: FakeResourceClient) -> None:
        aggregator = Aggregator(client)

        logs = await aggregator.get_pod_logs("default", "web", "app", 50)

        assert logs == "default/web:app:50"

    @pytest.mark.asyncio
    async def test_close_logs_adapter_failures(self, client: FakeResourceClient) -> None:
        kubelet = MagicMock()
        kubelet.close = AsyncMock(side_effect=RuntimeError("already closed"))
        exporter = MagicMock()
        exporter.close = AsyncMock()
        aggregator = Aggregator(client, MetricAdapters(kubelet=kubelet, npu_exporter=exporter))

        await aggregator.close()

        exporter.close.assert_awaited_once()


class TestAggregatorScenario:
    """End-to-end counts over a small mixed cluster."""

    @pytest.mark.asyncio
    async def test_mixed_cluster_counts(self) -> None:
        client = FakeResourceClient(
            nodes=[
                NodeRecord(name="n1", status="Ready"),
                NodeRecord(name="n2", status="Ready"),
                NodeRecord(name="n3", status="NotReady"),
            ],
            pods=[
                PodRecord(name="a", namespace="d", phase="Running"),
                PodRecord(name="b", namespace="d", phase="Running"),
                PodRecord(name="c", namespace="d", phase="Pending"),
                PodRecord(name="e", namespace="d", phase="Failed"),
            ],
            events=[
                EventRecord(type="Warning"),
                EventRecord(type="Error"),
                EventRecord(type="Normal"),
            ],
        )
        aggregator = Aggregator(client, clock=lambda: NOW)

        summary = (await aggregator.get_cluster_data()).summary

        assert (summary.total_nodes, summary.ready_nodes, summary.not_ready_nodes) == (3, 2, 1)
        assert (
            summary.total_pods,
            summary.running_pods,
            summary.pending_pods,
            summary.failed_pods,
        ) == (4, 2, 1, 1)
        assert (summary.total_events, summary.warning_events, summary.error_events) == (3, 1, 1)

    @pytest.mark.asyncio
    async def test_zero_allocatable_gives_zero_percent(self) -> None:
        client = FakeResourceClient(nodes=[NodeRecord(name="n1", status="Ready")])
        kubelet = FakeKubelet(samples={"n1": _sample("n1", 1500, 4096)})
        aggregator = Aggregator(client, MetricAdapters(kubelet=kubelet))

        node = (await aggregator.get_cluster_data()).nodes[0]

        assert node.cpu_usage == 1500
        assert node.cpu_usage_percent == 0.0
        assert node.memory_usage_percent == 0.0
        assert node.pod_usage_percent == 0.0
