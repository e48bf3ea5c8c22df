"""Kubelet summary adapter - node, pod and container usage from stats/summary."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from kubemonitor.constants.enums import MetricsFailureKind
from kubemonitor.constants.timeouts import KUBELET_REQUEST_TIMEOUT
from kubemonitor.controllers.base import BaseController
from kubemonitor.controllers.cluster.kubectl_runner import KubectlTimeoutError
from kubemonitor.utils.resource_parser import parse_timestamp

logger = logging.getLogger(__name__)

_SUMMARY_PATH = "/api/v1/nodes/{node}/proxy/stats/summary"
_FIRST_NODE_PATH = "/api/v1/nodes?limit=1"
_NANOCORES_PER_MILLICORE = 1_000_000


class MetricsUnavailableError(RuntimeError):
    """Kubelet metrics could not be retrieved for a node."""

    def __init__(self, message: str, kind: MetricsFailureKind = MetricsFailureKind.UNAVAILABLE):
        super().__init__(message)
        self.kind = kind


@dataclass
class ContainerMetricsSample:
    """Usage of one container."""

    name: str
    cpu_usage: int = 0  # millicores
    memory_usage: int = 0  # bytes


@dataclass
class PodMetricsSample:
    """Usage of one pod and its containers."""

    name: str
    namespace: str
    cpu_usage: int = 0
    memory_usage: int = 0
    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    network_timestamp: datetime | None = None
    containers: list[ContainerMetricsSample] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class NodeMetricsSample:
    """One kubelet summary: node usage plus every pod scheduled on the node."""

    node_name: str
    cpu_usage: int = 0
    memory_usage: int = 0
    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    network_timestamp: datetime | None = None
    pods: dict[str, PodMetricsSample] = field(default_factory=dict)


def classify_failure(error: Exception) -> MetricsFailureKind:
    """Map a kubectl failure onto a metrics failure kind."""
    if isinstance(error, KubectlTimeoutError):
        return MetricsFailureKind.TIMEOUT
    message = str(error).lower()
    if "forbidden" in message or "unauthorized" in message:
        return MetricsFailureKind.PERMISSION_DENIED
    if "timeout" in message or "timed out" in message or "deadline exceeded" in message:
        return MetricsFailureKind.TIMEOUT
    if "not found" in message or "notfound" in message:
        return MetricsFailureKind.NOT_FOUND
    return MetricsFailureKind.UNAVAILABLE


def _cpu_millicores(stats: dict[str, Any] | None) -> int:
    nanocores = (stats or {}).get("usageNanoCores")
    if nanocores is None:
        return 0
    return int(nanocores) // _NANOCORES_PER_MILLICORE


def _working_set(stats: dict[str, Any] | None) -> int:
    return int((stats or {}).get("workingSetBytes") or 0)


def _network(stats: dict[str, Any] | None) -> tuple[int, int, datetime | None]:
    """Sum interface counters, falling back to the top-level totals."""
    if not stats:
        return 0, 0, None
    timestamp = parse_timestamp(stats.get("time")) or datetime.now(timezone.utc)
    rx_bytes = 0
    tx_bytes = 0
    for interface in stats.get("interfaces") or []:
        rx_bytes += int(interface.get("rxBytes") or 0)
        tx_bytes += int(interface.get("txBytes") or 0)
    if rx_bytes == 0:
        rx_bytes = int(stats.get("rxBytes") or 0)
    if tx_bytes == 0:
        tx_bytes = int(stats.get("txBytes") or 0)
    return rx_bytes, tx_bytes, timestamp


def parse_summary(node_name: str, summary: dict[str, Any]) -> NodeMetricsSample:
    """Convert a decoded stats/summary document into a NodeMetricsSample."""
    node_stats = summary.get("node") or {}
    rx_bytes, tx_bytes, timestamp = _network(node_stats.get("network"))
    sample = NodeMetricsSample(
        node_name=node_name,
        cpu_usage=_cpu_millicores(node_stats.get("cpu")),
        memory_usage=_working_set(node_stats.get("memory")),
        network_rx_bytes=rx_bytes,
        network_tx_bytes=tx_bytes,
        network_timestamp=timestamp,
    )

    for pod_stats in summary.get("pods") or []:
        pod_ref = pod_stats.get("podRef") or {}
        pod_rx, pod_tx, pod_time = _network(pod_stats.get("network"))
        pod = PodMetricsSample(
            name=pod_ref.get("name", ""),
            namespace=pod_ref.get("namespace", ""),
            cpu_usage=_cpu_millicores(pod_stats.get("cpu")),
            memory_usage=_working_set(pod_stats.get("memory")),
            network_rx_bytes=pod_rx,
            network_tx_bytes=pod_tx,
            network_timestamp=pod_time,
            containers=[
                ContainerMetricsSample(
                    name=container.get("name", ""),
                    cpu_usage=_cpu_millicores(container.get("cpu")),
                    memory_usage=_working_set(container.get("memory")),
                )
                for container in pod_stats.get("containers") or []
            ],
        )
        sample.pods[pod.key] = pod
    return sample


class KubeletMetricsAdapter(BaseController):
    """Reads kubelet summaries through the API server node proxy.

    Args:
        run_kubectl_func: Async function to run kubectl commands
        insecure: Skip TLS verification of the API server
        request_timeout: ``--request-timeout`` for each summary call
    """

    def __init__(
        self,
        run_kubectl_func: Any,
        *,
        insecure: bool = False,
        request_timeout: str = KUBELET_REQUEST_TIMEOUT,
    ) -> None:
        self._run_kubectl = run_kubectl_func
        self.insecure = insecure
        self.request_timeout = request_timeout

    def _build_args(self, node_name: str) -> tuple[str, ...]:
        args = [
            "get",
            "--raw",
            _SUMMARY_PATH.format(node=node_name),
            f"--request-timeout={self.request_timeout}",
        ]
        if self.insecure:
            args.append("--insecure-skip-tls-verify")
        return tuple(args)

    async def fetch_node_metrics(self, node_name: str) -> NodeMetricsSample:
        """Fetch node usage and all pod samples on the node in one call.

        Raises:
            MetricsUnavailableError: When the summary cannot be fetched or decoded.
        """
        try:
            output = await self._run_kubectl(self._build_args(node_name))
        except Exception as exc:
            kind = classify_failure(exc)
            raise MetricsUnavailableError(
                f"failed to fetch summary: {exc}", kind
            ) from exc

        try:
            summary = json.loads(output)
        except json.JSONDecodeError as exc:
            raise MetricsUnavailableError(
                f"failed to decode summary: {exc}",
                MetricsFailureKind.INVALID_RESPONSE,
            ) from exc
        if not isinstance(summary, dict):
            raise MetricsUnavailableError(
                "failed to decode summary: unexpected document",
                MetricsFailureKind.INVALID_RESPONSE,
            )

        sample = parse_summary(node_name, summary)
        logger.debug(
            "Node metrics fetched for %s: cpu=%dm mem=%d rx=%d tx=%d pods=%d",
            node_name,
            sample.cpu_usage,
            sample.memory_usage,
            sample.network_rx_bytes,
            sample.network_tx_bytes,
            len(sample.pods),
        )
        return sample

    async def check_connection(self) -> bool:
        """Return True when one node's summary can be read through the proxy."""
        try:
            output = await self._run_kubectl(
                ("get", "--raw", _FIRST_NODE_PATH, f"--request-timeout={self.request_timeout}")
            )
            items = json.loads(output).get("items") or []
            if not items:
                logger.warning("Kubelet connection check found no nodes")
                return False
            await self.fetch_node_metrics(items[0]["metadata"]["name"])
        except Exception as exc:
            logger.warning("Kubelet connection check failed: %s", exc)
            return False
        return True

    async def close(self) -> None:
        logger.info("Closing kubelet metrics adapter")
