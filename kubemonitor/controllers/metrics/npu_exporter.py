"""Accelerator exporter adapter - per-chip NPU telemetry.

The exporter is scraped through the API server service proxy by default, or
directly over HTTP when an endpoint override is configured. Chips are then
assigned to accelerator nodes and rolled up into node-level figures.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from kubemonitor.constants.timeouts import (
    NPU_EXPORTER_RETRY_COOLDOWN,
    NPU_EXPORTER_TIMEOUT,
)
from kubemonitor.constants.values import (
    NPU_EXPORTER_NAMESPACE,
    NPU_EXPORTER_PORT,
    NPU_EXPORTER_SERVICE,
)
from kubemonitor.controllers.base import BaseController
from kubemonitor.controllers.cluster.kubectl_runner import format_request_timeout
from kubemonitor.controllers.metrics.parsers import (
    ExporterChipMetrics,
    PrometheusChipParser,
)
from kubemonitor.models.core.node_info import NodeRecord

logger = logging.getLogger(__name__)

_BYTES_PER_MB = 1024 * 1024


class ExporterUnavailableError(RuntimeError):
    """The accelerator exporter could not be scraped."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def distribute_chips(
    nodes: list[NodeRecord],
    chips: list[ExporterChipMetrics],
) -> dict[str, list[ExporterChipMetrics]]:
    """Assign exporter chips to accelerator nodes.

    Candidates are nodes with accelerator capacity, in list order. A single
    candidate takes every chip. When the chip total fits on the first
    candidate the scrape came from one node's exporter, so that node takes
    them all. Otherwise each node gets a share proportional to its capacity,
    rounded down and capped at that capacity. Leftover chips go out one at a
    time in node order. Chips sorted by physical id are then sliced off in
    node order.

    Returns:
        Mapping of node name to its chips; nodes without chips are absent.
    """
    candidates = [node for node in nodes if node.npu_capacity > 0]
    if not candidates or not chips:
        return {}

    ordered = sorted(chips, key=lambda chip: chip.id)
    if len(candidates) == 1:
        return {candidates[0].name: ordered}

    first = candidates[0]
    if len(ordered) <= first.npu_capacity:
        logger.warning(
            "Exporter reported %d chips for %d accelerator nodes; "
            "assigning all chips to %s (single-node exporter assumed)",
            len(ordered),
            len(candidates),
            first.name,
        )
        return {first.name: ordered}

    total_capacity = sum(node.npu_capacity for node in candidates)
    distributable = min(len(ordered), total_capacity)
    shares = [
        min(node.npu_capacity, distributable * node.npu_capacity // total_capacity)
        for node in candidates
    ]
    leftover = distributable - sum(shares)
    while leftover:
        for index, node in enumerate(candidates):
            if leftover and shares[index] < node.npu_capacity:
                shares[index] += 1
                leftover -= 1

    assignment: dict[str, list[ExporterChipMetrics]] = {}
    position = 0
    for node, share in zip(candidates, shares):
        if share:
            assignment[node.name] = ordered[position : position + share]
        position += share

    if position < len(ordered):
        logger.warning(
            "%d exporter chips exceed total accelerator capacity and were not assigned",
            len(ordered) - position,
        )
    return assignment


def apply_chip_metrics(
    node: NodeRecord,
    chips: list[ExporterChipMetrics],
    sampled_at: datetime,
) -> None:
    """Roll chip telemetry up into the node's accelerator fields."""
    if not chips:
        return
    count = len(chips)
    hbm_total = sum(chip.hbm_total_memory for chip in chips)
    hbm_used = sum(chip.hbm_used_memory for chip in chips)
    unhealthy = sum(1 for chip in chips if not chip.healthy)

    node.npu_chips = [chip.to_chip() for chip in sorted(chips, key=lambda c: c.id)]
    node.npu_utilization = sum(chip.utilization for chip in chips) / count
    node.npu_memory_total = hbm_total * _BYTES_PER_MB
    node.npu_memory_used = hbm_used * _BYTES_PER_MB
    if hbm_total > 0:
        node.npu_memory_util = hbm_used / hbm_total * 100
    node.npu_temperature = int(sum(chip.temperature for chip in chips) / count)
    node.npu_power = int(sum(chip.power for chip in chips))
    node.npu_metrics_time = sampled_at
    if unhealthy:
        node.npu_health_status = "Warning"
        node.npu_error_count = unhealthy
    else:
        node.npu_health_status = "Healthy"


class NPUExporterAdapter(BaseController):
    """Scrapes the accelerator exporter with a retry cool-down.

    Args:
        run_kubectl_func: Async function to run kubectl commands
        endpoint: Direct exporter base URL; empty uses the service proxy
        timeout: Per-scrape timeout in seconds
        retry_cooldown: Seconds to wait after a failure before scraping again
        monotonic: Monotonic clock for the cool-down
        clock: Wall clock stamped on enriched nodes
    """

    def __init__(
        self,
        run_kubectl_func: Any,
        *,
        endpoint: str = "",
        timeout: float = NPU_EXPORTER_TIMEOUT,
        retry_cooldown: float = NPU_EXPORTER_RETRY_COOLDOWN,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Callable[[], datetime] = _utc_now,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._run_kubectl = run_kubectl_func
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.retry_cooldown = retry_cooldown
        self._monotonic = monotonic
        self._clock = clock
        self._http_client = http_client
        self._parser = PrometheusChipParser()
        self._retry_after: float | None = None
        self.available = False

    @property
    def proxy_path(self) -> str:
        return (
            f"/api/v1/namespaces/{NPU_EXPORTER_NAMESPACE}/services/"
            f"{NPU_EXPORTER_SERVICE}:{NPU_EXPORTER_PORT}/proxy/metrics"
        )

    async def _scrape_via_proxy(self) -> str:
        return await self._run_kubectl(
            (
                "get",
                "--raw",
                self.proxy_path,
                f"--request-timeout={format_request_timeout(self.timeout)}",
            )
        )

    async def _scrape_direct(self) -> str:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        response = await self._http_client.get(f"{self.endpoint}/metrics")
        response.raise_for_status()
        return response.text

    async def fetch_chip_metrics(self) -> tuple[dict[int, ExporterChipMetrics], int]:
        """Scrape and parse the exporter.

        Returns:
            Tuple of (chips keyed by id, reported chip count).

        Raises:
            ExporterUnavailableError: On scrape failure, or while the retry
                cool-down after a previous failure is still running.
        """
        now = self._monotonic()
        if self._retry_after is not None and now < self._retry_after:
            raise ExporterUnavailableError(
                f"exporter unavailable, next attempt in {self._retry_after - now:.0f}s"
            )

        try:
            if self.endpoint:
                text = await self._scrape_direct()
            else:
                text = await self._scrape_via_proxy()
        except Exception as exc:
            self.available = False
            self._retry_after = self._monotonic() + self.retry_cooldown
            raise ExporterUnavailableError(f"failed to scrape exporter: {exc}") from exc

        self.available = True
        self._retry_after = None
        return self._parser.parse(text)

    async def enrich_nodes(self, nodes: list[NodeRecord]) -> None:
        """Attach chip telemetry to accelerator nodes; failures are logged only."""
        if not any(node.npu_capacity > 0 for node in nodes):
            return
        try:
            chips, chip_count = await self.fetch_chip_metrics()
        except ExporterUnavailableError as exc:
            logger.debug("Skipping accelerator enrichment: %s", exc)
            return

        logger.debug("Exporter reported %d chips (machine count %d)", len(chips), chip_count)
        sampled_at = self._clock()
        by_name = {node.name: node for node in nodes}
        for node_name, node_chips in distribute_chips(nodes, list(chips.values())).items():
            apply_chip_metrics(by_name[node_name], node_chips, sampled_at)

    async def check_connection(self) -> bool:
        try:
            await self.fetch_chip_metrics()
        except ExporterUnavailableError:
            return False
        return True

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
