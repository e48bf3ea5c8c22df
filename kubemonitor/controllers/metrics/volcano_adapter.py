"""Volcano scheduler adapter - jobs, hypernodes and queues."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from kubemonitor.constants.timeouts import VOLCANO_PROBE_TIMEOUT
from kubemonitor.constants.values import (
    VOLCANO_HYPERNODE_RESOURCE,
    VOLCANO_JOB_RESOURCE,
    VOLCANO_QUEUE_RESOURCE,
)
from kubemonitor.controllers.base import BaseController
from kubemonitor.controllers.cluster.fetchers import ResourceFetcher
from kubemonitor.controllers.cluster.kubectl_runner import format_request_timeout
from kubemonitor.controllers.metrics.parsers import VolcanoParser
from kubemonitor.models.scheduler import (
    HyperNodeRecord,
    QueueRecord,
    VolcanoJobRecord,
    VolcanoSummary,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VolcanoAdapter(BaseController):
    """Reads Volcano custom resources once the CRDs are known to be served.

    ``probe()`` runs at most once. If the job CRD cannot be listed the
    adapter stays disabled for its whole lifetime.
    """

    def __init__(
        self,
        run_kubectl_func: Any,
        *,
        probe_timeout: float = VOLCANO_PROBE_TIMEOUT,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._run_kubectl = run_kubectl_func
        self.probe_timeout = probe_timeout
        self._fetcher = ResourceFetcher(run_kubectl_func)
        self._parser = VolcanoParser(clock)
        self._probed = False
        self.available = False

    async def probe(self) -> bool:
        """Check once whether Volcano jobs are served by the API server."""
        if self._probed:
            return self.available
        self._probed = True
        try:
            await self._run_kubectl(
                (
                    "get",
                    VOLCANO_JOB_RESOURCE,
                    "--all-namespaces",
                    "--chunk-size=1",
                    "-o",
                    "name",
                    f"--request-timeout={format_request_timeout(self.probe_timeout)}",
                )
            )
        except Exception as exc:
            logger.warning("Volcano CRDs not available, Volcano features disabled: %s", exc)
            self.available = False
            return False
        logger.info("Volcano CRDs detected, Volcano features enabled")
        self.available = True
        return True

    async def check_connection(self) -> bool:
        return await self.probe()

    async def list_jobs(self, namespace: str = "") -> list[VolcanoJobRecord]:
        """List Volcano jobs.

        Raises:
            KubectlError: If the jobs cannot be listed.
        """
        if not self.available:
            return []
        items = await self._fetcher.fetch_items(VOLCANO_JOB_RESOURCE, namespace=namespace)
        return [self._parser.parse_job(item) for item in items]

    async def list_hyper_nodes(self) -> list[HyperNodeRecord]:
        """List hypernodes; installations without the topology CRD yield []."""
        if not self.available:
            return []
        try:
            items = await self._fetcher.fetch_items(
                VOLCANO_HYPERNODE_RESOURCE, namespaced=False
            )
        except Exception as exc:
            logger.debug("Failed to list HyperNodes: %s", exc)
            return []
        return [self._parser.parse_hyper_node(item) for item in items]

    async def list_queues(self) -> list[QueueRecord]:
        if not self.available:
            return []
        try:
            items = await self._fetcher.fetch_items(VOLCANO_QUEUE_RESOURCE, namespaced=False)
        except Exception as exc:
            logger.debug("Failed to list Volcano queues: %s", exc)
            return []
        return [self._parser.parse_queue(item) for item in items]

    @staticmethod
    def build_summary(
        jobs: list[VolcanoJobRecord],
        hyper_nodes: list[HyperNodeRecord],
        queues: list[QueueRecord],
    ) -> VolcanoSummary:
        """Summarize job states, accelerator demand and hypernode tiers."""
        summary = VolcanoSummary(total_queues=len(queues))
        for job in jobs:
            summary.total_jobs += 1
            summary.npu_requested_by_jobs += job.npu_requested
            if job.status == "Running":
                summary.running_jobs += 1
                if job.replicas > 0 and job.running > 0:
                    summary.npu_running_by_jobs += (
                        job.npu_requested // job.replicas
                    ) * job.running
            elif job.status == "Completed":
                summary.completed_jobs += 1
            elif job.status == "Pending":
                summary.pending_jobs += 1
            elif job.status in ("Failed", "Aborted"):
                summary.failed_jobs += 1

        for hyper_node in hyper_nodes:
            summary.total_hyper_nodes += 1
            if hyper_node.tier == 1:
                summary.tier1_nodes += 1
            elif hyper_node.tier == 2:
                summary.tier2_nodes += 1
        return summary
