"""Volcano custom resource parser."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from kubemonitor.constants.values import HYPERJOB_INDEX_ANNOTATION, HYPERJOB_NAME_ANNOTATION
from kubemonitor.models.scheduler import (
    HyperNodeMember,
    HyperNodeRecord,
    QueueRecord,
    VolcanoJobRecord,
    VolcanoTaskRecord,
)
from kubemonitor.utils.resource_parser import (
    cpu_to_millicores,
    is_accelerator_resource,
    memory_to_bytes,
    parse_count,
    parse_timestamp,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class VolcanoParser:
    """Converts Volcano jobs, hypernodes and queues into records.

    Args:
        clock: Wall clock used for the duration of unfinished jobs.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._clock = clock

    @staticmethod
    def _task_npu_request(task: dict[str, Any]) -> tuple[int, str]:
        """Return the accelerator request of one task replica and its resource name."""
        containers = (
            ((task.get("template") or {}).get("spec") or {}).get("containers") or []
        )
        npu_request = 0
        resource_name = ""
        for container in containers:
            requests = (container.get("resources") or {}).get("requests") or {}
            for name, quantity in requests.items():
                if is_accelerator_resource(name):
                    npu_request = parse_count(quantity)
                    resource_name = resource_name or name
        return npu_request, resource_name

    def parse_job(self, item: dict[str, Any]) -> VolcanoJobRecord:
        metadata = item.get("metadata", {})
        spec = item.get("spec") or {}
        status = item.get("status") or {}
        annotations = metadata.get("annotations") or {}

        job = VolcanoJobRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            labels=metadata.get("labels") or {},
            annotations=annotations,
            hyper_job_name=annotations.get(HYPERJOB_NAME_ANNOTATION, ""),
            hyper_job_index=annotations.get(HYPERJOB_INDEX_ANNOTATION, ""),
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
            queue=spec.get("queue", "") or "",
            min_available=_int(spec.get("minAvailable")),
        )

        for task in spec.get("tasks") or []:
            replicas = _int(task.get("replicas"))
            npu_request, resource_name = self._task_npu_request(task)
            job.tasks.append(
                VolcanoTaskRecord(
                    name=task.get("name", "") or "",
                    replicas=replicas,
                    min_available=_int(task.get("minAvailable")),
                    npu_request=npu_request,
                )
            )
            job.replicas += replicas
            job.npu_requested += npu_request * replicas
            if resource_name and not job.npu_resource_name:
                job.npu_resource_name = resource_name

        job.status = (status.get("state") or {}).get("phase", "") or ""
        job.running = _int(status.get("running"))
        job.succeeded = _int(status.get("succeeded"))
        job.failed = _int(status.get("failed"))
        job.pending = _int(status.get("pending"))
        job.start_time = parse_timestamp(status.get("startTime"))
        job.completion_time = parse_timestamp(status.get("completionTime"))
        if job.start_time is not None:
            end = job.completion_time or self._clock()
            job.duration = end - job.start_time
        return job

    def parse_hyper_node(self, item: dict[str, Any]) -> HyperNodeRecord:
        metadata = item.get("metadata", {})
        spec = item.get("spec") or {}
        status = item.get("status") or {}
        members = [
            HyperNodeMember(
                type=member.get("type", "") or "",
                name=((member.get("selector") or {}).get("exactMatch") or {}).get("name", "")
                or "",
            )
            for member in spec.get("members") or []
        ]
        return HyperNodeRecord(
            name=metadata.get("name", ""),
            labels=metadata.get("labels") or {},
            tier=_int(spec.get("tier")),
            node_count=_int(status.get("nodeCount")),
            members=members,
        )

    @staticmethod
    def _queue_resources(resources: dict[str, Any]) -> tuple[int, int, int, int, str]:
        """Return (cpu millicores, memory bytes, npu, pods, npu resource name)."""
        cpu = memory = npu = pods = 0
        npu_name = ""
        for key, value in resources.items():
            if key == "cpu":
                cpu = cpu_to_millicores(value)
            elif key == "memory":
                memory = memory_to_bytes(value)
            elif key == "pods":
                pods = parse_count(value)
            elif "ascend" in key or "npu" in key:
                npu = parse_count(value)
                npu_name = key
        return cpu, memory, npu, pods, npu_name

    def parse_queue(self, item: dict[str, Any]) -> QueueRecord:
        metadata = item.get("metadata", {})
        spec = item.get("spec") or {}
        status = item.get("status") or {}

        queue = QueueRecord(
            name=metadata.get("name", ""),
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
            parent=spec.get("parent", "") or "",
            weight=_int(spec.get("weight")),
            reclaimable=bool(spec.get("reclaimable", False)),
            state=status.get("state", "") or "",
            running_jobs=_int(status.get("running")),
            pending_jobs=_int(status.get("pending")),
        )
        if spec.get("deserved"):
            (
                queue.cpu_deserved,
                queue.memory_deserved,
                queue.npu_deserved,
                queue.pod_deserved,
                queue.npu_resource_name,
            ) = self._queue_resources(spec["deserved"])
        if spec.get("guarantee"):
            (
                queue.cpu_guarantee,
                queue.memory_guarantee,
                queue.npu_guarantee,
                _,
                _,
            ) = self._queue_resources(spec["guarantee"])
        if status.get("allocated"):
            (
                queue.cpu_allocated,
                queue.memory_allocated,
                queue.npu_allocated,
                queue.pod_allocated,
                _,
            ) = self._queue_resources(status["allocated"])
        return queue
