"""Workload controller parser for the resource client."""

from __future__ import annotations

from typing import Any

from kubemonitor.models.core.workload_info import (
    CronJobRecord,
    DaemonSetRecord,
    DeploymentRecord,
    JobRecord,
    StatefulSetRecord,
)
from kubemonitor.utils.resource_parser import parse_timestamp


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


class WorkloadParser:
    """Parses deployments, statefulsets, daemonsets, jobs and cronjobs."""

    def parse_deployment(self, item: dict[str, Any]) -> DeploymentRecord:
        metadata = item.get("metadata", {})
        spec = item.get("spec", {})
        status = item.get("status", {})
        return DeploymentRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            replicas=_int(spec.get("replicas", 1)),
            ready_replicas=_int(status.get("readyReplicas")),
            available_replicas=_int(status.get("availableReplicas")),
            updated_replicas=_int(status.get("updatedReplicas")),
            strategy=(spec.get("strategy") or {}).get("type", "") or "",
            selector=(spec.get("selector") or {}).get("matchLabels") or {},
            conditions=[
                c.get("type", "")
                for c in status.get("conditions") or []
                if c.get("status") == "True"
            ],
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        )

    def parse_stateful_set(self, item: dict[str, Any]) -> StatefulSetRecord:
        metadata = item.get("metadata", {})
        spec = item.get("spec", {})
        status = item.get("status", {})
        return StatefulSetRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            replicas=_int(spec.get("replicas", 1)),
            ready_replicas=_int(status.get("readyReplicas")),
            current_replicas=_int(status.get("currentReplicas")),
            updated_replicas=_int(status.get("updatedReplicas")),
            selector=(spec.get("selector") or {}).get("matchLabels") or {},
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        )

    def parse_daemon_set(self, item: dict[str, Any]) -> DaemonSetRecord:
        metadata = item.get("metadata", {})
        spec = item.get("spec", {})
        status = item.get("status", {})
        return DaemonSetRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            desired_number_scheduled=_int(status.get("desiredNumberScheduled")),
            current_number_scheduled=_int(status.get("currentNumberScheduled")),
            number_ready=_int(status.get("numberReady")),
            number_available=_int(status.get("numberAvailable")),
            selector=(spec.get("selector") or {}).get("matchLabels") or {},
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        )

    def parse_job(self, item: dict[str, Any]) -> JobRecord:
        """Parse a batch job; completions default to 1 when unset."""
        metadata = item.get("metadata", {})
        spec = item.get("spec", {})
        status = item.get("status", {})
        start = parse_timestamp(status.get("startTime"))
        completion = parse_timestamp(status.get("completionTime"))
        duration = completion - start if start and completion else None
        completions = spec.get("completions")
        return JobRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            completions=_int(completions) if completions is not None else 1,
            succeeded=_int(status.get("succeeded")),
            failed=_int(status.get("failed")),
            active=_int(status.get("active")),
            start_time=start,
            completion_time=completion,
            duration=duration,
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        )

    def parse_cron_job(self, item: dict[str, Any]) -> CronJobRecord:
        metadata = item.get("metadata", {})
        spec = item.get("spec", {})
        status = item.get("status", {})
        return CronJobRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            schedule=spec.get("schedule", "") or "",
            suspend=bool(spec.get("suspend", False)),
            active=len(status.get("active") or []),
            last_schedule_time=parse_timestamp(status.get("lastScheduleTime")),
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        )
