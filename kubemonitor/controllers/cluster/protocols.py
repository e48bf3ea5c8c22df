"""Capability protocols implemented by cluster resource clients.

The aggregator depends only on these surfaces, so tests and alternative
backends can supply any object with the matching coroutine methods.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from kubemonitor.models.core import (
    CronJobRecord,
    DaemonSetRecord,
    DeploymentRecord,
    EventRecord,
    JobRecord,
    NodeRecord,
    PersistentVolumeClaimRecord,
    PersistentVolumeRecord,
    PodRecord,
    ServiceRecord,
    StatefulSetRecord,
)
from kubemonitor.models.state.kubelet_access import KubeletAccessStatus


@runtime_checkable
class ResourceLister(Protocol):
    """Mandatory cluster surface: nodes, pods, events, access checks, logs."""

    async def list_nodes(self) -> list[NodeRecord]: ...

    async def list_pods(self, namespace: str = "") -> list[PodRecord]: ...

    async def list_events(
        self,
        namespace: str = "",
        types: Sequence[str] = (),
        limit: int = 0,
    ) -> list[EventRecord]: ...

    async def check_metrics_access(self) -> KubeletAccessStatus: ...

    async def get_pod_logs(
        self,
        namespace: str,
        pod_name: str,
        container_name: str = "",
        tail_lines: int = 200,
    ) -> str: ...


@runtime_checkable
class ExtendedResourceLister(Protocol):
    """Optional surface: services, storage and workload controllers."""

    async def list_services(self, namespace: str = "") -> list[ServiceRecord]: ...

    async def list_persistent_volumes(self) -> list[PersistentVolumeRecord]: ...

    async def list_persistent_volume_claims(
        self, namespace: str = ""
    ) -> list[PersistentVolumeClaimRecord]: ...

    async def list_deployments(self, namespace: str = "") -> list[DeploymentRecord]: ...

    async def list_stateful_sets(self, namespace: str = "") -> list[StatefulSetRecord]: ...

    async def list_daemon_sets(self, namespace: str = "") -> list[DaemonSetRecord]: ...

    async def list_jobs(self, namespace: str = "") -> list[JobRecord]: ...

    async def list_cron_jobs(self, namespace: str = "") -> list[CronJobRecord]: ...
