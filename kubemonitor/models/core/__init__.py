"""Core cluster resource models."""

from kubemonitor.models.core.event_info import EventRecord
from kubemonitor.models.core.node_info import NodeRecord, NPUChip
from kubemonitor.models.core.pod_info import ContainerState, PodRecord
from kubemonitor.models.core.service_info import ServicePort, ServiceRecord
from kubemonitor.models.core.storage_info import (
    PersistentVolumeClaimRecord,
    PersistentVolumeRecord,
)
from kubemonitor.models.core.workload_info import (
    CronJobRecord,
    DaemonSetRecord,
    DeploymentRecord,
    JobRecord,
    StatefulSetRecord,
)

__all__ = [
    "ContainerState",
    "CronJobRecord",
    "DaemonSetRecord",
    "DeploymentRecord",
    "EventRecord",
    "JobRecord",
    "NPUChip",
    "NodeRecord",
    "PersistentVolumeClaimRecord",
    "PersistentVolumeRecord",
    "PodRecord",
    "ServicePort",
    "ServiceRecord",
    "StatefulSetRecord",
]
