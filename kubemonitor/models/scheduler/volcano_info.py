"""Volcano scheduler custom resource models."""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field


class VolcanoTaskRecord(BaseModel):
    """One task template of a Volcano job."""

    name: str = ""
    replicas: int = 0
    min_available: int = 0
    npu_request: int = 0  # per replica


class VolcanoJobRecord(BaseModel):
    """One Volcano job (batch.volcano.sh)."""

    name: str
    namespace: str
    status: str = ""  # Running, Completed, Pending, Failed, Aborted, ...
    queue: str = ""
    min_available: int = 0
    replicas: int = 0
    running: int = 0
    succeeded: int = 0
    failed: int = 0
    pending: int = 0
    npu_requested: int = 0
    npu_resource_name: str = ""
    creation_timestamp: datetime | None = None
    start_time: datetime | None = None
    completion_time: datetime | None = None
    duration: timedelta | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    hyper_job_name: str = ""
    hyper_job_index: str = ""
    tasks: list[VolcanoTaskRecord] = Field(default_factory=list)


class HyperNodeMember(BaseModel):
    """Member of a hypernode (a node or a nested hypernode)."""

    type: str = ""
    name: str = ""


class HyperNodeRecord(BaseModel):
    """Network topology group (topology.volcano.sh)."""

    name: str
    tier: int = 0  # 1 = SuperPod level, 2 = HyperCluster level
    node_count: int = 0
    members: list[HyperNodeMember] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)


class QueueRecord(BaseModel):
    """Scheduling queue (scheduling.volcano.sh)."""

    name: str
    parent: str = ""
    state: str = ""
    weight: int = 0
    reclaimable: bool = False
    creation_timestamp: datetime | None = None

    cpu_deserved: int = 0
    memory_deserved: int = 0
    npu_deserved: int = 0
    pod_deserved: int = 0

    cpu_allocated: int = 0
    memory_allocated: int = 0
    npu_allocated: int = 0
    pod_allocated: int = 0

    cpu_guarantee: int = 0
    memory_guarantee: int = 0
    npu_guarantee: int = 0

    npu_resource_name: str = ""
    running_jobs: int = 0
    pending_jobs: int = 0


class VolcanoSummary(BaseModel):
    """Secondary summary block for scheduler resources."""

    total_jobs: int = 0
    running_jobs: int = 0
    completed_jobs: int = 0
    pending_jobs: int = 0
    failed_jobs: int = 0
    total_queues: int = 0
    total_hyper_nodes: int = 0
    tier1_nodes: int = 0
    tier2_nodes: int = 0
    npu_requested_by_jobs: int = 0
    npu_running_by_jobs: int = 0
