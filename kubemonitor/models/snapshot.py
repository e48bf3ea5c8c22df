"""Cluster snapshot model."""

from pydantic import BaseModel, ConfigDict, Field

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
from kubemonitor.models.scheduler import (
    HyperNodeRecord,
    QueueRecord,
    VolcanoJobRecord,
    VolcanoSummary,
)
from kubemonitor.models.summary import ClusterSummary


class ClusterSnapshot(BaseModel):
    """Point-in-time view produced by one aggregation cycle.

    Fields cannot be reassigned once constructed; a new snapshot replaces the
    previous one wholesale on every refresh.
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[NodeRecord] = Field(default_factory=list)
    pods: list[PodRecord] = Field(default_factory=list)
    events: list[EventRecord] = Field(default_factory=list)
    services: list[ServiceRecord] = Field(default_factory=list)
    pvs: list[PersistentVolumeRecord] = Field(default_factory=list)
    pvcs: list[PersistentVolumeClaimRecord] = Field(default_factory=list)
    deployments: list[DeploymentRecord] = Field(default_factory=list)
    stateful_sets: list[StatefulSetRecord] = Field(default_factory=list)
    daemon_sets: list[DaemonSetRecord] = Field(default_factory=list)
    jobs: list[JobRecord] = Field(default_factory=list)
    cron_jobs: list[CronJobRecord] = Field(default_factory=list)
    summary: ClusterSummary = Field(default_factory=ClusterSummary)

    volcano_jobs: list[VolcanoJobRecord] = Field(default_factory=list)
    hyper_nodes: list[HyperNodeRecord] = Field(default_factory=list)
    queues: list[QueueRecord] = Field(default_factory=list)
    volcano_summary: VolcanoSummary | None = None
