"""Workload controller models."""

from datetime import datetime, timedelta

from pydantic import BaseModel, Field


class DeploymentRecord(BaseModel):
    """Deployment rollout state."""

    name: str
    namespace: str
    replicas: int = 0
    ready_replicas: int = 0
    available_replicas: int = 0
    updated_replicas: int = 0
    strategy: str = ""
    selector: dict[str, str] = Field(default_factory=dict)
    conditions: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None


class StatefulSetRecord(BaseModel):
    """StatefulSet rollout state."""

    name: str
    namespace: str
    replicas: int = 0
    ready_replicas: int = 0
    current_replicas: int = 0
    updated_replicas: int = 0
    selector: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None


class DaemonSetRecord(BaseModel):
    """DaemonSet scheduling state."""

    name: str
    namespace: str
    desired_number_scheduled: int = 0
    current_number_scheduled: int = 0
    number_ready: int = 0
    number_available: int = 0
    selector: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None


class JobRecord(BaseModel):
    """Batch job progress."""

    name: str
    namespace: str
    completions: int = 1
    succeeded: int = 0
    failed: int = 0
    active: int = 0
    start_time: datetime | None = None
    completion_time: datetime | None = None
    duration: timedelta | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None


class CronJobRecord(BaseModel):
    """CronJob schedule state."""

    name: str
    namespace: str
    schedule: str = ""
    suspend: bool = False
    active: int = 0
    last_schedule_time: datetime | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None
