"""Scheduler (Volcano) resource models."""

from kubemonitor.models.scheduler.volcano_info import (
    HyperNodeMember,
    HyperNodeRecord,
    QueueRecord,
    VolcanoJobRecord,
    VolcanoSummary,
    VolcanoTaskRecord,
)

__all__ = [
    "HyperNodeMember",
    "HyperNodeRecord",
    "QueueRecord",
    "VolcanoJobRecord",
    "VolcanoSummary",
    "VolcanoTaskRecord",
]
