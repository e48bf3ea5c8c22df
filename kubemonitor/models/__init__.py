"""Data models for the monitor."""

from kubemonitor.models.snapshot import ClusterSnapshot
from kubemonitor.models.summary import Alert, ClusterSummary, PodRestartInfo

__all__ = ["Alert", "ClusterSnapshot", "ClusterSummary", "PodRestartInfo"]
