"""Derived summary and alert models."""

from kubemonitor.models.summary.alert import Alert
from kubemonitor.models.summary.cluster_summary import ClusterSummary, PodRestartInfo

__all__ = ["Alert", "ClusterSummary", "PodRestartInfo"]
