"""Aggregation domain: snapshot assembly, summary, alerts and refresh."""

from kubemonitor.controllers.aggregation.access_guard import KubeletAccessGuard
from kubemonitor.controllers.aggregation.aggregator import (
    Aggregator,
    DataSourceError,
    MetricAdapters,
)
from kubemonitor.controllers.aggregation.alerts import (
    AlertEvaluator,
    alert_priority,
    recommended_action,
    sort_alerts,
)
from kubemonitor.controllers.aggregation.refresher import (
    Refresher,
    RefresherAlreadyRunningError,
    RefresherNotRunningError,
    RefresherStateError,
)
from kubemonitor.controllers.aggregation.summary_builder import SummaryBuilder

__all__ = [
    "AlertEvaluator",
    "Aggregator",
    "DataSourceError",
    "KubeletAccessGuard",
    "MetricAdapters",
    "Refresher",
    "RefresherAlreadyRunningError",
    "RefresherNotRunningError",
    "RefresherStateError",
    "SummaryBuilder",
    "alert_priority",
    "recommended_action",
    "sort_alerts",
]
