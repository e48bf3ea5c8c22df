"""Constants module for the monitor.

Centralized constants organized by domain:
- enums.py: All Enum class definitions
- values.py: Scalar constants (label keys, names, messages with Final)
- timeouts.py: Timeout values (seconds)
- limits.py: Alert thresholds and summary limits
- defaults.py: Default values for settings
"""

from kubemonitor.constants.defaults import (
    CACHE_TTL_DEFAULT,
    MAX_CONCURRENT_DEFAULT,
    REFRESH_INTERVAL_DEFAULT,
    TIMEOUT_DEFAULT,
)
from kubemonitor.constants.enums import (
    AlertCategory,
    AlertSeverity,
    AlertType,
    ContainerAnomaly,
    MetricsFailureKind,
    NodeStatus,
    PodPhase,
)
from kubemonitor.constants.limits import (
    HIGH_RESTART_THRESHOLD,
    TOP_RESTART_PODS_LIMIT,
)
from kubemonitor.constants.values import APP_TITLE

__all__ = [
    "APP_TITLE",
    "CACHE_TTL_DEFAULT",
    "HIGH_RESTART_THRESHOLD",
    "MAX_CONCURRENT_DEFAULT",
    "REFRESH_INTERVAL_DEFAULT",
    "TIMEOUT_DEFAULT",
    "TOP_RESTART_PODS_LIMIT",
    "AlertCategory",
    "AlertSeverity",
    "AlertType",
    "ContainerAnomaly",
    "MetricsFailureKind",
    "NodeStatus",
    "PodPhase",
]
