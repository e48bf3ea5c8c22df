"""Limit and threshold constants for the monitor.

All limit values, thresholds, and validation ranges.
"""

from typing import Final

# ============================================================================
# Alert thresholds
# ============================================================================

NODE_CPU_CRITICAL_THRESHOLD: Final = 90.0  # %
NODE_CPU_WARNING_THRESHOLD: Final = 80.0  # %
NODE_MEMORY_CRITICAL_THRESHOLD: Final = 90.0  # %
NODE_MEMORY_WARNING_THRESHOLD: Final = 80.0  # %
PENDING_WARNING_MINUTES: Final = 5
HIGH_RESTART_THRESHOLD: Final = 5

# ============================================================================
# Summary limits
# ============================================================================

TOP_RESTART_PODS_LIMIT: Final = 5
EVENT_FETCH_LIMIT: Final = 100

# ============================================================================
# Controller limits
# ============================================================================

MAX_CONCURRENT_MIN: Final = 1

__all__ = [
    "EVENT_FETCH_LIMIT",
    "HIGH_RESTART_THRESHOLD",
    "MAX_CONCURRENT_MIN",
    "NODE_CPU_CRITICAL_THRESHOLD",
    "NODE_CPU_WARNING_THRESHOLD",
    "NODE_MEMORY_CRITICAL_THRESHOLD",
    "NODE_MEMORY_WARNING_THRESHOLD",
    "PENDING_WARNING_MINUTES",
    "TOP_RESTART_PODS_LIMIT",
]
