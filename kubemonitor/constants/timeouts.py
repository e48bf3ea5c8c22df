"""Timeout constants for the monitor.

All timeout and interval values for kubectl requests, metric adapters and
refresh cycles.
"""

from typing import Final

# ============================================================================
# API/Cluster timeouts (string format for kubectl)
# ============================================================================

CLUSTER_REQUEST_TIMEOUT: Final = "5s"
KUBELET_REQUEST_TIMEOUT: Final = "3s"
EVENT_RETRY_REQUEST_TIMEOUT: Final = "15s"

# Process-level command timeout added on top of the request timeout
KUBECTL_PROCESS_GRACE: Final = 5

# ============================================================================
# Async operation timeouts (float, in seconds)
# ============================================================================

KUBELET_ACCESS_CHECK_TIMEOUT: Final = 5.0
KUBELET_ACCESS_CACHE_TTL: Final = 60.0
NPU_EXPORTER_TIMEOUT: Final = 5.0
NPU_EXPORTER_RETRY_COOLDOWN: Final = 30.0
VOLCANO_PROBE_TIMEOUT: Final = 5.0

__all__ = [
    "CLUSTER_REQUEST_TIMEOUT",
    "EVENT_RETRY_REQUEST_TIMEOUT",
    "KUBECTL_PROCESS_GRACE",
    "KUBELET_ACCESS_CACHE_TTL",
    "KUBELET_ACCESS_CHECK_TIMEOUT",
    "KUBELET_REQUEST_TIMEOUT",
    "NPU_EXPORTER_RETRY_COOLDOWN",
    "NPU_EXPORTER_TIMEOUT",
    "VOLCANO_PROBE_TIMEOUT",
]
