"""All enum definitions for the monitor.

This module consolidates all enumerations used throughout the application.
"""

from enum import Enum, IntEnum

# =============================================================================
# Status Enums
# =============================================================================

class NodeStatus(Enum):
    """Node status values derived from the Ready condition."""

    READY = "Ready"
    NOT_READY = "NotReady"
    UNKNOWN = "Unknown"


class PodPhase(Enum):
    """Pod phase values from Kubernetes API."""

    RUNNING = "Running"
    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


class ContainerAnomaly(Enum):
    """Container anomaly classes, ordered from most to least severe."""

    OOM_KILLED = "oom_killed"
    CRASH_LOOP = "crash_loop"
    IMAGE_PULL = "image_pull"
    CONTAINER_CREATING = "container_creating"
    ERROR = "error"


# =============================================================================
# Alert Enums
# =============================================================================

class AlertSeverity(IntEnum):
    """Alert severity; larger values are more urgent."""

    INFO = 0
    WARNING = 1
    CRITICAL = 2

    @property
    def label(self) -> str:
        """Human readable severity name."""
        return self.name.capitalize()


class AlertCategory(Enum):
    """Alert grouping used by the alert list."""

    NODE = "Node"
    RESOURCE = "Resource"
    POD = "Pod"
    SERVICE = "Service"
    STORAGE = "Storage"


class AlertType(Enum):
    """Specific alert kinds; drive recommended actions and priority."""

    NODE_NOT_READY = "node_not_ready"
    NODE_MEMORY_PRESSURE = "node_memory_pressure"
    NODE_DISK_PRESSURE = "node_disk_pressure"
    NODE_PID_PRESSURE = "node_pid_pressure"
    NODE_CPU_CRITICAL = "node_cpu_critical"
    NODE_CPU_HIGH = "node_cpu_high"
    NODE_MEMORY_CRITICAL = "node_memory_critical"
    NODE_MEMORY_HIGH = "node_memory_high"

    POD_OOM_KILLED = "pod_oom_killed"
    POD_CRASH_LOOP = "pod_crash_loop"
    POD_IMAGE_PULL = "pod_image_pull"
    POD_HIGH_RESTARTS = "pod_high_restarts"
    POD_PENDING_LONG = "pod_pending_long"
    POD_FAILED = "pod_failed"

    SERVICE_NO_ENDPOINTS = "service_no_endpoints"

    PVC_PENDING_LONG = "pvc_pending_long"


# =============================================================================
# Metrics Enums
# =============================================================================

class MetricsFailureKind(Enum):
    """Why a kubelet metrics call could not produce data."""

    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    INVALID_RESPONSE = "invalid_response"
    UNAVAILABLE = "unavailable"
