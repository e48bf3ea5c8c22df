"""Container anomaly taxonomy shared by the summary builder and alerts."""

from __future__ import annotations

from typing import Final

from kubemonitor.constants.enums import ContainerAnomaly

CONTAINER_ANOMALIES: Final[dict[str, ContainerAnomaly]] = {
    "OOMKilled": ContainerAnomaly.OOM_KILLED,
    "CrashLoopBackOff": ContainerAnomaly.CRASH_LOOP,
    "ImagePullBackOff": ContainerAnomaly.IMAGE_PULL,
    "ErrImagePull": ContainerAnomaly.IMAGE_PULL,
    "ContainerCreating": ContainerAnomaly.CONTAINER_CREATING,
    "Error": ContainerAnomaly.ERROR,
}

# Highest priority first; a pod is counted under at most one of these.
EXCLUSIVE_ANOMALY_ORDER: Final = (
    ContainerAnomaly.OOM_KILLED,
    ContainerAnomaly.CRASH_LOOP,
    ContainerAnomaly.IMAGE_PULL,
)


def classify_reason(reason: str) -> ContainerAnomaly | None:
    """Return the anomaly class of a container state reason, if any."""
    return CONTAINER_ANOMALIES.get(reason)
