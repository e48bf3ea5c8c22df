"""Metric source adapters."""

from kubemonitor.controllers.metrics.kubelet_adapter import (
    KubeletMetricsAdapter,
    MetricsUnavailableError,
    NodeMetricsSample,
    PodMetricsSample,
)
from kubemonitor.controllers.metrics.npu_exporter import (
    ExporterUnavailableError,
    NPUExporterAdapter,
)
from kubemonitor.controllers.metrics.volcano_adapter import VolcanoAdapter

__all__ = [
    "ExporterUnavailableError",
    "KubeletMetricsAdapter",
    "MetricsUnavailableError",
    "NPUExporterAdapter",
    "NodeMetricsSample",
    "PodMetricsSample",
    "VolcanoAdapter",
]
