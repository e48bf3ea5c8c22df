"""Controllers module for the monitor.

This module provides domain-driven controllers for fetching Kubernetes
resources, collecting metrics and aggregating them into cluster snapshots.
"""

from __future__ import annotations

# Base classes
from kubemonitor.controllers.base import BaseController

# Cluster domain
from kubemonitor.controllers.cluster import (
    ClusterResourceClient,
    KubectlError,
    KubectlRunner,
    KubectlTimeoutError,
)

# Metrics domain
from kubemonitor.controllers.metrics import (
    ExporterUnavailableError,
    KubeletMetricsAdapter,
    MetricsUnavailableError,
    NPUExporterAdapter,
    VolcanoAdapter,
)

# Aggregation domain
from kubemonitor.controllers.aggregation import (
    Aggregator,
    DataSourceError,
    MetricAdapters,
    Refresher,
)

__all__ = [
    # Base
    "BaseController",
    # Cluster domain
    "ClusterResourceClient",
    "KubectlError",
    "KubectlRunner",
    "KubectlTimeoutError",
    # Metrics domain
    "ExporterUnavailableError",
    "KubeletMetricsAdapter",
    "MetricsUnavailableError",
    "NPUExporterAdapter",
    "VolcanoAdapter",
    # Aggregation domain
    "Aggregator",
    "DataSourceError",
    "MetricAdapters",
    "Refresher",
]
