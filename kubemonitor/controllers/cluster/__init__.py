"""Cluster resource client package."""

from kubemonitor.controllers.cluster.kubectl_runner import (
    KubectlError,
    KubectlRunner,
    KubectlTimeoutError,
)
from kubemonitor.controllers.cluster.protocols import (
    ExtendedResourceLister,
    ResourceLister,
)
from kubemonitor.controllers.cluster.resource_client import ClusterResourceClient

__all__ = [
    "ClusterResourceClient",
    "ExtendedResourceLister",
    "KubectlError",
    "KubectlRunner",
    "KubectlTimeoutError",
    "ResourceLister",
]
