"""Parsers turning raw kubectl JSON into monitor records."""

from kubemonitor.controllers.cluster.parsers.event_parser import EventParser
from kubemonitor.controllers.cluster.parsers.node_parser import NodeParser
from kubemonitor.controllers.cluster.parsers.pod_parser import PodParser
from kubemonitor.controllers.cluster.parsers.service_parser import ServiceParser
from kubemonitor.controllers.cluster.parsers.storage_parser import StorageParser
from kubemonitor.controllers.cluster.parsers.workload_parser import WorkloadParser

__all__ = [
    "EventParser",
    "NodeParser",
    "PodParser",
    "ServiceParser",
    "StorageParser",
    "WorkloadParser",
]
