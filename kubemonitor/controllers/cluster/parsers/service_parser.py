"""Service parser for the resource client."""

from __future__ import annotations

from typing import Any

from kubemonitor.models.core.service_info import ServicePort, ServiceRecord
from kubemonitor.utils.resource_parser import parse_timestamp


class ServiceParser:
    """Parses service data into ServiceRecord."""

    def parse_service(
        self, service: dict[str, Any], ready_counts: dict[str, int] | None = None
    ) -> ServiceRecord:
        """Parse a single service.

        Args:
            service: Raw service dictionary from API
            ready_counts: Ready endpoint address counts keyed by "namespace/name"

        Returns:
            ServiceRecord with ``endpoint_count`` resolved from ``ready_counts``.
        """
        metadata = service.get("metadata", {})
        spec = service.get("spec", {})
        status = service.get("status", {})
        name = metadata.get("name", "")
        namespace = metadata.get("namespace", "")

        ports = [
            ServicePort(
                name=port.get("name", "") or "",
                protocol=port.get("protocol", "TCP") or "TCP",
                port=int(port.get("port", 0) or 0),
                target_port=str(port.get("targetPort", "") or ""),
                node_port=int(port.get("nodePort", 0) or 0),
            )
            for port in spec.get("ports") or []
        ]

        ingress = [
            entry.get("ip") or entry.get("hostname", "")
            for entry in (status.get("loadBalancer") or {}).get("ingress") or []
        ]

        counts = ready_counts or {}
        return ServiceRecord(
            name=name,
            namespace=namespace,
            type=spec.get("type", "ClusterIP") or "ClusterIP",
            cluster_ip=spec.get("clusterIP", "") or "",
            external_ips=spec.get("externalIPs") or [],
            ports=ports,
            selector=spec.get("selector") or {},
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
            load_balancer_ip=spec.get("loadBalancerIP", "") or "",
            ingress=[value for value in ingress if value],
            endpoint_count=counts.get(f"{namespace}/{name}", 0),
        )
