"""Node parser for the resource client - parses node data into NodeRecord."""

from __future__ import annotations

from contextlib import suppress
from typing import Any

from kubemonitor.constants.enums import NodeStatus
from kubemonitor.constants.values import (
    CABINET_LABEL,
    HYPER_CLUSTER_LABEL,
    HYPER_NODE_LABEL,
    NODE_ROLE_LABEL_PREFIX,
    NODE_ROLE_MASTER,
    NODE_ROLE_WORKER,
    NPU_AICORE_COUNT_LABEL,
    NPU_CHIP_NAME_LABEL,
    NPU_DEVICE_TYPE_LABEL,
    NPU_DRIVER_VERSION_LABEL,
    NPU_ERROR_COUNT_ANNOTATION,
    NPU_HBM_TOTAL_ANNOTATION,
    NPU_HBM_USED_ANNOTATION,
    NPU_HEALTH_ANNOTATION,
    NPU_POWER_ANNOTATION,
    NPU_TEMPERATURE_ANNOTATION,
    NPU_UTILIZATION_ANNOTATION,
    SUPER_POD_LABEL,
)
from kubemonitor.models.core.node_info import NodeRecord
from kubemonitor.utils.resource_parser import (
    cpu_to_millicores,
    is_accelerator_resource,
    memory_to_bytes,
    parse_count,
    parse_timestamp,
)


class NodeParser:
    """Parses node data into structured formats."""

    _MASTER_ROLE_LABELS = (
        f"{NODE_ROLE_LABEL_PREFIX}master",
        f"{NODE_ROLE_LABEL_PREFIX}control-plane",
    )
    _WORKER_ROLE_LABEL = f"{NODE_ROLE_LABEL_PREFIX}worker"
    _PRESSURE_CONDITIONS = {
        "MemoryPressure": "memory_pressure",
        "DiskPressure": "disk_pressure",
        "PIDPressure": "pid_pressure",
    }

    def _extract_roles(self, labels: dict[str, str]) -> list[str]:
        """Derive node roles from node-role labels, defaulting to worker."""
        roles: list[str] = []
        for key in sorted(labels):
            if key in self._MASTER_ROLE_LABELS:
                role = NODE_ROLE_MASTER
            elif key == self._WORKER_ROLE_LABEL:
                role = NODE_ROLE_WORKER
            else:
                continue
            if role not in roles:
                roles.append(role)
        return roles or [NODE_ROLE_WORKER]

    @staticmethod
    def _extract_status(conditions: dict[str, str]) -> str:
        ready = conditions.get("Ready")
        if ready == "True":
            return NodeStatus.READY.value
        if ready == "False":
            return NodeStatus.NOT_READY.value
        return NodeStatus.UNKNOWN.value

    @staticmethod
    def _accelerator_quantity(resources: dict[str, Any]) -> tuple[str, int]:
        for resource_name, quantity in resources.items():
            if is_accelerator_resource(resource_name):
                return resource_name, parse_count(quantity)
        return "", 0

    @staticmethod
    def _int_annotation(annotations: dict[str, str], key: str) -> int | None:
        with suppress(KeyError, ValueError, TypeError):
            return int(annotations[key])
        return None

    def _apply_accelerator_fields(
        self,
        record: NodeRecord,
        capacity: dict[str, Any],
        allocatable: dict[str, Any],
        labels: dict[str, str],
        annotations: dict[str, str],
    ) -> None:
        record.npu_resource_name, record.npu_capacity = self._accelerator_quantity(capacity)
        _, record.npu_allocatable = self._accelerator_quantity(allocatable)

        record.npu_chip_type = labels.get(NPU_CHIP_NAME_LABEL, "")
        record.npu_device_type = labels.get(NPU_DEVICE_TYPE_LABEL, "")
        record.npu_driver_version = labels.get(NPU_DRIVER_VERSION_LABEL, "")
        record.hyper_node_id = labels.get(HYPER_NODE_LABEL, "")
        record.hyper_cluster_id = labels.get(HYPER_CLUSTER_LABEL, "")
        record.super_pod_id = labels.get(SUPER_POD_LABEL, "")
        record.cabinet_info = labels.get(CABINET_LABEL, "")

        aicore = self._int_annotation(labels, NPU_AICORE_COUNT_LABEL)
        if aicore is None:
            aicore = self._int_annotation(annotations, NPU_AICORE_COUNT_LABEL)
        record.npu_aicore_count = aicore or 0

        # Device-plugin annotations (overridden later by exporter telemetry)
        with suppress(KeyError, ValueError, TypeError):
            record.npu_utilization = float(annotations[NPU_UTILIZATION_ANNOTATION])
        if NPU_HBM_TOTAL_ANNOTATION in annotations:
            record.npu_memory_total = memory_to_bytes(annotations[NPU_HBM_TOTAL_ANNOTATION])
        if NPU_HBM_USED_ANNOTATION in annotations:
            record.npu_memory_used = memory_to_bytes(annotations[NPU_HBM_USED_ANNOTATION])
        if record.npu_memory_total > 0:
            record.npu_memory_util = record.npu_memory_used / record.npu_memory_total * 100
        record.npu_temperature = self._int_annotation(annotations, NPU_TEMPERATURE_ANNOTATION) or 0
        record.npu_power = self._int_annotation(annotations, NPU_POWER_ANNOTATION) or 0
        record.npu_error_count = self._int_annotation(annotations, NPU_ERROR_COUNT_ANNOTATION) or 0
        record.npu_health_status = annotations.get(NPU_HEALTH_ANNOTATION, "")
        if record.npu_capacity > 0 and not record.npu_health_status:
            record.npu_health_status = "Healthy"

    def parse_node(self, node: dict[str, Any]) -> NodeRecord:
        """Parse a single node into NodeRecord.

        Args:
            node: Raw node dictionary from API

        Returns:
            NodeRecord with spec fields populated and usage fields zeroed.
        """
        metadata = node.get("metadata", {})
        status = node.get("status", {})
        spec = node.get("spec", {})
        labels = metadata.get("labels") or {}
        annotations = metadata.get("annotations") or {}

        conditions = {
            c["type"]: c["status"]
            for c in status.get("conditions", [])
            if "type" in c and "status" in c
        }

        addresses = {
            addr.get("type"): addr.get("address", "")
            for addr in status.get("addresses", [])
        }

        capacity = status.get("capacity", {})
        allocatable = status.get("allocatable", {})

        record = NodeRecord(
            name=metadata.get("name", "Unknown"),
            internal_ip=addresses.get("InternalIP", ""),
            external_ip=addresses.get("ExternalIP", ""),
            roles=self._extract_roles(labels),
            status=self._extract_status(conditions),
            conditions=conditions,
            taints=spec.get("taints") or [],
            labels=labels,
            annotations=annotations,
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
            cpu_capacity=cpu_to_millicores(capacity.get("cpu", "0")),
            memory_capacity=memory_to_bytes(capacity.get("memory", "0")),
            pod_capacity=parse_count(capacity.get("pods", 0)),
            cpu_allocatable=cpu_to_millicores(allocatable.get("cpu", "0")),
            memory_allocatable=memory_to_bytes(allocatable.get("memory", "0")),
            pod_allocatable=parse_count(allocatable.get("pods", 0)),
        )
        for condition_type, field_name in self._PRESSURE_CONDITIONS.items():
            setattr(record, field_name, conditions.get(condition_type) == "True")

        self._apply_accelerator_fields(record, capacity, allocatable, labels, annotations)
        return record

    def parse_nodes(self, items: list[dict[str, Any]]) -> list[NodeRecord]:
        """Parse a node list."""
        return [self.parse_node(item) for item in items]
