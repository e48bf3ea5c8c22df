"""Pod parser for the resource client - parses pod data into PodRecord."""

from __future__ import annotations

from typing import Any

from kubemonitor.models.core.pod_info import ContainerState, PodRecord
from kubemonitor.utils.resource_parser import (
    cpu_to_millicores,
    is_accelerator_resource,
    memory_to_bytes,
    parse_count,
    parse_timestamp,
)


class PodParser:
    """Parses pod data into structured formats."""

    @staticmethod
    def _container_state(status: dict[str, Any]) -> ContainerState:
        container = ContainerState(
            name=status.get("name", ""),
            image=status.get("image", ""),
            ready=bool(status.get("ready", False)),
            restart_count=int(status.get("restartCount", 0) or 0),
        )
        state = status.get("state") or {}
        if state.get("running") is not None:
            container.state = "Running"
        elif state.get("waiting") is not None:
            waiting = state["waiting"] or {}
            container.state = "Waiting"
            container.reason = waiting.get("reason", "")
            container.message = waiting.get("message", "")
        elif state.get("terminated") is not None:
            terminated = state["terminated"] or {}
            container.state = "Terminated"
            container.reason = terminated.get("reason", "")
            container.message = terminated.get("message", "")
            container.exit_code = int(terminated.get("exitCode", 0) or 0)
        return container

    @staticmethod
    def _apply_container_resources(
        container: ContainerState, resources: dict[str, Any]
    ) -> None:
        requests = resources.get("requests") or {}
        limits = resources.get("limits") or {}
        container.cpu_request = cpu_to_millicores(requests.get("cpu", "0"))
        container.memory_request = memory_to_bytes(requests.get("memory", "0"))
        container.cpu_limit = cpu_to_millicores(limits.get("cpu", "0"))
        container.memory_limit = memory_to_bytes(limits.get("memory", "0"))

    def parse_pod(self, pod: dict[str, Any]) -> PodRecord:
        """Parse a single pod into PodRecord.

        Pod-level requests and limits are summed over ``spec.containers``;
        restart and ready counts come from the container statuses.

        Args:
            pod: Raw pod dictionary from API

        Returns:
            PodRecord with usage fields zeroed.
        """
        metadata = pod.get("metadata", {})
        spec = pod.get("spec", {})
        status = pod.get("status", {})
        spec_containers = spec.get("containers", [])

        record = PodRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            node=spec.get("nodeName", "") or "",
            phase=status.get("phase", "Unknown") or "Unknown",
            reason=status.get("reason", ""),
            message=status.get("message", ""),
            host_ip=status.get("hostIP", ""),
            pod_ip=status.get("podIP", ""),
            qos_class=status.get("qosClass", ""),
            labels=metadata.get("labels") or {},
            annotations=metadata.get("annotations") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
            start_time=parse_timestamp(status.get("startTime")),
            containers=len(spec_containers),
        )

        specs_by_name = {c.get("name", ""): c for c in spec_containers}
        for container_status in status.get("containerStatuses") or []:
            record.restart_count += int(container_status.get("restartCount", 0) or 0)
            if container_status.get("ready"):
                record.ready_containers += 1
            container = self._container_state(container_status)
            container_spec = specs_by_name.get(container.name)
            if container_spec is not None:
                self._apply_container_resources(
                    container, container_spec.get("resources") or {}
                )
            record.container_states.append(container)

        for container_spec in spec_containers:
            resources = container_spec.get("resources") or {}
            requests = resources.get("requests") or {}
            limits = resources.get("limits") or {}
            record.cpu_request += cpu_to_millicores(requests.get("cpu", "0"))
            record.memory_request += memory_to_bytes(requests.get("memory", "0"))
            record.cpu_limit += cpu_to_millicores(limits.get("cpu", "0"))
            record.memory_limit += memory_to_bytes(limits.get("memory", "0"))
            for resource_name, quantity in requests.items():
                if is_accelerator_resource(resource_name):
                    record.npu_request += parse_count(quantity)
                    if not record.npu_resource_name:
                        record.npu_resource_name = resource_name

        return record

    def parse_pods(self, items: list[dict[str, Any]]) -> list[PodRecord]:
        """Parse a pod list."""
        return [self.parse_pod(item) for item in items]
