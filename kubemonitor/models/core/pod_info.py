"""Pod and container models."""

from datetime import datetime

from pydantic import BaseModel, Field


class ContainerState(BaseModel):
    """State and resources of one container in a pod."""

    name: str
    image: str = ""
    ready: bool = False
    restart_count: int = 0
    state: str = ""  # Running, Waiting, Terminated
    reason: str = ""
    message: str = ""
    exit_code: int = 0

    cpu_usage: int = 0  # millicores
    memory_usage: int = 0  # bytes

    cpu_request: int = 0
    cpu_limit: int = 0
    memory_request: int = 0
    memory_limit: int = 0


class PodRecord(BaseModel):
    """One pod with spec totals and live usage."""

    name: str
    namespace: str
    node: str = ""
    phase: str = "Unknown"
    reason: str = ""
    message: str = ""
    host_ip: str = ""
    pod_ip: str = ""
    qos_class: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None
    start_time: datetime | None = None

    containers: int = 0
    ready_containers: int = 0
    restart_count: int = 0
    container_states: list[ContainerState] = Field(default_factory=list)

    cpu_request: int = 0
    cpu_limit: int = 0
    memory_request: int = 0
    memory_limit: int = 0

    npu_request: int = 0
    npu_resource_name: str = ""

    cpu_usage: int = 0
    memory_usage: int = 0
    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    network_timestamp: datetime | None = None

    @property
    def key(self) -> str:
        """Namespace-qualified pod name used to match metrics."""
        return f"{self.namespace}/{self.name}"

    def clear_usage(self) -> None:
        """Zero pod and container live usage."""
        self.cpu_usage = 0
        self.memory_usage = 0
        self.network_rx_bytes = 0
        self.network_tx_bytes = 0
        for container in self.container_states:
            container.cpu_usage = 0
            container.memory_usage = 0
