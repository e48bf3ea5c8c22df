"""Node models."""

from datetime import datetime

from pydantic import BaseModel, Field

from kubemonitor.constants.enums import NodeStatus


class NPUChip(BaseModel):
    """Telemetry for one accelerator chip as reported by the exporter."""

    npu_id: int
    chip: int
    phy_id: int
    bus_id: str = ""
    health: str = "OK"
    aicore: int = 0  # AI core utilization %
    vector_util: float = 0.0
    temperature: int = 0  # Celsius
    power: float = 0.0  # Watts
    hbm_used: int = 0  # MB
    hbm_total: int = 0  # MB
    aicore_freq: int = 0  # MHz
    voltage: float = 0.0
    link_status: int = 0
    link_speed: int = 0
    link_up_num: int = 0
    network_status: int = 0
    error_code: int = 0
    hbm_ecc_single_err: int = 0
    hbm_ecc_double_err: int = 0
    roce_tx_pkts: int = 0
    roce_rx_pkts: int = 0
    roce_tx_err_pkts: int = 0
    roce_rx_err_pkts: int = 0
    bandwidth_rx: float = 0.0  # MB/s
    bandwidth_tx: float = 0.0  # MB/s


class NodeRecord(BaseModel):
    """One cluster node with spec data and live usage.

    Usage, percentage and network fields are filled in place during the
    enrichment phase of an aggregation cycle.
    """

    name: str
    internal_ip: str = ""
    external_ip: str = ""
    roles: list[str] = Field(default_factory=list)
    status: str = NodeStatus.UNKNOWN.value
    conditions: dict[str, str] = Field(default_factory=dict)
    taints: list[dict] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None

    # Capacity/allocatable: CPU in millicores, memory in bytes
    cpu_capacity: int = 0
    memory_capacity: int = 0
    pod_capacity: int = 0
    cpu_allocatable: int = 0
    memory_allocatable: int = 0
    pod_allocatable: int = 0

    cpu_usage: int = 0
    memory_usage: int = 0
    pod_count: int = 0

    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    network_timestamp: datetime | None = None

    cpu_usage_percent: float = 0.0
    memory_usage_percent: float = 0.0
    pod_usage_percent: float = 0.0

    memory_pressure: bool = False
    disk_pressure: bool = False
    pid_pressure: bool = False

    has_metrics: bool = False
    metrics_error: str = ""

    # Accelerator capacity and topology
    npu_capacity: int = 0
    npu_allocatable: int = 0
    npu_allocated: int = 0
    npu_resource_name: str = ""
    npu_chip_type: str = ""
    npu_device_type: str = ""
    npu_driver_version: str = ""
    npu_aicore_count: int = 0

    # Accelerator telemetry
    npu_utilization: float = 0.0
    npu_memory_total: int = 0  # bytes
    npu_memory_used: int = 0  # bytes
    npu_memory_util: float = 0.0
    npu_temperature: int = 0
    npu_power: int = 0
    npu_health_status: str = ""
    npu_error_count: int = 0
    npu_metrics_time: datetime | None = None
    npu_chips: list[NPUChip] = Field(default_factory=list)

    hyper_node_id: str = ""
    hyper_cluster_id: str = ""
    super_pod_id: str = ""
    cabinet_info: str = ""

    @property
    def is_ready(self) -> bool:
        """True when the Ready condition reports True."""
        return self.status == NodeStatus.READY.value

    def clear_usage(self) -> None:
        """Zero every live-usage field."""
        self.cpu_usage = 0
        self.memory_usage = 0
        self.network_rx_bytes = 0
        self.network_tx_bytes = 0
        self.network_timestamp = None
        self.cpu_usage_percent = 0.0
        self.memory_usage_percent = 0.0
