"""Cluster summary models."""

from datetime import datetime

from pydantic import BaseModel, Field

from kubemonitor.models.summary.alert import Alert


class PodRestartInfo(BaseModel):
    """High-restart pod entry of the summary."""

    name: str
    namespace: str
    restart_count: int
    reason: str = ""


class ClusterSummary(BaseModel):
    """Counters, sums and ratios derived from one snapshot's collections.

    CPU values are millicores, memory/storage values are bytes and every
    ``*_utilization`` / ``*_percent`` field is a 0-100 percentage that is
    0.0 whenever its denominator is zero.
    """

    total_nodes: int = 0
    ready_nodes: int = 0
    not_ready_nodes: int = 0

    total_pods: int = 0
    running_pods: int = 0
    pending_pods: int = 0
    failed_pods: int = 0
    unknown_pods: int = 0

    total_events: int = 0
    warning_events: int = 0
    error_events: int = 0

    cpu_capacity: int = 0
    cpu_allocatable: int = 0
    cpu_requested: int = 0
    cpu_limited: int = 0
    cpu_used: int = 0

    memory_capacity: int = 0
    memory_allocatable: int = 0
    memory_requested: int = 0
    memory_limited: int = 0
    memory_used: int = 0

    pod_capacity: int = 0
    pod_allocatable: int = 0

    cpu_request_utilization: float = 0.0
    cpu_limit_utilization: float = 0.0
    cpu_usage_utilization: float = 0.0
    mem_request_utilization: float = 0.0
    mem_limit_utilization: float = 0.0
    mem_usage_utilization: float = 0.0
    pod_utilization: float = 0.0

    total_deployments: int = 0
    total_stateful_sets: int = 0
    total_daemon_sets: int = 0
    total_jobs: int = 0
    total_cron_jobs: int = 0

    total_services: int = 0
    cluster_ip_services: int = 0
    node_port_services: int = 0
    load_balancer_services: int = 0
    no_endpoint_services: int = 0
    total_endpoints: int = 0
    avg_endpoints_per_service: float = 0.0

    total_pvs: int = 0
    bound_pvs: int = 0
    available_pvs: int = 0
    released_pvs: int = 0
    total_pvcs: int = 0
    bound_pvcs: int = 0
    pending_pvcs: int = 0
    total_storage_size: int = 0
    used_storage_size: int = 0
    storage_usage_percent: float = 0.0

    network_rx_bytes: int = 0
    network_tx_bytes: int = 0
    network_rx_rate: int = 0  # bytes/sec
    network_tx_rate: int = 0  # bytes/sec
    network_timestamp: datetime | None = None

    nodes_with_metrics: int = 0
    nodes_without_metrics: int = 0
    kubelet_metrics_available: bool = False
    kubelet_error: str = ""
    kubelet_errors: list[str] = Field(default_factory=list)

    memory_pressure_nodes: int = 0
    disk_pressure_nodes: int = 0
    pid_pressure_nodes: int = 0

    oom_killed_pods: int = 0
    crash_loop_back_off_pods: int = 0
    image_pull_back_off_pods: int = 0
    container_creating_pods: int = 0
    high_restart_pods: list[PodRestartInfo] = Field(default_factory=list)

    npu_capacity: int = 0
    npu_allocatable: int = 0
    npu_allocated: int = 0
    npu_utilization: float = 0.0
    npu_nodes_count: int = 0
    npu_resource_name: str = ""
    npu_chip_type: str = ""

    hyper_cluster_id: str = ""
    hyper_node_count: int = 0
    super_pod_count: int = 0

    last_refresh_time: datetime | None = None

    alerts: list[Alert] = Field(default_factory=list)
