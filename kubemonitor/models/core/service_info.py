"""Service models."""

from datetime import datetime

from pydantic import BaseModel, Field


class ServicePort(BaseModel):
    """One exposed service port."""

    name: str = ""
    protocol: str = "TCP"
    port: int = 0
    target_port: str = ""
    node_port: int = 0


class ServiceRecord(BaseModel):
    """One service with its resolved ready-endpoint count."""

    name: str
    namespace: str
    type: str = "ClusterIP"
    cluster_ip: str = ""
    external_ips: list[str] = Field(default_factory=list)
    ports: list[ServicePort] = Field(default_factory=list)
    selector: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None
    load_balancer_ip: str = ""
    ingress: list[str] = Field(default_factory=list)
    endpoint_count: int = 0
