"""Persistent volume and claim models."""

from datetime import datetime

from pydantic import BaseModel, Field


class PersistentVolumeRecord(BaseModel):
    """One persistent volume."""

    name: str
    capacity: int = 0  # bytes
    storage_class: str = ""
    access_modes: list[str] = Field(default_factory=list)
    reclaim_policy: str = ""
    status: str = ""  # Available, Bound, Released, Failed
    claim: str = ""  # namespace/pvc-name
    volume_mode: str = ""
    volume_type: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None


class PersistentVolumeClaimRecord(BaseModel):
    """One persistent volume claim."""

    name: str
    namespace: str
    status: str = ""  # Pending, Bound, Lost
    volume: str = ""
    capacity: int = 0  # bytes
    requested_storage: int = 0  # bytes
    storage_class: str = ""
    access_modes: list[str] = Field(default_factory=list)
    volume_mode: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None
