"""Persistent volume and claim parser for the resource client."""

from __future__ import annotations

from typing import Any

from kubemonitor.models.core.storage_info import (
    PersistentVolumeClaimRecord,
    PersistentVolumeRecord,
)
from kubemonitor.utils.resource_parser import memory_to_bytes, parse_timestamp

# Spec keys that are attributes rather than volume sources
_PV_SPEC_ATTRIBUTES = frozenset(
    {
        "accessModes",
        "capacity",
        "claimRef",
        "mountOptions",
        "nodeAffinity",
        "persistentVolumeReclaimPolicy",
        "storageClassName",
        "volumeMode",
        "volumeAttributesClassName",
    }
)


class StorageParser:
    """Parses PV and PVC data."""

    @staticmethod
    def _volume_type(spec: dict[str, Any]) -> str:
        for key in spec:
            if key not in _PV_SPEC_ATTRIBUTES:
                return key
        return ""

    def parse_pv(self, pv: dict[str, Any]) -> PersistentVolumeRecord:
        """Parse a single persistent volume."""
        metadata = pv.get("metadata", {})
        spec = pv.get("spec", {})
        claim_ref = spec.get("claimRef") or {}
        claim = ""
        if claim_ref.get("name"):
            claim = f"{claim_ref.get('namespace', '')}/{claim_ref['name']}"

        return PersistentVolumeRecord(
            name=metadata.get("name", ""),
            capacity=memory_to_bytes((spec.get("capacity") or {}).get("storage", "0")),
            storage_class=spec.get("storageClassName", "") or "",
            access_modes=spec.get("accessModes") or [],
            reclaim_policy=spec.get("persistentVolumeReclaimPolicy", "") or "",
            status=(pv.get("status") or {}).get("phase", "") or "",
            claim=claim,
            volume_mode=spec.get("volumeMode", "") or "",
            volume_type=self._volume_type(spec),
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        )

    def parse_pvc(self, pvc: dict[str, Any]) -> PersistentVolumeClaimRecord:
        """Parse a single persistent volume claim."""
        metadata = pvc.get("metadata", {})
        spec = pvc.get("spec", {})
        status = pvc.get("status") or {}
        requests = (spec.get("resources") or {}).get("requests") or {}

        return PersistentVolumeClaimRecord(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            status=status.get("phase", "") or "",
            volume=spec.get("volumeName", "") or "",
            capacity=memory_to_bytes((status.get("capacity") or {}).get("storage", "0")),
            requested_storage=memory_to_bytes(requests.get("storage", "0")),
            storage_class=spec.get("storageClassName", "") or "",
            access_modes=spec.get("accessModes") or [],
            volume_mode=spec.get("volumeMode", "") or "",
            labels=metadata.get("labels") or {},
            creation_timestamp=parse_timestamp(metadata.get("creationTimestamp")),
        )
