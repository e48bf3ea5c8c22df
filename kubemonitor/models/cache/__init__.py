"""Cache models."""

from kubemonitor.models.cache.snapshot_cache import SnapshotCache

__all__ = ["SnapshotCache"]
