"""Snapshot cache implementation."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from kubemonitor.models.snapshot import ClusterSnapshot

logger = logging.getLogger(__name__)


class SnapshotCache:
    """Single-slot TTL cache holding the latest complete cluster snapshot.

    Concurrency notes:
    - Read operations (get, is_expired) never await. On a single event loop
      they cannot interleave with a writer, so they see either the previous or
      the new entry, never a partial one.
    - Write operations (set, invalidate) acquire the lock so concurrent
      writers are serialized.
    """

    def __init__(
        self,
        ttl: float,
        *,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._ttl = ttl
        self._monotonic = monotonic
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = asyncio.Lock()
        self._data: ClusterSnapshot | None = None
        self._expires_at = 0.0

    @property
    def ttl(self) -> float:
        """Current time-to-live in seconds."""
        return self._ttl

    def get(self) -> ClusterSnapshot | None:
        """Return the cached snapshot, or None when empty or expired."""
        data = self._data
        if data is None:
            return None
        if self._monotonic() >= self._expires_at:
            logger.debug("Cache expired")
            return None
        return data

    async def set(self, snapshot: ClusterSnapshot) -> None:
        """Store a snapshot and restart its freshness window."""
        async with self._lock:
            snapshot.summary.last_refresh_time = self._clock()
            self._data = snapshot
            self._expires_at = self._monotonic() + self._ttl
            logger.debug("Cache updated, expires in %.1fs", self._ttl)

    async def invalidate(self) -> None:
        """Drop the cached snapshot."""
        async with self._lock:
            self._data = None
            self._expires_at = 0.0
            logger.debug("Cache invalidated")

    def is_expired(self) -> bool:
        """True when there is no snapshot or its freshness window has passed."""
        return self._data is None or self._monotonic() >= self._expires_at

    def set_ttl(self, ttl: float) -> None:
        """Change the TTL applied by subsequent ``set`` calls."""
        self._ttl = ttl
        logger.info("Cache TTL updated to %.1fs", ttl)
