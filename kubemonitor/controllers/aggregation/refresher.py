"""Background refresher that keeps the snapshot cache warm."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from kubemonitor.controllers.aggregation.aggregator import Aggregator
from kubemonitor.models.cache import SnapshotCache
from kubemonitor.models.snapshot import ClusterSnapshot
from kubemonitor.models.state import RefresherStatus
from kubemonitor.models.summary import ClusterSummary

logger = logging.getLogger(__name__)


class RefresherStateError(RuntimeError):
    """Refresher lifecycle call made in the wrong state."""


class RefresherAlreadyRunningError(RefresherStateError):
    def __init__(self) -> None:
        super().__init__("refresher already running")


class RefresherNotRunningError(RefresherStateError):
    def __init__(self) -> None:
        super().__init__("refresher not running")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _rate(current: int, previous: int, elapsed: float) -> int:
    delta = current - previous
    if delta < 0:
        # Counter reset (kubelet or pod restart)
        return 0
    return int(delta / elapsed)


class Refresher:
    """Runs the aggregator on an interval and stores results in the cache.

    Only one refresh runs at a time. A failed refresh records the error and
    leaves the cached snapshot untouched.

    Args:
        aggregator: Source of snapshots.
        cache: Destination cache.
        interval: Seconds between refreshes.
        namespace: Namespace filter passed to the aggregator.
        clock: Wall clock used for status and rate fallbacks.
    """

    def __init__(
        self,
        aggregator: Aggregator,
        cache: SnapshotCache,
        interval: float,
        namespace: str = "",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._aggregator = aggregator
        self._cache = cache
        self._interval = interval
        self._namespace = namespace
        self._clock = clock

        self._running = False
        self._task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._refresh_lock = asyncio.Lock()
        self._first_attempt = asyncio.Event()

        self._last_update: datetime | None = None
        self._last_error: str | None = None
        self._previous_summary: ClusterSummary | None = None
        self._previous_sample_time: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def namespace(self) -> str:
        return self._namespace

    async def start(self) -> None:
        """Start the background loop.

        Raises:
            RefresherAlreadyRunningError: If already started.
        """
        if self._running:
            raise RefresherAlreadyRunningError()
        self._running = True
        self._stop_event = asyncio.Event()
        self._first_attempt = asyncio.Event()
        self._task = asyncio.create_task(self._run(), name="kubemonitor-refresher")
        logger.info("Refresher started (interval=%.1fs)", self._interval)

    async def stop(self) -> None:
        """Stop the loop and wait for an in-flight refresh to finish.

        Raises:
            RefresherNotRunningError: If not started.
        """
        if not self._running:
            raise RefresherNotRunningError()
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
        self._running = False
        self._first_attempt.set()
        logger.info("Refresher stopped")

    async def refresh_now(self) -> Exception | None:
        """Run one refresh immediately.

        Returns:
            The refresh error, or None on success.

        Raises:
            RefresherNotRunningError: If not started.
        """
        if not self._running:
            raise RefresherNotRunningError()
        return await self._refresh()

    async def wait_first_refresh(self) -> None:
        """Block until the loop's first refresh attempt has finished.

        Returns as soon as the attempt ends, whether it succeeded or failed,
        and immediately once the refresher has been stopped.

        Raises:
            RefresherNotRunningError: If never started.
        """
        if not self._running and not self._first_attempt.is_set():
            raise RefresherNotRunningError()
        await self._first_attempt.wait()

    async def _run(self) -> None:
        try:
            await self._refresh()
        finally:
            self._first_attempt.set()
        while not self._stop_event.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
            if self._stop_event.is_set():
                break
            await self._refresh()

    async def _refresh(self) -> Exception | None:
        async with self._refresh_lock:
            try:
                snapshot = await self._aggregator.get_cluster_data(self._namespace)
            except Exception as exc:
                self._last_error = str(exc)
                logger.error("Refresh failed: %s", exc)
                return exc

            self._compute_network_rates(snapshot)
            await self._cache.set(snapshot)

            self._last_error = None
            self._last_update = self._clock()
            summary = snapshot.summary
            self._previous_summary = summary.model_copy()
            self._previous_sample_time = summary.network_timestamp or self._last_update
            logger.debug(
                "Refresh completed: %d nodes, %d pods",
                summary.total_nodes,
                summary.total_pods,
            )
            return None

    def _compute_network_rates(self, snapshot: ClusterSnapshot) -> None:
        summary = snapshot.summary
        previous = self._previous_summary
        if previous is None or self._previous_sample_time is None:
            return
        if summary.network_rx_bytes == 0 and summary.network_tx_bytes == 0:
            return

        current_time = summary.network_timestamp or self._clock()
        elapsed = (current_time - self._previous_sample_time).total_seconds()
        if elapsed <= 0:
            return

        summary.network_rx_rate = _rate(
            summary.network_rx_bytes, previous.network_rx_bytes, elapsed
        )
        summary.network_tx_rate = _rate(
            summary.network_tx_bytes, previous.network_tx_bytes, elapsed
        )

    def get_status(self) -> RefresherStatus:
        """Return a copy of the refresher state."""
        return RefresherStatus(
            running=self._running,
            last_update=self._last_update,
            last_error=self._last_error,
            interval=self._interval,
        )

    def set_interval(self, interval: float) -> None:
        """Change the interval; applies from the next wait."""
        self._interval = interval
        logger.info("Refresh interval updated to %.1fs", interval)

    async def set_namespace(self, namespace: str) -> None:
        """Change the namespace filter, refreshing at once when running."""
        self._namespace = namespace
        logger.info("Namespace filter set to %s", namespace or "all")
        if self._running:
            await self._refresh()
