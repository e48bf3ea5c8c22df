"""Cached kubelet proxy access check."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from kubemonitor.constants.timeouts import (
    KUBELET_ACCESS_CACHE_TTL,
    KUBELET_ACCESS_CHECK_TIMEOUT,
)
from kubemonitor.controllers.cluster.protocols import ResourceLister
from kubemonitor.models.state.kubelet_access import KubeletAccessStatus

logger = logging.getLogger(__name__)


class KubeletAccessGuard:
    """Decides whether kubelet metrics calls should be attempted this cycle.

    The access review result is cached for ``ttl`` seconds. A review that
    cannot be performed at all is cached as a denial, so a cluster that
    rejects access reviews is not hammered with kubelet calls that would
    fail with 401/403.
    """

    def __init__(
        self,
        resource_client: ResourceLister,
        *,
        ttl: float = KUBELET_ACCESS_CACHE_TTL,
        check_timeout: float = KUBELET_ACCESS_CHECK_TIMEOUT,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = resource_client
        self.ttl = ttl
        self.check_timeout = check_timeout
        self._monotonic = monotonic
        self._status: KubeletAccessStatus | None = None
        self._checked_at: float | None = None

    @property
    def status(self) -> KubeletAccessStatus | None:
        return self._status

    def _is_fresh(self) -> bool:
        return (
            self._checked_at is not None
            and self._monotonic() - self._checked_at < self.ttl
        )

    async def _review(self) -> KubeletAccessStatus:
        try:
            return await asyncio.wait_for(
                self._client.check_metrics_access(), timeout=self.check_timeout
            )
        except Exception as exc:
            detail = str(exc) or type(exc).__name__
            logger.warning("Kubelet access review failed, treating as no access: %s", detail)
            return KubeletAccessStatus(
                proxy_allowed=False,
                proxy_message=f"Access review failed: {detail}",
                checked_at=datetime.now(timezone.utc),
            )

    async def should_skip(self) -> tuple[bool, str]:
        """Return ``(skip, reason)`` for the current cycle."""
        if self._status is None or not self._is_fresh():
            self._status = await self._review()
            self._checked_at = self._monotonic()
        if self._status.proxy_allowed:
            return False, ""
        return True, self._status.message()

    def invalidate(self) -> None:
        """Forget the cached review so the next cycle checks again."""
        self._status = None
        self._checked_at = None
