"""Tests for the cached kubelet access guard."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from kubemonitor.controllers.aggregation.access_guard import KubeletAccessGuard
from kubemonitor.models.state.kubelet_access import KubeletAccessStatus


class FakeMonotonic:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeMonotonic:
    return FakeMonotonic()


def _client(result) -> MagicMock:
    client = MagicMock()
    if isinstance(result, BaseException):
        client.check_metrics_access = AsyncMock(side_effect=result)
    else:
        client.check_metrics_access = AsyncMock(return_value=result)
    return client


class TestKubeletAccessGuard:
    """Tests for KubeletAccessGuard class."""

    @pytest.mark.asyncio
    async def test_allowed(self, clock: FakeMonotonic) -> None:
        guard = KubeletAccessGuard(
            _client(KubeletAccessStatus(proxy_allowed=True)), monotonic=clock
        )

        assert await guard.should_skip() == (False, "")

    @pytest.mark.asyncio
    async def test_denied_reason_includes_hint(self, clock: FakeMonotonic) -> None:
        status = KubeletAccessStatus(proxy_allowed=False, proxy_message="RBAC: denied")
        guard = KubeletAccessGuard(_client(status), monotonic=clock)

        skip, reason = await guard.should_skip()

        assert skip is True
        assert reason == status.message()
        assert reason.startswith("RBAC: denied")

    @pytest.mark.asyncio
    async def test_result_cached_within_ttl(self, clock: FakeMonotonic) -> None:
        """Test a second call inside the TTL does not re-review."""
        client = _client(KubeletAccessStatus(proxy_allowed=False, proxy_message="no"))
        guard = KubeletAccessGuard(client, ttl=60.0, monotonic=clock)

        await guard.should_skip()
        clock.now += 59.0
        await guard.should_skip()

        assert client.check_metrics_access.await_count == 1

    @pytest.mark.asyncio
    async def test_rechecks_after_ttl(self, clock: FakeMonotonic) -> None:
        client = _client(KubeletAccessStatus(proxy_allowed=True))
        guard = KubeletAccessGuard(client, ttl=60.0, monotonic=clock)

        await guard.should_skip()
        clock.now += 60.0
        await guard.should_skip()

        assert client.check_metrics_access.await_count == 2

    @pytest.mark.asyncio
    async def test_review_failure_fails_closed(self, clock: FakeMonotonic) -> None:
        guard = KubeletAccessGuard(
            _client(RuntimeError("connection refused")), monotonic=clock
        )

        skip, reason = await guard.should_skip()

        assert skip is True
        assert reason.startswith("Access review failed: connection refused")
        assert guard.status is not None
        assert guard.status.proxy_allowed is False

    @pytest.mark.asyncio
    async def test_review_timeout_fails_closed(self, clock: FakeMonotonic) -> None:
        async def _slow() -> KubeletAccessStatus:
            await asyncio.sleep(10)
            return KubeletAccessStatus(proxy_allowed=True)

        client = MagicMock()
        client.check_metrics_access = _slow
        guard = KubeletAccessGuard(client, check_timeout=0.01, monotonic=clock)

        skip, reason = await guard.should_skip()

        assert skip is True
        assert reason.startswith("Access review failed: TimeoutError")

    @pytest.mark.asyncio
    async def test_invalidate_forces_review(self, clock: FakeMonotonic) -> None:
        client = _client(KubeletAccessStatus(proxy_allowed=True))
        guard = KubeletAccessGuard(client, monotonic=clock)

        await guard.should_skip()
        guard.invalidate()
        await guard.should_skip()

        assert client.check_metrics_access.await_count == 2
