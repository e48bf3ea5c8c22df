"""Event listing with a single slow-API retry."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from kubemonitor.constants.timeouts import (
    CLUSTER_REQUEST_TIMEOUT,
    EVENT_RETRY_REQUEST_TIMEOUT,
)
from kubemonitor.controllers.cluster.fetchers.resource_fetcher import ResourceFetcher
from kubemonitor.controllers.cluster.kubectl_runner import KubectlTimeoutError

logger = logging.getLogger(__name__)

_TIMEOUT_MARKERS = ("timeout", "timed out", "deadline exceeded")


def is_timeout(error: Exception) -> bool:
    """Return True for process timeouts and API-side deadline errors."""
    if isinstance(error, KubectlTimeoutError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _TIMEOUT_MARKERS)


class EventFetcher(ResourceFetcher):
    """Lists ``events`` objects.

    Event lists on busy clusters are large, so they are paged in smaller
    chunks and a timed-out request is retried once with a longer
    ``--request-timeout``.
    """

    _CHUNK_SIZE = 200

    def _event_args(
        self,
        namespace: str | None,
        types: Sequence[str],
        request_timeout: str,
    ) -> tuple[str, ...]:
        args = list(self._build_get_args("events", namespace=namespace, namespaced=True))
        # The field selector only matches one value per key.
        if len(types) == 1:
            args.append(f"--field-selector=type={types[0]}")
        args.append(f"--request-timeout={request_timeout}")
        return tuple(args)

    async def fetch_events_raw(
        self,
        *,
        namespace: str | None = None,
        types: Sequence[str] = (),
        request_timeout: str | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch raw event items.

        Args:
            namespace: Namespace filter; None means all namespaces.
            types: Event types wanted. A single type is filtered server-side;
                callers still filter when several are given.
            request_timeout: First-attempt request timeout.

        Raises:
            KubectlError: If both attempts fail, the failure is not a
                timeout, or the output is not JSON.
        """
        first = request_timeout or CLUSTER_REQUEST_TIMEOUT
        try:
            output = await self._run_kubectl(self._event_args(namespace, types, first))
        except Exception as exc:
            if not is_timeout(exc) or first == EVENT_RETRY_REQUEST_TIMEOUT:
                raise
            logger.warning(
                "Event list timed out after %s (namespace=%s), retrying with %s",
                first,
                namespace or "all",
                EVENT_RETRY_REQUEST_TIMEOUT,
            )
            output = await self._run_kubectl(
                self._event_args(namespace, types, EVENT_RETRY_REQUEST_TIMEOUT)
            )
        return self._decode_items("events", output)
