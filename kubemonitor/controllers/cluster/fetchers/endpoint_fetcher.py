"""Ready endpoint counts for every service from one bulk ``endpoints`` list."""

from __future__ import annotations

from typing import Any

from kubemonitor.controllers.cluster.fetchers.resource_fetcher import ResourceFetcher


def count_ready_addresses(endpoints: dict[str, Any]) -> int:
    """Sum ready addresses over every subset of an Endpoints object.

    ``notReadyAddresses`` are ignored.
    """
    return sum(
        len(subset.get("addresses") or []) for subset in endpoints.get("subsets") or []
    )


class EndpointFetcher(ResourceFetcher):
    """Maps ``namespace/name`` to the number of ready endpoint addresses."""

    async def fetch_ready_counts(self, namespace: str | None = None) -> dict[str, int]:
        items = await self.fetch_items("endpoints", namespace=namespace)
        return {
            "{}/{}".format(
                item.get("metadata", {}).get("namespace", ""),
                item.get("metadata", {}).get("name", ""),
            ): count_ready_addresses(item)
            for item in items
        }
