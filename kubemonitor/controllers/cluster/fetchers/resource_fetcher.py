"""Generic resource fetcher - lists Kubernetes objects as raw JSON items."""

from __future__ import annotations

import json
import logging
from typing import Any

from kubemonitor.controllers.cluster.kubectl_runner import KubectlError

logger = logging.getLogger(__name__)


class ResourceFetcher:
    """Fetches raw ``items`` lists with ``kubectl get <resource> -o json``."""

    _CHUNK_SIZE = 500

    def __init__(self, run_kubectl_func: Any) -> None:
        """Initialize with kubectl runner function.

        Args:
            run_kubectl_func: Async function to run kubectl commands
        """
        self._run_kubectl = run_kubectl_func

    def _build_get_args(
        self,
        resource: str,
        *,
        namespace: str | None,
        namespaced: bool,
    ) -> tuple[str, ...]:
        """Build list arguments scoped to one namespace or all namespaces."""
        args: list[str] = ["get", resource]
        if namespaced:
            if namespace:
                args.extend(["-n", namespace])
            else:
                args.append("--all-namespaces")
        args.extend([f"--chunk-size={self._CHUNK_SIZE}", "-o", "json"])
        return tuple(args)

    @staticmethod
    def _decode_items(resource: str, output: str) -> list[dict[str, Any]]:
        """Pull ``items`` out of a kubectl JSON list document."""
        if not output:
            return []
        try:
            data = json.loads(output)
        except json.JSONDecodeError as exc:
            raise KubectlError(f"invalid JSON listing {resource}: {exc}") from exc
        items = data.get("items", []) if isinstance(data, dict) else []
        logger.debug("Fetched %d %s", len(items), resource)
        return items

    async def fetch_items(
        self,
        resource: str,
        *,
        namespace: str | None = None,
        namespaced: bool = True,
    ) -> list[dict[str, Any]]:
        """List one resource type.

        Args:
            resource: Resource name as understood by kubectl (e.g. "pods").
            namespace: Namespace filter; empty or None means all namespaces.
            namespaced: False for cluster-scoped resources (nodes, PVs).

        Returns:
            Raw item dictionaries.

        Raises:
            KubectlError: If kubectl fails or prints something that is not JSON.
        """
        output = await self._run_kubectl(
            self._build_get_args(resource, namespace=namespace, namespaced=namespaced)
        )
        return self._decode_items(resource, output)
