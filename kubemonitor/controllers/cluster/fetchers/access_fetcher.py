"""Access review fetcher - asks the API server whether kubelet proxy calls are allowed."""

from __future__ import annotations

import json
import logging
from typing import Any

from kubemonitor.controllers.cluster.kubectl_runner import KubectlError

logger = logging.getLogger(__name__)


class AccessReviewFetcher:
    """Runs a SelfSubjectAccessReview for ``get nodes/proxy``."""

    _REVIEW = {
        "apiVersion": "authorization.k8s.io/v1",
        "kind": "SelfSubjectAccessReview",
        "spec": {
            "resourceAttributes": {
                "verb": "get",
                "resource": "nodes",
                "subresource": "proxy",
                "group": "",
            }
        },
    }

    def __init__(self, run_kubectl_func: Any) -> None:
        """Initialize with kubectl runner function.

        Args:
            run_kubectl_func: Async function to run kubectl commands
        """
        self._run_kubectl = run_kubectl_func

    async def fetch_proxy_review_status(self) -> dict[str, Any]:
        """Create the review and return its ``status`` block.

        Raises:
            KubectlError: If the review cannot be created or parsed.
        """
        output = await self._run_kubectl(
            ("create", "-f", "-", "-o", "json"),
            input_text=json.dumps(self._REVIEW),
        )
        try:
            data = json.loads(output)
        except json.JSONDecodeError as exc:
            raise KubectlError(f"invalid access review response: {exc}") from exc
        return data.get("status", {}) if isinstance(data, dict) else {}
