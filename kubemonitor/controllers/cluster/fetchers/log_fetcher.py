"""Log fetcher - tails container logs."""

from __future__ import annotations

from typing import Any


class LogFetcher:
    """Fetches container logs with ``kubectl logs``."""

    def __init__(self, run_kubectl_func: Any) -> None:
        """Initialize with kubectl runner function.

        Args:
            run_kubectl_func: Async function to run kubectl commands
        """
        self._run_kubectl = run_kubectl_func

    async def fetch_logs(
        self,
        namespace: str,
        pod_name: str,
        container_name: str = "",
        tail_lines: int = 200,
    ) -> str:
        """Return the last ``tail_lines`` lines of a container's log."""
        args: list[str] = ["logs", "-n", namespace, pod_name]
        if container_name:
            args.extend(["-c", container_name])
        if tail_lines > 0:
            args.append(f"--tail={tail_lines}")
        return await self._run_kubectl(tuple(args))
