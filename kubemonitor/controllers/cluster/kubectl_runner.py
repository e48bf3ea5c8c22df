"""kubectl subprocess runner shared by fetchers and metric adapters."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from collections.abc import Sequence

from kubemonitor.constants.timeouts import KUBECTL_PROCESS_GRACE

logger = logging.getLogger(__name__)


class KubectlError(RuntimeError):
    """kubectl exited with a non-zero status."""


class KubectlTimeoutError(KubectlError):
    """kubectl did not finish within its process-level timeout."""


def format_request_timeout(seconds: float) -> str:
    """Render seconds as a kubectl ``--request-timeout`` value ("5s")."""
    return f"{max(1, int(round(seconds)))}s"


def request_timeout_seconds(request_timeout: str) -> float:
    """Parse a ``--request-timeout`` value ("5s", "500ms", "1m") into seconds."""
    value = request_timeout.strip()
    try:
        if value.endswith("ms"):
            return float(value[:-2]) / 1000
        if value.endswith("s"):
            return float(value[:-1])
        if value.endswith("m"):
            return float(value[:-1]) * 60
        if value.endswith("h"):
            return float(value[:-1]) * 3600
        return float(value)
    except ValueError:
        return 0.0


class KubectlRunner:
    """Runs kubectl commands in a worker thread.

    Every command gets ``--request-timeout`` plus a process-level timeout a few
    seconds longer, so one unresponsive endpoint cannot stall a refresh cycle.
    Instances are callable and can be passed wherever a
    ``run_kubectl_func`` is expected.
    """

    def __init__(
        self,
        *,
        context: str | None = None,
        kubeconfig: str | None = None,
        request_timeout: str = "5s",
        executable: str = "kubectl",
    ) -> None:
        self.context = context
        self.kubeconfig = kubeconfig
        self.request_timeout = request_timeout
        self._executable = executable

    def _build_command(self, args: Sequence[str]) -> list[str]:
        cmd = [self._executable]
        if self.kubeconfig:
            cmd.extend(["--kubeconfig", str(self.kubeconfig)])
        if self.context:
            cmd.extend(["--context", self.context])
        cmd.extend(args)
        if not any(arg.startswith("--request-timeout") for arg in args):
            cmd.append(f"--request-timeout={self.request_timeout}")
        return cmd

    def _process_timeout(self, args: Sequence[str]) -> float:
        request_timeout = self.request_timeout
        for arg in args:
            if arg.startswith("--request-timeout="):
                request_timeout = arg.split("=", 1)[1]
        return request_timeout_seconds(request_timeout) + KUBECTL_PROCESS_GRACE

    def _run_kubectl_sync(
        self,
        args: tuple[str, ...],
        input_text: str | None = None,
    ) -> str:
        """Run a kubectl command synchronously (thread-safe wrapper target)."""
        cmd = self._build_command(args)
        timeout = self._process_timeout(args)
        try:
            result = subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise KubectlTimeoutError(
                f"kubectl {' '.join(args[:2])} timed out after {timeout:.0f}s"
            ) from exc
        except FileNotFoundError as exc:
            raise KubectlError(f"{self._executable} not found on PATH") from exc
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise KubectlError(stderr or "kubectl command failed")
        return result.stdout

    async def run(self, args: Sequence[str], input_text: str | None = None) -> str:
        """Run kubectl with ``args`` and return its stdout.

        Args:
            args: kubectl arguments (without the executable).
            input_text: Optional data written to stdin (for ``-f -``).

        Returns:
            Command stdout.

        Raises:
            KubectlError: On non-zero exit or missing executable.
            KubectlTimeoutError: When the process-level timeout fires.
        """
        logger.debug("kubectl %s", " ".join(args))
        return await asyncio.to_thread(self._run_kubectl_sync, tuple(args), input_text)

    async def __call__(self, args: Sequence[str], input_text: str | None = None) -> str:
        return await self.run(args, input_text)
