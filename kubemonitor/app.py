"""Application shell: wires the data pipeline and hosts the dashboard."""

from __future__ import annotations

import logging
from typing import Any

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Header, Static

from kubemonitor.constants.values import APP_TITLE
from kubemonitor.controllers.aggregation import (
    Aggregator,
    MetricAdapters,
    Refresher,
    RefresherNotRunningError,
)
from kubemonitor.controllers.cluster import ClusterResourceClient, KubectlRunner
from kubemonitor.controllers.cluster.kubectl_runner import format_request_timeout
from kubemonitor.controllers.metrics import (
    KubeletMetricsAdapter,
    NPUExporterAdapter,
    VolcanoAdapter,
)
from kubemonitor.models.cache import SnapshotCache
from kubemonitor.models.snapshot import ClusterSnapshot
from kubemonitor.models.state import AppSettings, RefresherStatus

logger = logging.getLogger(__name__)


class MonitorApp:
    """Owns the runner, adapters, aggregator, cache and refresher.

    Args:
        settings: Validated monitor settings.
        runner: kubectl callable; a ``KubectlRunner`` built from the settings
            when omitted.
    """

    def __init__(self, settings: AppSettings, runner: Any | None = None) -> None:
        self.settings = settings
        request_timeout = format_request_timeout(settings.timeout)
        self.runner = runner or KubectlRunner(
            context=settings.context,
            kubeconfig=str(settings.kubeconfig) if settings.kubeconfig else None,
            request_timeout=request_timeout,
        )
        self.client = ClusterResourceClient(self.runner, request_timeout=request_timeout)
        self.adapters = MetricAdapters(
            kubelet=KubeletMetricsAdapter(self.runner, insecure=settings.insecure_kubelet),
            npu_exporter=NPUExporterAdapter(
                self.runner, endpoint=settings.npu_exporter_endpoint
            ),
            volcano=VolcanoAdapter(self.runner),
        )
        self.aggregator = Aggregator(
            self.client,
            self.adapters,
            extended_lister=self.client,
            max_concurrent=settings.max_concurrent,
        )
        self.cache = SnapshotCache(settings.cache_ttl)
        self.refresher = Refresher(
            self.aggregator,
            self.cache,
            settings.refresh_interval,
            settings.namespace,
        )

    async def start(self) -> None:
        """Check connectivity and start background refresh."""
        if not await self.client.check_connection():
            logger.warning("Cluster API is not reachable yet; refresher will keep trying")
        await self.refresher.start()
        logger.info("Monitor started")

    async def get_cluster_data(self) -> tuple[ClusterSnapshot, bool]:
        """Return the cached snapshot, or aggregate directly on a miss.

        Returns:
            Tuple of (snapshot, served_from_cache).
        """
        cached = self.cache.get()
        if cached is not None:
            return cached, True
        logger.debug("Cache miss, aggregating directly")
        snapshot = await self.aggregator.get_cluster_data(self.refresher.namespace)
        return snapshot, False

    async def wait_for_first_refresh(self) -> None:
        """Wait until the background refresher has tried once."""
        await self.refresher.wait_first_refresh()

    async def force_refresh(self) -> Exception | None:
        """Refresh now; returns the refresh error, if any."""
        return await self.refresher.refresh_now()

    async def get_pod_logs(
        self,
        namespace: str,
        pod_name: str,
        container_name: str = "",
        tail_lines: int | None = None,
    ) -> str:
        lines = tail_lines if tail_lines is not None else self.settings.log_tail_lines
        return await self.aggregator.get_pod_logs(namespace, pod_name, container_name, lines)

    def get_refresher_status(self) -> RefresherStatus:
        return self.refresher.get_status()

    async def shutdown(self) -> None:
        """Stop refreshing and release adapters. Errors are logged."""
        try:
            await self.refresher.stop()
        except RefresherNotRunningError:
            logger.debug("Refresher was not running")
        except Exception:
            logger.exception("Failed to stop refresher")
        await self.aggregator.close()
        logger.info("Monitor stopped")

    async def __aenter__(self) -> MonitorApp:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()


class MonitorDashboard(App[None]):
    """One-screen dashboard reading snapshots from the monitor cache."""

    TITLE = APP_TITLE
    BINDINGS: list[Binding] = [
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit", priority=True),
    ]
    DEFAULT_CSS = """
    #counters {
        height: auto;
        padding: 0 1;
    }
    .counter-panel {
        width: 1fr;
        border: round $primary;
        padding: 0 1;
    }
    #status-line {
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(self, monitor: MonitorApp, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.monitor = monitor
        self._ready = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            with Horizontal(id="counters"):
                yield Static(id="nodes-panel", classes="counter-panel")
                yield Static(id="pods-panel", classes="counter-panel")
                yield Static(id="resources-panel", classes="counter-panel")
            yield Static(id="status-line")
            yield DataTable(id="alerts-table", zebra_stripes=True)
        yield Footer()

    async def on_mount(self) -> None:
        table = self.query_one("#alerts-table", DataTable)
        table.add_columns("Severity", "Type", "Resource", "Message", "Action")
        self.query_one("#status-line", Static).update("Loading cluster data...")
        await self.monitor.start()
        self.set_interval(self.monitor.settings.refresh_interval, self._on_tick)
        self._load_first_snapshot()

    def _on_tick(self) -> None:
        # Until the first refresh lands, a cache miss would aggregate a second time.
        if self._ready:
            self._load_snapshot()

    @work(exclusive=True, group="first-snapshot")
    async def _load_first_snapshot(self) -> None:
        await self.monitor.wait_for_first_refresh()
        self._ready = True
        await self._show_snapshot()

    @work(exclusive=True, group="snapshot")
    async def _load_snapshot(self) -> None:
        await self._show_snapshot()

    async def _show_snapshot(self) -> None:
        try:
            snapshot, from_cache = await self.monitor.get_cluster_data()
        except Exception as exc:
            logger.error("Failed to load cluster data: %s", exc)
            self.query_one("#status-line", Static).update(f"[red]Error:[/red] {exc}")
            return
        self._render_snapshot(snapshot, from_cache)

    def _render_snapshot(self, snapshot: ClusterSnapshot, from_cache: bool) -> None:
        summary = snapshot.summary
        self.query_one("#nodes-panel", Static).update(
            f"[b]Nodes[/b] {summary.ready_nodes}/{summary.total_nodes} ready\n"
            f"CPU {summary.cpu_usage_utilization:.1f}%  "
            f"Mem {summary.mem_usage_utilization:.1f}%"
        )
        self.query_one("#pods-panel", Static).update(
            f"[b]Pods[/b] {summary.running_pods} running, "
            f"{summary.pending_pods} pending, {summary.failed_pods} failed\n"
            f"Restarts: {len(summary.high_restart_pods)} high"
        )
        self.query_one("#resources-panel", Static).update(
            f"[b]Services[/b] {summary.total_services} "
            f"({summary.no_endpoint_services} without endpoints)\n"
            f"PVCs {summary.bound_pvcs}/{summary.total_pvcs} bound"
        )

        status = self.monitor.get_refresher_status()
        source = "cache" if from_cache else "live"
        line = f"Source: {source}  Interval: {status.interval:.0f}s"
        if status.last_update is not None:
            line += f"  Updated: {status.last_update:%H:%M:%S}"
        if status.last_error:
            line += f"  [red]Last error: {status.last_error}[/red]"
        if summary.kubelet_error:
            line += f"  [yellow]Metrics: {summary.kubelet_error}[/yellow]"
        self.query_one("#status-line", Static).update(line)

        table = self.query_one("#alerts-table", DataTable)
        table.clear()
        for alert in summary.alerts:
            resource = alert.resource_name
            if alert.namespace:
                resource = f"{alert.namespace}/{resource}"
            table.add_row(
                alert.severity.label,
                alert.alert_type.value,
                resource,
                alert.message,
                alert.recommended_action,
            )

    async def action_refresh(self) -> None:
        """Force a refresh and redraw."""
        self.notify("Refreshing data...", severity="information")
        error = await self.monitor.force_refresh()
        if error is not None:
            self.notify(f"Refresh failed: {error}", severity="error")
        self._load_snapshot()

    async def on_unmount(self) -> None:
        await self.monitor.shutdown()


__all__ = ["MonitorApp", "MonitorDashboard"]
