"""CLI entrypoint for the monitor."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from kubemonitor import __version__
from kubemonitor.app import MonitorApp, MonitorDashboard
from kubemonitor.controllers.aggregation import DataSourceError
from kubemonitor.logging_setup import configure_logging
from kubemonitor.models.snapshot import ClusterSnapshot
from kubemonitor.models.state import AppSettings, ConfigError, ConfigManager

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kubemonitor",
        description="Read-only Kubernetes cluster monitoring console.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--kubeconfig", type=Path, default=None, help="Path to kubeconfig")
    parser.add_argument("--context", default=None, help="Kubernetes context to use")
    parser.add_argument(
        "--namespace",
        "-n",
        default=None,
        help="Namespace filter (default: all namespaces)",
    )
    parser.add_argument(
        "--refresh-interval", type=float, default=None, help="Seconds between refreshes"
    )
    parser.add_argument(
        "--max-concurrent", type=int, default=None, help="Concurrent kubelet summary calls"
    )
    parser.add_argument(
        "--cache-ttl", type=float, default=None, help="Snapshot cache TTL in seconds"
    )
    parser.add_argument(
        "--npu-exporter-endpoint",
        default=None,
        help="Direct accelerator exporter URL (default: API server service proxy)",
    )
    parser.add_argument(
        "--insecure-kubelet",
        action="store_true",
        default=None,
        help="Skip TLS verification for kubelet summary calls",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warn", "warning", "error"],
        default=None,
        help="Log level",
    )
    parser.add_argument("--log-file", default=None, help="Rotating log file path")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        help="Aggregate once, print the summary and alerts, and exit",
    )
    mode.add_argument(
        "--watch",
        action="store_true",
        help="Print the summary and alerts every refresh interval without the dashboard",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> AppSettings:
    """Merge YAML, environment and CLI flags into settings."""
    return ConfigManager.load(
        args.config,
        kubeconfig=args.kubeconfig,
        context=args.context,
        namespace=args.namespace,
        refresh_interval=args.refresh_interval,
        max_concurrent=args.max_concurrent,
        cache_ttl=args.cache_ttl,
        npu_exporter_endpoint=args.npu_exporter_endpoint,
        insecure_kubelet=args.insecure_kubelet,
        log_level=args.log_level,
        log_file=args.log_file,
    )


def print_snapshot(snapshot: ClusterSnapshot, console: Console) -> None:
    """Render summary counters and alerts as rich tables."""
    summary = snapshot.summary

    overview = Table(title="Cluster summary", show_header=False)
    overview.add_column("Metric", style="bold")
    overview.add_column("Value")
    overview.add_row("Nodes ready", f"{summary.ready_nodes}/{summary.total_nodes}")
    overview.add_row(
        "Pods",
        f"{summary.total_pods} total, {summary.running_pods} running, "
        f"{summary.pending_pods} pending, {summary.failed_pods} failed",
    )
    overview.add_row("CPU requested", f"{summary.cpu_request_utilization:.1f}%")
    overview.add_row("CPU used", f"{summary.cpu_usage_utilization:.1f}%")
    overview.add_row("Memory requested", f"{summary.mem_request_utilization:.1f}%")
    overview.add_row("Memory used", f"{summary.mem_usage_utilization:.1f}%")
    overview.add_row(
        "Services",
        f"{summary.total_services} ({summary.no_endpoint_services} without endpoints)",
    )
    overview.add_row("PVCs bound", f"{summary.bound_pvcs}/{summary.total_pvcs}")
    if summary.npu_capacity:
        overview.add_row(
            "Accelerators",
            f"{summary.npu_allocated}/{summary.npu_allocatable} allocated "
            f"({summary.npu_utilization:.1f}%)",
        )
    if summary.kubelet_error:
        overview.add_row("Metrics", f"[yellow]{summary.kubelet_error}[/yellow]")
    console.print(overview)

    if not summary.alerts:
        console.print("[green]No alerts[/green]")
        return

    alerts = Table(title=f"Alerts ({len(summary.alerts)})")
    alerts.add_column("Severity")
    alerts.add_column("Resource")
    alerts.add_column("Message")
    alerts.add_column("Action", overflow="fold")
    for alert in summary.alerts:
        resource = f"{alert.resource_type}/{alert.resource_name}"
        if alert.namespace:
            resource = f"{alert.namespace}/{resource}"
        alerts.add_row(alert.severity.label, resource, alert.message, alert.recommended_action)
    console.print(alerts)


async def _run_once(settings: AppSettings, console: Console) -> None:
    monitor = MonitorApp(settings)
    try:
        snapshot = await monitor.aggregator.get_cluster_data(settings.namespace)
    finally:
        await monitor.aggregator.close()
    print_snapshot(snapshot, console)


async def _run_watch(settings: AppSettings, console: Console) -> None:
    async with MonitorApp(settings) as monitor:
        while True:
            try:
                snapshot, from_cache = await monitor.get_cluster_data()
            except DataSourceError as e:
                console.print(f"[red]Error:[/red] {e}")
            else:
                console.clear()
                print_snapshot(snapshot, console)
                status = monitor.get_refresher_status()
                if status.last_error:
                    console.print(f"[yellow]Last refresh failed:[/yellow] {status.last_error}")
                elif not from_cache:
                    console.print("[dim]Waiting for first background refresh[/dim]")
            await asyncio.sleep(settings.refresh_interval)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the kubemonitor CLI."""
    args = _parse_args(argv)
    console = Console()
    try:
        settings = load_settings(args)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 2

    configure_logging(settings.log_level, settings.log_file, console=args.once)

    if args.once:
        try:
            asyncio.run(_run_once(settings, console))
        except Exception as e:
            logger.exception("Aggregation failed")
            console.print(f"[red]Error:[/red] {e}")
            return 1
        return 0

    if args.watch:
        try:
            asyncio.run(_run_watch(settings, console))
        except KeyboardInterrupt:
            logger.info("Watch mode interrupted")
        return 0

    MonitorDashboard(MonitorApp(settings)).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
