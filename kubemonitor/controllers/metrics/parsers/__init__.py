"""Parsers for metric source payloads."""

from kubemonitor.controllers.metrics.parsers.prometheus_parser import (
    ExporterChipMetrics,
    PrometheusChipParser,
)
from kubemonitor.controllers.metrics.parsers.volcano_parser import VolcanoParser

__all__ = ["ExporterChipMetrics", "PrometheusChipParser", "VolcanoParser"]
