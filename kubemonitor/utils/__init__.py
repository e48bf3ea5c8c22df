"""Utility functions for the monitor."""

from kubemonitor.utils.resource_parser import (
    cpu_to_millicores,
    memory_to_bytes,
    parse_count,
    parse_quantity,
    parse_timestamp,
)

__all__ = [
    # Quantities
    "cpu_to_millicores",
    "memory_to_bytes",
    "parse_count",
    "parse_quantity",
    # Time
    "parse_timestamp",
]
