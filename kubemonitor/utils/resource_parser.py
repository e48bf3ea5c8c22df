"""Kubernetes quantity and timestamp parsing.

Every resource value the API server reports (``cpu: 250m``,
``memory: 512Mi``, ``huawei.com/Ascend910: "8"``) is a quantity string: a
decimal number followed by an optional binary or SI suffix. The helpers here
turn those into the integer units the records use:

- CPU into millicores
- memory and storage into bytes
- pods and accelerator devices into plain counts
"""

from __future__ import annotations

from contextlib import suppress
from datetime import datetime, timezone
from typing import Any

from kubemonitor.constants.values import NPU_RESOURCE_MARKER, NPU_RESOURCE_VENDOR

# Two-letter binary suffixes must be tried before the one-letter SI ones.
_QUANTITY_SUFFIXES: tuple[tuple[str, float], ...] = (
    ("Ki", 2.0**10),
    ("Mi", 2.0**20),
    ("Gi", 2.0**30),
    ("Ti", 2.0**40),
    ("Pi", 2.0**50),
    ("Ei", 2.0**60),
    ("n", 1e-9),
    ("u", 1e-6),
    ("m", 1e-3),
    ("k", 1e3),
    ("K", 1e3),
    ("M", 1e6),
    ("G", 1e9),
    ("T", 1e12),
    ("P", 1e15),
    ("E", 1e18),
)


def parse_quantity(value: Any) -> float:
    """Parse a quantity into its base unit.

    Args:
        value: Quantity such as ``"100m"``, ``"1.5Gi"``, ``"2"`` or a number.

    Returns:
        The value in base units (cores, bytes, devices); 0.0 when the
        value is missing or malformed.
    """
    if value is None or isinstance(value, bool):
        return float(bool(value))
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return 0.0
    multiplier = 1.0
    for suffix, factor in _QUANTITY_SUFFIXES:
        if text.endswith(suffix):
            text = text[: -len(suffix)]
            multiplier = factor
            break
    try:
        return float(text) * multiplier
    except ValueError:
        return 0.0


def parse_cpu(cpu_str: Any) -> float:
    """CPU quantity in cores ("500000000n" and "500m" are both 0.5)."""
    return parse_quantity(cpu_str)


def cpu_to_millicores(cpu_str: Any) -> int:
    """Parse a CPU quantity into integer millicores ("250m" -> 250, "2" -> 2000)."""
    return int(round(parse_quantity(cpu_str) * 1000))


def memory_to_bytes(memory_str: Any) -> int:
    return int(parse_quantity(memory_str))


def parse_count(value: Any) -> int:
    """Parse a count quantity (pods, accelerator devices) into an int."""
    return int(parse_quantity(value))


def parse_timestamp(timestamp: Any) -> datetime | None:
    """Parse an RFC3339 timestamp into an aware datetime, or None."""
    if not isinstance(timestamp, str) or not timestamp:
        return None
    with suppress(ValueError):
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def is_accelerator_resource(resource_name: str) -> bool:
    """Return True for Ascend accelerator extended resources (huawei.com/*ascend*)."""
    return (
        NPU_RESOURCE_VENDOR in resource_name
        and NPU_RESOURCE_MARKER in resource_name.lower()
    )
