"""Refresher status model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class RefresherStatus:
    """Read-only copy of the refresher's state."""

    running: bool
    last_update: datetime | None
    last_error: str | None
    interval: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "running": self.running,
            "last_update": self.last_update.isoformat() if self.last_update else None,
            "last_error": self.last_error,
            "interval": self.interval,
        }
