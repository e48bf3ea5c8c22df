"""Kubelet proxy access review status."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from kubemonitor.constants.values import (
    DETAIL_SEPARATOR,
    KUBELET_ACCESS_DEFAULT_MESSAGE,
    KUBELET_ACCESS_HINT,
)


@dataclass(frozen=True)
class KubeletAccessStatus:
    """Outcome of a ``get nodes/proxy`` access review."""

    proxy_allowed: bool
    proxy_message: str = ""
    checked_at: datetime | None = None

    def message(self) -> str:
        """Return the user-facing denial text, or "" when access is allowed."""
        if self.proxy_allowed:
            return ""
        detail = self.proxy_message or KUBELET_ACCESS_DEFAULT_MESSAGE
        return f"{detail}{DETAIL_SEPARATOR}{KUBELET_ACCESS_HINT}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "proxy_allowed": self.proxy_allowed,
            "proxy_message": self.proxy_message,
            "checked_at": self.checked_at.isoformat() if self.checked_at else None,
        }
