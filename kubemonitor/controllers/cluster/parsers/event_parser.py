"""Event parser for the resource client."""

from __future__ import annotations

from typing import Any

from kubemonitor.models.core.event_info import EventRecord
from kubemonitor.utils.resource_parser import parse_timestamp


class EventParser:
    """Parses event data into EventRecord."""

    def parse_event(self, event: dict[str, Any]) -> EventRecord:
        """Parse a single event.

        ``lastTimestamp`` is empty for events recorded through the
        events.k8s.io API, so ``eventTime`` is used in that case.
        """
        metadata = event.get("metadata", {})
        involved = event.get("involvedObject") or {}
        source = event.get("source") or {}

        last = (
            parse_timestamp(event.get("lastTimestamp"))
            or parse_timestamp(event.get("eventTime"))
            or parse_timestamp(metadata.get("creationTimestamp"))
        )
        first = parse_timestamp(event.get("firstTimestamp")) or last

        return EventRecord(
            type=event.get("type", "Normal") or "Normal",
            reason=event.get("reason", "") or "",
            message=event.get("message", "") or "",
            count=int(event.get("count") or 1),
            first_timestamp=first,
            last_timestamp=last,
            involved_object=f"{involved.get('kind', '')}/{involved.get('name', '')}",
            involved_namespace=involved.get("namespace", "") or "",
            source=source.get("component", "") or "",
        )

    def parse_events(self, items: list[dict[str, Any]]) -> list[EventRecord]:
        """Parse an event list."""
        return [self.parse_event(item) for item in items]
