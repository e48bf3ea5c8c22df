"""Event models."""

from datetime import datetime

from pydantic import BaseModel


class EventRecord(BaseModel):
    """One cluster event."""

    type: str = "Normal"  # Normal, Warning, Error
    reason: str = ""
    message: str = ""
    count: int = 1
    first_timestamp: datetime | None = None
    last_timestamp: datetime | None = None
    involved_object: str = ""  # e.g. "Pod/mypod"
    involved_namespace: str = ""
    source: str = ""
