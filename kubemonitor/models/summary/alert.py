"""Alert models."""

from datetime import datetime

from pydantic import BaseModel

from kubemonitor.constants.enums import AlertCategory, AlertSeverity, AlertType


class Alert(BaseModel):
    """One threshold alert produced by an aggregation cycle."""

    severity: AlertSeverity
    category: AlertCategory
    alert_type: AlertType
    resource_type: str
    resource_name: str
    namespace: str = ""
    message: str = ""
    value: str = ""
    threshold: str = ""
    recommended_action: str = ""
    timestamp: datetime | None = None
