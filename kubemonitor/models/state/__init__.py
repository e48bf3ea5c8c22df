"""Application state models."""

from kubemonitor.models.state.app_settings import (
    AppSettings,
    ConfigError,
    ConfigLoadError,
)
from kubemonitor.models.state.config_manager import ConfigManager
from kubemonitor.models.state.kubelet_access import KubeletAccessStatus
from kubemonitor.models.state.refresher_status import RefresherStatus

__all__ = [
    "AppSettings",
    "ConfigError",
    "ConfigLoadError",
    "ConfigManager",
    "KubeletAccessStatus",
    "RefresherStatus",
]
