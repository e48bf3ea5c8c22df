"""Application settings models."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kubemonitor.constants.defaults import (
    CACHE_TTL_DEFAULT,
    ENV_PREFIX,
    LOG_FILE_DEFAULT,
    LOG_LEVEL_DEFAULT,
    LOG_TAIL_LINES_DEFAULT,
    MAX_CONCURRENT_DEFAULT,
    REFRESH_INTERVAL_DEFAULT,
    TIMEOUT_DEFAULT,
)

_LOG_LEVELS = ("debug", "info", "warn", "warning", "error")


class AppSettings(BaseSettings):
    """Monitor settings loaded from environment, YAML file and CLI flags."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        extra="ignore",
        populate_by_name=True,
    )

    # Cluster access
    kubeconfig: Path | None = None
    context: str | None = None
    namespace: str = ""  # empty means all namespaces

    # Refresh pipeline
    refresh_interval: float = Field(default=REFRESH_INTERVAL_DEFAULT, gt=0)  # seconds
    timeout: float = Field(default=TIMEOUT_DEFAULT, gt=0)  # per kubectl call
    max_concurrent: int = Field(default=MAX_CONCURRENT_DEFAULT, ge=1)
    cache_ttl: float = Field(default=CACHE_TTL_DEFAULT, gt=0)

    # Metrics sources
    insecure_kubelet: bool = False
    npu_exporter_endpoint: str = ""

    # Shell
    log_tail_lines: int = Field(default=LOG_TAIL_LINES_DEFAULT, ge=1)
    log_level: str = LOG_LEVEL_DEFAULT
    log_file: str = LOG_FILE_DEFAULT

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unsupported log level: {value}")
        return level

    @field_validator("npu_exporter_endpoint")
    @classmethod
    def _strip_endpoint(cls, value: str) -> str:
        return value.strip().rstrip("/")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when settings fail to load."""
