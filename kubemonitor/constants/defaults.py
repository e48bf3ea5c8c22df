"""Default values for settings.

All default values used in AppSettings model and validation fallback values.
"""

from typing import Final

# ============================================================================
# Refresh defaults
# ============================================================================

REFRESH_INTERVAL_DEFAULT: Final = 2.0
TIMEOUT_DEFAULT: Final = 5.0
MAX_CONCURRENT_DEFAULT: Final = 10
CACHE_TTL_DEFAULT: Final = 60.0

# ============================================================================
# Shell defaults
# ============================================================================

LOG_TAIL_LINES_DEFAULT: Final = 200
LOG_LEVEL_DEFAULT: Final = "info"
LOG_FILE_DEFAULT: Final = "/tmp/k8s-monitor.log"
ENV_PREFIX: Final = "K8S_MONITOR_"

__all__ = [
    "CACHE_TTL_DEFAULT",
    "ENV_PREFIX",
    "LOG_FILE_DEFAULT",
    "LOG_LEVEL_DEFAULT",
    "LOG_TAIL_LINES_DEFAULT",
    "MAX_CONCURRENT_DEFAULT",
    "REFRESH_INTERVAL_DEFAULT",
    "TIMEOUT_DEFAULT",
]
