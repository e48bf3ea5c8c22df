"""Shared lifecycle for monitor data sources.

The resource client and the metric adapters each expose a cheap
reachability probe and an idempotent ``close``. They can also be used as
``async with`` blocks, which close them on exit.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class BaseController(ABC):
    """A data source the aggregator reads from."""

    @abstractmethod
    async def check_connection(self) -> bool:
        """Return True when the backing endpoint answers."""
        ...

    async def close(self) -> None:
        """Release resources held by the data source."""
        logger.debug("Closing %s", type(self).__name__)

    async def __aenter__(self) -> BaseController:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
