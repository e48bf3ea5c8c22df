"""Base controller package."""

from kubemonitor.controllers.base.base_controller import BaseController

__all__ = ["BaseController"]
