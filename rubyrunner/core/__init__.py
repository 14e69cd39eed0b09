"""Ambient configuration and logging for the runner."""

from rubyrunner.core.config import Settings, get_settings
from rubyrunner.core.logging import configure_structlog

__all__ = ["Settings", "get_settings", "configure_structlog"]
