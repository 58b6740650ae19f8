"""
Core configuration and logging for pkgstate.
"""

from .config import Settings, get_settings
from .logging import configure_logging

__all__ = ["Settings", "get_settings", "configure_logging"]
