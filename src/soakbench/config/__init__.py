"""
soakbench.config - Logging and settings.

``settings`` is imported explicitly (``from soakbench.config.settings import
load_settings``) because it depends on the option models in soakbench.core.
"""

from __future__ import annotations

from .logging import configure_logging, get_logger, is_configured

__all__ = ["configure_logging", "get_logger", "is_configured"]
