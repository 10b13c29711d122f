"""Foundation - configuration shared by the serum core and codec."""

from __future__ import annotations

from .config import LoggingSettings, SerumSettings, clear_settings_cache, get_settings

__all__ = ["LoggingSettings", "SerumSettings", "clear_settings_cache", "get_settings"]
