"""
Configuration management for Backend pgrep.

Loads settings from environment variables and an optional .env file.
"""

from backend_pgrep.config.env import is_admin_steam_id  # noqa: F401
from backend_pgrep.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings", "is_admin_steam_id"]
