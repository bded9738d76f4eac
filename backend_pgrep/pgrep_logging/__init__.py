"""
Structured logging for Backend pgrep.

JSON logs with timestamp, steam_id, event_type.
"""

from backend_pgrep.pgrep_logging.logger import bind_player, get_logger

__all__ = ["bind_player", "get_logger"]
