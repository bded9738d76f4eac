"""
Structured logging for pgrep: one JSON object per line.

Every event carries event_type, level, an ISO UTC timestamp, the service
name and, when bound, the steam_id being looked up. Upstream errors can echo
request URLs, and Steam takes its API key as a query parameter, so string
values are scrubbed of `key=` / `_leetify_key=` / bearer secrets before
rendering.

LOG_LEVEL sets the threshold (default INFO). LOG_FORMAT=console switches to
structlog's coloured dev renderer for local runs.

Only stdlib logging and structlog are imported here; backend_pgrep modules
import this one first.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import Any

import structlog

SERVICE_NAME = "pgrep"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

_SECRET_RE = re.compile(r"((?:\bkey|_leetify_key)=|Bearer\s+)[^&\s\"']+", re.IGNORECASE)
REDACTED = "***"


def redact(value: str) -> str:
    """Mask API keys in query strings and bearer headers."""
    return _SECRET_RE.sub(lambda m: m.group(1) + REDACTED, value)


def _redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for field, value in event_dict.items():
        if isinstance(value, str):
            event_dict[field] = redact(value)
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Rename structlog's 'event' key to event_type and tag the service."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_structlog() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.format_exc_info,
        _event_type,
        _redact_secrets,
    ]
    if LOG_FORMAT == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("reputation_assessed", steam_id=sid, score=72, label="Review")
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_player(steam_id: str) -> structlog.BoundLogger:
    """Logger with steam_id bound, for one reputation lookup."""
    return get_logger("backend_pgrep").bind(steam_id=steam_id)
