"""
Application-level exceptions.

The reputation scorer never raises; these cover configuration, upstream
fetches and the moderation workflow. API routes map them to HTTP status codes.
"""

from __future__ import annotations


class PgrepError(Exception):
    """Base class for all backend_pgrep errors."""


class ConfigError(PgrepError):
    """A required setting (API key, URL) is missing or invalid."""


class UpstreamError(PgrepError):
    """An upstream provider (steam, faceit, leetify) returned an error or bad payload."""

    def __init__(self, source: str, status_code: int | None = None, detail: str = "") -> None:
        self.source = source
        self.status_code = status_code
        self.detail = detail
        msg = f"{source} fetch failed"
        if status_code is not None:
            msg += f" ({status_code})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ReportError(PgrepError):
    """Base class for moderation report errors."""


class ReportValidationError(ReportError):
    """Report payload failed validation (cheat type, date, demo URL, status)."""


class ReportConflictError(ReportError):
    """Target player already has an approved report (overwatch banned)."""


class ReportNotFoundError(ReportError):
    """No report with the requested id."""


class ResolveError(PgrepError):
    """A search query could not be turned into a SteamID64."""
