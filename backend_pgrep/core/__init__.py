"""
Core utilities — exceptions and cross-cutting concerns shared by the
reputation scorer, upstream clients and API server.
"""

from backend_pgrep.core.exceptions import (
    ConfigError,
    PgrepError,
    ReportConflictError,
    ReportError,
    ReportNotFoundError,
    ReportValidationError,
    ResolveError,
    UpstreamError,
)

__all__ = [
    "ConfigError",
    "PgrepError",
    "ReportConflictError",
    "ReportError",
    "ReportNotFoundError",
    "ReportValidationError",
    "ResolveError",
    "UpstreamError",
]
