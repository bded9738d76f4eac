"""
FastAPI server — reputation lookups and the moderation workflow.

Routes live in reputation.py, reports.py and stats.py; this module wires
them up with the rate limiter, creates the moderation tables on startup and
maps errors to JSON.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from backend_pgrep import __version__
from backend_pgrep.api_server import db_moderation
from backend_pgrep.api_server.rate_limit import RateLimiter
from backend_pgrep.api_server.reports import router as reports_router
from backend_pgrep.api_server.reputation import router as reputation_router
from backend_pgrep.api_server.stats import router as stats_router
from backend_pgrep.config import get_settings
from backend_pgrep.pgrep_logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create moderation tables before serving."""
    db_moderation.init_db()
    logger.info("api_started", version=__version__)
    yield
    logger.info("api_stopped")


def create_app(rate_limiter: RateLimiter | None = None) -> FastAPI:
    """Build the app; a fresh RateLimiter from settings is used when none is given."""
    settings = get_settings()
    app = FastAPI(
        title="Backend pgrep API",
        description="Player reputation (trust score) and community moderation.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.rate_limiter = rate_limiter or RateLimiter(
        max_requests=settings.rate_limit_max,
        window_sec=settings.rate_limit_window_sec,
    )
    app.include_router(reputation_router, prefix="/api")
    app.include_router(reports_router, prefix="/api")
    app.include_router(stats_router, prefix="/api")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness probe: API is up."""
        return {"status": "ok"}

    @app.exception_handler(HTTPException)
    def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Consistent JSON error response for HTTPException."""
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("api_unhandled_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app


app = create_app()

__all__ = ["app", "create_app"]
