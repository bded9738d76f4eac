"""
FastAPI dependencies: viewer identity, admin gate, rate limiting.

Viewer identity arrives in the X-Steam-Id header from the session layer in
front of this service; signing and verifying that session is not done here.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request

from backend_pgrep.api_server.rate_limit import RateLimiter
from backend_pgrep.config import is_admin_steam_id

IDENTITY_HEADER = "X-Steam-Id"


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def client_ip(request: Request) -> str:
    """First x-forwarded-for hop, else peer address, else 'local'."""
    forwarded = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "local"


def rate_limited(prefix: str):
    """Dependency factory: 429 once the caller's window for prefix is exhausted."""

    def _check(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
        result = limiter.check(f"{prefix}:{client_ip(request)}")
        if not result.allowed:
            raise HTTPException(status_code=429, detail="Rate limit exceeded.")

    return _check


def get_viewer_steam_id(x_steam_id: str | None = Header(default=None)) -> str | None:
    value = (x_steam_id or "").strip()
    return value or None


def require_viewer(viewer: str | None = Depends(get_viewer_steam_id)) -> str:
    if not viewer:
        raise HTTPException(status_code=401, detail="You must be logged in.")
    return viewer


def require_admin(viewer: str | None = Depends(get_viewer_steam_id)) -> str:
    if not is_admin_steam_id(viewer):
        raise HTTPException(status_code=401, detail="Unauthorized.")
    return viewer
