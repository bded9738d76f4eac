"""
FastAPI router: landing-page counters, visitor heartbeat and the admin activity view.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from backend_pgrep.api_server import db_moderation
from backend_pgrep.api_server.deps import get_viewer_steam_id, require_admin

router = APIRouter(tags=["stats"])

MAX_PATH_LENGTH = 512


class HeartbeatRequest(BaseModel):
    path: str | None = None


@router.get("/home-stats")
def get_home_stats() -> dict[str, int]:
    return db_moderation.home_stats()


@router.post("/track/heartbeat")
def heartbeat(
    request: Request,
    body: HeartbeatRequest | None = None,
    viewer: str | None = Depends(get_viewer_steam_id),
) -> dict[str, bool]:
    """Refresh the viewer's last_seen_at. Anonymous visitors are accepted and not recorded."""
    if not viewer:
        return {"ok": True}
    path = (body.path if body else None) or None
    db_moderation.touch_user(
        viewer,
        persona_name=request.headers.get("x-persona-name"),
        last_path=path[:MAX_PATH_LENGTH] if path else None,
    )
    return {"ok": True}


@router.get("/admin/stats")
def get_admin_stats(admin: str = Depends(require_admin)) -> dict[str, Any]:
    return {
        "active_window_minutes": db_moderation.ACTIVE_WINDOW_SEC // 60,
        "active_users": db_moderation.list_active_users(),
        "indexed_profiles": db_moderation.list_indexed_profiles(),
    }
