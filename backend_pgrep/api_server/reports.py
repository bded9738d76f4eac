"""
FastAPI router: overwatch reports, admin review, auto-flag list, notifications.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from backend_pgrep.api_server import db_moderation
from backend_pgrep.api_server.deps import require_admin, require_viewer
from backend_pgrep.core.exceptions import (
    ReportConflictError,
    ReportNotFoundError,
    ReportValidationError,
)
from backend_pgrep.pgrep_logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["moderation"])


class ReportRequest(BaseModel):
    """POST /reports body. Fields are validated by the store so errors map to 400."""

    model_config = ConfigDict(populate_by_name=True)

    target_steam_id: str | None = Field(None, alias="targetSteamId")
    target_name: str | None = Field(None, alias="targetName", max_length=256)
    occurred_at: str | None = Field(None, alias="occurredAt")
    demo_url: str | None = Field(None, alias="demoUrl", max_length=1024)
    cheat_type: str | None = Field(None, alias="cheatType")


class ReportStatusRequest(BaseModel):
    id: int | None = None
    status: str | None = None


@router.post("/reports")
def submit_report(
    body: ReportRequest,
    request: Request,
    viewer: str = Depends(require_viewer),
) -> dict[str, Any]:
    try:
        report_id = db_moderation.add_report(
            target_steam_id=body.target_steam_id or "",
            reporter_steam_id=viewer,
            demo_url=body.demo_url or "",
            cheat_type=body.cheat_type or "",
            occurred_at=body.occurred_at or "",
            target_persona_name=body.target_name,
            reporter_persona_name=request.headers.get("x-persona-name"),
        )
    except ReportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ReportConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {"ok": True, "id": report_id}


@router.get("/reports")
def get_reports(status: str | None = None) -> list[dict[str, Any]]:
    return db_moderation.list_reports(status=status)


@router.post("/admin/reports/status")
def update_report_status(
    body: ReportStatusRequest,
    admin: str = Depends(require_admin),
) -> dict[str, Any]:
    if not body.id or not body.status:
        raise HTTPException(status_code=400, detail="Invalid payload.")
    try:
        db_moderation.resolve_report(body.id, body.status, resolved_by=admin)
    except ReportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return {"ok": True}


@router.get("/ai-flags")
def get_auto_flags() -> dict[str, Any]:
    """Profiles auto-flagged for a trust rating below the threshold."""
    profiles = db_moderation.list_auto_flagged()
    return {"total": len(profiles), "profiles": profiles}


@router.get("/notifications")
def get_notifications(viewer: str = Depends(require_viewer)) -> list[dict[str, Any]]:
    return db_moderation.list_notifications(viewer)
