"""
FastAPI router: GET /reputation/{steam_id} and GET /resolve (search box).

Fetches Steam, FACEIT and Leetify concurrently, scores the player and stores
the rating (NULL when there was no analytics data) for the auto-flag list.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from backend_pgrep.api_server import db_moderation
from backend_pgrep.api_server.deps import rate_limited
from backend_pgrep.core.exceptions import ConfigError, ResolveError, UpstreamError
from backend_pgrep.pgrep_logging import get_logger
from backend_pgrep.upstream.aggregator import build_reputation
from backend_pgrep.upstream.resolver import resolve_player

logger = get_logger(__name__)

router = APIRouter(tags=["reputation"])


@router.get("/reputation/{steam_id}", dependencies=[Depends(rate_limited("reputation"))])
async def get_reputation(steam_id: str) -> dict[str, Any]:
    """
    Reputation view for one player. score is null with label
    "Insufficient Data" when no analytics source returned data.
    """
    steam_id = steam_id.strip()
    if not steam_id.isdigit():
        raise HTTPException(status_code=400, detail="steam_id must be a SteamID64")

    report = await build_reputation(steam_id)
    body = report.to_dict()

    if report.has_steam_profile:
        try:
            profile = await run_in_threadpool(
                db_moderation.upsert_profile,
                steam_id,
                report.persona_name,
                report.avatar_url,
                report.assessment.score,
            )
            body["auto_flagged_at"] = profile.get("auto_flagged_at")
        except Exception as e:
            logger.exception("reputation_persist_failed", steam_id=steam_id, error=str(e))
            raise HTTPException(status_code=500, detail="Failed to store profile") from e

    body["overwatch_banned"] = await run_in_threadpool(db_moderation.is_overwatch_banned, steam_id)
    return body


@router.get("/resolve", dependencies=[Depends(rate_limited("resolve"))])
async def resolve(query: str = "") -> dict[str, Any]:
    """SteamID64, Steam profile URL, vanity name or FACEIT player URL to a SteamID64."""
    try:
        player = await resolve_player(query)
    except (ResolveError, UpstreamError, ConfigError) as e:
        logger.info("resolve_failed", query=query[:200], error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {"ok": True, **player.to_dict()}
