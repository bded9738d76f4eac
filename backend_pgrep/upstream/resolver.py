"""
Search box resolution: free-form input to a SteamID64.

Accepted forms, tried in order: any 17-digit SteamID64 in the text (covers
/profiles/ and Leetify links), a steamcommunity.com/id/<vanity> URL, a
faceit.com/.../players/<nickname> URL, and finally the bare text treated as
a Steam vanity name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import httpx

from backend_pgrep.config.settings import Settings, get_settings
from backend_pgrep.core.exceptions import ResolveError
from backend_pgrep.pgrep_logging import get_logger
from backend_pgrep.upstream.faceit import FaceitClient
from backend_pgrep.upstream.steam import SteamClient

logger = get_logger(__name__)

STEAM_ID_RE = re.compile(r"\b(\d{17})\b")
VANITY_RE = re.compile(r"steamcommunity\.com/id/([^/?#]+)", re.IGNORECASE)
FACEIT_NICKNAME_RE = re.compile(r"faceit\.com/(?:[^/]+/)?players/([^/?#]+)", re.IGNORECASE)
SCHEME_RE = re.compile(r"https?://", re.IGNORECASE)


@dataclass(frozen=True)
class ResolvedPlayer:
    steam_id: str
    resolved_from: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"steam_id": self.steam_id, "resolved_from": self.resolved_from}


def extract_steam_id(query: str) -> str | None:
    match = STEAM_ID_RE.search(query)
    return match.group(1) if match else None


def extract_vanity(query: str) -> str | None:
    match = VANITY_RE.search(query)
    return match.group(1) if match else None


def extract_faceit_nickname(query: str) -> str | None:
    match = FACEIT_NICKNAME_RE.search(query)
    return match.group(1) if match else None


def fallback_vanity(query: str) -> str | None:
    """Bare input such as "somename" or "somename/": first path segment, scheme stripped."""
    head = SCHEME_RE.sub("", query, count=1).split("/")[0].strip()
    return head or None


async def _resolve_remote(http: httpx.AsyncClient, settings: Settings, query: str) -> ResolvedPlayer:
    vanity = extract_vanity(query)
    if not vanity:
        nickname = extract_faceit_nickname(query)
        if nickname:
            faceit = FaceitClient(http, settings.faceit_api_key, settings.faceit_base_url)
            player = await faceit.find_by_nickname(nickname)
            steam_id = str(player.get("steam_id_64") or "").strip()
            if not steam_id:
                raise ResolveError("FACEIT profile has no Steam64 linked.")
            return ResolvedPlayer(steam_id, nickname)
        vanity = fallback_vanity(query)
    if not vanity:
        raise ResolveError("Unable to resolve.")
    steam = SteamClient(http, settings.steam_api_key, settings.steam_base_url)
    return ResolvedPlayer(await steam.resolve_vanity_url(vanity), vanity)


async def resolve_player(
    query: str,
    settings: Settings | None = None,
    http: httpx.AsyncClient | None = None,
) -> ResolvedPlayer:
    """
    Resolve search input to a SteamID64.

    A SteamID64 in the input is returned without any upstream call. Raises
    ResolveError when nothing matches, UpstreamError / ConfigError when a
    lookup cannot be made.
    """
    query = (query or "").strip()
    if not query:
        raise ResolveError("Missing query.")
    direct = extract_steam_id(query)
    if direct:
        return ResolvedPlayer(direct)

    cfg = settings or get_settings()
    if http is not None:
        resolved = await _resolve_remote(http, cfg, query)
    else:
        async with httpx.AsyncClient(timeout=httpx.Timeout(cfg.upstream_timeout_sec)) as client:
            resolved = await _resolve_remote(client, cfg, query)
    logger.info("player_resolved", steam_id=resolved.steam_id, resolved_from=resolved.resolved_from)
    return resolved
