"""
Concurrent fetch of Steam, FACEIT and Leetify followed by scoring.

All three requests are issued together and settled independently: a failed
or timed-out source becomes an absent payload plus an entry in errors and
never blocks the others. The scorer runs once every source has settled.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable

import httpx

from backend_pgrep.config.settings import Settings, get_settings
from backend_pgrep.core.exceptions import PgrepError
from backend_pgrep.pgrep_logging import bind_player
from backend_pgrep.reputation.scorer import TrustAssessment, assess
from backend_pgrep.reputation.signals import PlayerSignal
from backend_pgrep.upstream.faceit import FaceitClient, FaceitPayload
from backend_pgrep.upstream.leetify import LeetifyClient
from backend_pgrep.upstream.signal_builder import build_player_signal
from backend_pgrep.upstream.steam import SteamClient, SteamPayload

SOURCE_STEAM = "steam"
SOURCE_FACEIT = "faceit"
SOURCE_LEETIFY = "leetify"

# Failures mapped to "source absent"; anything else is a bug and propagates
SETTLED_ERRORS = (PgrepError, httpx.HTTPError, asyncio.TimeoutError)


@dataclass
class PlayerSources:
    steam: SteamPayload | None = None
    faceit: FaceitPayload | None = None
    leetify: dict[str, Any] | None = None
    errors: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ReputationReport:
    steam_id: str
    signal: PlayerSignal
    assessment: TrustAssessment
    persona_name: str | None = None
    avatar_url: str | None = None
    has_steam_profile: bool = False
    errors: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "steam_id": self.steam_id,
            "persona_name": self.persona_name,
            "avatar_url": self.avatar_url,
            "signal": self.signal.to_dict(),
            "assessment": self.assessment.to_dict(),
            "errors": dict(self.errors),
        }


async def _fetch_steam(http: httpx.AsyncClient, settings: Settings, steam_id: str) -> SteamPayload:
    client = SteamClient(http, settings.steam_api_key, settings.steam_base_url)
    return await client.fetch_profile(steam_id)


async def _fetch_faceit(http: httpx.AsyncClient, settings: Settings, steam_id: str) -> FaceitPayload:
    client = FaceitClient(http, settings.faceit_api_key, settings.faceit_base_url)
    return await client.fetch_profile(steam_id)


async def _fetch_leetify(http: httpx.AsyncClient, settings: Settings, steam_id: str) -> dict[str, Any]:
    client = LeetifyClient(http, settings.leetify_api_key, settings.leetify_base_url)
    return await client.fetch_profile(steam_id)


async def _gather_sources(
    http: httpx.AsyncClient,
    settings: Settings,
    steam_id: str,
) -> PlayerSources:
    log = bind_player(steam_id)
    timeout = settings.upstream_timeout_sec
    tasks: dict[str, Awaitable[Any]] = {
        SOURCE_STEAM: asyncio.wait_for(_fetch_steam(http, settings, steam_id), timeout),
        SOURCE_FACEIT: asyncio.wait_for(_fetch_faceit(http, settings, steam_id), timeout),
        SOURCE_LEETIFY: asyncio.wait_for(_fetch_leetify(http, settings, steam_id), timeout),
    }
    results = await asyncio.gather(*tasks.values(), return_exceptions=True)

    sources = PlayerSources()
    for source, result in zip(tasks, results):
        if isinstance(result, SETTLED_ERRORS):
            message = str(result) or type(result).__name__
            sources.errors[source] = message
            log.warning("upstream_fetch_failed", source=source, error=message)
            continue
        if isinstance(result, BaseException):
            raise result
        setattr(sources, source, result)
    log.info(
        "upstream_sources_settled",
        fetched=[s for s in tasks if getattr(sources, s) is not None],
        failed=sorted(sources.errors),
    )
    return sources


async def fetch_player_sources(
    steam_id: str,
    settings: Settings | None = None,
    http: httpx.AsyncClient | None = None,
) -> PlayerSources:
    """
    Fetch all three sources concurrently.

    Args:
        steam_id: SteamID64 of the player.
        settings: API keys, base URLs and timeout; read from env if None.
        http: Shared client (tests pass one with a MockTransport); a new one is
            created and closed when None.
    """
    cfg = settings or get_settings()
    if http is not None:
        return await _gather_sources(http, cfg, steam_id)
    async with httpx.AsyncClient(timeout=httpx.Timeout(cfg.upstream_timeout_sec)) as client:
        return await _gather_sources(client, cfg, steam_id)


async def build_reputation(
    steam_id: str,
    now: datetime | None = None,
    settings: Settings | None = None,
    http: httpx.AsyncClient | None = None,
) -> ReputationReport:
    """Fetch, assemble the signal and assess. Partial data still yields a report."""
    sources = await fetch_player_sources(steam_id, settings, http)
    signal = build_player_signal(sources.steam, sources.faceit, sources.leetify)
    assessment = assess(signal, now or datetime.now(timezone.utc))

    profile = (sources.steam.profile if sources.steam else None) or {}
    bind_player(steam_id).info(
        "reputation_assessed",
        score=assessment.score,
        label=assessment.label.value,
        anomaly_count=sum(1 for a in assessment.anomalies if a.penalty_points),
    )
    return ReputationReport(
        steam_id=steam_id,
        signal=signal,
        assessment=assessment,
        persona_name=profile.get("personaname"),
        avatar_url=profile.get("avatarfull"),
        has_steam_profile=bool(profile),
        errors=sources.errors,
    )
