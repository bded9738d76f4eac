"""
Steam Web API client: player summary, CS2 playtime, Steam level and vanity URL lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from backend_pgrep.config.env import STEAM_API_BASE_URL
from backend_pgrep.core.exceptions import ConfigError, ResolveError
from backend_pgrep.upstream.base import UpstreamClient

CS2_APP_ID = 730
VANITY_MATCH = 1


@dataclass(frozen=True)
class SteamPayload:
    profile: dict[str, Any] | None
    cs2: dict[str, Any] | None = None
    steam_level: int | None = None


def _response(data: dict[str, Any] | None) -> dict[str, Any]:
    """The "response" object of a Steam reply; {} when missing or malformed."""
    value = (data or {}).get("response")
    return value if isinstance(value, dict) else {}


def _first_dict(value: Any) -> dict[str, Any] | None:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return None


class SteamClient(UpstreamClient):
    source = "steam"

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str | None,
        base_url: str = STEAM_API_BASE_URL,
    ) -> None:
        if not api_key:
            raise ConfigError("Missing environment variable: STEAM_WEB_API_KEY")
        super().__init__(http, base_url)
        self._api_key = api_key

    async def fetch_profile(self, steam_id: str) -> SteamPayload:
        """
        Summary is required; owned-games (CS2 only) and level are best-effort.
        """
        summary = await self._get_json(
            "/ISteamUser/GetPlayerSummaries/v2/",
            {"key": self._api_key, "steamids": steam_id},
        )
        profile = _first_dict(_response(summary).get("players"))

        games = await self._get_json_optional(
            "/IPlayerService/GetOwnedGames/v1/",
            {
                "key": self._api_key,
                "steamid": steam_id,
                "appids_filter[0]": CS2_APP_ID,
                "include_appinfo": "true",
            },
        )
        cs2 = _first_dict(_response(games).get("games"))

        level_data = await self._get_json_optional(
            "/IPlayerService/GetSteamLevel/v1/",
            {"key": self._api_key, "steamid": steam_id},
        )
        steam_level = _response(level_data).get("player_level")

        return SteamPayload(profile=profile, cs2=cs2, steam_level=steam_level)

    async def resolve_vanity_url(self, vanity: str) -> str:
        """Custom profile name (steamcommunity.com/id/<vanity>) to SteamID64."""
        data = await self._get_json(
            "/ISteamUser/ResolveVanityURL/v1/",
            {"key": self._api_key, "vanityurl": vanity},
        )
        response = _response(data)
        steam_id = response.get("steamid")
        if response.get("success") != VANITY_MATCH or not steam_id:
            raise ResolveError("Steam vanity not found.")
        return str(steam_id)
