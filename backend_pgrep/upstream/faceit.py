"""
FACEIT Data API v4 client: player lookup by Steam ID or nickname plus CS2 match history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from backend_pgrep.config.env import FACEIT_API_BASE_URL
from backend_pgrep.core.exceptions import ConfigError
from backend_pgrep.upstream.base import UpstreamClient

HISTORY_LIMIT = 50


@dataclass(frozen=True)
class FaceitPayload:
    profile: dict[str, Any]
    match_history: dict[str, Any] | None = None


class FaceitClient(UpstreamClient):
    source = "faceit"

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str | None,
        base_url: str = FACEIT_API_BASE_URL,
    ) -> None:
        if not api_key:
            raise ConfigError("Missing environment variable: FACEIT_SERVER_API_KEY")
        super().__init__(http, base_url)
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def fetch_profile(self, steam_id: str) -> FaceitPayload:
        profile = await self._get_json(
            "/players",
            {"game": "cs2", "game_player_id": steam_id},
        )
        history = None
        player_id = profile.get("player_id")
        if player_id:
            history = await self._get_json_optional(
                f"/players/{player_id}/history",
                {"game": "cs2", "offset": 0, "limit": HISTORY_LIMIT},
            )
        return FaceitPayload(profile=profile, match_history=history)

    async def find_by_nickname(self, nickname: str) -> dict[str, Any]:
        """Player details for a FACEIT nickname; steam_id_64 links it to Steam."""
        return await self._get_json("/players", {"nickname": nickname})
