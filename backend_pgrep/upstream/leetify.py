"""
Leetify public API client: v3 profile (ranks, ratings, stats).
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_pgrep.config.env import LEETIFY_PUBLIC_BASE_URL
from backend_pgrep.upstream.base import UpstreamClient


class LeetifyClient(UpstreamClient):
    source = "leetify"

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str | None = None,
        base_url: str = LEETIFY_PUBLIC_BASE_URL,
    ) -> None:
        super().__init__(http, base_url)
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
            headers["_leetify_key"] = self._api_key
        return headers

    async def fetch_profile(self, steam_id: str) -> dict[str, Any]:
        """Return the profile object, unwrapping a {"profile": {...}} envelope."""
        payload = await self._get_json("/v3/profile", {"steam64_id": steam_id})
        inner = payload.get("profile")
        return inner if isinstance(inner, dict) else payload
