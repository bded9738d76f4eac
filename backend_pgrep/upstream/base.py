"""
Shared httpx plumbing for upstream provider clients.

Each client gets an httpx.AsyncClient from the caller (one per fan-out
cycle) and raises UpstreamError on transport errors, non-2xx status or a
body that is not a JSON object.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_pgrep.core.exceptions import UpstreamError
from backend_pgrep.pgrep_logging import get_logger

logger = get_logger(__name__)

ERROR_BODY_PREVIEW = 200


class UpstreamClient:
    source = "upstream"

    def __init__(self, http: httpx.AsyncClient, base_url: str) -> None:
        self._http = http
        self._base_url = base_url.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    async def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """GET base_url + path; return the JSON object or raise UpstreamError."""
        url = f"{self._base_url}{path}"
        try:
            resp = await self._http.get(url, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise UpstreamError(self.source, None, str(e)) from e
        logger.debug("upstream_response", source=self.source, path=path, status=resp.status_code)
        if resp.status_code >= 400:
            raise UpstreamError(self.source, resp.status_code, resp.text[:ERROR_BODY_PREVIEW])
        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamError(self.source, resp.status_code, "invalid JSON body") from e
        if not isinstance(data, dict):
            raise UpstreamError(self.source, resp.status_code, "unexpected JSON payload")
        return data

    async def _get_json_optional(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """Best-effort secondary call: log and return None on failure."""
        try:
            return await self._get_json(path, params)
        except UpstreamError as e:
            logger.warning(
                "upstream_optional_fetch_failed",
                source=self.source,
                path=path,
                status=e.status_code,
                error=e.detail,
            )
            return None
