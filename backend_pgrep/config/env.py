"""
Environment variable loading and validation for pgrep.

- STEAM_WEB_API_KEY: Steam Web API key (required for Steam fetches)
- FACEIT_SERVER_API_KEY: FACEIT Data API server key (required for FACEIT fetches)
- LEETIFY_API_KEY: optional Leetify public API key
- LEETIFY_BASE_URL: Leetify API base (legacy api.leetify.com is rewritten)
- ADMIN_STEAM_IDS: comma-separated Steam IDs allowed to moderate reports
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_pgrep/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

STEAM_API_BASE_URL = "https://api.steampowered.com"
FACEIT_API_BASE_URL = "https://open.faceit.com/data/v4"
LEETIFY_PUBLIC_BASE_URL = "https://api-public.cs-prod.leetify.com"
LEETIFY_LEGACY_HOST = "api.leetify.com"


def load_pgrep_env() -> None:
    """Load .env from project root. Existing env vars win; safe to call multiple times."""
    load_dotenv(_ENV_PATH, override=False)


def get_env(name: str, fallback: str | None = None) -> str | None:
    """Return stripped env value, or fallback when unset or blank."""
    load_pgrep_env()
    value = (os.getenv(name) or "").strip()
    return value or fallback


def get_leetify_base_url() -> str:
    """
    Return LEETIFY_BASE_URL, defaulting to the public API.
    The retired api.leetify.com host is mapped to the public API.
    """
    raw = get_env("LEETIFY_BASE_URL", LEETIFY_PUBLIC_BASE_URL) or LEETIFY_PUBLIC_BASE_URL
    if LEETIFY_LEGACY_HOST in raw:
        return LEETIFY_PUBLIC_BASE_URL
    return raw.rstrip("/")


def get_admin_steam_ids() -> frozenset[str]:
    """Parse ADMIN_STEAM_IDS (comma-separated) into a set; empty when unset."""
    raw = get_env("ADMIN_STEAM_IDS", "") or ""
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def is_admin_steam_id(steam_id: str | None) -> bool:
    """Return True if steam_id is listed in ADMIN_STEAM_IDS."""
    if not steam_id:
        return False
    return steam_id in get_admin_steam_ids()
