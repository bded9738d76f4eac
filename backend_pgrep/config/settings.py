"""
Application settings resolved from environment variables and .env.

Settings is a frozen snapshot; call get_settings() again after changing the
environment (tests do this through monkeypatch).
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_pgrep.config.env import (
    FACEIT_API_BASE_URL,
    STEAM_API_BASE_URL,
    get_admin_steam_ids,
    get_env,
    get_leetify_base_url,
)


@dataclass(frozen=True)
class Settings:
    steam_api_key: str | None
    faceit_api_key: str | None
    leetify_api_key: str | None
    steam_base_url: str
    faceit_base_url: str
    leetify_base_url: str
    upstream_timeout_sec: float
    admin_steam_ids: frozenset[str]
    rate_limit_max: int
    rate_limit_window_sec: float
    api_host: str
    api_port: int


def _float_env(name: str, default: float) -> float:
    raw = get_env(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = get_env(name)
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def get_settings() -> Settings:
    """Return the current application settings."""
    return Settings(
        steam_api_key=get_env("STEAM_WEB_API_KEY"),
        faceit_api_key=get_env("FACEIT_SERVER_API_KEY"),
        leetify_api_key=get_env("LEETIFY_API_KEY"),
        steam_base_url=(get_env("STEAM_API_BASE_URL", STEAM_API_BASE_URL) or STEAM_API_BASE_URL).rstrip("/"),
        faceit_base_url=(get_env("FACEIT_API_BASE_URL", FACEIT_API_BASE_URL) or FACEIT_API_BASE_URL).rstrip("/"),
        leetify_base_url=get_leetify_base_url(),
        upstream_timeout_sec=_float_env("UPSTREAM_TIMEOUT_SEC", 10.0),
        admin_steam_ids=get_admin_steam_ids(),
        rate_limit_max=_int_env("RATE_LIMIT_MAX", 30),
        rate_limit_window_sec=_float_env("RATE_LIMIT_WINDOW_SEC", 60.0),
        api_host=get_env("API_HOST", "0.0.0.0") or "0.0.0.0",
        api_port=_int_env("API_PORT", 8000),
    )
