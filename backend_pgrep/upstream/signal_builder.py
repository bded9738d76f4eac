"""
Assemble a PlayerSignal from raw Steam, FACEIT and Leetify payloads.

Field extraction and unit normalization (epoch seconds vs milliseconds, ISO
strings) happen here so the scorer only ever sees clean optional values.
A missing payload leaves its fields None.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from backend_pgrep.reputation.signals import (
    METRIC_ACCURACY_ENEMY_SPOTTED,
    METRIC_ACCURACY_HEAD,
    METRIC_AIM,
    METRIC_CLUTCH,
    METRIC_LEETIFY_RATING,
    METRIC_OPENING,
    METRIC_POSITIONING,
    METRIC_PREAIM,
    METRIC_REACTION_TIME_MS,
    METRIC_UTILITY,
    PlayerSignal,
    clean_number,
)
from backend_pgrep.upstream.faceit import FaceitPayload
from backend_pgrep.upstream.steam import SteamPayload

# Epoch values above this are milliseconds
EPOCH_MS_THRESHOLD = 10_000_000_000

# (section, field) in the Leetify profile -> metric key
LEETIFY_METRIC_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("rating", "aim", METRIC_AIM),
    ("rating", "positioning", METRIC_POSITIONING),
    ("rating", "clutch", METRIC_CLUTCH),
    ("stats", "accuracy_head", METRIC_ACCURACY_HEAD),
    ("stats", "accuracy_enemy_spotted", METRIC_ACCURACY_ENEMY_SPOTTED),
    ("stats", "reaction_time_ms", METRIC_REACTION_TIME_MS),
    ("rating", "utility", METRIC_UTILITY),
    ("rating", "opening", METRIC_OPENING),
    ("stats", "preaim", METRIC_PREAIM),
    ("ranks", "leetify", METRIC_LEETIFY_RATING),
)


def parse_timestamp(value: Any) -> datetime | None:
    """Epoch seconds/ms or ISO-8601 string to an aware UTC datetime; None if unparsable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = clean_number(value)
        if number is None:
            return None
        seconds = number / 1000 if number > EPOCH_MS_THRESHOLD else number
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def _section(data: Mapping[str, Any] | None, key: str) -> Mapping[str, Any]:
    value = (data or {}).get(key)
    return value if isinstance(value, dict) else {}


def _last_match_at(history: Mapping[str, Any] | None) -> datetime | None:
    items = (history or {}).get("items")
    if not isinstance(items, list) or not items or not isinstance(items[0], dict):
        return None
    first = items[0]
    raw = first.get("finished_at")
    if raw is None:
        raw = first.get("started_at")
    return parse_timestamp(raw)


def leetify_stats(leetify: Mapping[str, Any] | None) -> dict[str, Any]:
    """Pull the ten scored metrics out of a Leetify profile."""
    stats: dict[str, Any] = {}
    for section, field_name, key in LEETIFY_METRIC_FIELDS:
        value = _section(leetify, section).get(field_name)
        if value is not None:
            stats[key] = value
    return stats


def build_player_signal(
    steam: SteamPayload | None = None,
    faceit: FaceitPayload | None = None,
    leetify: Mapping[str, Any] | None = None,
) -> PlayerSignal:
    """Map whatever payloads were fetched onto a PlayerSignal."""
    steam_profile = (steam.profile if steam else None) or {}
    cs2 = (steam.cs2 if steam else None) or {}
    faceit_cs2 = _section(_section(faceit.profile if faceit else None, "games"), "cs2")

    return PlayerSignal.create(
        account_created_at=parse_timestamp(steam_profile.get("timecreated")),
        total_playtime_minutes=cs2.get("playtime_forever"),
        account_level=steam.steam_level if steam else None,
        competitive_rating=_section(leetify, "ranks").get("premier"),
        secondary_level=faceit_cs2.get("skill_level"),
        secondary_elo=faceit_cs2.get("faceit_elo"),
        last_secondary_match_at=_last_match_at(faceit.match_history if faceit else None),
        derived_stats=leetify_stats(leetify),
    )
