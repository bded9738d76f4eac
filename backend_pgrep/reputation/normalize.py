"""
Normalization helpers for the reputation scorer.

Maps raw provider values onto the 0-100 display scale, FACEIT levels onto
expected Premier bands, and timestamps onto elapsed years/days. All helpers
return None for missing input instead of a neutral number.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone

SECONDS_PER_DAY = 86_400
DAYS_PER_YEAR = 365

REACTION_TIME_MIN_MS = 300.0
REACTION_TIME_MAX_MS = 900.0

# FACEIT level -> expected Premier rating band (inclusive)
PREMIER_BANDS: dict[int, tuple[int, int]] = {
    1: (1000, 3000),
    2: (3000, 6000),
    3: (3000, 6000),
    4: (7000, 10000),
    5: (7000, 10000),
    6: (10000, 15000),
    7: (10000, 15000),
    8: (15000, 20000),
    9: (15000, 20000),
    10: (20000, 30000),
}

# FACEIT CS2 elo upper bound per level; above the last bound is level 10
ELO_LEVEL_UPPER_BOUNDS: tuple[tuple[int, int], ...] = (
    (500, 1),
    (750, 2),
    (900, 3),
    (1050, 4),
    (1200, 5),
    (1350, 6),
    (1530, 7),
    (1750, 8),
    (2000, 9),
)
MAX_FACEIT_LEVEL = 10


def js_round(value: float) -> int:
    """Round half up (JavaScript Math.round), not banker's rounding."""
    return math.floor(value + 0.5)


def round_cents(value: float) -> float:
    """Round to two decimals, half up."""
    return js_round(value * 100) / 100


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def normalize_stat(value: float | None) -> float | None:
    """
    Map a raw stat onto 0-100.

    [0, 1] ratios scale by 100, [-1, 0) ratings map (v + 1) / 2 * 100,
    (1, 100] is already a percentage, anything else is v / 10 clamped.
    """
    if value is None or math.isnan(value):
        return None
    if 0 <= value <= 1:
        return value * 100
    if -1 <= value <= 1:
        return (value + 1) * 50
    if 1 < value <= 100:
        return value
    return clamp(value / 10, 0.0, 100.0)


def normalize_inverse(
    value: float | None,
    low: float = REACTION_TIME_MIN_MS,
    high: float = REACTION_TIME_MAX_MS,
) -> float | None:
    """Lower is better: clamp into [low, high] and invert onto 0-100."""
    if value is None or math.isnan(value):
        return None
    clamped = clamp(value, low, high)
    percent = (clamped - low) / (high - low)
    return clamp((1 - percent) * 100, 0.0, 100.0)


def clamp_percent(value: float | None) -> float:
    """Display percent; missing collapses to 0 for the bar only, never for scoring."""
    if value is None or math.isnan(value):
        return 0.0
    return clamp(value, 0.0, 100.0)


def level_from_elo(elo: int | None) -> int | None:
    """FACEIT CS2 level for an elo value."""
    if elo is None or elo < 0:
        return None
    for upper, level in ELO_LEVEL_UPPER_BOUNDS:
        if elo <= upper:
            return level
    return MAX_FACEIT_LEVEL


def premier_band_for_level(level: int | None) -> tuple[int, int] | None:
    """Expected Premier band for a FACEIT level; None outside 1..10."""
    if level is None:
        return None
    return PREMIER_BANDS.get(level)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def elapsed_seconds(since: datetime | None, now: datetime) -> float | None:
    if not isinstance(since, datetime):
        return None
    return (_as_utc(now) - _as_utc(since)).total_seconds()


def years_since(since: datetime | None, now: datetime) -> float:
    """Elapsed years (365-day); 0 when absent or in the future."""
    seconds = elapsed_seconds(since, now)
    if seconds is None or seconds < 0:
        return 0.0
    return seconds / (SECONDS_PER_DAY * DAYS_PER_YEAR)


def days_since(since: datetime | None, now: datetime) -> int | None:
    """Whole days elapsed (floor); None when absent."""
    seconds = elapsed_seconds(since, now)
    if seconds is None:
        return None
    return math.floor(seconds / SECONDS_PER_DAY)


def minutes_to_hours(minutes: int | None) -> int | None:
    if minutes is None:
        return None
    return js_round(minutes / 60)
