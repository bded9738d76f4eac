"""
Player signal: normalized input to the reputation scorer.

Assembled by the caller from Steam, FACEIT and Leetify payloads. Every field
is optional; None means "not available" and is never read as zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

# Derived stat keys, in display order.
METRIC_AIM = "aim"
METRIC_POSITIONING = "positioning"
METRIC_CLUTCH = "clutch"
METRIC_ACCURACY_HEAD = "accuracy_head"
METRIC_ACCURACY_ENEMY_SPOTTED = "accuracy_enemy_spotted"
METRIC_REACTION_TIME_MS = "reaction_time_ms"
METRIC_UTILITY = "utility"
METRIC_OPENING = "opening"
METRIC_PREAIM = "preaim"
METRIC_LEETIFY_RATING = "leetify_rating"

METRIC_KEYS: tuple[str, ...] = (
    METRIC_AIM,
    METRIC_POSITIONING,
    METRIC_CLUTCH,
    METRIC_ACCURACY_HEAD,
    METRIC_ACCURACY_ENEMY_SPOTTED,
    METRIC_REACTION_TIME_MS,
    METRIC_UTILITY,
    METRIC_OPENING,
    METRIC_PREAIM,
    METRIC_LEETIFY_RATING,
)


def clean_number(value: Any) -> float | None:
    """Return value as a finite float, or None for missing, boolean, non-numeric or NaN/inf."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def clean_non_negative_int(value: Any) -> int | None:
    """Finite, non-negative number truncated to int; anything else is None."""
    number = clean_number(value)
    if number is None or number < 0:
        return None
    return int(number)


def _isoformat(value: Any) -> str | None:
    return value.isoformat() if isinstance(value, datetime) else None


def _clean_stats(stats: Mapping[str, Any] | None) -> dict[str, float]:
    out: dict[str, float] = {}
    for key, value in (stats or {}).items():
        number = clean_number(value)
        if number is not None:
            out[str(key)] = number
    return out


@dataclass(frozen=True)
class PlayerSignal:
    """
    Identity metadata plus aggregated stats for one player.

    Construct through PlayerSignal.create() to get malformed values dropped;
    the scorer also tolerates a directly built instance.
    """

    account_created_at: datetime | None = None
    total_playtime_minutes: int | None = None
    account_level: int | None = None
    competitive_rating: int | None = None
    """Premier rating (primary matchmaking)."""
    secondary_level: int | None = None
    """FACEIT skill level 1..10."""
    secondary_elo: int | None = None
    """FACEIT elo."""
    last_secondary_match_at: datetime | None = None
    derived_stats: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        *,
        account_created_at: datetime | None = None,
        total_playtime_minutes: Any = None,
        account_level: Any = None,
        competitive_rating: Any = None,
        secondary_level: Any = None,
        secondary_elo: Any = None,
        last_secondary_match_at: datetime | None = None,
        derived_stats: Mapping[str, Any] | None = None,
    ) -> PlayerSignal:
        """Build a signal, turning NaN, non-numeric and negative counters into None."""
        return cls(
            account_created_at=account_created_at,
            total_playtime_minutes=clean_non_negative_int(total_playtime_minutes),
            account_level=clean_non_negative_int(account_level),
            competitive_rating=clean_non_negative_int(competitive_rating),
            secondary_level=clean_non_negative_int(secondary_level),
            secondary_elo=clean_non_negative_int(secondary_elo),
            last_secondary_match_at=last_secondary_match_at,
            derived_stats=_clean_stats(derived_stats),
        )

    def stat(self, key: str) -> float | None:
        return clean_number((self.derived_stats or {}).get(key))

    @property
    def has_analytics(self) -> bool:
        """True when any analytics-derived field is present (premier, FACEIT rank, any stat)."""
        if any(
            clean_non_negative_int(v) is not None
            for v in (self.competitive_rating, self.secondary_level, self.secondary_elo)
        ):
            return True
        return any(self.stat(key) is not None for key in (self.derived_stats or {}))

    def to_dict(self) -> dict[str, Any]:
        return {
            "account_created_at": _isoformat(self.account_created_at),
            "total_playtime_minutes": self.total_playtime_minutes,
            "account_level": self.account_level,
            "competitive_rating": self.competitive_rating,
            "secondary_level": self.secondary_level,
            "secondary_elo": self.secondary_elo,
            "last_secondary_match_at": _isoformat(self.last_secondary_match_at),
            "derived_stats": dict(self.derived_stats or {}),
        }
