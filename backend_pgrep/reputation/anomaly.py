"""
Rule-based anomaly checks for player statistics.

Three kinds of checks feed the trust score: rank mismatch between Premier and
FACEIT, high-skill FACEIT inactivity, and a per-metric scan over Leetify
stats. Every finding carries its status, penalty and the raw/normalized
values it was judged on. Only aim, time-to-damage and Leetify rating have
thresholds; the other metrics are informational.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from backend_pgrep.reputation import normalize
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
    clean_non_negative_int,
)


class FindingStatus(str, Enum):
    NORMAL = "normal"
    ELEVATED = "elevated"
    FLAGGED = "flagged"


class RankCheck(str, Enum):
    ALIGNED = "aligned"
    MISMATCH = "mismatch"
    NOT_APPLICABLE = "not_applicable"

    @property
    def display(self) -> str:
        if self is RankCheck.NOT_APPLICABLE:
            return "N/A"
        return self.value.capitalize()


@dataclass(frozen=True)
class AnomalyConfig:
    """Thresholds and penalties for every rule."""

    aim_flag_threshold: float = 95.0
    aim_penalty: int = 50
    reaction_time_elevated_ms: float = 500.0
    reaction_time_penalty: int = 15
    leetify_rating_flag_threshold: float = 5.0
    leetify_rating_penalty: int = 25

    rank_mismatch_penalty: int = 25

    high_skill_elo: int = 2300
    inactivity_grace_days: int = 30
    inactivity_ramp_days: int = 60
    inactivity_penalty_weight: float = 0.4


DEFAULT_CONFIG = AnomalyConfig()


@dataclass(frozen=True)
class AnomalyFinding:
    """One classified check contributing to the trust score."""

    key: str
    label: str
    status: FindingStatus
    penalty_points: int
    raw_value: float | None = None
    percent: float | None = None
    """Normalized 0-100 display value."""
    severity: float | None = None
    raw_delta: float | None = None

    @property
    def impact(self) -> int | None:
        return -self.penalty_points if self.penalty_points else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "status": self.status.value,
            "penalty_points": self.penalty_points,
            "impact": self.impact,
            "raw_value": self.raw_value,
            "percent": self.percent,
            "severity": self.severity,
            "raw_delta": self.raw_delta,
        }


Rule = Callable[[float, AnomalyConfig], tuple[FindingStatus, int]]


def _no_threshold(raw: float, config: AnomalyConfig) -> tuple[FindingStatus, int]:
    return FindingStatus.NORMAL, 0


def _aim_rule(raw: float, config: AnomalyConfig) -> tuple[FindingStatus, int]:
    if raw >= config.aim_flag_threshold:
        return FindingStatus.FLAGGED, config.aim_penalty
    return FindingStatus.NORMAL, 0


def _reaction_time_rule(raw: float, config: AnomalyConfig) -> tuple[FindingStatus, int]:
    if raw < config.reaction_time_elevated_ms:
        return FindingStatus.ELEVATED, config.reaction_time_penalty
    return FindingStatus.NORMAL, 0


def _leetify_rating_rule(raw: float, config: AnomalyConfig) -> tuple[FindingStatus, int]:
    if raw > config.leetify_rating_flag_threshold:
        return FindingStatus.FLAGGED, config.leetify_rating_penalty
    return FindingStatus.NORMAL, 0


@dataclass(frozen=True)
class MetricSpec:
    key: str
    label: str
    normalizer: Callable[[float | None], float | None]
    rule: Rule = _no_threshold


METRICS: tuple[MetricSpec, ...] = (
    MetricSpec(METRIC_AIM, "Aim Rating", normalize.normalize_stat, _aim_rule),
    MetricSpec(METRIC_POSITIONING, "Positioning", normalize.normalize_stat),
    MetricSpec(METRIC_CLUTCH, "Clutch Rating", normalize.normalize_stat),
    MetricSpec(METRIC_ACCURACY_HEAD, "HS Accuracy", normalize.normalize_stat),
    MetricSpec(METRIC_ACCURACY_ENEMY_SPOTTED, "Enemy Spotted Acc", normalize.normalize_stat),
    MetricSpec(METRIC_REACTION_TIME_MS, "Time to Damage", normalize.normalize_inverse, _reaction_time_rule),
    MetricSpec(METRIC_UTILITY, "Utility", normalize.normalize_stat),
    MetricSpec(METRIC_OPENING, "Opening Rating", normalize.normalize_stat),
    MetricSpec(METRIC_PREAIM, "Preaim", normalize.normalize_stat),
    MetricSpec(METRIC_LEETIFY_RATING, "Leetify Rating", normalize.normalize_stat, _leetify_rating_rule),
)


def scan_metrics(
    signal: PlayerSignal,
    config: AnomalyConfig = DEFAULT_CONFIG,
) -> list[AnomalyFinding]:
    """Classify each present derived stat; absent metrics produce no finding."""
    findings: list[AnomalyFinding] = []
    for metric in METRICS:
        raw = signal.stat(metric.key)
        if raw is None:
            continue
        percent = normalize.clamp_percent(metric.normalizer(raw))
        status, penalty = metric.rule(raw, config)
        findings.append(
            AnomalyFinding(
                key=metric.key,
                label=metric.label,
                status=status,
                penalty_points=penalty,
                raw_value=raw,
                percent=percent,
                severity=normalize.js_round(percent * 10) / 10 if percent > 0 else None,
                raw_delta=normalize.round_cents(percent - 50) if percent > 0 else None,
            )
        )
    return findings


def secondary_level_of(signal: PlayerSignal) -> int | None:
    """FACEIT level as reported, else derived from elo."""
    level = clean_non_negative_int(signal.secondary_level)
    if level is not None:
        return level
    return normalize.level_from_elo(clean_non_negative_int(signal.secondary_elo))


def check_rank_mismatch(
    signal: PlayerSignal,
    config: AnomalyConfig = DEFAULT_CONFIG,
) -> tuple[RankCheck, AnomalyFinding | None]:
    """Compare Premier against the band expected for the FACEIT level."""
    premier = clean_non_negative_int(signal.competitive_rating)
    band = normalize.premier_band_for_level(secondary_level_of(signal))
    if premier is None or band is None:
        return RankCheck.NOT_APPLICABLE, None
    low, high = band
    if low <= premier <= high:
        return RankCheck.ALIGNED, None
    return RankCheck.MISMATCH, AnomalyFinding(
        key="rank_mismatch",
        label="Rank Mismatch",
        status=FindingStatus.FLAGGED,
        penalty_points=config.rank_mismatch_penalty,
        raw_value=float(premier),
    )


def check_high_skill_inactivity(
    signal: PlayerSignal,
    now: datetime,
    config: AnomalyConfig = DEFAULT_CONFIG,
) -> tuple[int, AnomalyFinding | None]:
    """
    Severity 0-100 for high-elo players who stopped playing FACEIT.

    Ramps from 0 at the grace period to 100 after a further ramp window.
    """
    elo = clean_non_negative_int(signal.secondary_elo)
    if elo is None or elo < config.high_skill_elo:
        return 0, None
    days = normalize.days_since(signal.last_secondary_match_at, now)
    if days is None or days <= config.inactivity_grace_days:
        return 0, None
    severity = min(
        100,
        normalize.js_round(((days - config.inactivity_grace_days) / config.inactivity_ramp_days) * 100),
    )
    penalty = normalize.js_round(severity * config.inactivity_penalty_weight)
    return severity, AnomalyFinding(
        key="high_skill_inactivity",
        label="High Skill Inactivity",
        status=FindingStatus.ELEVATED,
        penalty_points=penalty,
        raw_value=float(days),
        percent=float(severity),
        severity=float(severity),
    )
