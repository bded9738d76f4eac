"""
Trust score computation — rules and aggregation.

Starts from 100, subtracts rank-mismatch, inactivity and per-metric
penalties, adds small account-age, playtime and Steam-level bonuses, and
clamps to 0-100. A player with no analytics data at all gets score None
("Insufficient Data"), which is not the same as a low score.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from backend_pgrep.reputation import normalize
from backend_pgrep.reputation.anomaly import (
    DEFAULT_CONFIG,
    AnomalyConfig,
    AnomalyFinding,
    RankCheck,
    check_high_skill_inactivity,
    check_rank_mismatch,
    scan_metrics,
)
from backend_pgrep.reputation.signals import PlayerSignal, clean_non_negative_int

BASE_SCORE = 100
SCORE_MIN = 0
SCORE_MAX = 100

AGE_YEARS_MULTIPLIER = 10
AGE_BONUS_WEIGHT = 0.4
PLAYTIME_HOURS_MULTIPLIER = 0.015
LEVEL_MULTIPLIER = 0.6
BONUS_WEIGHT = 0.025
BONUS_SCORE_CAP = 100


class TrustLabel(str, Enum):
    NORMAL = "Normal"
    REVIEW = "Review"
    CAUTION = "Caution"
    HIGHLY_SUSPICIOUS = "Highly Suspicious"
    INSUFFICIENT_DATA = "Insufficient Data"


@dataclass(frozen=True)
class ScoreBreakdown:
    """Individual contributions to the final score, for display."""

    rank_mismatch_penalty: int = 0
    inactivity_penalty: int = 0
    stat_penalty: int = 0
    account_age_bonus: float = 0.0
    playtime_bonus: float = 0.0
    account_level_bonus: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank_mismatch_penalty": self.rank_mismatch_penalty,
            "inactivity_penalty": self.inactivity_penalty,
            "stat_penalty": self.stat_penalty,
            "account_age_bonus": self.account_age_bonus,
            "playtime_bonus": self.playtime_bonus,
            "account_level_bonus": self.account_level_bonus,
        }


@dataclass(frozen=True)
class TrustAssessment:
    score: int | None
    label: TrustLabel
    anomalies: list[AnomalyFinding] = field(default_factory=list)
    rank_check: RankCheck = RankCheck.NOT_APPLICABLE
    inactivity_severity: int = 0
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label.value,
            "anomalies": [a.to_dict() for a in self.anomalies],
            "rank_check": self.rank_check.value,
            "rank_check_display": self.rank_check.display,
            "inactivity_severity": self.inactivity_severity,
            "breakdown": self.breakdown.to_dict(),
        }


def account_age_bonus(created_at: datetime | None, now: datetime) -> float:
    years = normalize.years_since(created_at, now)
    capped = min(BONUS_SCORE_CAP, years * AGE_YEARS_MULTIPLIER)
    return normalize.round_cents(capped / AGE_YEARS_MULTIPLIER * AGE_BONUS_WEIGHT)


def playtime_bonus(playtime_minutes: int | None) -> float:
    hours = normalize.minutes_to_hours(clean_non_negative_int(playtime_minutes))
    if hours is None:
        return 0.0
    score = min(BONUS_SCORE_CAP, hours * PLAYTIME_HOURS_MULTIPLIER)
    return normalize.round_cents(score * BONUS_WEIGHT)


def account_level_bonus(level: int | None) -> float:
    level = clean_non_negative_int(level)
    if level is None:
        return 0.0
    score = min(BONUS_SCORE_CAP, level * LEVEL_MULTIPLIER)
    return normalize.round_cents(score * BONUS_WEIGHT)


def label_for_score(score: int | None) -> TrustLabel:
    if score is None:
        return TrustLabel.INSUFFICIENT_DATA
    if score >= 80:
        return TrustLabel.NORMAL
    if score >= 60:
        return TrustLabel.REVIEW
    if score >= 40:
        return TrustLabel.CAUTION
    return TrustLabel.HIGHLY_SUSPICIOUS


def assess(
    signal: PlayerSignal,
    now: datetime,
    config: AnomalyConfig = DEFAULT_CONFIG,
) -> TrustAssessment:
    """
    Compute the trust assessment for one player.

    Pure: no I/O, no hidden state, never raises for missing fields. Absent
    inputs drop their check (0 penalty/bonus) instead of counting as worst
    or best case.

    Args:
        signal: Normalized player signal.
        now: Reference time for account age and inactivity.
        config: Thresholds and penalties; defaults match the dashboard.

    Returns:
        TrustAssessment with score None when no analytics data was present.
    """
    rank_check, rank_finding = check_rank_mismatch(signal, config)
    inactivity_severity, inactivity_finding = check_high_skill_inactivity(signal, now, config)
    metric_findings = scan_metrics(signal, config)

    anomalies: list[AnomalyFinding] = []
    if rank_finding is not None:
        anomalies.append(rank_finding)
    if inactivity_finding is not None:
        anomalies.append(inactivity_finding)
    anomalies.extend(metric_findings)

    breakdown = ScoreBreakdown(
        rank_mismatch_penalty=rank_finding.penalty_points if rank_finding else 0,
        inactivity_penalty=inactivity_finding.penalty_points if inactivity_finding else 0,
        stat_penalty=sum(f.penalty_points for f in metric_findings),
        account_age_bonus=account_age_bonus(signal.account_created_at, now),
        playtime_bonus=playtime_bonus(signal.total_playtime_minutes),
        account_level_bonus=account_level_bonus(signal.account_level),
    )

    score: int | None = None
    if signal.has_analytics:
        raw = (
            BASE_SCORE
            - breakdown.rank_mismatch_penalty
            - breakdown.inactivity_penalty
            - breakdown.stat_penalty
            + breakdown.account_age_bonus
            + breakdown.playtime_bonus
            + breakdown.account_level_bonus
        )
        score = normalize.js_round(normalize.clamp(raw, SCORE_MIN, SCORE_MAX))

    return TrustAssessment(
        score=score,
        label=label_for_score(score),
        anomalies=anomalies,
        rank_check=rank_check,
        inactivity_severity=inactivity_severity,
        breakdown=breakdown,
    )
