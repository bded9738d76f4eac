"""
Pytest tests for the reputation scorer (assess, bonuses, labels, anomaly checks).

All inputs are built in memory; no network or database.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend_pgrep.reputation import (
    FindingStatus,
    PlayerSignal,
    RankCheck,
    TrustLabel,
    assess,
)
from backend_pgrep.reputation.scorer import (
    account_age_bonus,
    account_level_bonus,
    label_for_score,
    playtime_bonus,
)

NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _stats(**stats):
    return PlayerSignal.create(derived_stats=stats)


# --- Insufficient data ---


def test_empty_signal_is_insufficient_data():
    """No fields at all -> score None, 'Insufficient Data', no anomalies."""
    result = assess(PlayerSignal(), NOW)
    assert result.score is None
    assert result.label == TrustLabel.INSUFFICIENT_DATA
    assert result.anomalies == []
    assert result.rank_check == RankCheck.NOT_APPLICABLE


def test_identity_only_signal_has_no_score():
    """Steam age/playtime/level alone are not analytics data; bonuses do not produce a score."""
    signal = PlayerSignal.create(
        account_created_at=NOW - timedelta(days=3650),
        total_playtime_minutes=120_000,
        account_level=50,
    )
    result = assess(signal, NOW)
    assert result.score is None
    assert result.label == TrustLabel.INSUFFICIENT_DATA
    assert result.breakdown.account_age_bonus == 4.0


def test_zero_rating_counts_as_present():
    """Premier 0 is data, not absence."""
    result = assess(PlayerSignal.create(competitive_rating=0), NOW)
    assert result.score == 100
    assert result.label == TrustLabel.NORMAL


def test_malformed_values_are_absent():
    """NaN, negative counters and non-numeric strings are dropped, leaving no analytics."""
    signal = PlayerSignal.create(
        competitive_rating=float("nan"),
        secondary_elo=-10,
        account_level="abc",
        total_playtime_minutes=-5,
        derived_stats={"aim": float("nan"), "preaim": None},
    )
    assert signal.competitive_rating is None
    assert signal.secondary_elo is None
    assert signal.account_level is None
    assert signal.total_playtime_minutes is None
    assert dict(signal.derived_stats) == {}
    assert assess(signal, NOW).score is None


def test_directly_built_signal_with_bad_values_does_not_raise():
    signal = PlayerSignal(competitive_rating=-1, derived_stats={"aim": float("inf")})
    result = assess(signal, NOW)
    assert result.score is None
    assert result.anomalies == []


def test_directly_built_signal_with_missing_containers_does_not_raise():
    """derived_stats=None and non-datetime timestamps behave like absent fields."""
    signal = PlayerSignal(
        derived_stats=None,
        account_created_at="2015-01-01",
        secondary_elo=2500,
        last_secondary_match_at=1_600_000_000,
    )
    result = assess(signal, NOW)
    assert result.score == 100
    assert result.inactivity_severity == 0
    assert result.breakdown.account_age_bonus == 0.0
    assert signal.to_dict()["derived_stats"] == {}

    empty = assess(PlayerSignal(derived_stats=None), NOW)
    assert empty.score is None
    assert empty.anomalies == []


# --- Per-metric thresholds ---


def test_aim_96_alone_scores_50_caution():
    result = assess(_stats(aim=96), NOW)
    assert result.score == 50
    assert result.label == TrustLabel.CAUTION
    assert len(result.anomalies) == 1
    finding = result.anomalies[0]
    assert finding.key == "aim"
    assert finding.label == "Aim Rating"
    assert finding.status == FindingStatus.FLAGGED
    assert finding.penalty_points == 50
    assert finding.percent == 96
    assert finding.severity == 96.0
    assert finding.raw_delta == 46.0


def test_aim_threshold_boundary():
    """Exactly 95 is flagged; 94.999 is normal."""
    at = assess(_stats(aim=95), NOW).anomalies[0]
    below = assess(_stats(aim=94.999), NOW).anomalies[0]
    assert at.status == FindingStatus.FLAGGED
    assert at.penalty_points == 50
    assert below.status == FindingStatus.NORMAL
    assert below.penalty_points == 0


def test_reaction_time_below_500_is_elevated():
    fast = assess(_stats(reaction_time_ms=450), NOW)
    assert fast.anomalies[0].status == FindingStatus.ELEVATED
    assert fast.anomalies[0].penalty_points == 15
    assert fast.anomalies[0].percent == 75.0
    assert fast.score == 85

    edge = assess(_stats(reaction_time_ms=500), NOW)
    assert edge.anomalies[0].status == FindingStatus.NORMAL
    assert edge.score == 100


def test_leetify_rating_above_5_is_flagged():
    high = assess(_stats(leetify_rating=5.5), NOW)
    assert high.anomalies[0].status == FindingStatus.FLAGGED
    assert high.anomalies[0].penalty_points == 25
    assert high.score == 75

    edge = assess(_stats(leetify_rating=5), NOW)
    assert edge.anomalies[0].status == FindingStatus.NORMAL


def test_informational_metrics_never_penalize():
    """Metrics without thresholds stay normal even at extreme values."""
    result = assess(
        _stats(positioning=1.0, clutch=0.99, accuracy_head=99, accuracy_enemy_spotted=99,
               utility=100, opening=1.0, preaim=0.1),
        NOW,
    )
    assert result.score == 100
    assert all(f.status == FindingStatus.NORMAL for f in result.anomalies)
    assert [f.key for f in result.anomalies] == [
        "positioning", "clutch", "accuracy_head", "accuracy_enemy_spotted",
        "utility", "opening", "preaim",
    ]


# --- Rank mismatch ---


def test_rank_mismatch_premier_above_band():
    """Premier 25000 against the level-1 band [1000, 3000] -> flagged, penalty 25."""
    result = assess(PlayerSignal.create(competitive_rating=25_000, secondary_level=1), NOW)
    assert result.rank_check == RankCheck.MISMATCH
    assert len(result.anomalies) == 1
    finding = result.anomalies[0]
    assert finding.key == "rank_mismatch"
    assert finding.status == FindingStatus.FLAGGED
    assert finding.penalty_points == 25
    assert result.breakdown.rank_mismatch_penalty == 25
    assert result.score == 75


def test_rank_mismatch_uses_elo_when_level_missing():
    """Elo 400 is level 1, so the same mismatch is found."""
    result = assess(PlayerSignal.create(competitive_rating=25_000, secondary_elo=400), NOW)
    assert result.rank_check == RankCheck.MISMATCH


def test_rank_aligned_has_no_penalty():
    result = assess(PlayerSignal.create(competitive_rating=25_000, secondary_level=10), NOW)
    assert result.rank_check == RankCheck.ALIGNED
    assert result.anomalies == []
    assert result.score == 100


@pytest.mark.parametrize(
    "kwargs",
    [
        {"competitive_rating": 25_000},
        {"secondary_level": 3},
        {"competitive_rating": 25_000, "secondary_level": 0},
    ],
)
def test_rank_check_not_applicable(kwargs):
    result = assess(PlayerSignal.create(**kwargs), NOW)
    assert result.rank_check == RankCheck.NOT_APPLICABLE
    assert result.rank_check.display == "N/A"
    assert result.breakdown.rank_mismatch_penalty == 0


# --- High-skill inactivity ---


def test_high_skill_inactivity_90_days():
    """Elo 2400, last match 90 days ago -> severity 100, penalty 40."""
    signal = PlayerSignal.create(secondary_elo=2400, last_secondary_match_at=NOW - timedelta(days=90))
    result = assess(signal, NOW)
    assert result.inactivity_severity == 100
    assert result.breakdown.inactivity_penalty == 40
    assert result.anomalies[0].key == "high_skill_inactivity"
    assert result.anomalies[0].status == FindingStatus.ELEVATED
    assert result.score == 60


def test_high_skill_inactivity_partial():
    signal = PlayerSignal.create(secondary_elo=2400, last_secondary_match_at=NOW - timedelta(days=45))
    result = assess(signal, NOW)
    assert result.inactivity_severity == 25
    assert result.breakdown.inactivity_penalty == 10


@pytest.mark.parametrize(
    "elo,days",
    [(2400, 30), (2299, 120), (2400, None)],
)
def test_high_skill_inactivity_gate(elo, days):
    last = NOW - timedelta(days=days) if days is not None else None
    result = assess(PlayerSignal.create(secondary_elo=elo, last_secondary_match_at=last), NOW)
    assert result.inactivity_severity == 0
    assert result.breakdown.inactivity_penalty == 0


def test_inactivity_penalty_monotonic_in_days():
    penalties = []
    for days in range(31, 200, 7):
        signal = PlayerSignal.create(secondary_elo=2500, last_secondary_match_at=NOW - timedelta(days=days))
        penalties.append(assess(signal, NOW).breakdown.inactivity_penalty)
    assert penalties == sorted(penalties)
    assert penalties[-1] == 40


# --- Bonuses ---


def test_account_age_bonus():
    assert account_age_bonus(NOW - timedelta(days=3650), NOW) == 4.0
    assert account_age_bonus(NOW - timedelta(days=1825), NOW) == 2.0
    assert account_age_bonus(None, NOW) == 0.0
    assert account_age_bonus(NOW + timedelta(days=10), NOW) == 0.0


def test_playtime_and_level_bonus():
    assert playtime_bonus(120_000) == 0.75
    assert playtime_bonus(None) == 0.0
    assert account_level_bonus(50) == 0.75
    assert account_level_bonus(None) == 0.0


def test_playtime_bonus_monotonic():
    bonuses = [playtime_bonus(minutes) for minutes in range(0, 2_000_000, 37_000)]
    assert bonuses == sorted(bonuses)


def test_bonuses_added_to_score():
    """Aim 96 plus 10y account, 2000h, level 50: 100 - 50 + 4.0 + 0.75 + 0.75 = 55.5 -> 56."""
    signal = PlayerSignal.create(
        account_created_at=NOW - timedelta(days=3650),
        total_playtime_minutes=120_000,
        account_level=50,
        derived_stats={"aim": 96},
    )
    result = assess(signal, NOW)
    assert result.score == 56
    assert result.label == TrustLabel.CAUTION


# --- Clamping, labels, purity ---


def test_score_clamped_at_zero():
    signal = PlayerSignal.create(
        competitive_rating=5000,
        secondary_elo=2400,
        last_secondary_match_at=NOW - timedelta(days=365),
        derived_stats={"aim": 99, "reaction_time_ms": 300, "leetify_rating": 9},
    )
    result = assess(signal, NOW)
    assert result.score == 0
    assert result.label == TrustLabel.HIGHLY_SUSPICIOUS
    assert result.rank_check == RankCheck.MISMATCH


def test_score_clamped_at_100():
    signal = PlayerSignal.create(
        account_created_at=NOW - timedelta(days=3650),
        account_level=200,
        competitive_rating=25_000,
        secondary_level=10,
    )
    assert assess(signal, NOW).score == 100


@pytest.mark.parametrize(
    "score,label",
    [
        (100, TrustLabel.NORMAL),
        (80, TrustLabel.NORMAL),
        (79, TrustLabel.REVIEW),
        (60, TrustLabel.REVIEW),
        (59, TrustLabel.CAUTION),
        (40, TrustLabel.CAUTION),
        (39, TrustLabel.HIGHLY_SUSPICIOUS),
        (0, TrustLabel.HIGHLY_SUSPICIOUS),
        (None, TrustLabel.INSUFFICIENT_DATA),
    ],
)
def test_label_for_score(score, label):
    assert label_for_score(score) == label


def test_assess_is_idempotent():
    signal = PlayerSignal.create(
        competitive_rating=12_000,
        secondary_level=4,
        secondary_elo=1000,
        account_created_at=NOW - timedelta(days=900),
        derived_stats={"aim": 70, "reaction_time_ms": 480, "leetify_rating": 1.2},
    )
    first = assess(signal, NOW)
    second = assess(signal, NOW)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_to_dict_keeps_null_score():
    data = assess(PlayerSignal(), NOW).to_dict()
    assert data["score"] is None
    assert data["label"] == "Insufficient Data"
    assert data["rank_check_display"] == "N/A"
