"""
Reputation package — trust score and anomaly findings for a player.

Consumes a normalized PlayerSignal and produces a TrustAssessment. Pure
functions only; fetching and persistence live in upstream and api_server.
"""

from backend_pgrep.reputation.anomaly import (
    AnomalyConfig,
    AnomalyFinding,
    FindingStatus,
    RankCheck,
)
from backend_pgrep.reputation.scorer import (
    ScoreBreakdown,
    TrustAssessment,
    TrustLabel,
    assess,
)
from backend_pgrep.reputation.signals import METRIC_KEYS, PlayerSignal

__all__ = [
    "AnomalyConfig",
    "AnomalyFinding",
    "FindingStatus",
    "METRIC_KEYS",
    "PlayerSignal",
    "RankCheck",
    "ScoreBreakdown",
    "TrustAssessment",
    "TrustLabel",
    "assess",
]
