"""
Upstream package — Steam, FACEIT and Leetify clients and signal assembly.
"""

from backend_pgrep.upstream.aggregator import (
    PlayerSources,
    ReputationReport,
    build_reputation,
    fetch_player_sources,
)
from backend_pgrep.upstream.resolver import ResolvedPlayer, resolve_player
from backend_pgrep.upstream.signal_builder import build_player_signal, parse_timestamp

__all__ = [
    "PlayerSources",
    "ReputationReport",
    "ResolvedPlayer",
    "build_player_signal",
    "build_reputation",
    "fetch_player_sources",
    "parse_timestamp",
    "resolve_player",
]
