"""
Pytest tests for upstream.signal_builder: provider payloads -> PlayerSignal.
"""

from __future__ import annotations

from datetime import datetime, timezone

from backend_pgrep.upstream.faceit import FaceitPayload
from backend_pgrep.upstream.signal_builder import build_player_signal, leetify_stats, parse_timestamp
from backend_pgrep.upstream.steam import SteamPayload

CREATED = datetime(2020, 9, 13, 12, 26, 40, tzinfo=timezone.utc)

STEAM = SteamPayload(
    profile={"steamid": "76561198000000003", "personaname": "target", "timecreated": 1_600_000_000},
    cs2={"appid": 730, "playtime_forever": 6000},
    steam_level=12,
)
FACEIT = FaceitPayload(
    profile={"player_id": "abc", "games": {"cs2": {"skill_level": 8, "faceit_elo": 1700}}},
    match_history={"items": [{"match_id": "m1", "finished_at": 1_700_000_000}, {"match_id": "m0"}]},
)
LEETIFY = {
    "ranks": {"premier": 16_000, "leetify": 2.1},
    "rating": {"aim": 80, "positioning": 0.6, "clutch": 0.2, "utility": 55, "opening": -0.1},
    "stats": {"accuracy_head": 21.5, "accuracy_enemy_spotted": 40, "reaction_time_ms": 550, "preaim": 9.5},
}


def test_parse_timestamp_seconds_and_millis():
    assert parse_timestamp(1_600_000_000) == CREATED
    assert parse_timestamp(1_600_000_000_000) == CREATED


def test_parse_timestamp_iso_strings():
    assert parse_timestamp("2020-09-13T12:26:40Z") == CREATED
    assert parse_timestamp("2020-09-13T12:26:40") == CREATED


def test_parse_timestamp_rejects_garbage():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    assert parse_timestamp("not a date") is None
    assert parse_timestamp(True) is None
    assert parse_timestamp(float("nan")) is None


def test_build_signal_from_all_sources():
    signal = build_player_signal(STEAM, FACEIT, LEETIFY)
    assert signal.account_created_at == CREATED
    assert signal.total_playtime_minutes == 6000
    assert signal.account_level == 12
    assert signal.competitive_rating == 16_000
    assert signal.secondary_level == 8
    assert signal.secondary_elo == 1700
    assert signal.last_secondary_match_at == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
    assert signal.stat("aim") == 80.0
    assert signal.stat("leetify_rating") == 2.1
    assert signal.stat("reaction_time_ms") == 550.0
    assert len(signal.derived_stats) == 10


def test_build_signal_with_no_sources():
    signal = build_player_signal(None, None, None)
    assert signal.account_created_at is None
    assert signal.competitive_rating is None
    assert signal.secondary_elo is None
    assert dict(signal.derived_stats) == {}
    assert not signal.has_analytics


def test_build_signal_steam_only_has_no_analytics():
    signal = build_player_signal(STEAM, None, None)
    assert signal.account_level == 12
    assert not signal.has_analytics


def test_last_match_falls_back_to_started_at():
    faceit = FaceitPayload(profile={}, match_history={"items": [{"started_at": 1_600_000_000}]})
    assert build_player_signal(None, faceit, None).last_secondary_match_at == CREATED


def test_leetify_stats_skips_missing_sections():
    assert leetify_stats({"ranks": {"premier": 9000}}) == {}
    assert leetify_stats({"rating": "broken", "stats": {"preaim": 8}}) == {"preaim": 8}
    assert leetify_stats(None) == {}


def test_malformed_match_history_has_no_last_match():
    """A dict-valued or empty items field is ignored rather than raising."""
    for history in ({"items": {"a": 1}}, {"items": []}, {"items": ["m1"]}, {"items": None}):
        faceit = FaceitPayload(profile=FACEIT.profile, match_history=history)
        signal = build_player_signal(STEAM, faceit, None)
        assert signal.last_secondary_match_at is None
        assert signal.secondary_level == 8
