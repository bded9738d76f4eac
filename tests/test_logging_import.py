"""
Test that pgrep_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from pgrep_logging and use the logger."""
    from backend_pgrep.pgrep_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_bind_player_logger():
    """bind_player returns a logger usable with extra fields."""
    from backend_pgrep.pgrep_logging import bind_player

    log = bind_player("76561198000000003")
    log.info("test_bound_message", score=72)


def test_redact_masks_api_keys():
    """Steam keys in query strings and bearer tokens never reach the log line."""
    from backend_pgrep.pgrep_logging.logger import redact

    url = "https://api.steampowered.com/ISteamUser/GetPlayerSummaries/v2/?key=ABC123&steamids=7656"
    assert redact(url) == "https://api.steampowered.com/ISteamUser/GetPlayerSummaries/v2/?key=***&steamids=7656"
    assert redact("Authorization: Bearer sk-xyz") == "Authorization: Bearer ***"
    assert redact("_leetify_key=secret") == "_leetify_key=***"
    assert redact("monkey=banana") == "monkey=banana"


def test_processors_rename_event_and_scrub_values():
    from backend_pgrep.pgrep_logging.logger import _event_type, _redact_secrets

    event = {"event": "upstream_fetch_failed", "error": "GET /x?key=ABC123 failed", "attempt": 2}
    event = _redact_secrets(None, "warning", _event_type(None, "warning", event))
    assert event == {
        "event_type": "upstream_fetch_failed",
        "service": "pgrep",
        "error": "GET /x?key=*** failed",
        "attempt": 2,
    }
