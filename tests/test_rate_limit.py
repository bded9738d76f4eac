"""
Pytest tests for the fixed-window RateLimiter (fake clock, no sleeping).
"""

from __future__ import annotations

import pytest

from backend_pgrep.api_server.rate_limit import RateLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_max_then_blocks():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=3, window_sec=60, clock=clock)
    results = [limiter.check("reputation:1.2.3.4") for _ in range(4)]
    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_sec=60, clock=clock)
    assert limiter.check("k").allowed is True
    assert limiter.check("k").allowed is False
    clock.now += 60
    assert limiter.check("k").allowed is True


def test_keys_are_independent():
    limiter = RateLimiter(max_requests=1, window_sec=60, clock=FakeClock())
    assert limiter.check("reputation:a").allowed is True
    assert limiter.check("reputation:b").allowed is True
    assert limiter.check("reports:a").allowed is True
    assert limiter.check("reputation:a").allowed is False


def test_prune_and_reset():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_sec=10, clock=clock)
    limiter.check("a")
    clock.now += 5
    limiter.check("b")
    clock.now += 6
    assert limiter.prune() == 1
    assert len(limiter) == 1
    limiter.reset()
    assert len(limiter) == 0


@pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_sec": 0}, {"window_sec": -1}])
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        RateLimiter(**kwargs)


def test_expired_windows_evicted_without_prune():
    """Many one-off clients do not accumulate once their windows have expired."""
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_sec=60, clock=clock)
    for i in range(5000):
        limiter.check(f"reputation:10.0.{i // 256}.{i % 256}")
    assert len(limiter) == 5000
    clock.now += 61
    limiter.check("reputation:192.168.0.1")
    assert len(limiter) == 1


def test_live_windows_survive_sweep():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_sec=60, clock=clock)
    limiter.check("old")
    clock.now += 30
    limiter.check("recent")
    limiter.check("recent")
    clock.now += 31
    assert limiter.check("recent").allowed is False
    assert len(limiter) == 1
