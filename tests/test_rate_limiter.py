"""고정 윈도우 요청 제한기 테스트."""

from __future__ import annotations

from app.core.rate_limiter import FixedWindowRateLimiter


class _FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_first_request_is_allowed_with_remaining_max_minus_one() -> None:
    limiter = FixedWindowRateLimiter(clock=_FakeClock())

    result = limiter.check("10.0.0.1", max_requests=5, window_seconds=60)

    assert result.allowed is True
    assert result.remaining == 4
    assert result.reset_at == 60


def test_request_after_max_within_window_is_denied() -> None:
    limiter = FixedWindowRateLimiter(clock=_FakeClock())

    results = [limiter.check("10.0.0.1", max_requests=3, window_seconds=60) for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]


def test_window_expiry_resets_count() -> None:
    clock = _FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock)
    for _ in range(3):
        limiter.check("10.0.0.1", max_requests=3, window_seconds=60)
    assert limiter.check("10.0.0.1", max_requests=3, window_seconds=60).allowed is False

    clock.now = 60
    assert limiter.check("10.0.0.1", max_requests=3, window_seconds=60).allowed is False

    clock.now = 60.5
    result = limiter.check("10.0.0.1", max_requests=3, window_seconds=60)

    assert result.allowed is True
    assert result.remaining == 2


def test_identifiers_are_counted_independently() -> None:
    limiter = FixedWindowRateLimiter(clock=_FakeClock())
    limiter.check("a", max_requests=1, window_seconds=60)

    assert limiter.check("a", max_requests=1, window_seconds=60).allowed is False
    assert limiter.check("b", max_requests=1, window_seconds=60).allowed is True


def test_reset_clears_identifier() -> None:
    limiter = FixedWindowRateLimiter(clock=_FakeClock())
    limiter.check("a", max_requests=1, window_seconds=60)

    limiter.reset("a")

    assert limiter.check("a", max_requests=1, window_seconds=60).allowed is True


def test_sweep_drops_only_finished_windows() -> None:
    clock = _FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock)
    limiter.check("10.0.0.1", max_requests=5, window_seconds=10)
    limiter.check("10.0.0.2", max_requests=5, window_seconds=60)

    clock.now = 10
    assert limiter.sweep() == 0

    clock.now = 10.5
    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.check("10.0.0.2", max_requests=5, window_seconds=60).remaining == 3
