from __future__ import annotations

from core.config import DEFAULT_RATE_LIMITS, RateLimitRule, build_rate_limits
from core.rate_limit import RateLimiter, rate_limit_message


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


RULE = RateLimitRule(identifier="factoids", max_requests=2, window_seconds=30)


def test_allows_up_to_max_requests() -> None:
    limiter = RateLimiter(clock=FakeClock())

    assert limiter.check("u1", RULE) is True
    assert limiter.check("u1", RULE) is True
    assert limiter.check("u1", RULE) is False


def test_limits_are_per_user_and_identifier() -> None:
    limiter = RateLimiter(clock=FakeClock())
    other = RateLimitRule(identifier="karma", max_requests=1, window_seconds=30)

    limiter.check("u1", RULE)
    limiter.check("u1", RULE)

    assert limiter.check("u2", RULE) is True
    assert limiter.check("u1", other) is True


def test_window_resets_after_expiry() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    limiter.check("u1", RULE)
    limiter.check("u1", RULE)

    clock.now += 31

    assert limiter.check("u1", RULE) is True


def test_remaining_seconds_rounds_up() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    limiter.check("u1", RULE)
    clock.now += 10.5

    assert limiter.remaining_seconds("u1", "factoids") == 20
    assert limiter.remaining_seconds("u2", "factoids") == 0


def test_sweep_drops_expired_windows() -> None:
    clock = FakeClock()
    limiter = RateLimiter(clock=clock)
    limiter.check("u1", RULE)
    limiter.check("u2", RateLimitRule(identifier="general", max_requests=5, window_seconds=120))
    clock.now += 60

    assert limiter.sweep_expired() == 1
    assert limiter.remaining_seconds("u2", "general") == 60


def test_rate_limit_message_wording() -> None:
    assert rate_limit_message(0) == "Please try again."
    assert rate_limit_message(1) == "⏱️ Rate limit exceeded. Please wait 1 second before trying again."
    assert rate_limit_message(25) == "⏱️ Rate limit exceeded. Please wait 25 seconds before trying again."
    assert rate_limit_message(60) == "⏱️ Rate limit exceeded. Please wait 1 minute before trying again."
    assert rate_limit_message(90) == "⏱️ Rate limit exceeded. Please wait 2 minutes before trying again."


def test_build_rate_limits_merges_over_defaults() -> None:
    limits = build_rate_limits({"karma": {"max_requests": 3}, "custom": {"max_requests": 1, "window_seconds": 5}})

    assert limits["karma"].max_requests == 3
    assert limits["karma"].window_seconds == DEFAULT_RATE_LIMITS["karma"].window_seconds
    assert limits["factoids"] == DEFAULT_RATE_LIMITS["factoids"]
    assert limits["custom"] == RateLimitRule(identifier="custom", max_requests=1, window_seconds=5.0)
