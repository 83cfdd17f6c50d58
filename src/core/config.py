"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PendingConfig:
    """Confirmation store settings shared by every confirmation kind."""

    ttl_seconds: float = 300.0
    sweep_interval_seconds: float = 600.0


@dataclass(frozen=True)
class RateLimitRule:
    """Fixed-window limit for one feature (or the general command budget)."""

    identifier: str
    max_requests: int
    window_seconds: float


DEFAULT_RATE_LIMITS: dict[str, RateLimitRule] = {
    "karma": RateLimitRule(identifier="karma", max_requests=10, window_seconds=60),
    "factoids": RateLimitRule(identifier="factoids", max_requests=5, window_seconds=30),
    "general": RateLimitRule(identifier="general", max_requests=20, window_seconds=60),
}


def build_rate_limits(raw: dict) -> dict[str, RateLimitRule]:
    """Merge the ``rate_limits`` config section over the defaults."""

    limits = dict(DEFAULT_RATE_LIMITS)
    for identifier, entry in (raw or {}).items():
        base = limits.get(identifier)
        limits[identifier] = RateLimitRule(
            identifier=identifier,
            max_requests=int(entry.get("max_requests", base.max_requests if base else 20)),
            window_seconds=float(entry.get("window_seconds", base.window_seconds if base else 60)),
        )
    return limits
