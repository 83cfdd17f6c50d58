"""Per-user fixed-window rate limiting for feature commands."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import threading
import time
from typing import Callable, Dict, Optional

from core.config import RateLimitRule

LOGGER = logging.getLogger(__name__)


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """Counts requests per ``identifier:user`` inside a fixed time window."""

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._windows: Dict[str, _Window] = {}

    def check(self, user_id: str, rule: RateLimitRule) -> bool:
        """Record one request and return False if the user is over the limit."""

        key = f"{rule.identifier}:{user_id}"
        with self._lock:
            now = self._clock()
            window = self._windows.get(key)
            if window is None or now > window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + rule.window_seconds)
                return True
            if window.count >= rule.max_requests:
                LOGGER.info(
                    "Rate limit exceeded for %s (%s/%s)",
                    key,
                    window.count,
                    rule.max_requests,
                )
                return False
            window.count += 1
            return True

    def remaining_seconds(self, user_id: str, identifier: str) -> int:
        """Seconds until the user's window resets, or 0 when not limited."""

        with self._lock:
            window = self._windows.get(f"{identifier}:{user_id}")
            if window is None:
                return 0
            now = self._clock()
            if now > window.reset_at:
                return 0
            return math.ceil(window.reset_at - now)

    def sweep_expired(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, window in self._windows.items() if now > window.reset_at]
            for key in expired:
                del self._windows[key]
        if expired:
            LOGGER.debug("Cleaned up %s expired rate limit windows", len(expired))
        return len(expired)


def rate_limit_message(remaining_seconds: int) -> str:
    """User-facing text for a rate-limited request."""

    if remaining_seconds <= 0:
        return "Please try again."
    if remaining_seconds == 1:
        return "⏱️ Rate limit exceeded. Please wait 1 second before trying again."
    if remaining_seconds < 60:
        return f"⏱️ Rate limit exceeded. Please wait {remaining_seconds} seconds before trying again."
    minutes = math.ceil(remaining_seconds / 60)
    suffix = "" if minutes == 1 else "s"
    return f"⏱️ Rate limit exceeded. Please wait {minutes} minute{suffix} before trying again."
