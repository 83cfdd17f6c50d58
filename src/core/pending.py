"""Pending-action confirmation store (core domain).

Two-message flows (delete an item, bulk cleanup, restore a snapshot) park the
proposed action here until the requester confirms or cancels it, or until it
expires. Entries are keyed by (requester, kind) so unrelated flows never see
each other, and a new request for the same key replaces the old one.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import threading
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

from core.models import ConversationRef, PendingAction

LOGGER = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=5)

Clock = Callable[[], datetime]
TTL = Union[timedelta, int, float]


class PendingKey(NamedTuple):
    requester_id: str
    kind: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_timedelta(ttl: TTL) -> timedelta:
    value = ttl if isinstance(ttl, timedelta) else timedelta(seconds=float(ttl))
    if value <= timedelta(0):
        raise ValueError(f"ttl must be positive, got {ttl!r}")
    return value


class PendingActionStore:
    """In-memory table of pending actions, safe for concurrent callers.

    Every public operation runs as one critical section under a single lock,
    so operations on the same key are linearizable. Nothing here does I/O.
    """

    def __init__(self, default_ttl: TTL = DEFAULT_TTL, clock: Optional[Clock] = None) -> None:
        self._default_ttl = _as_timedelta(default_ttl)
        self._clock = clock or _utcnow
        self._lock = threading.Lock()
        self._entries: Dict[PendingKey, PendingAction] = {}

    @property
    def default_ttl(self) -> timedelta:
        return self._default_ttl

    def create(
        self,
        requester_id: str,
        kind: str,
        payload: Any,
        conversation: Optional[ConversationRef] = None,
        ttl: Optional[TTL] = None,
    ) -> PendingAction:
        """Park a new action, replacing any unconfirmed one for the same key."""

        lifetime = self._default_ttl if ttl is None else _as_timedelta(ttl)
        key = PendingKey(str(requester_id), kind)
        with self._lock:
            now = self._clock()
            action = PendingAction(
                requester_id=key.requester_id,
                kind=kind,
                payload=payload,
                conversation=conversation,
                created_at=now,
                expires_at=now + lifetime,
            )
            replaced = self._entries.get(key)
            self._entries[key] = action
        if replaced is not None:
            LOGGER.debug("Replaced pending %s for %s", kind, key.requester_id)
        return action

    def _live(self, key: PendingKey, now: datetime) -> Optional[PendingAction]:
        # Caller holds the lock. Expired entries are evicted on sight.
        action = self._entries.get(key)
        if action is None:
            return None
        if action.is_expired(now):
            del self._entries[key]
            LOGGER.debug("Pending %s for %s expired", key.kind, key.requester_id)
            return None
        return action

    def get(self, requester_id: str, kind: str) -> Optional[PendingAction]:
        """Return the live entry for the key without removing it."""

        key = PendingKey(str(requester_id), kind)
        with self._lock:
            return self._live(key, self._clock())

    def confirm(self, requester_id: str, kind: str) -> Optional[PendingAction]:
        """Take the live entry for the key; the caller executes its payload."""

        key = PendingKey(str(requester_id), kind)
        with self._lock:
            action = self._live(key, self._clock())
            if action is not None:
                del self._entries[key]
        return action

    def cancel(self, requester_id: str, kind: str) -> bool:
        """Drop the live entry for the key. Returns whether one was removed."""

        key = PendingKey(str(requester_id), kind)
        with self._lock:
            action = self._live(key, self._clock())
            if action is None:
                return False
            del self._entries[key]
        return True

    def sweep_expired(self, now: Optional[datetime] = None) -> int:
        """Remove every expired entry in a single pass and return the count."""

        with self._lock:
            now = now or self._clock()
            expired = [key for key, action in self._entries.items() if action.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def pending_for(self, requester_id: str) -> List[PendingAction]:
        """Live entries held by one requester, across all kinds."""

        requester_id = str(requester_id)
        with self._lock:
            now = self._clock()
            return [
                action
                for key, action in self._entries.items()
                if key.requester_id == requester_id and not action.is_expired(now)
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
