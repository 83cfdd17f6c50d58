"""Karma: reputation points for people and things."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from core.config import RateLimitRule
from core.dispatch import RuleSpec
from core.models import MessageContext
from core.ports import ChatPort, KarmaStore
from core.rate_limit import RateLimiter, rate_limit_message
from features.base import Feature, rule

LOGGER = logging.getLogger(__name__)

CHANGE_PATTERN = re.compile(r"^(\S+?)(\+\+|--)$")
QUERY_PATTERN = re.compile(r"^karma\s+(\S+)$", re.IGNORECASE)


def normalize_name(raw: str) -> str:
    return raw.strip().lstrip("@").lower()


class KarmaFeature(Feature):
    name = "karma"

    def __init__(
        self,
        chat: ChatPort,
        store: KarmaStore,
        limiter: Optional[RateLimiter] = None,
        limit: Optional[RateLimitRule] = None,
    ) -> None:
        super().__init__(chat)
        self._store = store
        self._limiter = limiter
        self._limit = limit

    def rules(self) -> Iterable[RuleSpec]:
        yield rule(CHANGE_PATTERN.pattern, self.name, 2)
        yield rule(QUERY_PATTERN.pattern, self.name, 2)

    def _allowed(self, message: MessageContext) -> bool:
        if self._limiter is None or self._limit is None:
            return True
        return self._limiter.check(message.requester_id, self._limit)

    async def handle(self, message: MessageContext) -> None:
        text = message.text.strip()
        change = CHANGE_PATTERN.match(text)
        query = QUERY_PATTERN.match(text) if change is None else None
        if change is None and query is None:
            return

        if not self._allowed(message):
            remaining = self._limiter.remaining_seconds(message.requester_id, self._limit.identifier)
            await self.say(message, rate_limit_message(remaining))
            return

        if query is not None:
            target = normalize_name(query.group(1))
            score = self._store.get_karma(message.scope, target)
            await self.say(message, f"{target} has {score} karma.")
            return

        target = normalize_name(change.group(1))
        if not target:
            return
        if target in {normalize_name(str(message.sender_id)), normalize_name(message.sender_username or "")}:
            await self.say(message, "Nice try, but you can't change your own karma.")
            return

        delta = 1 if change.group(2) == "++" else -1
        score = self._store.add_karma(message.scope, target, delta)
        LOGGER.info("Karma for %s is now %s", target, score)
        await self.say(message, f"{target} now has {score} karma.")
