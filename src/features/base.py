"""Shared plumbing for feature modules."""

from __future__ import annotations

import re
from typing import Iterable, Optional

from core.dispatch import DispatchRegistry, RuleSpec
from core.models import MessageContext
from core.ports import ChatPort


class Feature:
    """Base class: a named module that claims patterns and handles messages."""

    name = ""

    def __init__(self, chat: ChatPort) -> None:
        self._chat = chat
        self._registry: Optional[DispatchRegistry] = None

    def rules(self) -> Iterable[RuleSpec]:
        """Patterns this feature claims. Registered once, at startup."""

        return ()

    def setup(self, registry: DispatchRegistry) -> None:
        self._registry = registry
        for spec in self.rules():
            registry.register_rule(spec)

    @property
    def registry(self) -> DispatchRegistry:
        if self._registry is None:
            raise RuntimeError(f"Feature {self.name} used before setup()")
        return self._registry

    async def say(self, message: MessageContext, text: str) -> None:
        await self._chat.reply(message.conversation, text)

    async def handle(self, message: MessageContext) -> None:
        raise NotImplementedError


def rule(pattern: str, owner_id: str, priority: float, *, exclusive: bool = False, flags: int = re.IGNORECASE) -> RuleSpec:
    """Shorthand for a case-insensitive ``RuleSpec``."""

    return RuleSpec(pattern=pattern, owner_id=owner_id, priority=priority, exclusive=exclusive, flags=flags)
