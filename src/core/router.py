"""Core message routing.

This module is integration-agnostic. Every enabled feature sees every inbound
message and decides for itself whether to act, except when an exclusive rule
claims the text: then only that rule's owner is consulted.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from core.dispatch import DispatchRegistry
from core.models import MessageContext
from core.ports import FeaturePort

LOGGER = logging.getLogger(__name__)


class MessageRouter:
    """Fans inbound messages out to feature modules."""

    def __init__(self, registry: DispatchRegistry, features: Iterable[FeaturePort]) -> None:
        self._registry = registry
        self._features = list(features)

    @property
    def features(self) -> List[FeaturePort]:
        return list(self._features)

    def recipients(self, message: MessageContext) -> List[FeaturePort]:
        """Features that should see ``message``, in load order."""

        winner = self._registry.resolve_rule(message.text)
        if winner is not None:
            LOGGER.debug("Message %s owned by %s", message.message_id, winner.owner_id)
            if winner.exclusive:
                return [feature for feature in self._features if feature.name == winner.owner_id]
        return list(self._features)

    async def handle(self, message: MessageContext) -> None:
        """Process one message context."""

        # Our own replies (and other bots) would otherwise loop back in.
        if message.sender_is_bot:
            return

        if not message.text.strip():
            return

        for feature in self.recipients(message):
            try:
                await feature.handle(message)
            except Exception:
                LOGGER.exception("Feature %s failed on message %s", feature.name, message.message_id)
