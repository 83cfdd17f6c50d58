"""Core domain models.

These dataclasses are shared across the core, the feature modules and the
adapters so none of them depend on Telethon types directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class ConversationRef:
    """Where a reply should go: a chat and, optionally, the message to thread under."""

    chat_id: int
    reply_to: Optional[int] = None


@dataclass(frozen=True)
class MessageContext:
    """Minimal inbound message used by the router and feature modules."""

    chat_id: int
    message_id: int
    sender_id: int
    date: datetime
    text: str
    is_mention: bool = False
    is_private: bool = False
    sender_is_bot: bool = False
    sender_username: Optional[str] = None

    @property
    def requester_id(self) -> str:
        return str(self.sender_id)

    @property
    def scope(self) -> str:
        # Records are kept per chat, the closest Telegram analogue of a workspace.
        return str(self.chat_id)

    @property
    def conversation(self) -> ConversationRef:
        """Reply target: threaded under this message."""

        return ConversationRef(chat_id=self.chat_id, reply_to=self.message_id)


@dataclass(frozen=True)
class PendingAction:
    """A proposed destructive action waiting for a second, confirming message."""

    requester_id: str
    kind: str
    payload: Any
    conversation: Optional[ConversationRef]
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
