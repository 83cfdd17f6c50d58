"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the router and feature modules.
"""

from __future__ import annotations

import html
import re
from typing import Optional, Tuple

from telethon.tl.custom import Message

from core.models import MessageContext


def strip_bot_mention(text: str, bot_username: Optional[str]) -> Tuple[str, bool]:
    """Remove a leading ``@bot`` mention. Returns (text, was_mentioned)."""

    if not bot_username:
        return text.strip(), False
    pattern = re.compile(rf"^\s*@{re.escape(bot_username)}\b[\s,:]*", re.IGNORECASE)
    stripped, count = pattern.subn("", text, count=1)
    return stripped.strip(), bool(count)


def _sender_username(sender) -> Optional[str]:
    username = getattr(sender, "username", None)
    if isinstance(username, str) and username:
        return username.lower()
    return None


async def build_context(message: Message, bot_username: Optional[str] = None) -> MessageContext:
    """Build a core MessageContext from a Telethon Message.

    The sender is fetched rather than read from the cache: ``message.sender``
    is None for entities Telethon has not seen yet.
    """

    # Clients may send entity-escaped text; commands are matched on the plain form.
    raw_text = html.unescape(message.raw_text or "")
    text, addressed = strip_bot_mention(raw_text, bot_username)
    is_private = bool(getattr(message, "is_private", False))
    mentioned = bool(getattr(message, "mentioned", False))
    sender = await message.get_sender()

    return MessageContext(
        chat_id=message.chat_id,
        message_id=message.id,
        sender_id=message.sender_id or 0,
        date=message.date,
        text=text,
        # Private chats are always addressed to the bot.
        is_mention=addressed or mentioned or is_private,
        is_private=is_private,
        sender_is_bot=bool(getattr(sender, "bot", False)),
        sender_username=_sender_username(sender),
    )
