"""Telegram reply adapter.

Sends feature replies into the originating chat, threaded under the
triggering message.
"""

from __future__ import annotations

import logging

from core.models import ConversationRef

LOGGER = logging.getLogger(__name__)


class TelegramReplier:
    """ChatPort adapter backed by a connected Telethon client."""

    def __init__(self, client, parse_mode: str = "md") -> None:
        self._client = client
        self._parse_mode = parse_mode

    async def reply(self, conversation: ConversationRef, text: str) -> None:
        """Send ``text`` to the conversation's chat."""

        await self._client.send_message(
            conversation.chat_id,
            text,
            reply_to=conversation.reply_to,
            parse_mode=self._parse_mode,
            link_preview=False,
        )
        LOGGER.debug("Replied in %s (reply_to=%s)", conversation.chat_id, conversation.reply_to)
