from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from adapters.telegram_mapper import build_context, strip_bot_mention
from core.models import ConversationRef


class DummySender:
    def __init__(self, username: "str | None" = None, bot: bool = False) -> None:
        self.username = username
        self.bot = bot


class DummyMessage:
    def __init__(
        self,
        *,
        chat_id: int,
        message_id: int,
        text: str,
        sender_id: "int | None" = 42,
        sender: "DummySender | None" = None,
        is_private: bool = False,
        mentioned: bool = False,
    ) -> None:
        self.chat_id = chat_id
        self.id = message_id
        self.raw_text = text
        self.sender_id = sender_id
        # Uncached sender entities are only reachable through get_sender().
        self.sender = None
        self._sender = sender
        self.is_private = is_private
        self.mentioned = mentioned
        self.date = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def get_sender(self) -> "DummySender | None":
        return self._sender


def test_strip_bot_mention() -> None:
    assert strip_bot_mention("@SwitchBot coffee is great", "switchbot") == ("coffee is great", True)
    assert strip_bot_mention("@switchbot, forget tea", "switchbot") == ("forget tea", True)
    assert strip_bot_mention("@switchbotter hi", "switchbot") == ("@switchbotter hi", False)
    assert strip_bot_mention("  hi  ", None) == ("hi", False)


def test_build_context_basic_fields() -> None:
    message = DummyMessage(
        chat_id=-100123,
        message_id=10,
        text="karma bob",
        sender=DummySender(username="Alice"),
    )

    context = asyncio.run(build_context(message, "switchbot"))

    assert context.chat_id == -100123
    assert context.message_id == 10
    assert context.sender_id == 42
    assert context.text == "karma bob"
    assert context.is_mention is False
    assert context.sender_username == "alice"
    assert context.requester_id == "42"
    assert context.scope == "-100123"
    assert context.conversation == ConversationRef(chat_id=-100123, reply_to=10)


def test_build_context_leading_mention() -> None:
    message = DummyMessage(chat_id=1, message_id=2, text="@switchbot coffee is great")

    context = asyncio.run(build_context(message, "switchbot"))

    assert context.text == "coffee is great"
    assert context.is_mention is True


def test_build_context_private_chat_counts_as_mention() -> None:
    message = DummyMessage(chat_id=5, message_id=2, text="forget tea", is_private=True)

    context = asyncio.run(build_context(message))

    assert context.is_mention is True
    assert context.is_private is True


def test_build_context_unescapes_html_entities() -> None:
    message = DummyMessage(chat_id=1, message_id=2, text="fish &amp; chips?")

    assert asyncio.run(build_context(message)).text == "fish & chips?"


def test_build_context_flags_bot_senders() -> None:
    message = DummyMessage(chat_id=1, message_id=2, text="hi", sender=DummySender(bot=True), sender_id=None)

    context = asyncio.run(build_context(message))

    assert context.sender_is_bot is True
    assert context.sender_id == 0


def test_build_context_fetches_uncached_sender_for_karma_and_bot_checks() -> None:
    message = DummyMessage(chat_id=1, message_id=2, text="alice++", sender=DummySender(username="Alice"))

    context = asyncio.run(build_context(message))

    assert message.sender is None
    assert context.sender_username == "alice"
