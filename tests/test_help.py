from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from core.dispatch import DispatchRegistry
from core.models import MessageContext
from features.help import HelpFeature, format_full_help, format_plugin_help, process_help_request


class FakeChat:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def reply(self, conversation, text: str) -> None:
        self.sent.append(text)


def _message(text: str) -> MessageContext:
    return MessageContext(
        chat_id=1,
        message_id=2,
        sender_id=3,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        text=text,
    )


def test_full_help_lists_every_plugin() -> None:
    text = format_full_help()

    assert text.startswith("**Available Plugins:**")
    for title in ("**Factoids**", "**Karma System**", "**Conversions**", "**Help**"):
        assert title in text
    assert text.endswith("try `@bot help <plugin>` (e.g., `@bot help karma`)")


def test_plugin_help_uses_bot_username() -> None:
    text = format_plugin_help("factoids", bot_username="switchbot")

    assert text is not None
    assert "• `@switchbot X is Y` - Set a factoid" in text
    assert "@bot" not in text


def test_unknown_plugin() -> None:
    assert process_help_request("weather") == (
        'Plugin "weather" not found. Try one of: factoids, karma, conversions, help'
    )


def test_help_feature_replies() -> None:
    chat = FakeChat()
    feature = HelpFeature(chat)
    feature.setup(DispatchRegistry())

    asyncio.run(feature.handle(_message("help")))
    asyncio.run(feature.handle(_message("HELP karma")))
    asyncio.run(feature.handle(_message("helpful tips")))

    assert len(chat.sent) == 2
    assert chat.sent[0].startswith("**Available Plugins:**")
    assert chat.sent[1].startswith("**Karma System**")


def test_help_claims_commands_and_question_words() -> None:
    registry = DispatchRegistry()
    HelpFeature(FakeChat()).setup(registry)

    assert registry.resolve("commands") == "help"
    assert registry.resolve("Plugins") == "help"
    assert registry.resolve("what") == "common-words"
    assert registry.resolve("what is this") is None
