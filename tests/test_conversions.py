from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from core.dispatch import DispatchRegistry
from core.models import ConversationRef, MessageContext
from features.conversions import (
    ConversionsFeature,
    convert_distance,
    convert_temperature,
    find_conversions,
    format_number,
    opposite_distance_unit,
)


class FakeChat:
    def __init__(self) -> None:
        self.sent: list[tuple[ConversationRef, str]] = []

    async def reply(self, conversation: ConversationRef, text: str) -> None:
        self.sent.append((conversation, text))


def _message(text: str) -> MessageContext:
    return MessageContext(
        chat_id=10,
        message_id=20,
        sender_id=30,
        date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        text=text,
    )


def test_temperature_conversion() -> None:
    assert convert_temperature(100, "c", "F") == pytest.approx(212)
    assert convert_temperature(32, "fahrenheit", "C") == pytest.approx(0)
    assert convert_temperature(0, "kelvin", "C") == pytest.approx(-273.15)


def test_distance_conversion() -> None:
    assert convert_distance(1, "mile", "km") == pytest.approx(1.609344)
    assert convert_distance(100, "cm", "inches") == pytest.approx(39.3700787)
    assert convert_distance(3, "ft", "m") == pytest.approx(0.9144)


def test_opposite_distance_units() -> None:
    assert opposite_distance_unit("mi") == "km"
    assert opposite_distance_unit("k") == "miles"
    assert opposite_distance_unit("meters") == "feet"
    assert opposite_distance_unit("furlong") == "unknown"


def test_format_number() -> None:
    assert format_number(212.0) == "212"
    assert format_number(23.888) == "23.9"
    assert format_number(-40.0) == "-40"


def test_find_conversions() -> None:
    assert find_conversions("it is 75F outside") == ["75°F = 23.9°C"]
    assert find_conversions("water boils at 100°C") == ["100°C = 212°F"]
    assert find_conversions("ran 5 miles then 10 km") == ["5 miles = 8 km", "10 km = 6.2 miles"]
    assert find_conversions("6 feet tall") == ["6 feet = 1.8 m"]
    assert find_conversions("nothing to see") == []


def test_feature_replies_in_thread() -> None:
    chat = FakeChat()
    feature = ConversionsFeature(chat)
    feature.setup(DispatchRegistry())

    asyncio.run(feature.handle(_message("it was -40F today")))

    assert chat.sent == [(ConversationRef(chat_id=10, reply_to=20), "-40°F = -40°C")]


def test_feature_skips_other_commands() -> None:
    chat = FakeChat()
    registry = DispatchRegistry()
    registry.register(r"^!convert", "other", 5)
    feature = ConversionsFeature(chat)
    feature.setup(registry)

    asyncio.run(feature.handle(_message("!convert 5 miles")))

    assert chat.sent == []


def test_feature_silent_without_measurements() -> None:
    chat = FakeChat()
    feature = ConversionsFeature(chat)
    feature.setup(DispatchRegistry())

    asyncio.run(feature.handle(_message("hello there")))

    assert chat.sent == []
