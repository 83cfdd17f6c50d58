"""Temperature and distance auto-conversion.

Mentions like "75F" or "5 miles" get a threaded reply with the value in the
other measurement system. 'k' alone means kilometers, 'kelvin' is temperature.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List

from core.dispatch import RuleSpec
from core.models import MessageContext
from features.base import Feature, rule

LOGGER = logging.getLogger(__name__)

TEMPERATURE_PATTERN = r"(-?\d+(?:\.\d+)?)\s*°?\s*(f|fahrenheit|c|celsius|kelvin)\b"
DISTANCE_PATTERN = (
    r"(\d+(?:\.\d+)?)\s*"
    r"(miles?|mi|feet|ft|inches?|in|kilometers?|km|k(?!elvin)|meters?|m|centimeters?|cm)\b"
)

_TEMPERATURE = re.compile(TEMPERATURE_PATTERN, re.IGNORECASE)
_DISTANCE = re.compile(DISTANCE_PATTERN, re.IGNORECASE)
# Everything from the first number on; what is left is the command prefix.
_FROM_FIRST_NUMBER = re.compile(r"\s*\d+.*")

_METERS_PER_UNIT = (
    (("mile", "mi"), 1609.344),
    (("feet", "ft"), 0.3048),
    (("inch", "in"), 0.0254),
    (("kilometer", "km", "k"), 1000.0),
    (("meter", "m"), 1.0),
    (("centimeter", "cm"), 0.01),
)

_OPPOSITE_DISTANCE = {
    "mile": "km",
    "feet": "m",
    "inch": "cm",
    "kilometer": "miles",
    "meter": "feet",
    "centimeter": "inches",
}


def _distance_family(unit: str) -> str:
    u = unit.lower()
    for names, _ in _METERS_PER_UNIT:
        prefix, *aliases = names
        if u.startswith(prefix) or u in aliases:
            return prefix
    raise ValueError(f"Unknown distance unit: {unit}")


def convert_temperature(value: float, from_unit: str, to_unit: str) -> float:
    source = from_unit.lower()
    target = to_unit.lower()

    if source.startswith("f"):
        celsius = (value - 32) * 5 / 9
    elif source.startswith("c"):
        celsius = value
    elif source == "kelvin":
        celsius = value - 273.15
    else:
        raise ValueError(f"Unknown temperature unit: {from_unit}")

    if target.startswith("f"):
        return celsius * 9 / 5 + 32
    if target.startswith("c"):
        return celsius
    if target == "kelvin":
        return celsius + 273.15
    raise ValueError(f"Unknown temperature unit: {to_unit}")


def convert_distance(value: float, from_unit: str, to_unit: str) -> float:
    factors = {names[0]: factor for names, factor in _METERS_PER_UNIT}
    meters = value * factors[_distance_family(from_unit)]
    return meters / factors[_distance_family(to_unit)]


def opposite_temperature_unit(unit: str) -> str:
    return "F" if unit.lower().startswith("c") else "C"


def opposite_distance_unit(unit: str) -> str:
    try:
        return _OPPOSITE_DISTANCE[_distance_family(unit)]
    except ValueError:
        return "unknown"


def format_number(value: float) -> str:
    """One decimal place, without a trailing ``.0``."""

    rounded = round(value, 1)
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)


def find_conversions(text: str) -> List[str]:
    """Return one conversion line per temperature or distance found in ``text``."""

    conversions: List[str] = []
    for match in _TEMPERATURE.finditer(text):
        raw_value, unit = match.group(1), match.group(2)
        target = opposite_temperature_unit(unit)
        converted = convert_temperature(float(raw_value), unit, target)
        conversions.append(f"{raw_value}°{unit.upper()} = {format_number(converted)}°{target}")

    for match in _DISTANCE.finditer(text):
        raw_value, unit = match.group(1), match.group(2)
        target = opposite_distance_unit(unit)
        if target == "unknown":
            continue
        converted = convert_distance(float(raw_value), unit, target)
        conversions.append(f"{raw_value} {unit} = {format_number(converted)} {target}")
    return conversions


class ConversionsFeature(Feature):
    name = "conversions"

    def rules(self) -> Iterable[RuleSpec]:
        # Low priority: these detect measurements, they are not commands.
        yield rule(TEMPERATURE_PATTERN, self.name, 1)
        yield rule(DISTANCE_PATTERN, self.name, 1)

    async def handle(self, message: MessageContext) -> None:
        prefix = _FROM_FIRST_NUMBER.sub("", message.text, count=1)
        # Text whose prefix is another module's command is left alone.
        if self.registry.matches_any(prefix):
            return

        conversions = find_conversions(message.text)
        if not conversions:
            return
        await self.say(message, "\n".join(conversions))
        LOGGER.info("Converted %s units in message from user %s", len(conversions), message.sender_id)
