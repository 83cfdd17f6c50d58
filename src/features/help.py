"""Help text for every feature module."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Dict, Iterable, List, Optional, Tuple

from core.dispatch import RuleSpec
from core.models import MessageContext
from core.ports import ChatPort
from features.base import Feature, rule

HELP_PATTERN = re.compile(r"^(?:help|commands|plugins)(?:\s+(\w+))?$", re.IGNORECASE)


@dataclass(frozen=True)
class PluginHelp:
    title: str
    description: str
    commands: Tuple[Tuple[str, str], ...]


HELP_TEXT: Dict[str, PluginHelp] = {
    "factoids": PluginHelp(
        title="Factoids",
        description="Store and retrieve custom responses",
        commands=(
            ("keyword?", "Query a factoid (or use ! instead of ?)"),
            ("@bot X is Y", "Set a factoid"),
            ("@bot X is <reply>Y", "Set with direct reply"),
            ("@bot forget X", "Delete a factoid"),
            ("!factoid: list", "List all factoids"),
            ("!factoid: cleanup", "Find and remove invalid factoids"),
            ("!factoid: backup", "Create a backup of all factoids"),
            ("!factoid: backups", "List available factoid backups"),
            ("!factoid: restore FILENAME", "Restore factoids from a backup file"),
        ),
    ),
    "karma": PluginHelp(
        title="Karma System",
        description="Track and manage karma points",
        commands=(
            ("thing++", "Give karma to thing"),
            ("thing--", "Take karma from thing"),
            ("karma @user", "Query user's karma"),
            ("karma thing", "Query thing's karma"),
        ),
    ),
    "conversions": PluginHelp(
        title="Conversions",
        description="Converts temperatures and distances mentioned in chat",
        commands=(
            ("it is 75F outside", "Fahrenheit to Celsius (and back)"),
            ("ran 5 miles", "Imperial to metric distances (and back)"),
        ),
    ),
    "help": PluginHelp(
        title="Help",
        description="Show this help",
        commands=(
            ("help", "List all plugins"),
            ("help <plugin>", "Show every command of one plugin"),
        ),
    ),
}


def _with_bot(pattern: str, bot_username: Optional[str]) -> str:
    if bot_username and "@bot" in pattern:
        return pattern.replace("@bot", f"@{bot_username}")
    return pattern


def format_plugin_help(plugin: str, bot_username: Optional[str] = None) -> Optional[str]:
    help_entry = HELP_TEXT.get(plugin)
    if help_entry is None:
        return None
    lines = [f"**{help_entry.title}**", help_entry.description, "", "**Commands:**"]
    for pattern, description in help_entry.commands:
        lines.append(f"• `{_with_bot(pattern, bot_username)}` - {description}")
    return "\n".join(lines)


def format_full_help(bot_username: Optional[str] = None) -> str:
    lines: List[str] = ["**Available Plugins:**", ""]
    for help_entry in HELP_TEXT.values():
        lines.extend([f"**{help_entry.title}**", help_entry.description, "__Key commands:__"])
        for pattern, description in help_entry.commands[:2]:
            lines.append(f"• `{_with_bot(pattern, bot_username)}` - {description}")
        lines.append("")
    mention = _with_bot("@bot", bot_username)
    lines.append(
        f"For detailed help on a specific plugin, try `{mention} help <plugin>` (e.g., `{mention} help karma`)"
    )
    return "\n".join(lines)


def process_help_request(plugin: Optional[str], bot_username: Optional[str] = None) -> str:
    if not plugin:
        return format_full_help(bot_username)
    text = format_plugin_help(plugin, bot_username)
    if text is None:
        return f'Plugin "{plugin}" not found. Try one of: {", ".join(HELP_TEXT)}'
    return text


class HelpFeature(Feature):
    name = "help"

    def __init__(self, chat: ChatPort, bot_username: Optional[str] = None) -> None:
        super().__init__(chat)
        self._bot_username = bot_username

    def rules(self) -> Iterable[RuleSpec]:
        for word in ("help", "commands", "plugins"):
            yield rule(rf"^{word}$", "help", 10)
        # Bare question words would otherwise be read as factoid lookups.
        for word in ("what", "who", "how", "when", "where", "why"):
            yield rule(rf"^{word}$", "common-words", 5)

    async def handle(self, message: MessageContext) -> None:
        match = HELP_PATTERN.match(message.text.strip())
        if not match:
            return
        plugin = match.group(1).lower() if match.group(1) else None
        await self.say(message, process_help_request(plugin, self._bot_username))
