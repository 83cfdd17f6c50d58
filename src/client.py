"""Telegram client factory for switchboard.

The same session file serves both modes: a bot account when BOT_TOKEN is set,
otherwise a user account logged in once with ``switchboard login``.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from telethon import TelegramClient


def build_client(session_name: Optional[str] = None) -> TelegramClient:
    """Create a Telethon client from API_ID/API_HASH in the environment or .env.

    ``session_name`` falls back to SESSION_NAME, then "switchboard".
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = session_name or os.getenv("SESSION_NAME", "switchboard")

    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    logging.getLogger(__name__).info("Initializing Telegram client (%s)", session_name)

    return TelegramClient(session_name, int(api_id), api_hash)


def bot_token() -> Optional[str]:
    """Bot API token, if the bot runs as a Telegram bot rather than a user account."""

    load_dotenv()
    return os.getenv("BOT_TOKEN") or None
