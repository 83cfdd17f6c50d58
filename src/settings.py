"""Static configuration for switchboard.

All user-editable settings (plugins, confirmation timeouts, rate limits,
storage, logging) live in a single JSON file for quick edits without touching
Python. Secrets stay in the environment (.env).
"""

import json
import os

from dotenv import load_dotenv

from core.config import PendingConfig, build_rate_limits
from core.plugins import PluginFilter

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.getenv("SWITCHBOARD_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _project_path(path: str) -> str:
    return path if os.path.isabs(path) else os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Bot identity. The username is stripped from leading mentions and used in
# help text in place of "@bot".
_bot = _CONFIG.get("bot", {})
SESSION_NAME = os.getenv("SESSION_NAME") or _bot.get("session_name", "switchboard")
BOT_USERNAME = (_bot.get("username") or "").lstrip("@") or None

# Plugin selection: ENABLED_PLUGINS (comma separated) overrides config.json.
# An empty or missing list enables every plugin.
_plugins = _CONFIG.get("plugins", {})
PLUGINS = PluginFilter(os.getenv("ENABLED_PLUGINS") or _plugins.get("enabled"))

# One TTL for every confirmation kind, and how often abandoned ones are swept.
_pending = _CONFIG.get("pending", {})
PENDING = PendingConfig(
    ttl_seconds=float(_pending.get("ttl_seconds", 300)),
    sweep_interval_seconds=float(_pending.get("sweep_interval_seconds", 600)),
)

# Per-feature fixed-window limits keyed by identifier (karma, factoids, general).
RATE_LIMITS = build_rate_limits(_CONFIG.get("rate_limits", {}))

# Where records and snapshots live.
_storage = _CONFIG.get("storage", {})
DB_PATH = _project_path(_storage.get("db_path", "data/switchboard.db"))
BACKUPS_DIR = _project_path(_storage.get("backups_dir", "data/backups"))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
