"""Application entry point for the switchboard chat bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional

from art import tprint
from telethon import events

import settings
from adapters.json_backups import JsonBackupStore
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_mapper import build_context
from adapters.telegram_replier import TelegramReplier
from client import bot_token, build_client
from core.dispatch import DispatchRegistry
from core.pending import PendingActionStore
from core.rate_limit import RateLimiter
from core.router import MessageRouter
from core.sweeper import ExpirySweeper
from features.loader import load_features
from get_session import authorize, login
from logging_setup import configure_logging

NAME = "SWITCHBOARD"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


async def _start_sweeper(sweeper: ExpirySweeper) -> None:
    sweeper.start()


def _run() -> None:
    _print_banner()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    logger = logging.getLogger(__name__)

    logger.info("Starting switchboard")

    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    backups = JsonBackupStore(settings.BACKUPS_DIR)

    # Both live for the whole process and start empty; restarts drop any
    # unconfirmed actions.
    registry = DispatchRegistry()
    pending = PendingActionStore(default_ttl=settings.PENDING.ttl_seconds)
    limiter = RateLimiter()

    client = build_client(settings.SESSION_NAME)
    token = bot_token()
    if token:
        client.start(bot_token=token)
    else:
        client.loop.run_until_complete(client.connect())
        client.loop.run_until_complete(authorize(client))

    bot_username = settings.BOT_USERNAME
    if not bot_username:
        me = client.loop.run_until_complete(client.get_me())
        bot_username = getattr(me, "username", None)
    logger.info("Running as @%s", bot_username)

    features = load_features(
        settings.PLUGINS,
        registry,
        TelegramReplier(client),
        facts=storage,
        karma=storage,
        backups=backups,
        pending=pending,
        limiter=limiter,
        rate_limits=settings.RATE_LIMITS,
        bot_username=bot_username,
    )
    router = MessageRouter(registry, features)

    sweeper = ExpirySweeper([pending, limiter], interval=settings.PENDING.sweep_interval_seconds)
    client.loop.run_until_complete(_start_sweeper(sweeper))

    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            context = await build_context(event.message, bot_username)
            await router.handle(context)
        except Exception:
            logger.exception("Error while processing message")

    logger.info("Client connected. Listening for incoming messages...")
    try:
        client.run_until_disconnected()
    finally:
        client.loop.run_until_complete(sweeper.stop())
        logger.info("Switchboard stopped")


def _login() -> None:
    _print_banner()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    asyncio.run(login(settings.SESSION_NAME))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="switchboard")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")
    subparsers.add_parser("login", help="Log in a user account and save the session")

    args = parser.parse_args(argv)
    if args.command == "login":
        _login()
        return
    _run()


if __name__ == "__main__":
    main()
