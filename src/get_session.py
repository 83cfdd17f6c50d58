"""Interactive login for running switchboard on a user account.

Only needed when no BOT_TOKEN is configured: the session file created here is
reused by ``switchboard run``.
"""

from __future__ import annotations

import asyncio
import logging
import os
from getpass import getpass
from typing import Optional

import qrcode
from dotenv import load_dotenv
from telethon import TelegramClient, errors

from client import build_client

LOGGER = logging.getLogger(__name__)

LOGIN_METHODS = {"1": "qr", "2": "phone"}


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _resolve_2fa_password() -> str:
    password = os.getenv("2FA")
    if password:
        return password
    return getpass("2FA password: ")


async def _authorize_with_qr(client: TelegramClient) -> None:
    qr = await client.qr_login()
    _print_qr(qr.url)
    await qr.wait(timeout=120)


async def _authorize_with_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def pick_login_method() -> str:
    """LOGIN_METHOD from the environment, otherwise ask on the terminal."""

    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in LOGIN_METHODS.values():
        return method
    while True:
        print("")
        print("Login methods:")
        print("[1] QR code")
        print("[2] Phone code")
        print("[3] Exit")
        choice = input("switchboard > ").strip()
        if choice in LOGIN_METHODS:
            return LOGIN_METHODS[choice]
        if choice == "3":
            raise SystemExit(0)
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient) -> None:
    if await client.is_user_authorized():
        return

    load_dotenv()
    try:
        if pick_login_method() == "phone":
            await _authorize_with_phone(client)
        else:
            await _authorize_with_qr(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_resolve_2fa_password())


async def login(session_name: Optional[str] = None) -> None:
    client = build_client(session_name)
    await client.connect()
    try:
        await authorize(client)
        me = await client.get_me()
        LOGGER.info("Logged in as: %s", getattr(me, "first_name", None) or getattr(me, "username", "?"))
    finally:
        await client.disconnect()


if __name__ == "__main__":
    asyncio.run(login())
