from __future__ import annotations

import pytest

from client import bot_token, build_client


def test_build_client_requires_api_credentials(monkeypatch) -> None:
    monkeypatch.setenv("API_ID", "")
    monkeypatch.setenv("API_HASH", "")

    with pytest.raises(RuntimeError, match="API_ID or API_HASH"):
        build_client("switchboard-test")


def test_bot_token_blank_means_user_account(monkeypatch) -> None:
    monkeypatch.setenv("BOT_TOKEN", "")
    assert bot_token() is None

    monkeypatch.setenv("BOT_TOKEN", "123:abc")
    assert bot_token() == "123:abc"
