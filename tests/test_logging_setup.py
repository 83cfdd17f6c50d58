from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from logging_setup import RedactingFormatter, build_handlers, collect_redaction_values


def _record(message: str) -> logging.LogRecord:
    return logging.LogRecord("switchboard", logging.INFO, __file__, 1, message, None, None)


def test_redacting_formatter_masks_secrets() -> None:
    formatter = RedactingFormatter(["s3cret", ""], fmt="%(message)s")

    assert formatter.format(_record("token=s3cret")) == "token=***"


def test_collect_redaction_values(monkeypatch) -> None:
    monkeypatch.setenv("API_HASH", "abc")
    monkeypatch.setenv("BOT_TOKEN", "abcdef")
    monkeypatch.delenv("PHONE", raising=False)
    config = {"redact": {"enabled": True, "patterns": ["API_HASH", "BOT_TOKEN", "PHONE"]}}

    assert collect_redaction_values(config) == ["abcdef", "abc"]
    assert collect_redaction_values({"redact": {"enabled": False, "patterns": ["API_HASH"]}}) == []


def test_build_handlers_console_and_file(tmp_path) -> None:
    config = {"console": True, "file": {"enabled": True, "path": "logs/switchboard.log"}}

    handlers = build_handlers(config, str(tmp_path), logging.INFO)

    assert len(handlers) == 2
    assert isinstance(handlers[1], RotatingFileHandler)
    assert (tmp_path / "logs").is_dir()
    for handler in handlers:
        handler.close()


def test_build_handlers_console_disabled(tmp_path) -> None:
    assert build_handlers({"console": False}, str(tmp_path), logging.INFO) == []
