"""Logging configuration shared by every entry point."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


class RedactingFormatter(logging.Formatter):
    """Formatter that masks known secret values wherever they appear."""

    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def collect_redaction_values(config: dict) -> list[str]:
    """Values of the env vars named in ``redact.patterns``, longest first."""

    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def build_handlers(config: dict, project_root: str, level: int) -> list[logging.Handler]:
    formatter = RedactingFormatter(collect_redaction_values(config), fmt=FORMAT, datefmt=DATEFMT)
    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/switchboard.log")
        if not os.path.isabs(path):
            path = os.path.join(project_root, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    return handlers


def configure_logging(config: Optional[dict], project_root: str) -> None:
    config = config or {}
    if not config.get("enabled", False):
        return

    # LOG_LEVEL wins over the file so a deployment can turn on debug output.
    level_name = str(os.getenv("LOG_LEVEL") or config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handlers = build_handlers(config, project_root, level)
    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers, force=True)
