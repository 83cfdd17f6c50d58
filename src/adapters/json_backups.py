"""JSON snapshot files for factoid backup and restore.

Snapshots look like ``{"id": "<scope>_factoids", "data": {store_key: fact}}``
and are named ``<scope>_factoids_<timestamp>.json`` inside one directory.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from core.ports import Fact


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace(":", "-")


class JsonBackupStore:
    """Satisfies the BackupStore port with plain files in ``directory``."""

    def __init__(self, directory: str, timestamp: Optional[Callable[[], str]] = None) -> None:
        self._directory = directory
        self._timestamp = timestamp or _timestamp

    def _prefix(self, scope: str) -> str:
        return f"{scope}_factoids_"

    def write_backup(self, scope: str, facts: Dict[str, Fact], label: str = "") -> str:
        """Write a snapshot and return its file name."""

        os.makedirs(self._directory, exist_ok=True)
        infix = f"{label}_" if label else ""
        filename = f"{self._prefix(scope)}{infix}{self._timestamp()}.json"
        snapshot = {
            "id": f"{scope}_factoids",
            "data": {key: asdict(fact) for key, fact in facts.items()},
        }
        with open(os.path.join(self._directory, filename), "w", encoding="utf-8") as handle:
            json.dump(snapshot, handle, indent=2, ensure_ascii=False)
        return filename

    def list_backups(self, scope: str) -> List[str]:
        """File names of a scope's snapshots, newest first."""

        if not os.path.isdir(self._directory):
            return []
        prefix = self._prefix(scope)
        names = [
            name
            for name in os.listdir(self._directory)
            if name.startswith(prefix) and name.endswith(".json")
        ]
        return sorted(names, reverse=True)

    def backup_path(self, scope: str, filename: str) -> Optional[str]:
        """Full path of one of ``scope``'s snapshots; None if missing, foreign or outside the directory."""

        if os.path.basename(filename) != filename or filename in {"", ".", ".."}:
            return None
        if not filename.startswith(self._prefix(scope)):
            return None
        path = os.path.join(self._directory, filename)
        return path if os.path.isfile(path) else None

    def read_backup(self, scope: str, path: str) -> Dict[str, Fact]:
        """Load one of ``scope``'s snapshots. Raises ValueError when the file is not one."""

        with open(path, "r", encoding="utf-8") as handle:
            try:
                snapshot = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Backup {path} is not valid JSON") from exc

        if not isinstance(snapshot, dict) or not snapshot.get("id") or not isinstance(snapshot.get("data"), dict):
            raise ValueError(f"Backup {path} is missing id or data")
        if snapshot["id"] != f"{scope}_factoids":
            raise ValueError(f"Backup {path} belongs to {snapshot['id']!r}, not {scope!r}")

        facts: Dict[str, Fact] = {}
        for store_key, raw in snapshot["data"].items():
            if not isinstance(raw, dict) or "key" not in raw:
                raise ValueError(f"Backup {path} has a malformed entry for {store_key!r}")
            value = raw.get("value", [])
            facts[store_key] = Fact(
                key=str(raw["key"]),
                be=str(raw.get("be", "is")),
                reply=bool(raw.get("reply", False)),
                value=[str(item) for item in (value if isinstance(value, list) else [value])],
            )
        return facts
