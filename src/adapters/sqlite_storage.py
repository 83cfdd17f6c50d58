"""SQLite storage adapter.

Implements the FactStore and KarmaStore ports using a simple SQLite database.
"""

from __future__ import annotations

import json
import os
import sqlite3
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.ports import Fact


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the FactStore and KarmaStore contracts."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - factoids: one row per (scope, store_key)
        - karma: one running score per (scope, name)
        """

        directory = os.path.dirname(self._db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with self._connect() as conn:
            # factoids keeps the display key separately from the lookup key so
            # answers preserve the casing the fact was taught with.
            # Fields:
            # - scope: chat the fact belongs to
            # - store_key: normalized lookup key
            # - display_key: key as originally written
            # - be: "is" or "are"
            # - reply: 1 when the value is answered verbatim
            # - value_json: JSON list of values ("X is A and also B")
            # - updated_at: last write, for auditing
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS factoids (
                    scope TEXT NOT NULL,
                    store_key TEXT NOT NULL,
                    display_key TEXT NOT NULL,
                    be TEXT NOT NULL,
                    reply INTEGER NOT NULL,
                    value_json TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL,
                    PRIMARY KEY (scope, store_key)
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS karma (
                    scope TEXT NOT NULL,
                    name TEXT NOT NULL,
                    score INTEGER NOT NULL,
                    PRIMARY KEY (scope, name)
                )
                """
            )

    @staticmethod
    def _row_to_fact(row: sqlite3.Row) -> Fact:
        return Fact(
            key=row["display_key"],
            be=row["be"],
            reply=bool(row["reply"]),
            value=list(json.loads(row["value_json"])),
        )

    @staticmethod
    def _upsert(conn: sqlite3.Connection, scope: str, store_key: str, fact: Fact) -> None:
        conn.execute(
            """
            INSERT INTO factoids (scope, store_key, display_key, be, reply, value_json, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(scope, store_key) DO UPDATE SET
                display_key = excluded.display_key,
                be = excluded.be,
                reply = excluded.reply,
                value_json = excluded.value_json,
                updated_at = excluded.updated_at
            """,
            (
                scope,
                store_key,
                fact.key,
                fact.be,
                int(fact.reply),
                json.dumps(fact.value),
                datetime.now(timezone.utc).isoformat(),
            ),
        )

    def get_fact(self, scope: str, store_key: str) -> Optional[Fact]:
        """Return one factoid, if it exists."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM factoids WHERE scope = ? AND store_key = ?",
                (scope, store_key),
            ).fetchone()
        return self._row_to_fact(row) if row else None

    def put_fact(self, scope: str, store_key: str, fact: Fact) -> None:
        """Insert or overwrite one factoid."""

        with self._connect() as conn:
            self._upsert(conn, scope, store_key, fact)

    def delete_facts(self, scope: str, store_keys: List[str]) -> int:
        """Delete the given keys and return how many existed."""

        if not store_keys:
            return 0
        with self._connect() as conn:
            cur = conn.executemany(
                "DELETE FROM factoids WHERE scope = ? AND store_key = ?",
                [(scope, key) for key in store_keys],
            )
            return cur.rowcount

    def load_facts(self, scope: str) -> Dict[str, Fact]:
        """Return every factoid of a scope keyed by store_key."""

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM factoids WHERE scope = ? ORDER BY store_key",
                (scope,),
            ).fetchall()
        return {row["store_key"]: self._row_to_fact(row) for row in rows}

    def replace_facts(self, scope: str, facts: Dict[str, Fact]) -> None:
        """Replace all factoids of a scope in one transaction."""

        with self._connect() as conn:
            conn.execute("DELETE FROM factoids WHERE scope = ?", (scope,))
            for store_key, fact in facts.items():
                self._upsert(conn, scope, store_key, fact)

    def get_karma(self, scope: str, name: str) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT score FROM karma WHERE scope = ? AND name = ?",
                (scope, name),
            ).fetchone()
        return int(row["score"]) if row else 0

    def add_karma(self, scope: str, name: str, delta: int) -> int:
        """Apply ``delta`` to a score and return the new value."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO karma (scope, name, score)
                VALUES (?, ?, ?)
                ON CONFLICT(scope, name) DO UPDATE SET score = score + excluded.score
                """,
                (scope, name, delta),
            )
            row = conn.execute(
                "SELECT score FROM karma WHERE scope = ? AND name = ?",
                (scope, name),
            ).fetchone()
        return int(row["score"])
