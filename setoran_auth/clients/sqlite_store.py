"""SQLite-backed record storage for session tokens and saved credentials."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional


class SQLiteStore:
    """Durable key-value store keyed by (namespace, key), one JSON row per record.

    Each public method runs in a single transaction, so a record is either
    written completely or not at all.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_records (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (namespace, key)
                )
                """
            )

    def put_record(self, namespace: str, key: str, data: Dict[str, Any]) -> None:
        if not namespace or not key:
            raise ValueError("Records require both a namespace and a key")

        data_json = json.dumps(data)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO session_records (namespace, key, data)
                VALUES (?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET data = excluded.data
                """,
                (namespace, key, data_json),
            )

    def replace_namespace(
        self, namespace: str, records: Dict[str, Dict[str, Any]]
    ) -> None:
        """Drop every record in ``namespace`` and write ``records`` in one transaction."""
        rows = [(namespace, key, json.dumps(data)) for key, data in records.items()]
        with self._connect() as conn:
            conn.execute("DELETE FROM session_records WHERE namespace = ?", (namespace,))
            conn.executemany(
                "INSERT INTO session_records (namespace, key, data) VALUES (?, ?, ?)",
                rows,
            )

    def get_record(self, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM session_records WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    def update_record(
        self, namespace: str, key: str, changes: Dict[str, Any]
    ) -> bool:
        """Merge ``changes`` into an existing record. Returns False if it is missing."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM session_records WHERE namespace = ? AND key = ?",
                (namespace, key),
            ).fetchone()
            if not row:
                return False
            data = json.loads(row["data"])
            data.update(changes)
            conn.execute(
                "UPDATE session_records SET data = ? WHERE namespace = ? AND key = ?",
                (json.dumps(data), namespace, key),
            )
        return True

    def delete_record(self, namespace: str, key: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM session_records WHERE namespace = ? AND key = ?",
                (namespace, key),
            )

    def delete_namespace(self, namespace: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM session_records WHERE namespace = ?", (namespace,))


__all__ = ["SQLiteStore"]
