"""SQLite-backed storage for connection records."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from app.models.connection import ConnectionRecord

if TYPE_CHECKING:
    from app.services.token_cipher import TokenCipherService


class SQLiteConnectionStore:
    """Connection records keyed by (user, connection type, external id).

    Rows live in a ``kv_records`` table with ``pk = user#<user_id>`` and
    ``sk = connection#<type>#<external_id>``.
    """

    def __init__(self, db_path: str, *, cipher: Optional["TokenCipherService"] = None) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._cipher = cipher
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_records (
                    pk TEXT NOT NULL,
                    sk TEXT NOT NULL,
                    data TEXT NOT NULL,
                    PRIMARY KEY (pk, sk)
                )
                """
            )

    @staticmethod
    def _keys(user_id: str, connection_type: str, external_id: str) -> tuple[str, str]:
        return f"user#{user_id}", f"connection#{connection_type}#{external_id}"

    def has_connection(self, *, user_id: str, connection_type: str, external_id: str) -> bool:
        pk, sk = self._keys(user_id, connection_type, external_id)
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM kv_records WHERE pk = ? AND sk = ?",
                (pk, sk),
            ).fetchone()
        return row is not None

    def create_connection(self, record: ConnectionRecord) -> ConnectionRecord:
        """Insert ``record``; an existing row for the same key is left untouched."""
        pk, sk = self._keys(record.user_id, record.type, record.external_id)
        item: Dict[str, Any] = record.model_dump(mode="json")
        if self._cipher is not None:
            item["token_data_encrypted"] = self._cipher.encrypt_token_data(item.pop("token_data"))

        with self._connect() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO kv_records (pk, sk, data) VALUES (?, ?, ?)",
                (pk, sk, json.dumps(item)),
            )
        return record

    def list_connections(self, *, user_id: str) -> List[ConnectionRecord]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT data FROM kv_records WHERE pk = ? AND sk LIKE ? ORDER BY sk",
                (f"user#{user_id}", "connection#%"),
            ).fetchall()
        return [self._to_record(json.loads(row["data"])) for row in rows]

    def _to_record(self, item: Dict[str, Any]) -> ConnectionRecord:
        encrypted = item.pop("token_data_encrypted", None)
        if encrypted is not None:
            if self._cipher is None:
                raise ValueError("Stored token data is encrypted but no cipher is configured.")
            item["token_data"] = self._cipher.decrypt_token_data(encrypted)
        return ConnectionRecord.model_validate(item)


__all__ = ["SQLiteConnectionStore"]
