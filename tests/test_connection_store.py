try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import sqlite3
from pathlib import Path

import pytest

from app.clients.connection_store import SQLiteConnectionStore
from app.models.connection import ConnectionRecord
from app.services.token_cipher import TokenCipherService


def _record(**overrides) -> ConnectionRecord:
    values = {
        "user_id": "u1",
        "type": "xbox",
        "external_id": "X1",
        "name": "Gamer1",
        "token_data": {"access_token": "plain-access-token", "fetched_at": 1700000000000},
    }
    values.update(overrides)
    return ConnectionRecord(**values)


def test_create_and_list_connections(tmp_path: Path) -> None:
    store = SQLiteConnectionStore(str(tmp_path / "nested" / "connections.db"))

    assert not store.has_connection(user_id="u1", connection_type="xbox", external_id="X1")

    created = store.create_connection(_record())

    assert store.has_connection(user_id="u1", connection_type="xbox", external_id="X1")
    assert not store.has_connection(user_id="u2", connection_type="xbox", external_id="X1")
    assert not store.has_connection(user_id="u1", connection_type="xbox", external_id="X2")
    assert store.list_connections(user_id="u1") == [created]
    assert store.list_connections(user_id="u2") == []


def test_existing_connection_is_not_overwritten(tmp_path: Path) -> None:
    store = SQLiteConnectionStore(str(tmp_path / "connections.db"))
    original = store.create_connection(_record())

    store.create_connection(_record(name="Renamed"))

    assert store.list_connections(user_id="u1") == [original]


def test_token_data_is_encrypted_at_rest(tmp_path: Path) -> None:
    db_path = tmp_path / "connections.db"
    cipher = TokenCipherService(secret="at-rest-secret")
    store = SQLiteConnectionStore(str(db_path), cipher=cipher)

    store.create_connection(_record())

    with sqlite3.connect(db_path) as conn:
        (raw,) = conn.execute("SELECT data FROM kv_records").fetchone()
    assert "plain-access-token" not in raw
    assert "token_data_encrypted" in raw

    [loaded] = store.list_connections(user_id="u1")
    assert loaded.token_data == {"access_token": "plain-access-token", "fetched_at": 1700000000000}


def test_encrypted_rows_need_a_cipher(tmp_path: Path) -> None:
    db_path = tmp_path / "connections.db"
    SQLiteConnectionStore(str(db_path), cipher=TokenCipherService(secret="s")).create_connection(
        _record()
    )

    with pytest.raises(ValueError):
        SQLiteConnectionStore(str(db_path)).list_connections(user_id="u1")
