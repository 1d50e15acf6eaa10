"""
SQLite Backing Store Adapter.

Implements BackingStorePort on a local SQLite file. Each call opens its own
connection and runs in a worker thread so the event loop is never blocked.

Driver errors are translated:
- UNIQUE/PRIMARY KEY violations -> DuplicateKeyError
- any other sqlite3.Error       -> StoreError
"""

from __future__ import annotations

import asyncio
import builtins
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from bloginno.core.ports.store import (
    COLLECTIONS,
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS categories (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    icon TEXT NOT NULL,
    owner_id TEXT,
    created_at TEXT
);
CREATE TABLE IF NOT EXISTS articles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    summary TEXT NOT NULL,
    content TEXT NOT NULL,
    date TEXT NOT NULL,
    read_time TEXT NOT NULL,
    category TEXT NOT NULL,
    image_url TEXT NOT NULL DEFAULT '',
    video_url TEXT NOT NULL DEFAULT '',
    owner_id TEXT,
    created_at TEXT,
    updated_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_articles_created_at ON articles(created_at);
CREATE INDEX IF NOT EXISTS idx_articles_category ON articles(category);
"""


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _to_column(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SQLiteBackingStore:
    def __init__(self, db_path: str | Path, *, create_schema: bool = True):
        self.db_path = str(db_path)
        self._columns: dict[str, builtins.list[str]] = {}
        if create_schema:
            self.ensure_schema()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        return conn

    def ensure_schema(self) -> None:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = self._get_conn()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Could not initialize schema: {e}") from e
        finally:
            conn.close()

    def _table_columns(self, conn: sqlite3.Connection, collection: str) -> builtins.list[str]:
        if collection not in COLLECTIONS:
            raise StoreError(f"Unknown collection: {collection}")
        if collection not in self._columns:
            rows = conn.execute(f"PRAGMA table_info({collection})").fetchall()
            self._columns[collection] = [row["name"] for row in rows]
        return self._columns[collection]

    # --- Synchronous implementations (run in worker threads) ---

    def _list_sync(
        self, collection: str, order_by: str | None, descending: bool
    ) -> builtins.list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            columns = self._table_columns(conn, collection)
            sql = f"SELECT * FROM {collection}"
            if order_by:
                if order_by not in columns:
                    raise StoreError(f"Cannot order {collection} by unknown column {order_by}")
                sql += f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}"
            return conn.execute(sql).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"list {collection} failed: {e}") from e
        finally:
            conn.close()

    def _insert_sync(self, collection: str, record: dict[str, Any]) -> Any:
        conn = self._get_conn()
        try:
            columns = self._table_columns(conn, collection)
            values = {
                k: _to_column(v)
                for k, v in record.items()
                if k in columns and not (k == "id" and v is None)
            }
            names = ", ".join(values)
            placeholders = ", ".join("?" for _ in values)
            cursor = conn.execute(
                f"INSERT INTO {collection} ({names}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            conn.commit()
            return values["id"] if "id" in values else cursor.lastrowid
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "UNIQUE" in str(e) or "PRIMARY KEY" in str(e):
                raise DuplicateKeyError(collection, record.get("id")) from e
            raise StoreError(f"insert into {collection} failed: {e}") from e
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"insert into {collection} failed: {e}") from e
        finally:
            conn.close()

    def _update_sync(self, collection: str, record_id: Any, fields: dict[str, Any]) -> None:
        conn = self._get_conn()
        try:
            columns = self._table_columns(conn, collection)
            values = {k: _to_column(v) for k, v in fields.items() if k in columns and k != "id"}
            if not values:
                return
            assignments = ", ".join(f"{k} = ?" for k in values)
            cursor = conn.execute(
                f"UPDATE {collection} SET {assignments} WHERE id = ?",
                (*values.values(), record_id),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                raise RecordNotFoundError(collection, record_id)
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"update {collection} failed: {e}") from e
        finally:
            conn.close()

    def _delete_sync(self, collection: str, record_id: Any) -> None:
        conn = self._get_conn()
        try:
            self._table_columns(conn, collection)
            conn.execute(f"DELETE FROM {collection} WHERE id = ?", (record_id,))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"delete from {collection} failed: {e}") from e
        finally:
            conn.close()

    # --- BackingStorePort ---

    async def list(
        self,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ) -> builtins.list[dict[str, Any]]:
        return await asyncio.to_thread(self._list_sync, collection, order_by, descending)

    async def insert(self, collection: str, record: dict[str, Any]) -> Any:
        return await asyncio.to_thread(self._insert_sync, collection, record)

    async def update(self, collection: str, record_id: Any, fields: dict[str, Any]) -> None:
        await asyncio.to_thread(self._update_sync, collection, record_id, fields)

    async def delete(self, collection: str, record_id: Any) -> None:
        await asyncio.to_thread(self._delete_sync, collection, record_id)
