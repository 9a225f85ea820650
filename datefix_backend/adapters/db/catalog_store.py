"""
SQLite-backed media catalog.

Implementation note:
- Uses a single `aiosqlite` connection; writes are serialized by an
  asyncio lock.
- Never raises to callers; every public method returns `Result(...)`.
- `add_item`/`update_item` emit `item_added`/`item_updated` after commit,
  synchronously on the calling task.
"""
from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiosqlite

from ...config import DB_TIMEOUT
from ...features.catalog import CancelSignal, EventSource, MediaItem
from ...shared import ErrorCode, ItemKind, Result, UpdateKind, format_timestamp, get_logger, parse_timestamp

logger = get_logger(__name__)

SCHEMA_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL DEFAULT '',
    kind TEXT NOT NULL,
    path TEXT,
    parent_id TEXT,
    date_created TEXT NOT NULL,
    date_modified TEXT,
    last_edit_kind TEXT
);
CREATE INDEX IF NOT EXISTS idx_items_kind ON items(kind);
CREATE INDEX IF NOT EXISTS idx_items_parent ON items(parent_id);
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""

_ITEM_COLUMNS = "id, name, kind, path, parent_id, date_created"


def _row_to_item(row: Any) -> MediaItem:
    return MediaItem(
        id=str(row["id"]),
        name=str(row["name"] or ""),
        kind=ItemKind(row["kind"]),
        date_created=parse_timestamp(row["date_created"]),
        path=row["path"],
        parent_id=row["parent_id"],
    )


def _placeholders(count: int) -> str:
    return ",".join("?" for _ in range(count))


class CatalogStore:
    """
    Media items persisted in SQLite, with change notifications.

    Usage:
        store = CatalogStore("/path/catalog.sqlite")
        await store.open()
        await store.add_item(item)
        ...
        await store.aclose()
    """

    def __init__(self, db_path: str | Path, *, timeout: float = DB_TIMEOUT):
        self.db_path = Path(db_path)
        self._timeout = float(timeout)
        self._conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self.item_added = EventSource("item_added")
        self.item_updated = EventSource("item_updated")

    async def open(self) -> Result[bool]:
        """Connect and create the schema if needed."""
        if self._conn is not None:
            return Result.Ok(True)
        try:
            if str(self.db_path) != ":memory:":
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(str(self.db_path), timeout=self._timeout)
            conn.row_factory = sqlite3.Row
            if str(self.db_path) != ":memory:":
                await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA synchronous=NORMAL")
            await conn.executescript(SCHEMA)
            await conn.execute(
                "INSERT OR IGNORE INTO metadata (key, value) VALUES ('schema_version', ?)",
                (str(SCHEMA_VERSION),),
            )
            await conn.commit()
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to open catalog %s: %s", self.db_path, exc)
            return Result.Err(ErrorCode.DB_ERROR, f"Failed to open catalog: {exc}")
        self._conn = conn
        return Result.Ok(True)

    async def aclose(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            await conn.close()

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("catalog is not open")
        return self._conn

    async def add_item(self, item: MediaItem) -> Result[MediaItem]:
        """Insert a new item and emit `item_added`."""
        try:
            conn = self._require_conn()
            async with self._write_lock:
                await conn.execute(
                    f"INSERT INTO items ({_ITEM_COLUMNS}, date_modified) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        item.id,
                        item.name,
                        item.kind.value,
                        item.path,
                        item.parent_id,
                        format_timestamp(item.date_created),
                        format_timestamp(),
                    ),
                )
                await conn.commit()
        except sqlite3.IntegrityError as exc:
            return Result.Err(ErrorCode.INVALID_INPUT, f"Item already exists: {item.id} ({exc})")
        except sqlite3.Error as exc:
            logger.error("Failed to add %s: %s", item.name, exc)
            return Result.Err(ErrorCode.DB_ERROR, str(exc))
        self.item_added.emit(item)
        return Result.Ok(item)

    async def get_item(self, item_id: str) -> Result[MediaItem]:
        try:
            conn = self._require_conn()
            async with conn.execute(f"SELECT {_ITEM_COLUMNS} FROM items WHERE id = ?", (item_id,)) as cur:
                row = await cur.fetchone()
        except sqlite3.Error as exc:
            return Result.Err(ErrorCode.DB_ERROR, str(exc))
        if row is None:
            return Result.Err(ErrorCode.NOT_FOUND, f"Item not found: {item_id}")
        return Result.Ok(_row_to_item(row))

    async def query_items(
        self,
        kinds: Sequence[ItemKind],
        recursive: bool = True,
        parent_id: str | None = None,
    ) -> Result[list[MediaItem]]:
        """
        Items of the given kinds.

        Args:
            kinds: Kinds to include (empty means every kind)
            recursive: Include all descendants of `parent_id` (or the whole
                catalog when no parent is given) instead of direct children
            parent_id: Root of the query; None for the catalog root
        """
        params: list[Any] = []
        if recursive and parent_id is not None:
            sql = (
                "WITH RECURSIVE tree(id) AS ("
                " SELECT id FROM items WHERE parent_id = ?"
                " UNION ALL SELECT i.id FROM items i JOIN tree t ON i.parent_id = t.id"
                f") SELECT {_ITEM_COLUMNS} FROM items WHERE id IN (SELECT id FROM tree)"
            )
            params.append(parent_id)
        elif recursive:
            sql = f"SELECT {_ITEM_COLUMNS} FROM items WHERE 1 = 1"
        elif parent_id is not None:
            sql = f"SELECT {_ITEM_COLUMNS} FROM items WHERE parent_id = ?"
            params.append(parent_id)
        else:
            sql = f"SELECT {_ITEM_COLUMNS} FROM items WHERE parent_id IS NULL"

        kind_values = [ItemKind(k).value for k in kinds or ()]
        if kind_values:
            sql += f" AND kind IN ({_placeholders(len(kind_values))})"
            params.extend(kind_values)
        sql += " ORDER BY id"

        try:
            conn = self._require_conn()
            async with conn.execute(sql, tuple(params)) as cur:
                rows = await cur.fetchall()
            return Result.Ok([_row_to_item(r) for r in rows])
        except (sqlite3.Error, ValueError) as exc:
            logger.error("Catalog query failed: %s", exc)
            return Result.Err(ErrorCode.DB_ERROR, str(exc))

    async def update_item(
        self,
        item: MediaItem,
        parent_id: str | None,
        edit_kind: UpdateKind,
        cancel: CancelSignal | None = None,
    ) -> Result[MediaItem]:
        """Persist `item` and emit `item_updated`."""
        if cancel is not None and cancel.is_set():
            return Result.Err(ErrorCode.CANCELLED, "update cancelled")
        try:
            conn = self._require_conn()
            async with self._write_lock:
                cur = await conn.execute(
                    """
                    UPDATE items
                    SET name = ?, path = ?, parent_id = ?, date_created = ?,
                        date_modified = ?, last_edit_kind = ?
                    WHERE id = ?
                    """,
                    (
                        item.name,
                        item.path,
                        parent_id,
                        format_timestamp(item.date_created),
                        format_timestamp(),
                        UpdateKind(edit_kind).value,
                        item.id,
                    ),
                )
                changed = cur.rowcount
                await cur.close()
                await conn.commit()
        except sqlite3.Error as exc:
            logger.error("Failed to update %s: %s", item.name, exc)
            return Result.Err(ErrorCode.DB_ERROR, str(exc))
        if not changed:
            return Result.Err(ErrorCode.NOT_FOUND, f"Item not found: {item.id}")
        self.item_updated.emit(item)
        return Result.Ok(item)

    async def count_items(self) -> Result[int]:
        try:
            conn = self._require_conn()
            async with conn.execute("SELECT COUNT(*) AS n FROM items") as cur:
                row = await cur.fetchone()
        except sqlite3.Error as exc:
            return Result.Err(ErrorCode.DB_ERROR, str(exc))
        return Result.Ok(int(row["n"]) if row else 0)
