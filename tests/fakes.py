"""Small in-memory stand-ins for the catalog and the file probe."""
from __future__ import annotations

import asyncio
import dataclasses
from datetime import datetime, timezone

from datefix_backend.adapters.fs import FileState
from datefix_backend.features.catalog import EventSource, MediaItem
from datefix_backend.shared import ErrorCode, ItemKind, Result

BAD = datetime(1999, 6, 1, tzinfo=timezone.utc)
GOOD_MTIME = datetime(2021, 3, 4, 10, 0, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


_AUTO = object()


def make_item(item_id: str, created: datetime = BAD, path=_AUTO, kind: ItemKind = ItemKind.MOVIE) -> MediaItem:
    return MediaItem(
        id=item_id,
        name=f"item-{item_id}",
        kind=kind,
        date_created=created,
        path=f"/m/{item_id}.mkv" if path is _AUTO else path,
        parent_id="lib",
    )


class FakeProbe:
    def __init__(self, files: dict[str, datetime] | None = None, broken: set[str] | None = None):
        self.files = dict(files or {})
        self.broken = set(broken or ())
        self.calls: list[str] = []

    def stat(self, path: str):
        self.calls.append(path)
        if path in self.broken:
            raise PermissionError(f"denied: {path}")
        mtime = self.files.get(path)
        if mtime is None:
            return None
        return FileState(path=path, last_modified=mtime, size=1024)

    def exists(self, path: str) -> bool:
        return path in self.files

    def last_modified_utc(self, path: str) -> datetime:
        return self.files[path]


class FakeCatalog:
    """Persists copies of items and counts/updates like a real catalog would."""

    def __init__(self, items=(), *, fail_ids=(), raise_ids=(), delay: float = 0.0):
        self.items: dict[str, MediaItem] = {i.id: dataclasses.replace(i) for i in items}
        self.item_added = EventSource("item_added")
        self.item_updated = EventSource("item_updated")
        self.fail_ids = set(fail_ids)
        self.raise_ids = set(raise_ids)
        self.delay = delay
        self.update_calls: list[tuple[str, str | None, object]] = []
        self.in_flight = 0
        self.peak = 0
        self.query_fails = False

    async def query_items(self, kinds, recursive=True, parent_id=None):
        if self.query_fails:
            return Result.Err(ErrorCode.DB_ERROR, "query failed")
        wanted = {ItemKind(k) for k in kinds}
        return Result.Ok([dataclasses.replace(i) for i in self.items.values() if not wanted or i.kind in wanted])

    async def update_item(self, item, parent_id, edit_kind, cancel=None):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            self.update_calls.append((item.id, parent_id, edit_kind))
            if self.delay:
                await asyncio.sleep(self.delay)
            if cancel is not None and cancel.is_set():
                return Result.Err(ErrorCode.CANCELLED, "update cancelled")
            if item.id in self.raise_ids:
                raise OSError("catalog offline")
            if item.id in self.fail_ids:
                return Result.Err(ErrorCode.DB_ERROR, "write failed")
            self.items[item.id] = dataclasses.replace(item)
        finally:
            self.in_flight -= 1
        self.item_updated.emit(item)
        return Result.Ok(item)
