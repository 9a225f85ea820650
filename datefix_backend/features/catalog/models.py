"""
Catalog data model and the narrow interface the fixer consumes.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, Sequence

from ...shared import ItemKind, Result, UpdateKind, to_utc

if TYPE_CHECKING:
    from .events import EventSource


class CancelSignal(Protocol):
    """Anything with `is_set()`: `threading.Event` or `asyncio.Event`."""

    def is_set(self) -> bool: ...


@dataclass
class MediaItem:
    """
    A catalog entry. Owned by the catalog; the fixer only reads it and
    rewrites `date_created`.
    """

    id: str
    name: str
    kind: ItemKind
    date_created: datetime
    path: str | None = None
    parent_id: str | None = None

    def __post_init__(self) -> None:
        self.kind = ItemKind(self.kind)
        self.date_created = to_utc(self.date_created)

    @property
    def is_file_backed(self) -> bool:
        return bool(self.path and str(self.path).strip())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "date_created": self.date_created.isoformat(),
            "path": self.path,
            "parent_id": self.parent_id,
        }


class Catalog(Protocol):
    """What the fixer needs from the media catalog."""

    item_added: "EventSource"
    item_updated: "EventSource"

    async def query_items(
        self,
        kinds: Sequence[ItemKind],
        recursive: bool = True,
        parent_id: str | None = None,
    ) -> Result[list[MediaItem]]: ...

    async def update_item(
        self,
        item: MediaItem,
        parent_id: str | None,
        edit_kind: UpdateKind,
        cancel: CancelSignal | None = None,
    ) -> Result[MediaItem]: ...
