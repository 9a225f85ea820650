"""Catalog model, interface and change notifications."""
from .events import EventSource, ItemHandler
from .models import CancelSignal, Catalog, MediaItem

__all__ = ["EventSource", "ItemHandler", "CancelSignal", "Catalog", "MediaItem"]
