"""
Shared types, enums, and constants.
"""
from enum import Enum
from typing import Final


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Client / validation
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"

    # Service availability
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    ALREADY_RUNNING = "ALREADY_RUNNING"

    # Storage
    DB_ERROR = "DB_ERROR"

    # Operation errors
    CANCELLED = "CANCELLED"
    UPDATE_FAILED = "UPDATE_FAILED"
    UNEXPECTED_FAILURE = "UNEXPECTED_FAILURE"


class ItemKind(str, Enum):
    """Catalog item kinds."""

    MOVIE = "movie"
    EPISODE = "episode"
    AUDIO = "audio"
    SERIES = "series"
    SEASON = "season"
    FOLDER = "folder"


# Kinds that carry a backing media file
MEDIA_KINDS: Final[tuple[ItemKind, ...]] = (ItemKind.MOVIE, ItemKind.EPISODE, ItemKind.AUDIO)


class UpdateKind(str, Enum):
    """Why an item is being written back to the catalog."""

    NONE = "none"
    METADATA_IMPORT = "metadata_import"
    METADATA_DOWNLOAD = "metadata_download"
    METADATA_EDIT = "metadata_edit"


class SkipReason(str, Enum):
    """Why an item was left untouched."""

    NOT_BAD = "not_bad"                      # timestamp already trustworthy
    NOT_FILE_BACKED = "not_file_backed"      # item has no path
    FILE_MISSING = "file_missing"            # path does not exist on disk
    TIMESTAMP_INVALID = "timestamp_invalid"  # mtime still bad or in the future


def parse_item_kinds(raw: str) -> tuple[ItemKind, ...]:
    """
    Parse a comma separated kind list ("movie,episode").

    Unknown names raise ValueError so misconfiguration is loud.
    """
    kinds: list[ItemKind] = []
    for token in str(raw or "").split(","):
        name = token.strip().lower()
        if not name:
            continue
        kind = ItemKind(name)
        if kind not in kinds:
            kinds.append(kind)
    return tuple(kinds)
