"""
Filesystem probe: existence and last-modification time of backing files.
"""
from __future__ import annotations

import os
import stat as stat_mod
from dataclasses import dataclass
from datetime import datetime

from ...shared import from_epoch


@dataclass(frozen=True)
class FileState:
    """One stat() worth of facts about a backing file."""

    path: str
    last_modified: datetime
    size: int


class FileProbe:
    """
    Reads file facts from the local filesystem.

    `stat()` is the call correctors use: existence and mtime come from a
    single read so one evaluation cannot see two different files.
    """

    def stat(self, path: str) -> FileState | None:
        """
        Return the file's state, or None if it does not exist (or is not a
        regular file). Other OSErrors (permissions, I/O) propagate.
        """
        try:
            st = os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return None
        if not stat_mod.S_ISREG(st.st_mode):
            return None
        return FileState(path=path, last_modified=from_epoch(st.st_mtime), size=int(st.st_size))

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def last_modified_utc(self, path: str) -> datetime:
        """Raises FileNotFoundError when the file is gone."""
        return from_epoch(os.stat(path).st_mtime)
