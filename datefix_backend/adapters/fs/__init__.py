from .probe import FileProbe, FileState

__all__ = ["FileProbe", "FileState"]
