"""
Module: entry
Purpose: Immutable snapshot of a single directory listing entry.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class DirectoryEntry:
    """
    One name inside the scanned tree, captured once at scan time.
    """

    path: str
    relative_path: str
    name: str
    extension: str
    size: int
    is_directory: bool
    is_symlink: bool = False

    @property
    def parent(self) -> str:
        return os.path.dirname(self.path)

    @property
    def stem(self) -> str:
        return self.name[: len(self.name) - len(self.extension)] if self.extension else self.name

    @property
    def is_regular_file(self) -> bool:
        return not self.is_directory and not self.is_symlink
