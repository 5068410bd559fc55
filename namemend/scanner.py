"""
Module: scanner
Purpose: Snapshot a directory tree into DirectoryEntry records.
"""

import os
from typing import Dict, List, Tuple

from .exceptions import ConfigurationError, TraversalError
from .models.entry import DirectoryEntry
from .utils import log_error, log_info


class Snapshot:
    """
    Read-only listing of a tree taken once at scan start.

    Entries are kept in lexical order of their relative path; siblings are
    indexed by parent directory for the resolvers.
    """

    def __init__(self, root: str, entries: List[DirectoryEntry]):
        self.root = root
        self.entries = sorted(entries, key=lambda entry: entry.relative_path)
        self._by_name: Dict[str, Dict[str, DirectoryEntry]] = {}
        for entry in self.entries:
            self._by_name.setdefault(entry.parent, {})[entry.name] = entry
        self._listings: Dict[str, List[DirectoryEntry]] = {
            parent: sorted(names.values(), key=lambda entry: entry.name)
            for parent, names in self._by_name.items()
        }

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def siblings(self, parent: str) -> List[DirectoryEntry]:
        """Entries of one directory, sorted by name."""
        return self._listings.get(parent, [])

    def sibling(self, parent: str, name: str) -> DirectoryEntry | None:
        return self._by_name.get(parent, {}).get(name)


def validate_root(root: str) -> str:
    """
    Resolve and validate the directory to reconcile.

    Args:
        root: Directory path supplied by the user.

    Returns:
        Absolute root path.

    Raises:
        ConfigurationError: If the root is missing, not a directory or unreadable.
    """
    if not root:
        log_error("No root directory supplied")
        raise ConfigurationError("A root directory is required")
    normalized = os.path.abspath(root)
    if not os.path.exists(normalized):
        log_error(f"Path does not exist: {normalized}")
        raise ConfigurationError(f"Directory '{normalized}' not found")
    if not os.path.isdir(normalized):
        log_error(f"Path is not a directory: {normalized}")
        raise ConfigurationError(f"Path is not a directory: {normalized}")
    try:
        with os.scandir(normalized):
            pass
    except OSError as exc:
        log_error(f"Directory is not readable: {normalized} ({exc})")
        raise ConfigurationError(f"Directory '{normalized}' is not readable") from exc
    return normalized


def scan_tree(root: str) -> Snapshot:
    """
    Recursively list `root` and return a Snapshot of every file and directory.

    Symlinked directories are recorded as names but never descended into.

    Args:
        root: Directory to scan.

    Returns:
        Snapshot with one DirectoryEntry per name below root.

    Raises:
        ConfigurationError: If the root fails validation.
        TraversalError: If any subtree or entry cannot be read.
    """
    normalized_root = validate_root(root)
    entries: List[DirectoryEntry] = []

    def _on_error(exc: OSError) -> None:
        log_error(f"Failed to list {exc.filename}: {exc}")
        raise TraversalError(f"Failed to list {exc.filename}: {exc.strerror or exc}") from exc

    for dirpath, dirs, files in os.walk(normalized_root, topdown=True, onerror=_on_error, followlinks=False):
        dirs.sort()
        for dirname in dirs:
            entries.append(_make_entry(normalized_root, dirpath, dirname, is_directory=True))
        for name in sorted(files):
            entries.append(_make_entry(normalized_root, dirpath, name, is_directory=False))

    log_info(f"Scanned {len(entries)} entries under {normalized_root}")
    return Snapshot(normalized_root, entries)


def _make_entry(root: str, dirpath: str, name: str, *, is_directory: bool) -> DirectoryEntry:
    path = os.path.join(dirpath, name)
    size, is_symlink = _stat_entry(path, is_directory)
    _, ext = os.path.splitext(name)
    return DirectoryEntry(
        path=path,
        relative_path=os.path.relpath(path, root),
        name=name,
        extension=ext,
        size=size,
        is_directory=is_directory,
        is_symlink=is_symlink,
    )


def _stat_entry(path: str, is_directory: bool) -> Tuple[int, bool]:
    try:
        is_symlink = os.path.islink(path)
        if is_directory:
            return 0, is_symlink
        return os.lstat(path).st_size, is_symlink
    except OSError as exc:
        log_error(f"Failed to read file info for {path}: {exc}")
        raise TraversalError(f"Failed to read file info for {path}: {exc.strerror or exc}") from exc
