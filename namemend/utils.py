"""
Module: utils
Purpose: Shared helper utilities for namemend.
"""

import os

from .exceptions import MutationError

COLOR_RESET = "\033[0m"
BOLD = "\033[1m"


def color_256(code: int) -> str:
    return f"\033[38;5;{code}m"


def relative_path(path: str, root: str) -> str:
    """Path of `path` relative to `root`, as printed in every output line."""
    return os.path.relpath(os.path.abspath(path), os.path.abspath(root))


def exists(path: str) -> bool:
    return os.path.lexists(path)


def remove_file(path: str) -> None:
    """
    Delete a single file.

    Args:
        path: File to delete.

    Returns:
        None

    Raises:
        MutationError: If the file cannot be removed.
    """
    normalized = os.path.abspath(path)
    try:
        os.remove(normalized)
    except OSError as exc:
        log_error(f"Failed to remove {normalized}: {exc}")
        raise MutationError(f"Failed to remove {normalized}: {exc.strerror or exc}") from exc
    log_info(f"Removed {normalized}")


def rename_file(src: str, dst: str) -> None:
    """
    Rename a file inside its directory without ever overwriting another file.

    Args:
        src: Current file path.
        dst: New file path.

    Returns:
        None

    Raises:
        MutationError: If the destination is taken or the rename fails.
    """
    normalized_src = os.path.abspath(src)
    normalized_dst = os.path.abspath(dst)
    if os.path.lexists(normalized_dst):
        log_error(f"Refusing to overwrite {normalized_dst} while renaming {normalized_src}")
        raise MutationError(f"Destination already exists: {normalized_dst}")
    try:
        os.rename(normalized_src, normalized_dst)
        if not os.path.lexists(normalized_dst):
            raise FileNotFoundError(f"Rename verification failed for {normalized_dst}")
    except OSError as exc:
        log_error(f"Failed to rename {normalized_src} to {normalized_dst}: {exc}")
        raise MutationError(
            f"Failed to rename {normalized_src} to {normalized_dst}: {exc.strerror or exc}"
        ) from exc
    log_info(f"Renamed {normalized_src} -> {normalized_dst}")


def log_error(message: str):
    """
    Log an error message.

    Args:
        message: Error message to log.

    Returns:
        None

    Raises:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[ERROR] {message}"])


def log_warning(message: str):
    """
    Log a warning message.

    Args:
        message: Warning message to log.

    Returns:
        None
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[WARNING] {message}"])


def log_info(message: str):
    """
    Log an informational message.
    """
    from . import reporting  # Local import to avoid circular dependency rules

    reporting.write_log([f"[INFO] {message}"])
