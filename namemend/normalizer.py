"""
Module: normalizer
Purpose: Strip sync-tool disambiguation markers such as " (1)" from file names.
"""

import os
import re
from typing import Iterable

# Optional single space, then a parenthesised run of decimal digits.
MARKER_PATTERN = re.compile(r" ?\(\d+\)", re.ASCII)


def normalize(name: str) -> str:
    """
    Return the canonical form of `name` with every disambiguation marker removed.

    Markers are removed wherever they occur, leaving all other characters
    untouched. The function is total and idempotent: nested input such as
    "((1)1)" collapses further once the inner marker is gone, so substitution
    repeats until nothing matches.

    Args:
        name: File name (or any string) to normalize.

    Returns:
        Canonical name.

    Raises:
        None
    """
    current = name
    while True:
        stripped = MARKER_PATTERN.sub("", current)
        if stripped == current:
            return stripped
        current = stripped


def has_marker(name: str) -> bool:
    return MARKER_PATTERN.search(name) is not None


def canonical_stem(name: str) -> str:
    """Canonical form of `name` without its (canonical) extension."""
    canonical = normalize(name)
    stem, _ = os.path.splitext(canonical)
    return stem


def sidecar_suffix(name: str, sidecar_suffixes: Iterable[str]) -> str | None:
    """
    Return the sidecar suffix of `name` spelled as it appears in the name, or
    None when `name` is not a sidecar. The longest configured suffix wins.
    """
    lowered = name.lower()
    best: str | None = None
    for suffix in sidecar_suffixes:
        if suffix and len(suffix) < len(name) and lowered.endswith(suffix.lower()):
            if best is None or len(suffix) > len(best):
                best = suffix
    if best is None:
        return None
    return name[len(name) - len(best):]


def is_sidecar_name(name: str, sidecar_suffixes: Iterable[str]) -> bool:
    return sidecar_suffix(name, sidecar_suffixes) is not None
