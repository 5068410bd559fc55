"""
Module: duplicates
Purpose: Detect marked copies that duplicate a canonical sibling.
"""

from typing import Callable, Iterable, List

from .models.decisions import DuplicatePair
from .normalizer import is_sidecar_name, normalize
from .scanner import Snapshot

VerboseReporter = Callable[[str], None]


def find_duplicate_pairs(
    snapshot: Snapshot,
    sidecar_suffixes: Iterable[str],
    reporter: VerboseReporter | None = None,
) -> List[DuplicatePair]:
    """
    Pair every marked file with the canonical sibling it duplicates.

    A pair is emitted only when the sibling named `normalize(name)` exists in
    the same directory, is a regular file, and has exactly the same size.
    Equality is size-only: two distinct files of equal size are paired too.

    Args:
        snapshot: Scanned tree.
        sidecar_suffixes: Suffixes whose files are left to the sidecar binder.
        reporter: Optional callback tracing why a marked file was not paired.

    Returns:
        DuplicatePair list in lexical order of the duplicate's relative path.

    Raises:
        None
    """
    suffixes = tuple(sidecar_suffixes)
    pairs: List[DuplicatePair] = []
    for entry in snapshot:
        if entry.is_directory or is_sidecar_name(entry.name, suffixes):
            continue
        canonical = normalize(entry.name)
        if canonical == entry.name:
            continue
        if not entry.is_regular_file:
            _trace(reporter, f"{entry.relative_path}: not a regular file")
            continue
        original = snapshot.sibling(entry.parent, canonical)
        if original is None:
            _trace(reporter, f"{entry.relative_path}: no canonical sibling '{canonical}'")
            continue
        if not original.is_regular_file:
            _trace(reporter, f"{entry.relative_path}: canonical sibling is not a regular file")
            continue
        if original.size != entry.size:
            _trace(
                reporter,
                f"{entry.relative_path}: size differs ({entry.size} vs {original.size} bytes)",
            )
            continue
        pairs.append(DuplicatePair(original=original, duplicate=entry))
    return pairs


def _trace(reporter: VerboseReporter | None, message: str) -> None:
    if reporter:
        reporter(message)
