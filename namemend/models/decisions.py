"""
Module: decisions
Purpose: Defines the data structures for reconciliation decisions.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .entry import DirectoryEntry

CONFLICT_BASE_MISSING = "base_missing"
CONFLICT_DESTINATION_BOUND = "destination_bound"
CONFLICT_CASE_MISMATCH = "case_mismatch"


@dataclass
class ReconcileDecision:
    """Base class for all reconciliation decisions."""
    type: str


@dataclass
class DuplicatePair(ReconcileDecision):
    """A marked file that is a size-identical copy of its canonical sibling."""
    original: DirectoryEntry
    duplicate: DirectoryEntry
    type: str = field(default="DUPLICATE_PAIR", init=False)


@dataclass
class AlreadyCorrect(ReconcileDecision):
    """Sidecar already sits next to the base file it names."""
    sidecar: DirectoryEntry
    type: str = field(default="ALREADY_CORRECT", init=False)


@dataclass
class Ambiguous(ReconcileDecision):
    """Bare and numbered base variants coexist; no safe choice exists."""
    sidecar: DirectoryEntry
    candidates: List[DirectoryEntry]
    type: str = field(default="AMBIGUOUS", init=False)


@dataclass
class Orphaned(ReconcileDecision):
    """Sidecar without a base file among its siblings."""
    sidecar: DirectoryEntry
    reason: str
    candidate: Optional[DirectoryEntry] = None
    type: str = field(default="ORPHANED", init=False)


@dataclass
class NeedsRename(ReconcileDecision):
    """Sidecar should be renamed to follow its base candidate."""
    sidecar: DirectoryEntry
    candidate: DirectoryEntry
    target: str
    type: str = field(default="NEEDS_RENAME", init=False)


@dataclass
class Conflict(ReconcileDecision):
    """Rename target is already taken by another sidecar."""
    sidecar: DirectoryEntry
    candidate: DirectoryEntry
    existing_path: str
    kind: str
    type: str = field(default="CONFLICT", init=False)


BindingDecision = Union[AlreadyCorrect, Ambiguous, Orphaned, NeedsRename, Conflict]
