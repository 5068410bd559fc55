"""
Module: sidecars
Purpose: Bind metadata sidecar files to the base file they annotate.
"""

import os
from typing import Callable, Iterable, List, Set, Tuple

from . import utils
from .models.decisions import (
    CONFLICT_BASE_MISSING,
    CONFLICT_CASE_MISMATCH,
    CONFLICT_DESTINATION_BOUND,
    AlreadyCorrect,
    Ambiguous,
    BindingDecision,
    Conflict,
    NeedsRename,
    Orphaned,
)
from .models.entry import DirectoryEntry
from .normalizer import canonical_stem, has_marker, is_sidecar_name, normalize, sidecar_suffix
from .scanner import Snapshot

VerboseReporter = Callable[[str], None]
ExistsProbe = Callable[[str], bool]

RENAME_POLICY_CANDIDATE = "candidate"
RENAME_POLICY_LITERAL = "literal"
RENAME_POLICIES = (RENAME_POLICY_CANDIDATE, RENAME_POLICY_LITERAL)

ORPHAN_NO_BASE = "orphaned sidecar, no base file exists"

STATE_START = "START"
STATE_SEARCHING = "SEARCHING"
STATE_CANDIDATE_FOUND = "CANDIDATE_FOUND"
STATE_DONE = "DONE"


class SidecarBinder:
    """
    State machine deciding what to do with one sidecar.

    START -> DONE (already correct) or START -> SEARCHING -> CANDIDATE_FOUND
    -> DONE. The decision is computed once against the snapshot; only the
    base-still-exists check for a taken rename target touches the filesystem.
    """

    def __init__(
        self,
        sidecar: DirectoryEntry,
        suffix: str,
        snapshot: Snapshot,
        sidecar_suffixes: Tuple[str, ...],
        *,
        rename_policy: str = RENAME_POLICY_CANDIDATE,
        exists: ExistsProbe = utils.exists,
        claimed_targets: Set[Tuple[str, str]] | None = None,
        reporter: VerboseReporter | None = None,
    ):
        if rename_policy not in RENAME_POLICIES:
            raise ValueError(f"Unknown rename policy: {rename_policy}")
        self.sidecar = sidecar
        self.suffix = suffix
        self.snapshot = snapshot
        self.sidecar_suffixes = sidecar_suffixes
        self.rename_policy = rename_policy
        self.exists = exists
        self.claimed_targets = claimed_targets if claimed_targets is not None else set()
        self.reporter = reporter
        self.state = STATE_START
        self.literal_base = sidecar.name[: len(sidecar.name) - len(suffix)]

    def bind(self) -> BindingDecision:
        if self.state != STATE_START:
            raise RuntimeError(f"Binder for {self.sidecar.relative_path} already ran")
        decision = self._bind()
        self.state = STATE_DONE
        return decision

    def _bind(self) -> BindingDecision:
        parent = self.sidecar.parent
        if self.snapshot.sibling(parent, self.literal_base) is not None:
            return AlreadyCorrect(sidecar=self.sidecar)

        self.state = STATE_SEARCHING
        marked, bare = self._partition_candidates()
        if marked and bare:
            self._trace(
                f"{self.sidecar.relative_path}: ambiguous between "
                + ", ".join(entry.name for entry in bare + marked)
            )
            return Ambiguous(sidecar=self.sidecar, candidates=bare + marked)
        candidates = marked or bare
        if not candidates:
            return Orphaned(sidecar=self.sidecar, reason=ORPHAN_NO_BASE)

        self.state = STATE_CANDIDATE_FOUND
        candidate = candidates[0]
        self._trace(f"{self.sidecar.relative_path}: candidate {candidate.name}")
        if self.rename_policy == RENAME_POLICY_LITERAL:
            # The literal base was already missing at START.
            return Orphaned(sidecar=self.sidecar, reason=ORPHAN_NO_BASE, candidate=candidate)
        return self._resolve_target(candidate)

    def _partition_candidates(self) -> Tuple[List[DirectoryEntry], List[DirectoryEntry]]:
        _, declared_ext = os.path.splitext(self.literal_base)
        wanted_stem = canonical_stem(self.literal_base).lower()
        marked: List[DirectoryEntry] = []
        bare: List[DirectoryEntry] = []
        for entry in self.snapshot.siblings(self.sidecar.parent):
            if entry.is_directory or is_sidecar_name(entry.name, self.sidecar_suffixes):
                continue
            if entry.extension.lower() != declared_ext.lower():
                continue
            if normalize(entry.stem).lower() != wanted_stem:
                continue
            if has_marker(entry.name):
                marked.append(entry)
            else:
                bare.append(entry)
        return marked, bare

    def _resolve_target(self, candidate: DirectoryEntry) -> BindingDecision:
        target_name = candidate.name + self.suffix
        if target_name == self.sidecar.name:
            return AlreadyCorrect(sidecar=self.sidecar)
        parent = self.sidecar.parent
        target_path = os.path.join(parent, target_name)

        existing = self._find_existing(target_name)
        if existing is not None:
            if existing.name != target_name:
                return Conflict(
                    sidecar=self.sidecar,
                    candidate=candidate,
                    existing_path=existing.path,
                    kind=CONFLICT_CASE_MISMATCH,
                )
            if not self.exists(candidate.path):
                return Conflict(
                    sidecar=self.sidecar,
                    candidate=candidate,
                    existing_path=existing.path,
                    kind=CONFLICT_BASE_MISSING,
                )
            return Conflict(
                sidecar=self.sidecar,
                candidate=candidate,
                existing_path=existing.path,
                kind=CONFLICT_DESTINATION_BOUND,
            )

        claim = (parent, target_name.lower())
        if claim in self.claimed_targets:
            return Conflict(
                sidecar=self.sidecar,
                candidate=candidate,
                existing_path=target_path,
                kind=CONFLICT_DESTINATION_BOUND,
            )
        self.claimed_targets.add(claim)
        return NeedsRename(sidecar=self.sidecar, candidate=candidate, target=target_path)

    def _find_existing(self, target_name: str) -> DirectoryEntry | None:
        exact = self.snapshot.sibling(self.sidecar.parent, target_name)
        if exact is not None:
            return exact
        # The sidecar itself counts: a case-only rename is a case-folding conflict.
        folded = target_name.lower()
        for entry in self.snapshot.siblings(self.sidecar.parent):
            if entry.name.lower() == folded:
                return entry
        return None

    def _trace(self, message: str) -> None:
        if self.reporter:
            self.reporter(message)


def bind_sidecars(
    snapshot: Snapshot,
    sidecar_suffixes: Iterable[str],
    *,
    rename_policy: str = RENAME_POLICY_CANDIDATE,
    exists: ExistsProbe = utils.exists,
    reporter: VerboseReporter | None = None,
) -> List[BindingDecision]:
    """
    Run one SidecarBinder per sidecar in the snapshot.

    Args:
        snapshot: Scanned tree.
        sidecar_suffixes: Suffixes marking metadata sidecars (e.g. ".xmp").
        rename_policy: "candidate" trusts a found base candidate and proposes a
            rename; "literal" treats every sidecar without its literal base as
            orphaned.
        exists: Probe used to confirm a base candidate still exists.
        reporter: Optional callback for verbose binding traces.

    Returns:
        One BindingDecision per sidecar, in lexical order of relative path.

    Raises:
        ValueError: If `rename_policy` is unknown.
    """
    suffixes = tuple(sidecar_suffixes)
    claimed: Set[Tuple[str, str]] = set()
    decisions: List[BindingDecision] = []
    for entry in snapshot:
        if entry.is_directory:
            continue
        suffix = sidecar_suffix(entry.name, suffixes)
        if suffix is None:
            continue
        binder = SidecarBinder(
            entry,
            suffix,
            snapshot,
            suffixes,
            rename_policy=rename_policy,
            exists=exists,
            claimed_targets=claimed,
            reporter=reporter,
        )
        decisions.append(binder.bind())
    return decisions

