"""
Module: report
Purpose: Reconciliation report dataclass definition.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .decisions import (
    CONFLICT_BASE_MISSING,
    CONFLICT_DESTINATION_BOUND,
    AlreadyCorrect,
    Ambiguous,
    Conflict,
    DuplicatePair,
    NeedsRename,
    Orphaned,
    ReconcileDecision,
)

STATUS_PLANNED = "planned"
STATUS_DONE = "done"
STATUS_FAILED = "failed"
STATUS_NO_ACTION = "no_action"

TALLY_KEYS = ("duplicates", "renamed", "removed", "skipped", "ambiguous", "already_correct", "failed")


@dataclass
class Outcome:
    status: str
    error: Optional[str] = None


@dataclass
class ReportEntry:
    decision: ReconcileDecision
    outcome: Outcome


def is_mutating(decision: ReconcileDecision) -> bool:
    """Return True when applying the decision changes the filesystem."""
    if isinstance(decision, (DuplicatePair, NeedsRename, Orphaned)):
        return True
    return isinstance(decision, Conflict) and decision.kind == CONFLICT_BASE_MISSING


def tally_key(decision: ReconcileDecision) -> str | None:
    if isinstance(decision, DuplicatePair):
        return "duplicates"
    if isinstance(decision, NeedsRename):
        return "renamed"
    if isinstance(decision, Orphaned):
        return "removed"
    if isinstance(decision, Conflict):
        if decision.kind == CONFLICT_BASE_MISSING:
            return "removed"
        if decision.kind == CONFLICT_DESTINATION_BOUND:
            return "skipped"
        return None
    if isinstance(decision, Ambiguous):
        return "ambiguous"
    if isinstance(decision, AlreadyCorrect):
        return "already_correct"
    return None


@dataclass
class ReconciliationReport:
    """
    Every decision computed for one run over `root`, in processing order,
    together with the outcome of executing it.
    """

    root: str
    apply: bool = False
    entries: List[ReportEntry] = field(default_factory=list)

    def add(self, decision: ReconcileDecision) -> ReportEntry:
        status = STATUS_PLANNED if is_mutating(decision) else STATUS_NO_ACTION
        entry = ReportEntry(decision=decision, outcome=Outcome(status=status))
        self.entries.append(entry)
        return entry

    def extend(self, decisions: Iterable[ReconcileDecision]) -> None:
        for decision in decisions:
            self.add(decision)

    @property
    def decisions(self) -> List[ReconcileDecision]:
        return [entry.decision for entry in self.entries]

    def tallies(self) -> Dict[str, int]:
        """
        Count decisions per summary bucket. Once applied, only completed
        mutations count; failed ones land in `failed` instead.
        """
        counts = {key: 0 for key in TALLY_KEYS}
        for entry in self.entries:
            if entry.outcome.status == STATUS_FAILED:
                counts["failed"] += 1
                continue
            key = tally_key(entry.decision)
            if key is None:
                continue
            if self.apply and entry.outcome.status == STATUS_PLANNED:
                continue
            counts[key] += 1
        return counts
