"""
Module: reporting
Purpose: Logging, decision rendering and report generation utilities.
"""

import json
import os
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from typing import Any, List

from .models.decisions import (
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
from .models.report import STATUS_DONE, STATUS_FAILED, ReconciliationReport, ReportEntry
from .utils import relative_path

ARTIFACTS_DIR = "artifacts"
ARTIFACTS_ENV = "NAMEMEND_ARTIFACTS_DIR"
LOG_BASENAME = "namemend.log"
LOG_FILE_NAME = os.path.join(ARTIFACTS_DIR, LOG_BASENAME)
REPORT_SCHEMA_VERSION = "1.0"

ORPHAN_BASE_GONE_REASON = "orphaned sidecar, base doesn't exist"
NO_DUPLICATES_MESSAGE = "No duplicate files found."
NO_SIDECAR_CHANGES_MESSAGE = "No sidecar files need renaming."


def artifact_path(filename: str) -> str:
    directory = os.environ.get(ARTIFACTS_ENV) or ARTIFACTS_DIR
    return os.path.abspath(os.path.join(directory, filename))


def log_file_path() -> str:
    return artifact_path(LOG_BASENAME)


def ensure_log_initialized() -> str:
    """Ensure the namemend log file exists and return its absolute path."""
    path = log_file_path()
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    with open(path, "a", encoding="utf-8"):
        pass
    return path


def write_log(entries: List[str], outfile: str | None = None):
    """
    Append entries to logfile.
    """
    target = outfile or log_file_path()
    directory = os.path.dirname(os.path.abspath(target)) or "."
    os.makedirs(directory, exist_ok=True)
    timestamp = datetime.now(timezone.utc).isoformat()
    with open(target, "a", encoding="utf-8") as handle:
        for entry in entries:
            normalized = entry if entry.startswith("[") else f"[INFO] {entry}"
            handle.write(f"[{timestamp}] {normalized}\n")


def decision_line(decision: ReconcileDecision, root: str) -> str | None:
    """
    Render the single output line for an actionable decision.

    Returns None for decisions that print nothing (already correct, ambiguous,
    case-folding conflicts).
    """
    if isinstance(decision, DuplicatePair):
        return (
            f"{decision.original.relative_path} <-> {decision.duplicate.relative_path} "
            f"(Size: {decision.duplicate.size} bytes)"
        )
    if isinstance(decision, NeedsRename):
        return f"{decision.sidecar.relative_path} -> {relative_path(decision.target, root)}"
    if isinstance(decision, Orphaned):
        return f"[REMOVE] {decision.sidecar.relative_path} ({decision.reason})"
    if isinstance(decision, Conflict):
        if decision.kind == CONFLICT_BASE_MISSING:
            return f"[REMOVE] {relative_path(decision.existing_path, root)} ({ORPHAN_BASE_GONE_REASON})"
        if decision.kind == CONFLICT_DESTINATION_BOUND:
            return (
                f"[SKIP] {decision.sidecar.relative_path} "
                f"(destination already exists: {relative_path(decision.existing_path, root)})"
            )
    return None


def verbose_line(decision: ReconcileDecision) -> str | None:
    if isinstance(decision, Ambiguous):
        names = ", ".join(entry.name for entry in decision.candidates)
        return f"[AMBIGUOUS] {decision.sidecar.relative_path} (candidates: {names})"
    if isinstance(decision, AlreadyCorrect):
        return f"[OK] {decision.sidecar.relative_path}"
    if isinstance(decision, Conflict) and decision.kind not in (
        CONFLICT_BASE_MISSING,
        CONFLICT_DESTINATION_BOUND,
    ):
        return f"[CASE] {decision.sidecar.relative_path} ({os.path.basename(decision.existing_path)})"
    return None


def outcome_line(entry: ReportEntry, root: str) -> str | None:
    """Render the result of executing a mutating decision."""
    decision = entry.decision
    outcome = entry.outcome
    if outcome.status not in (STATUS_DONE, STATUS_FAILED):
        return None
    if isinstance(decision, NeedsRename):
        src = decision.sidecar.relative_path
        dst = relative_path(decision.target, root)
        if outcome.status == STATUS_DONE:
            return f"  Renamed: {src} -> {dst}"
        return f"  [ERROR] Failed to rename {src}: {outcome.error}"
    removed = mutation_target(decision)
    if removed is None:
        return None
    rel = relative_path(removed, root)
    if outcome.status == STATUS_DONE:
        return f"  Removed: {rel}"
    return f"  [ERROR] Failed to remove {rel}: {outcome.error}"


def mutation_target(decision: ReconcileDecision) -> str | None:
    """Path a removing decision deletes."""
    if isinstance(decision, DuplicatePair):
        return decision.duplicate.path
    if isinstance(decision, Orphaned):
        return decision.sidecar.path
    if isinstance(decision, Conflict) and decision.kind == CONFLICT_BASE_MISSING:
        return decision.existing_path
    return None


def summary_line(report: ReconciliationReport) -> str:
    counts = report.tallies()
    mode = "apply" if report.apply else "preview"
    line = (
        f"Summary ({mode}): {counts['duplicates']} duplicate pair(s), "
        f"{counts['renamed']} renamed, {counts['removed']} removed, "
        f"{counts['skipped']} skipped, {counts['ambiguous']} ambiguous"
    )
    if counts["failed"]:
        line += f", {counts['failed']} failed"
    return line


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        if is_dataclass(o):
            return asdict(o)
        return super().default(o)


def write_json_report(report: ReconciliationReport, outfile: str, settings: Any = None):
    """
    Save structured JSON summary.
    """
    os.makedirs(os.path.dirname(os.path.abspath(outfile)) or ".", exist_ok=True)
    payload = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "root": report.root,
        "mode": "apply" if report.apply else "preview",
        "settings": settings,
        "tallies": report.tallies(),
        "decisions": report.entries,
    }
    with open(outfile, "w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, cls=EnhancedJSONEncoder)


PASS_DUPLICATES = "duplicates"
PASS_SIDECARS = "sidecars"
_PASS_TITLES = {PASS_DUPLICATES: "Duplicate files", PASS_SIDECARS: "Sidecar files"}
_PASS_EMPTY_MESSAGES = {PASS_DUPLICATES: NO_DUPLICATES_MESSAGE, PASS_SIDECARS: NO_SIDECAR_CHANGES_MESSAGE}
_END = "__end__"


class ReportRenderer:
    """
    Print report entries as they are produced, one pass after another.

    Each pass that printed nothing ends with its "nothing found" message;
    `finish` closes every remaining pass and prints the summary line.
    """

    def __init__(self, formatter, root: str, *, duplicates: bool = True, sidecars: bool = True, headers: bool = False):
        self.formatter = formatter
        self.root = root
        self.headers = headers
        self._pending = [name for name, enabled in ((PASS_DUPLICATES, duplicates), (PASS_SIDECARS, sidecars)) if enabled]
        self._current: str | None = None
        self._printed = 0

    def render(self, entry: ReportEntry) -> None:
        decision = entry.decision
        self._advance(PASS_DUPLICATES if isinstance(decision, DuplicatePair) else PASS_SIDECARS)
        line = decision_line(decision, self.root)
        if line is None:
            detail = verbose_line(decision)
            if detail:
                self.formatter.trace(detail)
        else:
            self._printed += 1
            self.formatter.decision(line)
        result = outcome_line(entry, self.root)
        if result:
            self.formatter.outcome(result, failed=entry.outcome.status == STATUS_FAILED)

    def render_all(self, report: ReconciliationReport) -> None:
        for entry in report.entries:
            self.render(entry)
        self.finish(report)

    def finish(self, report: ReconciliationReport) -> None:
        self._advance(_END)
        self.formatter.summary(summary_line(report))

    def _advance(self, target: str) -> None:
        while self._current != target:
            self._close_current()
            if not self._pending:
                self._current = target
                return
            self._current = self._pending.pop(0)
            self._printed = 0
            if self.headers:
                self.formatter.pass_header(_PASS_TITLES[self._current])

    def _close_current(self) -> None:
        if self._current in _PASS_EMPTY_MESSAGES and self._printed == 0:
            self.formatter.nothing_found(_PASS_EMPTY_MESSAGES[self._current])
