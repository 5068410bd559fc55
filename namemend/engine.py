"""
Module: engine
Purpose: Build reconciliation reports and execute them with safety checks.
"""

from typing import Callable, Dict

from . import utils
from .config import Settings
from .duplicates import find_duplicate_pairs
from .exceptions import MutationError
from .models.decisions import CONFLICT_CASE_MISMATCH, Conflict, NeedsRename, ReconcileDecision
from .models.report import STATUS_DONE, STATUS_FAILED, STATUS_PLANNED, ReconciliationReport, ReportEntry
from .reporting import mutation_target, write_log
from .scanner import scan_tree
from .sidecars import bind_sidecars

EntryListener = Callable[[ReportEntry], None]
VerboseReporter = Callable[[str], None]


def plan_reconciliation(
    root: str,
    settings: Settings | None = None,
    *,
    duplicates: bool = True,
    sidecars: bool = True,
    exists: Callable[[str], bool] = utils.exists,
    reporter: VerboseReporter | None = None,
) -> ReconciliationReport:
    """
    Scan `root` once and compute every decision without touching the tree.

    Both passes read the same unmodified snapshot; neither sees the other's
    planned mutations.

    Args:
        root: Directory to reconcile.
        settings: Effective settings; defaults apply when omitted.
        duplicates: Run the duplicate pair resolver.
        sidecars: Run the sidecar binder.
        exists: Filesystem existence check handed to the sidecar binder.
        reporter: Optional callback for verbose traces.

    Returns:
        ReconciliationReport in preview state.

    Raises:
        ConfigurationError: If the root is missing or unreadable.
        TraversalError: If the tree cannot be listed completely.
    """
    settings = settings or Settings()
    snapshot = scan_tree(root)
    report = ReconciliationReport(root=snapshot.root)
    write_log([f"[INFO] Reconciliation planned for {snapshot.root} ({len(snapshot)} entries)"])

    if duplicates:
        report.extend(find_duplicate_pairs(snapshot, settings.sidecar_suffixes, reporter=reporter))
    if sidecars:
        bindings = bind_sidecars(
            snapshot,
            settings.sidecar_suffixes,
            rename_policy=settings.rename_policy,
            exists=exists,
            reporter=reporter,
        )
        for decision in bindings:
            if isinstance(decision, Conflict) and decision.kind == CONFLICT_CASE_MISMATCH:
                write_log(
                    [f"[INFO] Skipped {decision.sidecar.path}: target differs only in case from {decision.existing_path}"]
                )
        report.extend(bindings)
    return report


def dry_run(report: ReconciliationReport) -> Dict[str, int]:
    """
    Produce a preview summary; no filesystem changes or console output.

    Args:
        report: ReconciliationReport to simulate.

    Returns:
        Dictionary mapping summary buckets to planned counts.
    """
    report.apply = False
    tallies = report.tallies()
    entries = [f"[INFO] Preview - decision count: {len(report.entries)}"]
    for key, count in tallies.items():
        entries.append(f"[INFO] {key}: {count}")
    write_log(entries)
    return tallies


def execute_reconciliation(
    report: ReconciliationReport,
    on_entry: EntryListener | None = None,
) -> ReconciliationReport:
    """
    Apply every planned decision in order.

    A failed mutation is recorded on its entry and the run continues; no
    mutation is retried.

    Args:
        report: Planned ReconciliationReport.
        on_entry: Called with each entry after its mutation (if any) ran.

    Returns:
        The same report, now in apply state with outcomes filled in.
    """
    report.apply = True
    for entry in report.entries:
        if entry.outcome.status == STATUS_PLANNED:
            try:
                _execute(entry.decision)
                entry.outcome.status = STATUS_DONE
            except MutationError as exc:
                entry.outcome.status = STATUS_FAILED
                entry.outcome.error = str(exc)
        if on_entry:
            on_entry(entry)
    tallies = report.tallies()
    write_log(
        [
            "[INFO] Reconciliation applied",
            *(f"[INFO] {key}: {count}" for key, count in tallies.items()),
        ]
    )
    return report


def _execute(decision: ReconcileDecision) -> None:
    if isinstance(decision, NeedsRename):
        utils.rename_file(decision.sidecar.path, decision.target)
        return
    target = mutation_target(decision)
    if target is None:
        raise MutationError(f"Nothing to apply for {decision.type}")
    utils.remove_file(target)
