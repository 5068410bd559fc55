"""
Module: cli
Purpose: Command-line interface entry point.
"""

import argparse
import sys
from typing import List

from . import engine, reporting
from .cli_formatter import COLOR_CHOICES, CLIFormatter, FormatterConfig, detect_terminal_capabilities
from .config import SIDECAR_EXTS_ENV, RENAME_POLICY_ENV, Settings, load_settings
from .exceptions import ConfigurationError, NamemendError, TraversalError
from .sidecars import RENAME_POLICIES

COMMAND_DUPLICATES = "duplicates"
COMMAND_SIDECARS = "sidecars"
COMMAND_RECONCILE = "reconcile"

EXIT_OK = 0
EXIT_FAILURE = 1


def _run(
    command: str,
    root: str,
    *,
    apply: bool,
    settings: Settings,
    formatter: CLIFormatter,
    report_path: str | None,
) -> int:
    run_duplicates = command in (COMMAND_DUPLICATES, COMMAND_RECONCILE)
    run_sidecars = command in (COMMAND_SIDECARS, COMMAND_RECONCILE)

    report = engine.plan_reconciliation(
        root,
        settings,
        duplicates=run_duplicates,
        sidecars=run_sidecars,
        reporter=formatter.trace,
    )
    renderer = reporting.ReportRenderer(
        formatter,
        report.root,
        duplicates=run_duplicates,
        sidecars=run_sidecars,
        headers=command == COMMAND_RECONCILE,
    )
    if apply:
        engine.execute_reconciliation(report, on_entry=renderer.render)
        renderer.finish(report)
    else:
        engine.dry_run(report)
        renderer.render_all(report)
        formatter.note("Preview only: no files were changed. Re-run with --apply to make these changes.")

    if report_path:
        reporting.write_json_report(report, report_path, settings=settings)
        formatter.note(f"Report saved to {report_path}")
    return EXIT_OK


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="namemend",
        description=(
            "Reconcile file names left behind by repeated syncs: remove size-identical '(N)' duplicates "
            "and re-bind metadata sidecars to their base files. Preview is the default."
        ),
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable ANSI colors regardless of terminal support.",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Plain mode: ASCII-only separators, no ANSI colors.",
    )
    parser.add_argument(
        "--color",
        choices=list(COLOR_CHOICES),
        default=None,
        help="Force color usage: auto (default), always, or never.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print why entries were left alone (ambiguous, already correct, unpaired).",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("root", help="Directory tree to reconcile")
    mode_group = common.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Preview only: print decisions without changing anything (default)",
    )
    mode_group.add_argument(
        "--apply",
        dest="dry_run",
        action="store_false",
        help="Delete duplicates and rename/remove sidecars, then print each outcome",
    )
    common.set_defaults(dry_run=True)
    common.add_argument(
        "--sidecar-ext",
        dest="sidecar_exts",
        action="append",
        metavar="EXT",
        default=None,
        help=f"Sidecar extension (repeatable, default .xmp). Also configurable via ${SIDECAR_EXTS_ENV}.",
    )
    common.add_argument(
        "--rename-policy",
        choices=list(RENAME_POLICIES),
        default=None,
        help=(
            "candidate (default): rename a sidecar to follow the base file it was matched to; "
            "literal: treat every sidecar without its exact base file as orphaned. "
            f"Also configurable via ${RENAME_POLICY_ENV}."
        ),
    )
    common.add_argument("--report", dest="report_path", default=None, help="Write a JSON report to this path")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser(
        COMMAND_DUPLICATES,
        parents=[common],
        help="Find '(N)' copies that match their original's size",
        description=(
            "Pairs every file carrying a '(N)' marker with the unmarked sibling of the same size. "
            "With --apply only the marked copy is deleted; the original is never touched."
        ),
    )
    subparsers.add_parser(
        COMMAND_SIDECARS,
        parents=[common],
        help="Rename or remove sidecar files that lost their base file",
        description=(
            "Binds each sidecar (e.g. photo.jpg.xmp) to its base file. Sidecars whose base was renumbered "
            "are renamed, orphaned sidecars are removed, ambiguous ones are left alone."
        ),
    )
    subparsers.add_parser(
        COMMAND_RECONCILE,
        parents=[common],
        help="Run the duplicate and sidecar passes on one snapshot",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    """
    Argument parser entry point.

    Args:
        argv: Arguments to parse; defaults to sys.argv[1:].

    Returns:
        Process exit status.

    Raises:
        SystemExit: On usage errors (argparse).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    formatter_config: FormatterConfig = detect_terminal_capabilities(
        color_preference=args.color,
        plain_mode=args.plain,
        no_color_flag=args.no_color,
        stdout_isatty=sys.stdout.isatty(),
    )
    formatter_config.verbose = args.verbose
    formatter = CLIFormatter(formatter_config, stream=sys.stdout)
    error_formatter = CLIFormatter(formatter_config, stream=sys.stderr)

    log_path = reporting.ensure_log_initialized()
    try:
        reporting.write_log([f"[INFO] Command {args.command} started ({'apply' if not args.dry_run else 'preview'})"])
        settings = load_settings(args.sidecar_exts, args.rename_policy)
        return _run(
            args.command,
            args.root,
            apply=not args.dry_run,
            settings=settings,
            formatter=formatter,
            report_path=args.report_path,
        )
    except KeyboardInterrupt:
        reporting.write_log(["[WARN] Operation aborted via Ctrl+C"])
        error_formatter.failure(
            "Interrupted",
            reason="Interrupted by user (Ctrl+C).",
            log_path=log_path,
            next_step="Re-run the command; completed renames and removals are not repeated.",
        )
        return EXIT_FAILURE
    except ConfigurationError as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        error_formatter.failure(
            str(exc),
            reason="Invalid root directory or option value.",
            log_path=log_path,
            next_step="Check that the directory exists and is readable and that option values are valid, then rerun.",
        )
        return EXIT_FAILURE
    except TraversalError as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        error_formatter.failure(
            str(exc),
            reason="Traversal aborted before any change was made.",
            log_path=log_path,
            next_step="Fix permissions on the unreadable folder, then rerun.",
        )
        return EXIT_FAILURE
    except NamemendError as exc:
        reporting.write_log([f"[ERROR] {exc}"])
        error_formatter.failure(str(exc), reason="Run failed.", log_path=log_path)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
