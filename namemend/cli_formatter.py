"""
Module: cli_formatter
Purpose: Console rendering of reconciliation decisions, outcomes and failures.
"""

import os
import sys
from dataclasses import dataclass
from typing import TextIO

from .utils import BOLD, COLOR_RESET, color_256

PLAIN_ENV = "NAMEMEND_PLAIN"
COLOR_ENV = "NAMEMEND_COLOR"
COLOR_CHOICES = ("auto", "always", "never")

HEADER_GLYPH = "◆"
HEADER_GLYPH_ASCII = ">"

# 256-color codes per kind of line.
HEADER_COLOR = 74
DONE_COLOR = 64
FAILED_COLOR = 160
NOTE_COLOR = 243
TAG_COLORS = {"[REMOVE]": 221, "[SKIP]": NOTE_COLOR}


@dataclass
class FormatterConfig:
    """How output lines are decorated; the text itself never changes."""

    use_color: bool = True
    ascii_only: bool = False
    verbose: bool = False


class CLIFormatter:
    """
    Writes namemend output.

    Decision, outcome and summary lines go out verbatim; color only ever wraps
    a whole line, so piped output matches the documented formats exactly.
    """

    def __init__(self, config: FormatterConfig | None = None, stream: TextIO | None = None):
        self.config = config or FormatterConfig()
        self.stream = stream or sys.stdout

    def pass_header(self, title: str) -> None:
        glyph = HEADER_GLYPH_ASCII if self.config.ascii_only else HEADER_GLYPH
        self._emit(f"{glyph} {title}", HEADER_COLOR, bold=True)

    def decision(self, line: str) -> None:
        tag = line.split(" ", 1)[0]
        self._emit(line, TAG_COLORS.get(tag), bold=tag == "[REMOVE]")

    def outcome(self, line: str, *, failed: bool = False) -> None:
        self._emit(line, FAILED_COLOR if failed else DONE_COLOR, bold=True)

    def nothing_found(self, message: str) -> None:
        self._emit(message)

    def summary(self, line: str) -> None:
        self._emit("")
        self._emit(line, HEADER_COLOR)

    def note(self, text: str) -> None:
        self._emit(text, NOTE_COLOR)

    def trace(self, text: str) -> None:
        """Verbose diagnostics; dropped unless --verbose was given."""
        if self.config.verbose:
            self._emit(f"[verbose] {text}", NOTE_COLOR)

    def failure(
        self,
        message: str,
        *,
        reason: str,
        log_path: str | None = None,
        next_step: str | None = None,
    ) -> None:
        """
        Print a fatal error line followed by an indented explanation.

        Args:
            message: Error text shown after the [ERROR] tag.
            reason: Why the run stopped.
            log_path: Log file holding the details, if any.
            next_step: What the user should do before rerunning.
        """
        self._emit(f"[ERROR] {message}", FAILED_COLOR, bold=True)
        details = [f"Reason: {reason}"]
        if log_path:
            details.append(f"Log file: {log_path}")
        details.append(f"Next step: {next_step or 'Review the log and rerun when ready.'}")
        for detail in details:
            self._emit(f"  {detail}")

    def _emit(self, text: str, color_code: int | None = None, bold: bool = False) -> None:
        if self.config.use_color and text and (color_code is not None or bold):
            prefix = BOLD if bold else ""
            if color_code is not None:
                prefix += color_256(color_code)
            text = f"{prefix}{text}{COLOR_RESET}"
        self.stream.write(text + "\n")


def detect_terminal_capabilities(
    *,
    color_preference: str | None = None,
    plain_mode: bool = False,
    no_color_flag: bool = False,
    stdout_isatty: bool | None = None,
) -> FormatterConfig:
    """
    Decide colors and glyphs for this run.

    --plain and $NAMEMEND_PLAIN force uncolored ASCII output. Otherwise
    --color or $NAMEMEND_COLOR decide; "auto" colors only an interactive
    terminal that has not opted out through --no-color, $NO_COLOR or TERM=dumb.
    """
    if stdout_isatty is None:
        stdout_isatty = sys.stdout.isatty()
    if plain_mode or os.environ.get(PLAIN_ENV):
        return FormatterConfig(use_color=False, ascii_only=True)

    preference = (color_preference or os.environ.get(COLOR_ENV) or "auto").lower()
    if preference not in COLOR_CHOICES:
        preference = "auto"
    dumb_terminal = os.environ.get("TERM", "").lower() == "dumb"
    if preference == "auto":
        use_color = stdout_isatty and not no_color_flag and not os.environ.get("NO_COLOR") and not dumb_terminal
    else:
        use_color = preference == "always"

    ascii_only = dumb_terminal or not stdout_isatty or not _stdout_encodes(HEADER_GLYPH)
    return FormatterConfig(use_color=use_color, ascii_only=ascii_only)


def _stdout_encodes(glyph: str) -> bool:
    encoding = getattr(sys.stdout, "encoding", None)
    if not encoding:
        return False
    try:
        glyph.encode(encoding)
    except (UnicodeEncodeError, LookupError):
        return False
    return True
