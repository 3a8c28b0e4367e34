"""CLI output with a strict stdout/stderr split.

* **stdout** carries data only: serialised documents, node paths, problem
  listings. This is what downstream tools pipe and parse.
* **stderr** carries diagnostics: status, warnings, errors.
* ``AUTO`` format renders with Rich on an interactive terminal and as plain
  text when piped. ``NO_COLOR`` and ``TERM=dumb`` disable colour.

:class:`OutputManager` holds the preferences and consoles. The CLI installs
one with :func:`set_output`; the module-level helpers delegate to it.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional, Sequence

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from specmodel.models import ValidationProblem, ValidationProblemSeverity

_SEVERITY_STYLES = {
    ValidationProblemSeverity.HIGH: "bold red",
    ValidationProblemSeverity.MEDIUM: "yellow",
    ValidationProblemSeverity.LOW: "cyan",
    ValidationProblemSeverity.IGNORE: "dim",
}


class OutputFormat(str, Enum):
    """Supported output formats. ``AUTO`` picks ``RICH`` or ``PLAIN`` by TTY."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr in the active format.

    Args:
        format: Desired output format.
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational messages on stderr.
        verbose: Show debug messages on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_document(self, text: str, language: str = "json") -> None:
        """Print serialised document text, highlighted in Rich mode."""
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, language, theme="monokai", word_wrap=True))
        else:
            self.print_data(text.rstrip("\n"))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
        styles: Optional[list[Optional[str]]] = None,
    ) -> None:
        """Print rows as a Rich table, JSON records, or tab-separated lines.

        Args:
            headers: Column header strings.
            rows: Cell strings per row.
            title: Table title (Rich mode only).
            styles: Optional Rich style per row (Rich mode only).
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for h in headers:
                table.add_column(h)
            for i, row in enumerate(rows):
                table.add_row(*row, style=styles[i] if styles else None)
            self._stdout.print(table)

    def print_problems(self, problems: Sequence[ValidationProblem]) -> None:
        """Print validation problems in the active format.

        JSON mode emits the full problem records, context included.
        """
        if self._format == OutputFormat.JSON:
            records = [p.model_dump(mode="json") for p in problems]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        rows = [
            [p.severity.value, p.error_code, p.node_path, p.property_name or "", p.message]
            for p in problems
        ]
        self.print_table(
            ["severity", "code", "path", "property", "message"],
            rows,
            title="Validation problems",
            styles=[_SEVERITY_STYLES[p.severity] for p in problems],
        )

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Informational message. Suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Warning. Shown even with ``--quiet``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Debug message. Only shown with ``--verbose``."""
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    if os.environ.get("NO_COLOR") is not None:
        return True
    return os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the global manager. Used by tests."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
