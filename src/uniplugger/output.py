"""Terminal output for the ``uniplugger`` command.

Resolved paths and plugin listings go to **stdout**; status, errors and
hints go to **stderr**, so ``uniplugger --json resolve ... | jq`` always
sees clean data. The format is JSON, plain tab-separated text, or Rich
tables when stdout is an interactive terminal with colour enabled
(``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all turn colour off).
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Sequence
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.table import Table

PLUGIN_COLUMNS = ("#", "File", "Class", "Name")
"""Column order of a plugin listing."""


class OutputFormat(str, Enum):
    """Output formats; ``AUTO`` picks ``RICH`` on a colour TTY, else ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _stdout_is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def color_disabled(no_color: bool = False) -> bool:
    """Return True if *no_color* is set, ``NO_COLOR`` exists or ``TERM=dumb``."""
    return (
        no_color
        or os.environ.get("NO_COLOR") is not None
        or os.environ.get("TERM") == "dumb"
    )


class OutputManager:
    """Writes discovery results and diagnostics in the selected format.

    Args:
        format: Desired format. ``AUTO`` is resolved once, here.
        no_color: Disable colour and Rich markup.
        quiet: Drop success messages and suggestions.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._plain_text = color_disabled(no_color)
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _stdout_is_tty() and not self._plain_text
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._plain_text,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._plain_text, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # stdout

    def _write(self, line: str) -> None:
        print(line, file=sys.stdout, flush=True)

    def print_paths(self, paths: Sequence[str]) -> None:
        """Print resolved module paths: a JSON array, or one path per line."""
        if self._format == OutputFormat.JSON:
            self._write(json.dumps(list(paths), indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for path in paths:
                self._write(path)
        else:
            for path in paths:
                self._stdout.print(path, style="cyan", highlight=False)

    def print_plugins(
        self, rows: Sequence[Sequence[str]], title: Optional[str] = None
    ) -> None:
        """Print one row per plugin under :data:`PLUGIN_COLUMNS`.

        JSON mode emits an array of objects keyed by column name; plain mode
        emits a tab-separated header line followed by the rows.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(PLUGIN_COLUMNS, row)) for row in rows]
            self._write(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            self._write("\t".join(PLUGIN_COLUMNS))
            for row in rows:
                self._write("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for column in PLUGIN_COLUMNS:
            table.add_column(column, justify="right" if column == "#" else "left")
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # stderr

    def _diagnostic(self, text: str, markup: str) -> None:
        if self._plain_text:
            print(text, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def error(self, message: str) -> None:
        """Report a failure. Shown even with ``--quiet``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def suggest(self, message: str) -> None:
        """Print a next-step hint such as checking ``--ext`` after zero matches."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {message}[/dim]")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the process-wide manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the process-wide manager (used between tests)."""
    global _output
    _output = None


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
