"""Terminal output for the ``scmauth`` CLI.

Whatever a shell wrapper may capture goes to **stdout**: the bare token
printed by ``scmauth token``, its ``Authorization:`` header line, the
credential mapping in ``--json`` mode, the ``scmauth check`` result and the
``scmauth providers`` table. Everything meant for a human reading the
terminal (status lines, errors, next-step hints) goes to **stderr**, so
``TOKEN=$(scmauth token URL)`` never picks up a stray message.

Rich styling is only used when stdout is a terminal and colour has not
been turned off with ``--no-color``, ``NO_COLOR`` or ``TERM=dumb``.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormat(str, Enum):
    """How stdout data is rendered. ``AUTO`` picks ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _dumps(value: Any, indent: Optional[int] = 2) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


class OutputManager:
    """Writes command results to stdout and diagnostics to stderr.

    Args:
        format: Rendering for stdout data; ``AUTO`` resolves to ``RICH`` on
            a colour-capable terminal and ``PLAIN`` otherwise.
        no_color: Never emit Rich markup or ANSI styles.
        quiet: Drop status lines and hints; errors are always shown.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def print_data(self, text: str) -> None:
        """Write *text* as one line, unstyled, e.g. a token or header line."""
        print(text, file=sys.stdout, flush=True)

    def format_data(self, data: dict[str, Any]) -> None:
        """Write a flat record such as a credential response or a routing result.

        ``--json`` prints one JSON object. Plain mode prints ``key<TAB>value``
        lines with nested values JSON-encoded on the same line. Rich mode
        prints an aligned key/value grid.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_dumps(data))
            return

        pairs = [
            (key, _dumps(value, indent=None) if isinstance(value, (dict, list)) else str(value))
            for key, value in data.items()
        ]
        if self._format == OutputFormat.PLAIN:
            for key, value in pairs:
                self.print_data(f"{key}\t{value}")
        else:
            grid = Table.grid(padding=(0, 2))
            grid.add_column(style="bold cyan")
            grid.add_column()
            for key, value in pairs:
                grid.add_row(key, value)
            self._stdout.print(grid)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows such as the provider list, one record per row.

        ``--json`` prints a list of objects keyed by *headers*; plain mode
        prints a tab-separated header line followed by the rows.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_dumps([dict(zip(headers, row)) for row in rows]))
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    # --- stderr ---

    def _note(self, message: str, prefix: str = "", style: str = "") -> None:
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        elif style:
            self._stderr.print(f"[{style}]{prefix}[/{style}]{message}")
        else:
            self._stderr.print(f"{prefix}{message}")

    def info(self, message: str) -> None:
        """Status line, hidden by ``--quiet``."""
        if not self._quiet:
            self._note(message)

    def error(self, message: str) -> None:
        """``Error:`` line, shown even with ``--quiet``."""
        self._note(message, prefix="Error: ", style="bold red")

    def suggest(self, message: str) -> None:
        """Next-step hint such as a config fix, hidden by ``--quiet``."""
        if not self._quiet:
            self._note(message, prefix="→ ", style="dim")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _color_disabled_by_env() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The manager installed by the CLI callback, or a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; tests call this between CLI runs."""
    global _output
    _output = None


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)
