"""Terminal output for the command line and the debug call logger.

Two streams, two purposes:

* **stdout** -- API payloads and tables only, so that ``mangoclient call``
  output can be piped into ``jq`` and friends.
* **stderr** -- diagnostics: status lines, errors and the ``debug_mode``
  call log written by :func:`~mangoclient.config.default_log_class`.

Rich formatting is used when stdout is a terminal and colour is not
disabled (``NO_COLOR``, ``TERM=dumb`` or ``--no-color``).

:class:`OutputManager` holds the preferences; the module-level helpers
(:func:`info`, :func:`error`, :func:`debug`, ...) delegate to a global
instance installed with :func:`set_output`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional, Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported payload formats. ``AUTO`` picks ``RICH`` on a TTY, ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes payloads to stdout and diagnostics to stderr.

    Args:
        format: Desired payload format.
        no_color: Disable colour and Rich markup.
        quiet: Drop informational lines on stderr; errors are always shown.
        verbose: Show ``[debug]`` lines on stderr.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self.no_color = no_color or _should_disable_color()
        self.quiet = quiet
        self.verbose = verbose

        if format is OutputFormat.AUTO:
            format = OutputFormat.PLAIN if self.no_color or not _is_tty() else OutputFormat.RICH
        self.format = format

        rich = format is OutputFormat.RICH
        self._console = Console(file=sys.stdout, no_color=self.no_color, force_terminal=rich)
        self._err_console = Console(file=sys.stderr, no_color=self.no_color, stderr=True)

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Render an API payload (raw data, a model or a list of models)."""
        data = _to_plain(data)
        if self.format is OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self.print_data(line)
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self.format is OutputFormat.JSON:
            self.print_data(text)
        else:
            self._console.print(Syntax(text, "json", word_wrap=True))

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows under *headers*.

        JSON mode emits a list of objects keyed by header, plain mode a
        tab-separated header line followed by one line per row.
        """
        if self.format is OutputFormat.JSON:
            self.print_data(json.dumps([dict(zip(headers, row)) for row in rows], indent=2))
        elif self.format is OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._console.print(table)

    # --- stderr ---

    def info(self, message: str) -> None:
        if not self.quiet:
            self._diagnostic(message)

    def error(self, message: str) -> None:
        self._diagnostic(f"Error: {message}", style="bold red")

    def debug(self, message: str) -> None:
        if self.verbose:
            self._diagnostic(f"[debug] {message}", style="dim")

    def _diagnostic(self, message: str, style: Optional[str] = None) -> None:
        if self.no_color or style is None:
            print(message, file=sys.stderr, flush=True)
        else:
            # markup=False keeps "[debug]" and payload brackets literal
            self._err_console.print(message, style=style, markup=False)


def _to_plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", exclude_none=True)
    if isinstance(data, list):
        return [_to_plain(item) for item in data]
    return data


def _plain_lines(data: Any) -> list[str]:
    """Objects become ``key<TAB>value`` lines, lists one line per item."""
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# --- global instance ---

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
    """Drop the global manager; tests call this between runs."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
