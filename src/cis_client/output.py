"""Terminal output for the cis-client CLI.

Profiles, change-API responses and token details are *data* and go to
stdout, so ``cis-client get-user ... --json | jq`` always works.  Status
lines, warnings and errors are *diagnostics* and go to stderr.

The data format is chosen once per invocation by :class:`OutputManager`:

``json``
    Indented JSON, unicode kept as-is.
``plain``
    One ``key<TAB>value`` line per top-level field (nested values as compact
    JSON), or one JSON value per line for lists.
``rich``
    Syntax-highlighted JSON.  Picked by ``auto`` when stdout is a terminal
    and colour is allowed.

Colour is disabled by ``--no-color``, any ``NO_COLOR`` value, or
``TERM=dumb``.  The module-level functions forward to the manager installed
with :func:`set_output`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """Data formats accepted by :class:`OutputManager`."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (plain prefix, rich template, suppressed by --quiet)
_DIAGNOSTICS: dict[str, tuple[str, str, bool]] = {
    "info": ("", "{message}", True),
    "success": ("", "[green]{message}[/green]", True),
    "warning": ("Warning: ", "[yellow]Warning:[/yellow] {message}", False),
    "error": ("Error: ", "[bold red]Error:[/bold red] {message}", False),
    "debug": ("[debug] ", "[dim]\\[debug] {message}[/dim]", False),
}


def _dumps(data: Any, indent: Optional[int] = None) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


class OutputManager:
    """Per-invocation output settings and the consoles they apply to.

    Args:
        format: Data format; ``AUTO`` picks ``RICH`` on a colour terminal
            and ``PLAIN`` otherwise.
        no_color: Never emit colour or markup.
        quiet: Drop info and success lines.  Warnings, errors and data are
            always written.
        verbose: Write debug lines.
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
            use_rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
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

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """Console bound to stderr; verbose logging is rendered through it."""
        return self._stderr

    def format_response(self, data: Any) -> None:
        """Write *data* to stdout in the selected format."""
        if self._format == OutputFormat.JSON:
            self.print_data(_dumps(data, indent=2))
        elif self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_dumps(data, indent=2), "json", theme="monokai", word_wrap=True))
        elif self._format == OutputFormat.RICH:
            self._stdout.print(str(data))
        else:
            for line in _plain_lines(data):
                self.print_data(line)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def info(self, message: str) -> None:
        self._diagnostic("info", message)

    def success(self, message: str) -> None:
        self._diagnostic("success", message)

    def warning(self, message: str) -> None:
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        self._diagnostic("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic("debug", message)

    def _diagnostic(self, level: str, message: str) -> None:
        prefix, template, quietable = _DIAGNOSTICS[level]
        if quietable and self._quiet:
            return
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(template.format(message=message))


def _plain_lines(data: Any) -> Iterator[str]:
    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                value = _dumps(value)
            yield f"{key}\t{value}"
    elif isinstance(data, list):
        for item in data:
            yield _dumps(item)
    else:
        yield str(data)


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The installed :class:`OutputManager`; a default one is created on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager.  Tests call this between invocations."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)
