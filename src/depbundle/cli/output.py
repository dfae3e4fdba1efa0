"""Rich output formatting helpers for the depbundle CLI.

Provides the console report sink used by ``depbundle bundle`` and the
tables printed by ``depbundle lock``.

Level Color Mapping:
    error = bold red, warning = yellow, info = default, verbose = dim
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from depbundle.core.bundle import BundleResult
from depbundle.core.lockfile import Lockfile

_LEVEL_STYLES: dict[str, str] = {
    "error": "bold red",
    "warning": "yellow",
    "info": "",
    "verbose": "dim",
    "quiet": "yellow",
}

console = Console()
error_console = Console(stderr=True)


def level_style(level: str) -> str:
    """Return the Rich style string for a report level."""
    return _LEVEL_STYLES.get(level, "")


class ConsoleReports:
    """Report sink that writes to the terminal.

    Errors go to stderr. Verbose messages are dropped unless enabled.

    Args:
        verbose: Show messages written to the verbose channel.
        out: Console for non-error messages.
        err: Console for error messages.
    """

    def __init__(
        self,
        verbose: bool = False,
        out: Console | None = None,
        err: Console | None = None,
    ) -> None:
        self._verbose = verbose
        self._out = out or console
        self._err = err or error_console

    def _write(self, target: Console, level: str, message: str) -> None:
        target.print(Text(message, style=level_style(level)))

    def error(self, message: str) -> None:
        self._write(self._err, "error", message)

    def warning(self, message: str) -> None:
        self._write(self._out, "warning", message)

    def info(self, message: str) -> None:
        self._write(self._out, "info", message)

    def verbose(self, message: str) -> None:
        if self._verbose:
            self._write(self._out, "verbose", message)

    def quiet(self, message: str) -> None:
        self._write(self._out, "quiet", message)


def print_bundle_summary(result: BundleResult) -> None:
    """Print the outcome of a bundle run.

    Args:
        result: Result returned by ``BundleOrchestrator.run()``.
    """
    if result.success:
        title = "[bold green]Bundle succeeded[/bold green]"
    elif result.error is None:
        title = "[bold yellow]Bundle emitted with unresolved dependencies[/bold yellow]"
    else:
        stage = result.failed_stage.value if result.failed_stage else "unknown"
        title = f"[bold red]Bundle failed at stage '{stage}'[/bold red]"
    console.print(Panel(title, title="depbundle"))

    if result.root is not None and result.error is None:
        console.print(f"  Output:    [bold]{result.root.output_path}[/bold]")
        console.print(f"  Packages:  {len(result.root.packages)}")
        console.print(f"  Projects:  {len(result.root.projects)}")
        console.print(f"  Runtimes:  {len(result.root.runtimes)}")


def print_lockfile(lockfile: Lockfile) -> None:
    """Print a table of locked libraries and their platforms.

    Args:
        lockfile: The lockfile to display.
    """
    if lockfile.library_count == 0:
        console.print("[dim]No libraries in the lockfile.[/dim]")
        return

    table = Table(title="Locked Libraries", show_header=True, header_style="bold")
    table.add_column("Library", style="bold")
    table.add_column("Version")
    table.add_column("Platforms")
    table.add_column("Files", justify="right")
    table.add_column("SHA-512", style="dim")

    for library in lockfile.libraries:
        platforms = "\n".join(g.target_platform for g in library.framework_groups)
        table.add_row(
            library.name,
            library.version,
            platforms or "-",
            str(len(library.files)),
            library.sha[:16] + "..." if library.sha else "-",
        )
    console.print(table)
    console.print(f"[bold]{lockfile.library_count}[/bold] libraries locked")


def print_validation_errors(errors: list[str]) -> None:
    """Print lockfile validation errors, or a success line."""
    if not errors:
        console.print("[green]Lockfile is valid.[/green]")
        return
    console.print(Panel("[bold red]Lockfile is invalid[/bold red]", title="Lockfile Validation"))
    for error in errors:
        console.print(f"  [red]- {error}[/red]")


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout.

    Args:
        data: Any JSON-serializable data structure.
    """
    console.print_json(json.dumps(data, default=str))
