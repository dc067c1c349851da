"""Console output helpers for the CLI and the sync engine."""

import json
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape


class OutputFormatter:
    """Prints status messages, honouring quiet and JSON output modes.

    Errors and warnings go to stderr so they stay visible when stdout is
    piped or when JSON output is requested.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def print(self, message: str = "") -> None:
        """Print a plain line (suppressed in quiet and JSON modes)."""
        if self.quiet or self.json_output:
            return
        self.console.print(escape(message), highlight=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self.quiet or self.json_output:
            return
        self.console.print(escape(message), highlight=False)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if self.quiet or self.json_output:
            return
        self.console.print(f"[green]{escape(message)}[/green]", highlight=False)

    def warning(self, message: str) -> None:
        """Print a warning in yellow. Shown even in quiet mode."""
        self.err_console.print(
            f"[yellow]{escape(message)}[/yellow]", highlight=False
        )

    def error(self, message: str) -> None:
        """Print an error in red. Shown even in quiet mode."""
        self.err_console.print(f"[red]{escape(message)}[/red]", highlight=False)

    def output_json(self, data: Any) -> None:
        """Write data as JSON to stdout."""
        self.console.print_json(json.dumps(data))
