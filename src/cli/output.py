"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Operation results are printed as JSON; raw HTTP responses (deletions) are
summarised by their status code.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from rich.console import Console
from rich.live import Live
from rich.spinner import Spinner


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Page deleted")
        >>> with handler.spinner("Fetching page..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def print_result(self, value: Any) -> None:
        """Display an operation result.

        Args:
            value: Parsed JSON payload, or a raw ``requests.Response`` for
                operations that return no body
        """
        status_code = getattr(value, "status_code", None)
        if status_code is not None:
            self.success(f"HTTP {status_code}")
            return
        self.console.print_json(data=value)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner while a request is in flight.

        Args:
            message: Message to display with spinner
        """
        spinner = Spinner("dots", text=message)
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield
