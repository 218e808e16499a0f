"""Command-line interface for the Confluence REST client.

This package provides the `confluence-rest` CLI tool, a thin Typer front end
that runs one client operation per command and prints its result.
"""

from .models import ExitCode, CLISettings
from .errors import CLIError, ContentSourceError

__all__ = [
    'ExitCode',
    'CLISettings',
    'CLIError',
    'ContentSourceError',
]
