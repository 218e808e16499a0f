"""Typed exception hierarchy for CLI-related errors.

All exceptions inherit from CLIError, itself a ConfluenceError, so callers
can catch every application-level error with one except clause.
"""

from typing import Optional

from src.confluence_rest.errors import ConfluenceError


class CLIError(ConfluenceError):
    """Base exception for all CLI-related errors."""
    pass


class ContentSourceError(CLIError):
    """Raised when page content cannot be taken from the command line."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        if file_path:
            message = f"{message} ({file_path})"
        super().__init__(message)
        self.file_path = file_path
