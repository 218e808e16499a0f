"""Data models for CLI operations.

This module defines the data models used by the CLI module.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    These exit codes provide meaningful feedback about the operation result:
    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (bad arguments, unreadable files, HTTP errors)
    - CONFLICT (2): Page update rejected because the version is stale
    - AUTH_ERROR (3): Missing configuration or authentication failure
    - NETWORK_ERROR (4): Network connectivity or API availability issues
    - NOT_FOUND (5): Requested space, page or home page does not exist

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFLICT = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4
    NOT_FOUND = 5


@dataclass
class CLISettings:
    """Global options shared by every command.

    Attributes:
        verbosity: Verbosity level (0=warning, 1=info, 2=debug)
        no_color: Disable colored output
        env_file: Optional .env file with CONFLUENCE_* variables
    """
    verbosity: int = 0
    no_color: bool = False
    env_file: Optional[str] = None
