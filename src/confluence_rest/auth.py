"""Authentication module for loading Confluence credentials.

This module handles loading Confluence credentials from environment variables
using python-dotenv. It validates that all required credentials are present and
raises appropriate errors if any are missing.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError


class Credentials(NamedTuple):
    """Confluence API credentials."""
    url: str
    user: str
    api_token: str
    api_version: Optional[str] = None


class Authenticator:
    """Loads and validates Confluence credentials from environment variables.

    Credentials are loaded from a .env file using python-dotenv and are never
    cached or logged.

    Required environment variables:
        CONFLUENCE_URL: Confluence instance URL (e.g., https://yourinstance.atlassian.net/wiki)
        CONFLUENCE_USER: Confluence user name or email address
        CONFLUENCE_API_TOKEN: Confluence API token or password

    Optional environment variables:
        CONFLUENCE_API_VERSION: Protocol-version marker ("4" selects the
            legacy prototype API)

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.url}")
    """

    def __init__(self, env_file: Optional[str] = None):
        """Load environment variables from a .env file.

        Args:
            env_file: Optional path to a specific .env file
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

    def get_credentials(self) -> Credentials:
        """Get Confluence credentials from environment variables.

        Returns:
            Credentials: A named tuple containing url, user, api_token and api_version

        Raises:
            InvalidCredentialsError: If any required credential is missing
        """
        url = os.getenv('CONFLUENCE_URL')
        user = os.getenv('CONFLUENCE_USER')
        api_token = os.getenv('CONFLUENCE_API_TOKEN')
        api_version = os.getenv('CONFLUENCE_API_VERSION')

        if not url or not user or not api_token:
            raise InvalidCredentialsError(
                user=user if user else "unknown",
                endpoint=url if url else "unknown"
            )

        return Credentials(
            url=url,
            user=user,
            api_token=api_token,
            api_version=api_version or None,
        )
