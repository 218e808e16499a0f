"""Typed exception hierarchy for Confluence REST client errors.

This module defines all custom exceptions used by the Confluence REST client.
All exceptions inherit from ConfluenceError base class for easy catching and
include descriptive messages with context to help with debugging.

Operational errors are never raised out of an operation; they are delivered
as the ``error`` half of an OperationResult. Only ConfigurationError is raised
synchronously, at client construction.
"""

from typing import Any, Optional


class ConfluenceError(Exception):
    """Base exception for all Confluence REST client errors."""
    pass


class ConfigurationError(ConfluenceError, ValueError):
    """Raised when the client configuration is missing or incomplete."""

    def __init__(self, message: str):
        super().__init__(message)


class TransportError(ConfluenceError):
    """Base exception for failures reported by the HTTP transport.

    Attributes:
        response: The raw ``requests.Response`` if one was received, else None
    """

    def __init__(self, message: str, response: Optional[Any] = None):
        super().__init__(message)
        self.response = response


class APIUnreachableError(TransportError):
    """Raised when the Confluence API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class InvalidCredentialsError(TransportError):
    """Raised when API credentials are invalid or authentication fails."""

    def __init__(self, user: str, endpoint: str, response: Optional[Any] = None):
        super().__init__(
            f"API key is invalid (user: {user}, endpoint: {endpoint})",
            response=response,
        )
        self.user = user
        self.endpoint = endpoint


class ContentNotFoundError(TransportError):
    """Raised when the requested resource does not exist (HTTP 404)."""

    def __init__(self, resource: str, response: Optional[Any] = None):
        super().__init__(f"Resource {resource} not found", response=response)
        self.resource = resource


class VersionConflictError(TransportError):
    """Raised when an update carries a stale version number (HTTP 409)."""

    def __init__(self, resource: str, response: Optional[Any] = None):
        super().__init__(
            f"Version conflict updating {resource} (supplied version is stale)",
            response=response,
        )
        self.resource = resource


class HTTPStatusError(TransportError):
    """Raised for any other HTTP error status (>= 400)."""

    def __init__(self, status_code: int, resource: str, response: Optional[Any] = None):
        super().__init__(
            f"Confluence API returned HTTP {status_code} for {resource}",
            response=response,
        )
        self.status_code = status_code
        self.resource = resource


class DomainError(ConfluenceError):
    """Raised when a well-formed response fails an expected-shape check.

    Attributes:
        response: The partially received response or payload, for diagnostics
    """

    def __init__(self, message: str, response: Optional[Any] = None):
        super().__init__(message)
        self.response = response


class HomePageNotFoundError(DomainError):
    """Raised when a space lookup does not lead to a home page."""

    def __init__(self, space_key: str, reason: str, response: Optional[Any] = None):
        super().__init__(
            f"Can't find space home page. {reason} (space: {space_key})",
            response=response,
        )
        self.space_key = space_key
        self.reason = reason


class AttachmentFileError(ConfluenceError):
    """Raised when a file selected for upload cannot be read."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Cannot read attachment file {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason
