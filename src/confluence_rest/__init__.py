"""Confluence REST client library.

This package maps a fixed set of method calls onto Confluence REST API
requests and delivers parsed results or typed errors through a callback and a
returned future.
"""

from .client import ConfluenceClient, create_client
from .config import ClientConfig
from .errors import (
    ConfluenceError,
    ConfigurationError,
    TransportError,
    APIUnreachableError,
    InvalidCredentialsError,
    ContentNotFoundError,
    VersionConflictError,
    HTTPStatusError,
    DomainError,
    HomePageNotFoundError,
    AttachmentFileError,
)
from .response_handler import OperationResult

__all__ = [
    "ConfluenceClient",
    "create_client",
    "ClientConfig",
    "OperationResult",
    "ConfluenceError",
    "ConfigurationError",
    "TransportError",
    "APIUnreachableError",
    "InvalidCredentialsError",
    "ContentNotFoundError",
    "VersionConflictError",
    "HTTPStatusError",
    "DomainError",
    "HomePageNotFoundError",
    "AttachmentFileError",
]
