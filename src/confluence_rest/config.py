"""Client configuration resolution.

Validates the caller's connection settings once, at client construction, and
derives the API path prefix and resource extension from the protocol-version
marker. The result is a frozen ClientConfig shared read-only by every
operation.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from .auth import Credentials
from .errors import ConfigurationError

# Version marker selecting the legacy prototype API
LEGACY_VERSION = 4

LEGACY_API_PATH = "/rest/prototype/latest"
LEGACY_EXTENSION = ".json"
REST_API_PATH = "/rest/api"

DEFAULT_MAX_WORKERS = 4
DEFAULT_TIMEOUT = 30


@dataclass(frozen=True)
class ClientConfig:
    """Immutable connection descriptor.

    Attributes:
        username: User name or email used for basic authentication
        password: Password or API token used for basic authentication
        base_url: Confluence base URL without trailing slash
            (e.g., https://yourinstance.atlassian.net/wiki)
        api_path: API path prefix derived from ``version``
        extension: Resource extension derived from ``version`` ("" or ".json")
        version: Protocol-version marker as supplied by the caller
        timeout: Transport timeout in seconds (default 30)
        max_workers: Size of the client's worker pool
    """
    username: str
    password: str
    base_url: str
    api_path: str = REST_API_PATH
    extension: str = ""
    version: Optional[Union[int, str]] = None
    timeout: float = DEFAULT_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS

    @property
    def api_url(self) -> str:
        """Base URL joined with the API path prefix."""
        return self.base_url + self.api_path

    @classmethod
    def resolve(cls, config: Union["ClientConfig", Mapping[str, Any], None]) -> "ClientConfig":
        """Validate a configuration mapping and derive the API layout.

        Checks run in order and the first failing one wins: missing config,
        missing credentials, missing base URL.

        Args:
            config: Mapping with ``username``, ``password``, ``base_url`` and
                optional ``version``, ``timeout`` and ``max_workers``. An
                existing ClientConfig is returned unchanged.

        Returns:
            ClientConfig: The resolved, immutable descriptor

        Raises:
            ConfigurationError: If config, credentials or base URL are missing,
                or the timeout is not a positive number
        """
        if isinstance(config, ClientConfig):
            return config

        if config is None:
            raise ConfigurationError("Confluence client expects a config object.")

        username = config.get("username")
        password = config.get("password")
        if not username or not password:
            raise ConfigurationError(
                "Confluence client expects a config object with both a username and password."
            )

        base_url = config.get("base_url")
        if not base_url:
            raise ConfigurationError(
                "Confluence client expects a config object with a base_url."
            )

        version = config.get("version")
        if is_legacy_version(version):
            api_path, extension = LEGACY_API_PATH, LEGACY_EXTENSION
        else:
            api_path, extension = REST_API_PATH, ""

        return cls(
            username=username,
            password=password,
            base_url=str(base_url).rstrip("/"),
            api_path=api_path,
            extension=extension,
            version=version,
            timeout=_resolve_timeout(config.get("timeout")),
            max_workers=config.get("max_workers") or DEFAULT_MAX_WORKERS,
        )

    @classmethod
    def from_credentials(cls, credentials: Credentials, **overrides: Any) -> "ClientConfig":
        """Resolve a ClientConfig from environment-loaded credentials."""
        settings = {
            "username": credentials.user,
            "password": credentials.api_token,
            "base_url": credentials.url,
            "version": credentials.api_version,
        }
        settings.update(overrides)
        return cls.resolve(settings)

    def __repr__(self) -> str:
        # Keep the secret out of logs and tracebacks
        return (
            f"ClientConfig(username={self.username!r}, password='***', "
            f"base_url={self.base_url!r}, api_path={self.api_path!r}, "
            f"extension={self.extension!r})"
        )


def is_legacy_version(version: Optional[Union[int, str]]) -> bool:
    """Return True if the version marker selects the legacy prototype API."""
    if version is None:
        return False
    return str(version).strip() == str(LEGACY_VERSION)


def _resolve_timeout(timeout: Any) -> float:
    if timeout is None:
        return DEFAULT_TIMEOUT
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigurationError(
            f"Confluence client expects a positive timeout in seconds, got {timeout!r}."
        )
    return timeout
