"""Confluence REST client with callback delivery.

This module wraps the atlassian-python-api Confluence session as transport
and exposes one method per REST operation. Every operation runs on the
client's worker pool, returns a Future resolving to an OperationResult, and
invokes the optional ``callback(error, result)`` exactly once.
"""

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from atlassian import Confluence

from .auth import Authenticator
from .config import ClientConfig
from .errors import AttachmentFileError, HomePageNotFoundError
from .request_builder import (
    DEFAULT_REPRESENTATION,
    OperationRequest,
    build_create_attachment,
    build_delete_content,
    build_delete_label,
    build_follow_link,
    build_get_attachments,
    build_get_content_by_id,
    build_get_content_by_page_title,
    build_get_custom_content_by_id,
    build_get_labels,
    build_get_space,
    build_post_content,
    build_post_labels,
    build_put_content,
    build_search,
    build_update_attachment_data,
)
from .response_handler import OperationResult, normalize

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[BaseException], Any], None]


def resolve_home_page_link(space_key: str, space_payload: Any) -> str:
    """Extract the home page link from a space lookup payload.

    Args:
        space_key: The space that was looked up (for error context)
        space_payload: Result of GET /space?spaceKey=...

    Returns:
        str: The ``results[0]._expandable.homepage`` link

    Raises:
        HomePageNotFoundError: If the payload has no results or no home page link
    """
    if not isinstance(space_payload, Mapping):
        raise HomePageNotFoundError(space_key, "Space lookup returned no JSON body.", space_payload)

    results = space_payload.get("results")
    if not isinstance(results, list) or not results or not isinstance(results[0], Mapping):
        raise HomePageNotFoundError(space_key, "Space lookup returned no results.", space_payload)

    expandable = results[0].get("_expandable")
    link = expandable.get("homepage") if isinstance(expandable, Mapping) else None
    if not isinstance(link, str) or not link:
        raise HomePageNotFoundError(space_key, "Space has no home page link.", space_payload)

    return link


def resolve_home_page_id(space_key: str, home_page: Any) -> str:
    """Extract the page id from a home page payload.

    Raises:
        HomePageNotFoundError: If the payload carries no ``id``
    """
    page_id = home_page.get("id") if isinstance(home_page, Mapping) else None
    if not page_id:
        raise HomePageNotFoundError(space_key, "Home page has no id.", home_page)
    return page_id


class ConfluenceClient:
    """Callback-driven client for the Confluence REST API.

    The client holds an immutable ClientConfig and a worker pool. Each worker
    thread lazily builds its own atlassian-python-api ``Confluence`` session
    authenticated with basic auth; nothing else is shared between operations.

    No operation retries. ``post_content`` has no idempotency key, so a caller
    retrying it can create duplicate pages.

    Example:
        >>> client = ConfluenceClient({
        ...     "username": "alice",
        ...     "password": "token",
        ...     "base_url": "https://example.atlassian.net/wiki",
        ... })
        >>> future = client.get_space("TEAM", callback=lambda err, data: print(err, data))
        >>> space = future.result().unwrap()
    """

    def __init__(self, config: Union[ClientConfig, Mapping[str, Any], None]):
        """Resolve the configuration and start the worker pool.

        Args:
            config: Connection settings, see ClientConfig.resolve()

        Raises:
            ConfigurationError: If config, credentials or base URL are missing,
                or the timeout is invalid
        """
        self.config = ClientConfig.resolve(config)
        self._local = threading.local()
        self._sessions: List[Confluence] = []
        self._sessions_lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="confluence-rest",
        )
        logger.debug(f"Created client for {self.config.api_url}")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> "ConfluenceClient":
        """Create a client from CONFLUENCE_* environment variables.

        Raises:
            InvalidCredentialsError: If a required variable is missing
        """
        credentials = Authenticator(env_file).get_credentials()
        return cls(ClientConfig.from_credentials(credentials, **overrides))

    def __enter__(self) -> "ConfluenceClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self, wait: bool = True) -> None:
        """Shut down the worker pool and close every session it opened."""
        self._executor.shutdown(wait=wait)
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get_client(self) -> Confluence:
        """Get or create this thread's Confluence session."""
        client = getattr(self._local, "client", None)
        if client is None:
            client = Confluence(
                url=self.config.base_url,
                username=self.config.username,
                password=self.config.password,
                timeout=self.config.timeout,
                backoff_and_retry=False,
                retry_with_header=False,
            )
            # The library truncates timeout to int
            client.timeout = self.config.timeout
            self._local.client = client
            with self._sessions_lock:
                self._sessions.append(client)
        return client

    def _request(self, request: OperationRequest, files: Optional[dict] = None) -> Any:
        return self._get_client().request(
            method=request.method,
            path=request.url,
            params=request.params,
            json=request.json,
            headers=request.headers,
            files=files,
            absolute=True,
            advanced_mode=True,
        )

    def _upload(self, request: OperationRequest) -> Any:
        try:
            handle = open(request.upload, "rb")
        except OSError as e:
            raise AttachmentFileError(request.upload, e.strerror or str(e)) from e

        with handle:
            files = {"file": (os.path.basename(request.upload), handle)}
            return self._request(request, files=files)

    def _send(self, request: OperationRequest) -> OperationResult:
        """Issue one request and normalize its outcome."""
        logger.debug(f"Sending {request.resource}")
        try:
            if request.upload:
                response = self._upload(request)
            else:
                response = self._request(request)
        except AttachmentFileError as e:
            logger.error(str(e))
            return OperationResult.failure(e)
        except Exception as e:
            return normalize(e, None, request, self.config)

        return normalize(None, response, request, self.config)

    def _submit(
        self,
        task: Callable[[], OperationResult],
        callback: Optional[Callback],
    ) -> "Future[OperationResult]":
        def run() -> OperationResult:
            result = task()
            if callback is not None:
                try:
                    callback(result.error, result.value)
                except Exception:
                    logger.exception("Operation callback raised")
                    raise
            return result

        return self._executor.submit(run)

    # ------------------------------------------------------------------
    # Two-step flows
    # ------------------------------------------------------------------

    def _fetch_space_home_page(self, space_key: str) -> OperationResult:
        space = self._send(build_get_space(self.config, space_key))
        if not space.ok:
            return space

        try:
            link = resolve_home_page_link(space_key, space.value)
        except HomePageNotFoundError as e:
            logger.warning(str(e))
            return OperationResult.failure(e, space.value)

        return self._send(build_follow_link(self.config, link))

    def _create_content(
        self,
        space_key: str,
        title: str,
        content: str,
        parent_id: Any,
        representation: str,
    ) -> OperationResult:
        if not parent_id:
            home_page = self._fetch_space_home_page(space_key)
            if not home_page.ok:
                return home_page
            try:
                parent_id = resolve_home_page_id(space_key, home_page.value)
            except HomePageNotFoundError as e:
                logger.warning(str(e))
                return OperationResult.failure(e, home_page.value)
            logger.info(f"Creating '{title}' under home page {parent_id} of space {space_key}")

        return self._send(build_post_content(
            self.config, space_key, title, content, parent_id, representation
        ))

    # ------------------------------------------------------------------
    # Spaces
    # ------------------------------------------------------------------

    def get_space(self, space_key: str, callback: Optional[Callback] = None) -> "Future[OperationResult]":
        """Get space information.

        Args:
            space_key: The space key (e.g., "TEAM")
            callback: Optional ``callback(error, data)``
        """
        request = build_get_space(self.config, space_key)
        return self._submit(lambda: self._send(request), callback)

    def get_space_home_page(
        self,
        space_key: str,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Get the home page of a space.

        Looks the space up, then follows its ``_expandable.homepage`` link. A
        space without that link yields HomePageNotFoundError carrying the
        space lookup payload.
        """
        return self._submit(lambda: self._fetch_space_home_page(space_key), callback)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def get_content_by_id(self, content_id: Any, callback: Optional[Callback] = None) -> "Future[OperationResult]":
        """Get a page with its storage body and version."""
        request = build_get_content_by_id(self.config, content_id)
        return self._submit(lambda: self._send(request), callback)

    def get_custom_content_by_id(
        self,
        content_id: Any,
        expanders: Optional[Sequence[str]] = None,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Get a page with a caller-chosen expand list.

        Args:
            content_id: The page ID
            expanders: Properties to expand; None means body.storage and
                version, an empty list is sent as an empty expand value
            callback: Optional ``callback(error, data)``
        """
        request = build_get_custom_content_by_id(self.config, content_id, expanders)
        return self._submit(lambda: self._send(request), callback)

    def get_content_by_page_title(
        self,
        space_key: str,
        title: str,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        request = build_get_content_by_page_title(self.config, space_key, title)
        return self._submit(lambda: self._send(request), callback)

    def post_content(
        self,
        space_key: str,
        title: str,
        content: str,
        parent_id: Any = None,
        representation: str = DEFAULT_REPRESENTATION,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Create a page.

        Args:
            space_key: The space key where the page will be created
            title: The page title
            content: Page body markup in ``representation`` format
            parent_id: Parent page ID; when empty the page is added under the
                space's home page, resolved with two extra requests first
            representation: Body representation (default: "storage")
            callback: Optional ``callback(error, data)``
        """
        return self._submit(
            lambda: self._create_content(space_key, title, content, parent_id, representation),
            callback,
        )

    def put_content(
        self,
        space_key: str,
        content_id: Any,
        version: int,
        title: str,
        content: str,
        minor_edit: bool = False,
        representation: str = DEFAULT_REPRESENTATION,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Update a page.

        Args:
            space_key: The page's space key
            content_id: The page ID
            version: The new version number, sent verbatim (current + 1)
            title: The page title
            content: Page body markup in ``representation`` format
            minor_edit: Mark the edit as minor (default: False)
            representation: Body representation (default: "storage")
            callback: Optional ``callback(error, data)``

        A stale version is reported as VersionConflictError.
        """
        request = build_put_content(
            self.config, space_key, content_id, version, title, content,
            minor_edit, representation,
        )
        return self._submit(lambda: self._send(request), callback)

    def delete_content(self, content_id: Any, callback: Optional[Callback] = None) -> "Future[OperationResult]":
        """Delete a page. The result is the raw response (HTTP 204)."""
        request = build_delete_content(self.config, content_id)
        return self._submit(lambda: self._send(request), callback)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def get_attachments(
        self,
        space_key: str,
        content_id: Any,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        request = build_get_attachments(self.config, space_key, content_id)
        return self._submit(lambda: self._send(request), callback)

    def create_attachment(
        self,
        space_key: str,
        content_id: Any,
        file_path: str,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Upload a file as a new attachment of a page."""
        logger.debug(f"Attaching {file_path} to {content_id} in space {space_key}")
        request = build_create_attachment(self.config, content_id, file_path)
        return self._submit(lambda: self._send(request), callback)

    def update_attachment_data(
        self,
        space_key: str,
        content_id: Any,
        attachment_id: Any,
        file_path: str,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Upload new data for an existing attachment."""
        logger.debug(f"Updating attachment {attachment_id} of {content_id} in space {space_key}")
        request = build_update_attachment_data(self.config, content_id, attachment_id, file_path)
        return self._submit(lambda: self._send(request), callback)

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def get_labels(self, content_id: Any, callback: Optional[Callback] = None) -> "Future[OperationResult]":
        request = build_get_labels(self.config, content_id)
        return self._submit(lambda: self._send(request), callback)

    def post_labels(
        self,
        content_id: Any,
        labels: Iterable[Union[str, Mapping[str, str]]],
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Add labels to a page.

        Args:
            content_id: The page ID
            labels: ``{"prefix", "name"}`` mappings or bare label names
            callback: Optional ``callback(error, data)``
        """
        request = build_post_labels(self.config, content_id, labels)
        return self._submit(lambda: self._send(request), callback)

    def delete_label(
        self,
        content_id: Any,
        label_name: str,
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Remove a label from a page. The result is the raw response (HTTP 204)."""
        request = build_delete_label(self.config, content_id, label_name)
        return self._submit(lambda: self._send(request), callback)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def search(
        self,
        query: Union[str, Mapping[str, Any]],
        callback: Optional[Callback] = None,
    ) -> "Future[OperationResult]":
        """Search content.

        Args:
            query: Raw query string (e.g., ``"cql=space=TEAM and type=page&limit=10"``)
                or a mapping of query parameters
            callback: Optional ``callback(error, data)``
        """
        request = build_search(self.config, query)
        return self._submit(lambda: self._send(request), callback)


def create_client(config: Union[ClientConfig, Mapping[str, Any], None]) -> ConfluenceClient:
    """Create a ConfluenceClient; equivalent to calling the class directly."""
    return ConfluenceClient(config)
