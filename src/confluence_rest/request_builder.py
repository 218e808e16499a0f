"""Request construction for every Confluence REST operation.

Each builder turns operation parameters into an OperationRequest: method,
absolute URL, ordered query pairs, and an optional JSON body or upload file.
Dynamic path segments are percent-encoded here; query values are encoded by
the transport, never concatenated into the URL by hand.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import parse_qsl, quote

from .config import ClientConfig

DEFAULT_EXPAND = ("body.storage", "version")
ATTACHMENT_EXPAND = ("version", "container")
DEFAULT_REPRESENTATION = "storage"
DEFAULT_LABEL_PREFIX = "global"

# Confluence rejects multipart uploads without this XSRF bypass header
NO_CHECK_HEADERS = {"X-Atlassian-Token": "no-check"}

QueryParams = List[Tuple[str, str]]


@dataclass(frozen=True)
class OperationRequest:
    """A single HTTP request ready for the transport.

    Attributes:
        method: HTTP method ("GET", "POST", "PUT", "DELETE")
        url: Absolute URL without query string
        params: Ordered query parameters
        json: Optional JSON document for the request body
        upload: Optional path of a file to send as multipart ``file`` field
        headers: Optional headers replacing the transport's JSON defaults
        raw: Deliver the raw response even when it carries a JSON body
    """
    method: str
    url: str
    params: Optional[QueryParams] = None
    json: Optional[Any] = None
    upload: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    raw: bool = False

    @property
    def resource(self) -> str:
        """Method and URL, used in log lines and error messages."""
        return f"{self.method} {self.url}"


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def resource_url(config: ClientConfig, *segments: Any) -> str:
    """Join API URL, encoded path segments and the resource extension.

    The first segment is a fixed resource name (e.g., "content"); later
    segments may be caller-supplied and are percent-encoded.

    Example:
        >>> resource_url(config, "content", "123", "label")
        'https://example.atlassian.net/wiki/rest/api/content/123/label'
    """
    path = "/".join(_segment(s) for s in segments)
    return f"{config.api_url}/{path}{config.extension}"


def _body(content: str, representation: str) -> Dict[str, Any]:
    return {
        representation: {
            "value": content,
            "representation": representation,
        }
    }


def build_get_space(config: ClientConfig, space_key: str) -> OperationRequest:
    return OperationRequest(
        "GET",
        resource_url(config, "space"),
        params=[("spaceKey", space_key)],
    )


def build_follow_link(config: ClientConfig, link: str) -> OperationRequest:
    """GET a server-supplied link relative to the base URL.

    The link comes from the service itself (e.g., ``/rest/api/content/65539``)
    and is used as-is.
    """
    if not link.startswith("/"):
        link = "/" + link
    return OperationRequest("GET", config.base_url + link)


def build_get_content_by_id(config: ClientConfig, content_id: Any) -> OperationRequest:
    return build_get_custom_content_by_id(config, content_id)


def build_get_custom_content_by_id(
    config: ClientConfig,
    content_id: Any,
    expanders: Optional[Sequence[str]] = None,
) -> OperationRequest:
    """Build a content fetch with a caller-chosen expand list.

    ``None`` selects the default expansion; an empty sequence is sent as an
    empty ``expand`` value.
    """
    if expanders is None:
        expanders = DEFAULT_EXPAND
    return OperationRequest(
        "GET",
        resource_url(config, "content", content_id),
        params=[("expand", ",".join(expanders))],
    )


def build_get_content_by_page_title(config: ClientConfig, space_key: str, title: str) -> OperationRequest:
    return OperationRequest(
        "GET",
        resource_url(config, "content"),
        params=[
            ("spaceKey", space_key),
            ("title", title),
            ("expand", ",".join(DEFAULT_EXPAND)),
        ],
    )


def build_post_content(
    config: ClientConfig,
    space_key: str,
    title: str,
    content: str,
    parent_id: Any,
    representation: str = DEFAULT_REPRESENTATION,
) -> OperationRequest:
    """Build a page creation request under an already resolved parent."""
    page = {
        "type": "page",
        "title": title,
        "space": {"key": space_key},
        "ancestors": [{"type": "page", "id": parent_id}],
        "body": _body(content, representation),
    }
    return OperationRequest("POST", resource_url(config, "content"), json=page)


def build_put_content(
    config: ClientConfig,
    space_key: str,
    content_id: Any,
    version: int,
    title: str,
    content: str,
    minor_edit: bool = False,
    representation: str = DEFAULT_REPRESENTATION,
) -> OperationRequest:
    """Build a page update request.

    ``version`` is sent verbatim; callers supply the next version number.
    """
    page = {
        "id": content_id,
        "type": "page",
        "title": title,
        "space": {"key": space_key},
        "version": {
            "number": version,
            "minorEdit": minor_edit,
        },
        "body": _body(content, representation),
    }
    return OperationRequest(
        "PUT",
        resource_url(config, "content", content_id),
        params=[("expand", ",".join(DEFAULT_EXPAND))],
        json=page,
    )


def build_delete_content(config: ClientConfig, content_id: Any) -> OperationRequest:
    return OperationRequest("DELETE", resource_url(config, "content", content_id), raw=True)


def build_get_attachments(config: ClientConfig, space_key: str, content_id: Any) -> OperationRequest:
    return OperationRequest(
        "GET",
        resource_url(config, "content", content_id, "child", "attachment"),
        params=[
            ("spaceKey", space_key),
            ("expand", ",".join(ATTACHMENT_EXPAND)),
        ],
    )


def build_create_attachment(config: ClientConfig, content_id: Any, file_path: str) -> OperationRequest:
    return OperationRequest(
        "POST",
        resource_url(config, "content", content_id, "child", "attachment"),
        upload=file_path,
        headers=dict(NO_CHECK_HEADERS),
    )


def build_update_attachment_data(
    config: ClientConfig,
    content_id: Any,
    attachment_id: Any,
    file_path: str,
) -> OperationRequest:
    return OperationRequest(
        "POST",
        resource_url(config, "content", content_id, "child", "attachment", attachment_id, "data"),
        upload=file_path,
        headers=dict(NO_CHECK_HEADERS),
    )


def build_get_labels(config: ClientConfig, content_id: Any) -> OperationRequest:
    return OperationRequest("GET", resource_url(config, "content", content_id, "label"))


def normalize_labels(labels: Iterable[Union[str, Mapping[str, str]]]) -> List[Dict[str, str]]:
    """Coerce labels to ``{"prefix", "name"}`` documents.

    Bare strings get the ``global`` prefix; mappings without a prefix too.
    """
    normalized = []
    for label in labels:
        if isinstance(label, str):
            normalized.append({"prefix": DEFAULT_LABEL_PREFIX, "name": label})
        else:
            normalized.append({
                "prefix": label.get("prefix") or DEFAULT_LABEL_PREFIX,
                "name": label["name"],
            })
    return normalized


def build_post_labels(
    config: ClientConfig,
    content_id: Any,
    labels: Iterable[Union[str, Mapping[str, str]]],
) -> OperationRequest:
    return OperationRequest(
        "POST",
        resource_url(config, "content", content_id, "label"),
        json=normalize_labels(labels),
    )


def build_delete_label(config: ClientConfig, content_id: Any, label_name: str) -> OperationRequest:
    return OperationRequest(
        "DELETE",
        resource_url(config, "content", content_id, "label"),
        params=[("name", label_name)],
        raw=True,
    )


def build_search(config: ClientConfig, query: Union[str, Mapping[str, Any]]) -> OperationRequest:
    """Build a search request.

    Args:
        query: Either a raw query string (e.g., ``"cql=type=page&limit=10"``),
            which is parsed into pairs and re-encoded, or a mapping of
            parameters
    """
    if isinstance(query, str):
        params = parse_qsl(query.lstrip("?"), keep_blank_values=True)
    else:
        params = [(key, str(value)) for key, value in query.items()]
    return OperationRequest("GET", resource_url(config, "search"), params=params)
