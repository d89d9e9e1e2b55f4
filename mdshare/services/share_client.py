"""HTTP client for sharing documents with an mdshare server."""

from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlparse

import requests

from ..lib.config import CLIENT_TIMEOUT_SECONDS, DEFAULT_SERVER_URL
from ..lib.exceptions import ShareClientError
from ..lib.logging import get_logger
from ..models.document import LoadedDocument, SaveResult

logger = get_logger(__name__)


def extract_doc_param(value: str) -> str:
    """
    Accept either a ?doc= value or a full share URL.

    "http://host/?doc=my-report-ab3k9f2p" -> "my-report-ab3k9f2p"
    """
    value = value.strip()
    if "://" in value or value.startswith("?"):
        doc_values = parse_qs(urlparse(value).query).get("doc")
        if doc_values:
            return doc_values[0]
    return value


class ShareClient:
    """Client for the /api/save and /api/load endpoints."""

    def __init__(
        self,
        server_url: str = DEFAULT_SERVER_URL,
        timeout: float = CLIENT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize share client.

        Args:
            server_url: Base URL of the mdshare server
            timeout: Request timeout in seconds
            session: Optional requests session (created if not provided)
        """
        self.server_url = server_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.server_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            raise ShareClientError("Request timeout - server may be slow or unreachable")
        except requests.ConnectionError as e:
            logger.warning("share_server_unreachable", url=url, error=str(e))
            raise ShareClientError(f"Could not connect to {self.server_url}")

        if not response.ok:
            try:
                message = response.json().get("error") or f"HTTP error {response.status_code}"
            except (ValueError, AttributeError):
                message = f"HTTP error {response.status_code}: {response.text[:100]}"
            raise ShareClientError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            raise ShareClientError("Server returned an invalid response", status_code=response.status_code)

        if not isinstance(data, dict) or not data.get("success"):
            error = data.get("error") if isinstance(data, dict) else None
            raise ShareClientError(error or "Request failed", status_code=response.status_code)
        return data

    def share(self, content: str, title: Optional[str] = None) -> SaveResult:
        """
        Save content to the server.

        Args:
            content: Markdown content
            title: Optional document title

        Returns:
            SaveResult including the shareable URL
        """
        payload: Dict[str, Any] = {"content": content}
        if title is not None:
            payload["title"] = title
        data = self._request("POST", "/api/save", json=payload)
        logger.info("document_shared", doc_id=data.get("id"), url=data.get("url"))
        return SaveResult(**data)

    def fetch(self, doc: str) -> LoadedDocument:
        """
        Load a shared document.

        Args:
            doc: Document ID, slug-ID or share URL

        Returns:
            LoadedDocument
        """
        doc_param = extract_doc_param(doc)
        data = self._request("GET", "/api/load", params={"id": doc_param})
        return LoadedDocument(**data)


def create_share_client(
    server_url: str = DEFAULT_SERVER_URL,
    timeout: float = CLIENT_TIMEOUT_SECONDS,
) -> ShareClient:
    """
    Create a share client instance.

    Args:
        server_url: Base URL of the mdshare server
        timeout: Request timeout in seconds

    Returns:
        ShareClient instance
    """
    return ShareClient(server_url=server_url, timeout=timeout)
