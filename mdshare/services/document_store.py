"""Document store: validated save/load of shared markdown documents."""

import hashlib
import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..lib.config import DEFAULT_TITLE, MAX_CONTENT_BYTES, ensure_documents_directory
from ..lib.exceptions import (
    ContentTooLargeError,
    ForbiddenPathError,
    InvalidContentTypeError,
    InvalidIdError,
    InvalidTitleError,
    MissingIdError,
    NoContentError,
    NotFoundError,
    PersistenceError,
)
from ..lib.logging import get_logger
from ..lib.text import build_share_url, create_slug, looks_suspicious, normalize_title
from ..models.document import DocumentMetadata, LoadedDocument, SaveResult
from .atomic_writer import AtomicWriter
from .id_generator import IdGenerator, create_id_generator
from .rate_limiter import RateLimiter, client_key_for, create_rate_limiter

logger = get_logger(__name__)

DOCUMENT_ID_PATTERN = re.compile(r"^[a-z0-9]{8}$")


def extract_document_id(doc_param: str) -> str:
    """
    Extract the document ID from a ?doc= value.

    Supports both "a3b5c7d9" and "my-document-a3b5c7d9"; the ID is the last
    hyphen-delimited segment.
    """
    return doc_param.rsplit("-", 1)[-1]


def is_valid_document_id(doc_id: str) -> bool:
    return bool(DOCUMENT_ID_PATTERN.fullmatch(doc_id))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _format_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024 and num_bytes % (1024 * 1024) == 0:
        return f"{num_bytes // (1024 * 1024)}MB"
    return f"{num_bytes} bytes"


class DocumentStore:
    """
    File-backed store for shared documents.

    Save always creates a new record under a fresh random ID; there is no
    update or delete. Load only reads committed files and never locks.
    """

    def __init__(
        self,
        documents_dir: Path,
        rate_limiter: RateLimiter,
        id_generator: Optional[IdGenerator] = None,
        writer: Optional[AtomicWriter] = None,
        max_content_bytes: int = MAX_CONTENT_BYTES,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initialize document store.

        Args:
            documents_dir: Directory holding <id>.md and <id>.json files
            rate_limiter: Limiter consulted once per save
            id_generator: ID generator (default: create_id_generator())
            writer: Record writer (default: AtomicWriter on documents_dir)
            max_content_bytes: Maximum UTF-8 size of content
            clock: Source of creation timestamps
        """
        self.documents_dir = ensure_documents_directory(documents_dir)
        self.rate_limiter = rate_limiter
        self.id_generator = id_generator or create_id_generator()
        self.writer = writer or AtomicWriter(self.documents_dir)
        self.max_content_bytes = max_content_bytes
        self.clock = clock

        logger.info("document_store_initialized", documents_dir=str(self.documents_dir))

    def exists(self, doc_id: str) -> bool:
        """A record exists iff its content artifact exists."""
        return self.writer.content_path(doc_id).exists()

    def admit(self, client_address: str) -> None:
        """Count one save request against the client's quota (raises RateLimitedError)."""
        self.rate_limiter.admit(client_key_for(client_address))

    def save(
        self,
        content: Any,
        title: Any = None,
        client_address: str = "unknown",
        base_url: str = "/",
    ) -> SaveResult:
        """
        Save a new document.

        Args:
            content: Markdown content (must be a str)
            title: Optional title (str or None)
            client_address: Client network address, used for rate limiting
            base_url: Application URL the share link is built from

        Returns:
            SaveResult with id, slug, title, created timestamp and share URL

        Raises:
            RateLimitedError, NoContentError, InvalidContentTypeError,
            InvalidTitleError, ContentTooLargeError, IdGenerationError,
            PersistenceError
        """
        self.admit(client_address)

        if content is None:
            raise NoContentError()
        if not isinstance(content, str):
            raise InvalidContentTypeError()
        if title is not None and not isinstance(title, str):
            raise InvalidTitleError()

        try:
            content_bytes = content.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidContentTypeError("Content must be valid UTF-8 text") from None
        if title is not None:
            try:
                title.encode("utf-8")
            except UnicodeEncodeError:
                raise InvalidTitleError("Title must be valid UTF-8 text") from None

        if looks_suspicious(content):
            # Markdown may legitimately contain code samples
            logger.warning("suspicious_content_detected", client_address=client_address)

        title = normalize_title(title)

        if len(content_bytes) > self.max_content_bytes:
            raise ContentTooLargeError(f"Content exceeds maximum size of {_format_size(self.max_content_bytes)}")

        doc_id = self.id_generator.generate(self.exists)
        slug = create_slug(title)
        created = self.clock().isoformat(timespec="seconds")

        metadata = DocumentMetadata(
            id=doc_id,
            slug=slug,
            title=title,
            created=created,
            size=len(content_bytes),
            content_hash=hashlib.sha256(content_bytes).hexdigest(),
        )
        self.writer.save_record(doc_id, content, metadata.model_dump(by_alias=True))

        logger.info(
            "document_saved",
            doc_id=doc_id,
            slug=slug,
            size=metadata.size,
            client_address=client_address,
        )

        return SaveResult(
            id=doc_id,
            slug=slug,
            title=title,
            created=created,
            url=build_share_url(base_url, doc_id, slug),
        )

    def _resolve_record_path(self, path: Path) -> Path:
        """Resolve a record path and make sure it stays inside the documents directory."""
        root = self.documents_dir.resolve()
        resolved = path.resolve()
        if not resolved.is_relative_to(root):
            raise ForbiddenPathError()
        return resolved

    def _read_metadata(self, doc_id: str) -> Dict[str, Any]:
        try:
            metadata_path = self._resolve_record_path(self.writer.metadata_path(doc_id))
        except ForbiddenPathError:
            logger.warning("metadata_outside_documents_dir", doc_id=doc_id)
            return {}

        try:
            raw = metadata_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("metadata_read_failed", doc_id=doc_id, error=str(e))
            return {}

        try:
            metadata = json.loads(raw)
        except ValueError as e:
            logger.warning("metadata_corrupt", doc_id=doc_id, error=str(e))
            return {}

        if not isinstance(metadata, dict):
            logger.warning("metadata_corrupt", doc_id=doc_id, error="not a JSON object")
            return {}
        return metadata

    def load(self, doc_param: Optional[str]) -> LoadedDocument:
        """
        Load a document by ID or slug-ID.

        Args:
            doc_param: "a3b5c7d9" or "my-document-a3b5c7d9"

        Returns:
            LoadedDocument; title and created fall back to defaults when the
            metadata artifact is missing or unreadable

        Raises:
            MissingIdError, InvalidIdError, ForbiddenPathError, NotFoundError,
            PersistenceError
        """
        if not doc_param:
            raise MissingIdError()

        doc_id = extract_document_id(doc_param)
        # Sole guard against traversal: nothing touches the filesystem before this
        if not is_valid_document_id(doc_id):
            raise InvalidIdError()

        content_path = self._resolve_record_path(self.writer.content_path(doc_id))
        if not content_path.is_file():
            raise NotFoundError()

        try:
            content_bytes = content_path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError() from None
        except OSError as e:
            logger.error("document_read_failed", doc_id=doc_id, error=str(e))
            raise PersistenceError("Failed to read document") from e

        metadata = self._read_metadata(doc_id)
        title = metadata.get("title")

        logger.info("document_loaded", doc_id=doc_id, size=len(content_bytes))

        return LoadedDocument(
            id=doc_id,
            content=content_bytes.decode("utf-8", errors="replace"),
            title=title if isinstance(title, str) and title else DEFAULT_TITLE,
            created=metadata.get("created") if isinstance(metadata.get("created"), str) else None,
            size=len(content_bytes),
        )


def create_document_store(
    documents_dir: Optional[Path] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> DocumentStore:
    """
    Create a document store with default configuration.

    Args:
        documents_dir: Documents directory (default: DOCUMENTS_DIR)
        rate_limiter: Rate limiter (default: file-backed limiter)

    Returns:
        DocumentStore instance
    """
    return DocumentStore(
        documents_dir=ensure_documents_directory(documents_dir),
        rate_limiter=rate_limiter or create_rate_limiter(),
    )
