"""Crash-safe record writer: stage to temp files, commit with os.replace."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from ..lib.exceptions import PersistenceError
from ..lib.logging import get_logger

logger = get_logger(__name__)

CONTENT_SUFFIX = ".md"
METADATA_SUFFIX = ".json"


def _remove_quietly(path: str | Path) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("temp_file_cleanup_failed", path=str(path), error=str(e))


class AtomicWriter:
    """
    Writes a document record as two artifacts, <id>.md and <id>.json.

    Both artifacts are staged as temp files in the documents directory and
    committed by rename, content first. A reader sees either no record or a
    fully written one; metadata may briefly lag behind content.
    """

    def __init__(self, documents_dir: Path):
        self.documents_dir = Path(documents_dir)

    def content_path(self, doc_id: str) -> Path:
        return self.documents_dir / f"{doc_id}{CONTENT_SUFFIX}"

    def metadata_path(self, doc_id: str) -> Path:
        return self.documents_dir / f"{doc_id}{METADATA_SUFFIX}"

    def _stage(self, doc_id: str, suffix: str, data: bytes) -> str:
        fd, temp_path = tempfile.mkstemp(
            dir=self.documents_dir,
            prefix=f".{doc_id}.",
            suffix=f"{suffix}.tmp",
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
        except BaseException:
            _remove_quietly(temp_path)
            raise
        return temp_path

    def save_record(self, doc_id: str, content: str, metadata: Dict[str, Any]) -> None:
        """
        Persist a record atomically.

        Args:
            doc_id: Validated document ID
            content: Markdown content
            metadata: JSON-serializable metadata

        Raises:
            PersistenceError: If staging or committing fails; no partial
                record is left behind
        """
        staged: List[str] = []
        try:
            staged.append(self._stage(doc_id, CONTENT_SUFFIX, content.encode("utf-8")))
            metadata_bytes = json.dumps(metadata, indent=2, ensure_ascii=False).encode("utf-8")
            staged.append(self._stage(doc_id, METADATA_SUFFIX, metadata_bytes))
        except (OSError, TypeError, ValueError) as e:
            for temp_path in staged:
                _remove_quietly(temp_path)
            logger.error("document_stage_failed", doc_id=doc_id, error=str(e))
            raise PersistenceError("Failed to save document") from e

        temp_content, temp_metadata = staged
        content_path = self.content_path(doc_id)

        try:
            os.replace(temp_content, content_path)
        except OSError as e:
            _remove_quietly(temp_content)
            _remove_quietly(temp_metadata)
            logger.error("document_commit_failed", doc_id=doc_id, error=str(e))
            raise PersistenceError("Failed to finalize document save") from e

        try:
            os.replace(temp_metadata, self.metadata_path(doc_id))
        except OSError as e:
            # Roll back so the record is not visible without its metadata
            _remove_quietly(content_path)
            _remove_quietly(temp_metadata)
            logger.error("metadata_commit_failed", doc_id=doc_id, error=str(e))
            raise PersistenceError("Failed to finalize metadata save") from e

        logger.debug("document_record_written", doc_id=doc_id, path=str(content_path))
