"""Unit tests for the atomic record writer."""

import json
import os

import pytest

from mdshare.lib.exceptions import PersistenceError
from mdshare.services import atomic_writer as atomic_writer_module
from mdshare.services.atomic_writer import AtomicWriter


class TestAtomicWriter:
    """Unit tests for AtomicWriter."""

    @pytest.fixture
    def writer(self, documents_dir):
        return AtomicWriter(documents_dir)

    @pytest.fixture
    def metadata(self):
        return {"id": "ab3k9f2p", "title": "Notes", "size": 5}

    def test_writes_content_and_metadata(self, writer, documents_dir, metadata):
        writer.save_record("ab3k9f2p", "# Hi\n", metadata)

        assert (documents_dir / "ab3k9f2p.md").read_bytes() == b"# Hi\n"
        assert json.loads((documents_dir / "ab3k9f2p.json").read_text(encoding="utf-8")) == metadata
        assert sorted(p.name for p in documents_dir.iterdir()) == ["ab3k9f2p.json", "ab3k9f2p.md"]

    def test_content_bytes_are_preserved(self, writer, documents_dir, metadata):
        content = "line one\r\nligne deux é\n\tüñï\r\n"
        writer.save_record("ab3k9f2p", content, metadata)

        assert (documents_dir / "ab3k9f2p.md").read_bytes() == content.encode("utf-8")

    def test_staging_failure_leaves_nothing(self, writer, documents_dir):
        """Unserializable metadata fails during staging; the staged content is removed."""
        with pytest.raises(PersistenceError):
            writer.save_record("ab3k9f2p", "content", {"bad": object()})

        assert list(documents_dir.iterdir()) == []

    def test_content_commit_failure_removes_temp_files(self, writer, documents_dir, metadata, monkeypatch):
        def failing_replace(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr(atomic_writer_module.os, "replace", failing_replace)

        with pytest.raises(PersistenceError) as exc_info:
            writer.save_record("ab3k9f2p", "content", metadata)

        assert "finalize document" in str(exc_info.value)
        assert list(documents_dir.iterdir()) == []

    def test_metadata_commit_failure_rolls_back_content(self, writer, documents_dir, metadata, monkeypatch):
        """If metadata cannot be committed, the committed content file is removed too."""
        real_replace = os.replace

        def replace_content_only(src, dst):
            if str(dst).endswith(".json"):
                raise OSError("rename failed")
            return real_replace(src, dst)

        monkeypatch.setattr(atomic_writer_module.os, "replace", replace_content_only)

        with pytest.raises(PersistenceError) as exc_info:
            writer.save_record("ab3k9f2p", "content", metadata)

        assert "finalize metadata" in str(exc_info.value)
        assert list(documents_dir.iterdir()) == []
