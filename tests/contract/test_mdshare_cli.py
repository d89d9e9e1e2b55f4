"""Contract tests for the mdshare CLI."""

import json
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from mdshare.cli import share as share_module
from mdshare.cli.main import app
from mdshare.lib.exceptions import ShareClientError
from mdshare.models.document import LoadedDocument, SaveResult


class TestCliHelp:
    """Contract tests for command registration."""

    @pytest.fixture
    def runner(self):
        """CLI test runner."""
        return CliRunner()

    @pytest.mark.parametrize(
        "command, text",
        [
            ("web", "Start the mdshare web server"),
            ("share", "Share a markdown file"),
            ("fetch", "Download a shared markdown document"),
            ("inspect", "Inspect a stored document"),
        ],
    )
    def test_command_help(self, runner, command, text):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0
        assert text in result.stdout


class TestShareCommands:
    """Contract tests for share and fetch."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def fake_client(self, monkeypatch):
        client = MagicMock()
        monkeypatch.setattr(share_module, "create_share_client", lambda **kwargs: client)
        return client

    def test_share_prints_url(self, runner, fake_client, tmp_path):
        note = tmp_path / "notes.md"
        note.write_text("# Notes\n", encoding="utf-8")
        fake_client.share.return_value = SaveResult(
            id="ab3k9f2p",
            slug="notes",
            title="notes.md",
            created="2026-10-17T09:30:00+00:00",
            url="http://localhost:8000/?doc=notes-ab3k9f2p",
        )

        result = runner.invoke(app, ["share", str(note), "--server", "http://localhost:8000"])

        assert result.exit_code == 0
        fake_client.share.assert_called_once_with("# Notes\n", "notes.md")
        assert "http://localhost:8000/?doc=notes-ab3k9f2p" in result.stdout

    def test_share_json_output(self, runner, fake_client, tmp_path):
        note = tmp_path / "notes.md"
        note.write_text("x", encoding="utf-8")
        fake_client.share.return_value = SaveResult(
            id="ab3k9f2p", slug="", title="Custom", created="2026-10-17T09:30:00+00:00",
            url="http://localhost:8000/?doc=ab3k9f2p",
        )

        result = runner.invoke(app, ["share", str(note), "--title", "Custom", "--output-format", "json"])

        assert result.exit_code == 0
        fake_client.share.assert_called_once_with("x", "Custom")
        assert json.loads(result.stdout)["id"] == "ab3k9f2p"

    def test_share_missing_file(self, runner, fake_client, tmp_path):
        result = runner.invoke(app, ["share", str(tmp_path / "missing.md")])

        assert result.exit_code == 1
        fake_client.share.assert_not_called()

    def test_share_server_error(self, runner, fake_client, tmp_path):
        note = tmp_path / "notes.md"
        note.write_text("x", encoding="utf-8")
        fake_client.share.side_effect = ShareClientError("Rate limit exceeded", status_code=429)

        result = runner.invoke(app, ["share", str(note)])

        assert result.exit_code == 1

    def test_fetch_to_file(self, runner, fake_client, tmp_path):
        fake_client.fetch.return_value = LoadedDocument(
            id="ab3k9f2p", content="# Notes\r\n", title="Notes", created=None, size=9,
        )
        output = tmp_path / "out.md"

        result = runner.invoke(app, ["fetch", "notes-ab3k9f2p", "-o", str(output)])

        assert result.exit_code == 0
        fake_client.fetch.assert_called_once_with("notes-ab3k9f2p")
        assert output.read_bytes() == b"# Notes\r\n"

    def test_fetch_to_stdout(self, runner, fake_client):
        fake_client.fetch.return_value = LoadedDocument(
            id="ab3k9f2p", content="hello", title="Notes", created=None, size=5,
        )

        result = runner.invoke(app, ["fetch", "ab3k9f2p"])

        assert result.exit_code == 0
        assert result.stdout == "hello"


class TestInspectCommand:
    """Contract tests for inspect."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_inspect_saved_document(self, runner, store, documents_dir):
        saved = store.save("# Body", "Inspect Me")

        result = runner.invoke(app, ["inspect", f"inspect-me-{saved.id}", "--documents-dir", str(documents_dir)])

        assert result.exit_code == 0
        assert "Inspect Me" in result.stdout
        assert "# Body" in result.stdout

    def test_inspect_json(self, runner, store, documents_dir):
        saved = store.save("# Body", "Inspect Me")

        result = runner.invoke(
            app, ["inspect", saved.id, "--documents-dir", str(documents_dir), "--format", "json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["id"] == saved.id
        assert data["content"] == "# Body"

    def test_inspect_unknown_document(self, runner, documents_dir):
        result = runner.invoke(app, ["inspect", "zzzzzzzz", "--documents-dir", str(documents_dir)])
        assert result.exit_code == 1

    def test_inspect_missing_directory(self, runner, tmp_path):
        result = runner.invoke(app, ["inspect", "zzzzzzzz", "--documents-dir", str(tmp_path / "nope")])
        assert result.exit_code == 1
