"""Unit tests for title, slug and message helpers."""

from mdshare.lib.text import (
    build_share_url,
    create_slug,
    looks_suspicious,
    normalize_title,
    sanitize_message,
    strip_tags,
)


class TestNormalizeTitle:
    """Tests for normalize_title."""

    def test_missing_title_defaults(self):
        assert normalize_title(None) == "Untitled"
        assert normalize_title("") == "Untitled"
        assert normalize_title("   ") == "Untitled"

    def test_trims_and_strips_tags(self):
        assert normalize_title("  My Report.md  ") == "My Report.md"
        assert normalize_title("<b>Bold</b> title") == "Bold title"

    def test_only_tags_defaults(self):
        assert normalize_title("<script></script>") == "Untitled"

    def test_truncates_to_255(self):
        assert len(normalize_title("x" * 300)) == 255


class TestCreateSlug:
    """Tests for create_slug."""

    def test_report_title(self):
        assert create_slug(normalize_title("  My Report.md  ")) == "my-report"

    def test_collapses_non_alphanumeric_runs(self):
        assert create_slug("Hello,   World!! -- 2024") == "hello-world-2024"

    def test_untitled_and_empty_give_no_slug(self):
        assert create_slug("Untitled") == ""
        assert create_slug("untitled.md") == ""
        assert create_slug("!!!") == ""
        assert create_slug("") == ""

    def test_truncated_to_50(self):
        slug = create_slug("word " * 40)
        assert len(slug) <= 50
        assert not slug.endswith("-")

    def test_slug_alphabet(self):
        slug = create_slug("Ünïcödé Tïtle & Sons")
        assert all(c.isdigit() or ("a" <= c <= "z") or c == "-" for c in slug)


class TestShareUrl:
    """Tests for share URL construction."""

    def test_url_with_slug(self):
        url = build_share_url("http://localhost:8000/", "ab3k9f2p", "my-report")
        assert url == "http://localhost:8000/?doc=my-report-ab3k9f2p"

    def test_url_without_slug(self):
        assert build_share_url("http://localhost:8000/", "ab3k9f2p") == "http://localhost:8000/?doc=ab3k9f2p"


class TestSanitizeMessage:
    """Tests for client-facing error messages."""

    def test_strips_html(self):
        assert sanitize_message("<img src=x onerror=alert(1)>bad input") == "bad input"

    def test_caps_length(self):
        message = sanitize_message("x" * 1000, max_length=50)
        assert len(message) == 50
        assert message.endswith("...")

    def test_empty_message_gets_fallback(self):
        assert sanitize_message("<b></b>") == "Request failed"

    def test_strip_tags_unterminated(self):
        assert strip_tags("safe<script") == "safe"


class TestSuspiciousContent:
    def test_detects_php_and_script(self):
        assert looks_suspicious("<?php echo 1; ?>")
        assert looks_suspicious("<SCRIPT>alert(1)</SCRIPT>")
        assert not looks_suspicious("# Plain markdown\n\n`code`")
