"""Title, slug and message sanitization helpers."""

import re

from .config import DEFAULT_TITLE, MAX_ERROR_MESSAGE_LENGTH, MAX_SLUG_LENGTH, MAX_TITLE_LENGTH

_TAG_PATTERN = re.compile(r"<[^>]*>?")
_NON_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
_MD_EXTENSION_PATTERN = re.compile(r"\.md$")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_SUSPICIOUS_PATTERN = re.compile(r"<\?php|<\?=|<script[\s>]", re.IGNORECASE)


def strip_tags(text: str) -> str:
    """Remove HTML/XML tags (including an unterminated trailing tag)."""
    return _TAG_PATTERN.sub("", text)


def normalize_title(title: str | None) -> str:
    """
    Normalize a user-supplied document title.

    Tags are stripped, surrounding whitespace trimmed and the result truncated
    to MAX_TITLE_LENGTH characters. Empty results fall back to DEFAULT_TITLE.

    Args:
        title: Raw title (None means absent)

    Returns:
        Display-safe title
    """
    if title is None:
        return DEFAULT_TITLE
    cleaned = strip_tags(title.strip()).strip()
    cleaned = cleaned[:MAX_TITLE_LENGTH]
    return cleaned or DEFAULT_TITLE


def create_slug(title: str) -> str:
    """
    Derive a URL slug from a title.

    "  My Report.md  " -> "my-report". Returns "" when nothing usable is left
    or the slug is just "untitled"; slugs are cosmetic and never used for
    lookup.
    """
    slug = title.strip().lower()
    slug = _MD_EXTENSION_PATTERN.sub("", slug)
    slug = _NON_SLUG_PATTERN.sub("-", slug).strip("-")
    slug = slug[:MAX_SLUG_LENGTH].rstrip("-")
    if not slug or slug == DEFAULT_TITLE.lower():
        return ""
    return slug


def build_doc_param(doc_id: str, slug: str = "") -> str:
    """Build the ?doc= value: "slug-id" or just "id"."""
    return f"{slug}-{doc_id}" if slug else doc_id


def build_share_url(base_url: str, doc_id: str, slug: str = "") -> str:
    """Build the shareable URL for a saved document."""
    return f"{base_url}?doc={build_doc_param(doc_id, slug)}"


def sanitize_message(message: str, max_length: int = MAX_ERROR_MESSAGE_LENGTH) -> str:
    """Make an error message safe to echo back to a client."""
    cleaned = _WHITESPACE_PATTERN.sub(" ", strip_tags(message)).strip()
    if len(cleaned) > max_length:
        cleaned = cleaned[: max_length - 3].rstrip() + "..."
    return cleaned or "Request failed"


def looks_suspicious(content: str) -> bool:
    """True when content carries PHP open tags or script tags."""
    return bool(_SUSPICIOUS_PATTERN.search(content))
