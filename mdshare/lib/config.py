"""Configuration constants for mdshare, read from the environment (and .env)."""

import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the working directory without overriding real environment
load_dotenv(override=False)


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: list[str]) -> list[str]:
    value = os.getenv(name)
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


# Base directories
BASE_DIR = Path(os.getenv("MDSHARE_BASE_DIR", Path.cwd()))
DOCUMENTS_DIR = Path(os.getenv("MDSHARE_DOCUMENTS_DIR", BASE_DIR / "data" / "documents"))
# Rate-limit counters live outside the documents directory (scratch storage)
RATE_LIMIT_DIR = Path(os.getenv("MDSHARE_RATE_LIMIT_DIR", Path(tempfile.gettempdir()) / "mdshare-rate"))

# Document limits
MAX_CONTENT_BYTES: int = int(os.getenv("MDSHARE_MAX_CONTENT_BYTES", str(5 * 1024 * 1024)))
MAX_TITLE_LENGTH: int = 255
MAX_SLUG_LENGTH: int = 50
DEFAULT_TITLE = "Untitled"

# Document IDs
ID_LENGTH: int = 8
ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
ID_MAX_ATTEMPTS: int = int(os.getenv("MDSHARE_ID_MAX_ATTEMPTS", "10"))

# Rate limiting
RATE_LIMIT: int = int(os.getenv("MDSHARE_RATE_LIMIT", "10"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("MDSHARE_RATE_LIMIT_WINDOW_SECONDS", "3600"))
RATE_LIMIT_FAIL_OPEN: bool = _get_bool("MDSHARE_RATE_LIMIT_FAIL_OPEN", False)
RATE_LIMIT_MAX_ATTEMPTS: int = 10

# HTTP surface
ALLOWED_ORIGINS: list[str] = _get_list(
    "MDSHARE_ALLOWED_ORIGINS",
    [
        "http://localhost:8000",
        "http://localhost:3000",
        "http://127.0.0.1:8000",
        "http://127.0.0.1:3000",
    ],
)
PUBLIC_BASE_URL: str | None = os.getenv("MDSHARE_PUBLIC_BASE_URL") or None
TRUST_FORWARDED_FOR: bool = _get_bool("MDSHARE_TRUST_FORWARDED_FOR", False)
MAX_ERROR_MESSAGE_LENGTH: int = 200

# Share client
DEFAULT_SERVER_URL = os.getenv("MDSHARE_SERVER_URL", "http://localhost:8000")
CLIENT_TIMEOUT_SECONDS: float = float(os.getenv("MDSHARE_CLIENT_TIMEOUT_SECONDS", "30"))

# Logging
LOG_LEVEL = os.getenv("MDSHARE_LOG_LEVEL", "INFO")
LOG_JSON: bool = _get_bool("MDSHARE_LOG_JSON", False)
LOG_FILE: str | None = os.getenv("MDSHARE_LOG_FILE") or None


def ensure_documents_directory(documents_dir: Path | None = None) -> Path:
    """
    Ensure the documents directory exists.

    Args:
        documents_dir: Directory to create (default: DOCUMENTS_DIR)

    Returns:
        Path to the documents directory
    """
    path = Path(documents_dir or DOCUMENTS_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path
