"""mdshare: markdown share backend with file-backed document storage."""

__version__ = "0.1.0"
