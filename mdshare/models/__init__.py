"""Document and rate-limit models."""

from .document import DocumentMetadata, ErrorResponse, LoadedDocument, SaveResult
from .rate_limit import RateLimitEntry

__all__ = ["DocumentMetadata", "ErrorResponse", "LoadedDocument", "SaveResult", "RateLimitEntry"]
