"""Exception hierarchy for the document store and share client."""

from typing import Optional


class MdShareError(Exception):
    """Base class for all mdshare errors."""
    pass


class DocumentStoreError(MdShareError):
    """
    Base class for errors raised while saving or loading documents.

    Every subclass carries the HTTP status it maps to at the request boundary.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


# Validation (400)

class ValidationError(DocumentStoreError):
    """Bad or missing request input."""

    status_code = 400
    default_message = "Invalid request"


class InvalidRequestError(ValidationError):
    """Request body is not a JSON object."""

    default_message = "Invalid JSON body"


class NoContentError(ValidationError):
    default_message = "No content provided"


class InvalidContentTypeError(ValidationError):
    default_message = "Content must be a string"


class InvalidTitleError(ValidationError):
    default_message = "Title must be a string"


class ContentTooLargeError(ValidationError):
    default_message = "Content exceeds maximum size of 5MB"


class MissingIdError(ValidationError):
    default_message = "No document ID provided"


class InvalidIdError(ValidationError):
    default_message = "Invalid document ID format"


class RateLimitedError(DocumentStoreError):
    """Client exceeded its save quota for the current window."""

    status_code = 429
    default_message = "Rate limit exceeded. Please try again later."

    def __init__(self, message: Optional[str] = None, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class NotFoundError(DocumentStoreError):
    status_code = 404
    default_message = "Document not found"


class ForbiddenPathError(DocumentStoreError):
    """Resolved document path escapes the documents directory."""

    status_code = 403
    default_message = "Invalid file path"


class PersistenceError(DocumentStoreError):
    """I/O failure while staging, committing or reading a record."""

    status_code = 500
    default_message = "Failed to save document"


class RateLimitStorageError(PersistenceError):
    """Rate-limit counters could not be read or written."""

    default_message = "Rate limit storage unavailable"


class IdGenerationError(DocumentStoreError):
    status_code = 500
    default_message = "Failed to generate unique ID"


class ExhaustedError(IdGenerationError):
    """No unused ID was found within the attempt budget."""
    pass


# Client side

class ShareClientError(MdShareError):
    """Raised by the share client when a save/load call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
