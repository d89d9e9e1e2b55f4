"""Document record models: persisted metadata and API payloads."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..lib.config import DEFAULT_TITLE


class DocumentMetadata(BaseModel):
    """
    Metadata artifact stored next to each document's content (<id>.json).

    Size and content hash are recorded at save time and never re-validated
    on load.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "ab3k9f2p",
                "slug": "my-report",
                "title": "My Report.md",
                "created": "2026-10-17T09:30:00+00:00",
                "size": 1234,
                "contentHash": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
            }
        },
    )

    id: str = Field(..., description="8-character document ID")
    slug: str = Field("", description="Cosmetic URL slug derived from the title")
    title: str = Field(DEFAULT_TITLE, description="Sanitized document title")
    created: str = Field(..., description="ISO 8601 creation timestamp")
    size: int = Field(..., ge=0, description="Content length in bytes")
    content_hash: str = Field(..., alias="contentHash", description="SHA-256 of the content")


class SaveResult(BaseModel):
    """Outcome of a successful save."""

    success: bool = True
    id: str
    slug: str
    title: str
    created: str
    url: str


class LoadedDocument(BaseModel):
    """A document read back from the store."""

    success: bool = True
    id: str
    content: str
    title: str = DEFAULT_TITLE
    created: Optional[str] = None
    size: int


class ErrorResponse(BaseModel):
    """Uniform error envelope returned by the HTTP API."""

    success: bool = False
    error: str
