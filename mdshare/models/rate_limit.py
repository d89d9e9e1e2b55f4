"""Rate-limit counter record."""

from pydantic import BaseModel, ConfigDict, Field


class RateLimitEntry(BaseModel):
    """
    Per-client counter for the current rate-limit window.

    Entries are immutable so storages can compare them for compare-and-swap.
    """

    model_config = ConfigDict(frozen=True)

    window_start: float = Field(..., description="Unix time the current window started")
    count: int = Field(..., ge=0, description="Saves admitted in the current window")
