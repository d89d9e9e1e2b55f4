"""Shared fixtures for mdshare tests."""

from datetime import datetime, timezone

import pytest

from mdshare.services.document_store import DocumentStore
from mdshare.services.id_generator import IdGenerator
from mdshare.services.rate_limiter import InMemoryCounterStorage, RateLimiter


class FakeClock:
    """Controllable Unix-time clock for rate-limit tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """Fake clock starting at a fixed time."""
    return FakeClock()


@pytest.fixture
def documents_dir(tmp_path):
    """Temporary documents directory."""
    path = tmp_path / "documents"
    path.mkdir()
    return path


@pytest.fixture
def rate_limiter(clock):
    """In-memory rate limiter (10 saves per hour)."""
    return RateLimiter(InMemoryCounterStorage(), limit=10, window_seconds=3600, clock=clock)


@pytest.fixture
def store(documents_dir, rate_limiter):
    """Document store on a temporary directory with a fixed creation time."""
    return DocumentStore(
        documents_dir,
        rate_limiter=rate_limiter,
        id_generator=IdGenerator(),
        clock=lambda: datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc),
    )
