"""Document store services."""

from .id_generator import IdGenerator, create_id_generator
from .rate_limiter import (
    RateLimiter,
    CounterStorage,
    InMemoryCounterStorage,
    FileCounterStorage,
    create_rate_limiter,
    client_key_for,
)
from .atomic_writer import AtomicWriter
from .document_store import DocumentStore, create_document_store
from .share_client import ShareClient, create_share_client

__all__ = [
    "IdGenerator",
    "create_id_generator",
    "RateLimiter",
    "CounterStorage",
    "InMemoryCounterStorage",
    "FileCounterStorage",
    "create_rate_limiter",
    "client_key_for",
    "AtomicWriter",
    "DocumentStore",
    "create_document_store",
    "ShareClient",
    "create_share_client",
]
