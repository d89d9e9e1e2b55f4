"""Rate limiter service for per-client save limits."""

import fcntl
import hashlib
import json
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional, Protocol

from ..lib.config import (
    RATE_LIMIT,
    RATE_LIMIT_DIR,
    RATE_LIMIT_FAIL_OPEN,
    RATE_LIMIT_MAX_ATTEMPTS,
    RATE_LIMIT_WINDOW_SECONDS,
)
from ..lib.exceptions import RateLimitedError, RateLimitStorageError
from ..lib.logging import get_logger
from ..models.rate_limit import RateLimitEntry

logger = get_logger(__name__)


def client_key_for(client_address: str) -> str:
    """Stable, filesystem-safe key for a client network address."""
    return hashlib.sha256(client_address.encode("utf-8")).hexdigest()


class CounterStorage(Protocol):
    """Key-value storage for rate-limit counters."""

    def get(self, key: str) -> Optional[RateLimitEntry]:
        ...

    def put(self, key: str, entry: RateLimitEntry) -> None:
        ...

    def compare_and_swap(
        self,
        key: str,
        expected: Optional[RateLimitEntry],
        new: RateLimitEntry,
    ) -> bool:
        """Store `new` only if the current value equals `expected` (None = absent)."""
        ...


class InMemoryCounterStorage:
    """Process-local counter storage (tests, single-process servers)."""

    def __init__(self):
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[RateLimitEntry]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: RateLimitEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def compare_and_swap(
        self,
        key: str,
        expected: Optional[RateLimitEntry],
        new: RateLimitEntry,
    ) -> bool:
        with self._lock:
            if self._entries.get(key) != expected:
                return False
            self._entries[key] = new
            return True


class FileCounterStorage:
    """
    Counter storage with one JSON file per client key.

    Writes go through a temp file and os.replace, so readers never see a
    truncated counter. compare_and_swap holds an exclusive advisory lock
    (fcntl.flock) on a per-key sidecar lock file, which serializes concurrent
    updates across threads and worker processes.
    """

    def __init__(self, storage_dir: Optional[Path] = None):
        """
        Initialize file counter storage.

        Args:
            storage_dir: Directory for counter files (default: RATE_LIMIT_DIR)
        """
        self.storage_dir = Path(storage_dir or RATE_LIMIT_DIR)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _entry_path(self, key: str) -> Path:
        return self.storage_dir / f"{key}.json"

    def _lock_path(self, key: str) -> Path:
        return self.storage_dir / f"{key}.lock"

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        fd = os.open(self._lock_path(key), os.O_RDWR | os.O_CREAT, 0o600)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

    def _read(self, key: str) -> Optional[RateLimitEntry]:
        path = self._entry_path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

        try:
            return RateLimitEntry(**json.loads(raw))
        except (ValueError, TypeError) as e:
            # Corrupt counter: start a fresh window
            logger.warning("rate_limit_entry_corrupt", path=str(path), error=str(e))
            return None

    def _write(self, key: str, entry: RateLimitEntry) -> None:
        fd, temp_path = tempfile.mkstemp(dir=self.storage_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entry.model_dump(), f)
            os.replace(temp_path, self._entry_path(key))
        except BaseException:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise

    def get(self, key: str) -> Optional[RateLimitEntry]:
        return self._read(key)

    def put(self, key: str, entry: RateLimitEntry) -> None:
        with self._locked(key):
            self._write(key, entry)

    def compare_and_swap(
        self,
        key: str,
        expected: Optional[RateLimitEntry],
        new: RateLimitEntry,
    ) -> bool:
        with self._locked(key):
            if self._read(key) != expected:
                return False
            self._write(key, new)
            return True


class RateLimiter:
    """
    Rate limiter enforcing a per-client save quota.

    Each client has a {window_start, count} record. A window that is at least
    window_seconds old is reset on the next admit; within a window at most
    `limit` saves are admitted.
    """

    def __init__(
        self,
        storage: CounterStorage,
        limit: int = RATE_LIMIT,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        fail_open: bool = RATE_LIMIT_FAIL_OPEN,
        max_attempts: int = RATE_LIMIT_MAX_ATTEMPTS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize rate limiter.

        Args:
            storage: Counter storage backend
            limit: Maximum saves allowed per window per client
            window_seconds: Window length in seconds
            fail_open: Admit (instead of reject) when storage fails
            max_attempts: compare-and-swap retries beyond the limit; each lost
                swap means another save was admitted, so up to `limit` losses
                are expected before the decision becomes a 429
            clock: Time source returning Unix seconds
        """
        self.storage = storage
        self.limit = limit
        self.window_seconds = window_seconds
        self.fail_open = fail_open
        self.max_attempts = max_attempts
        self.clock = clock

    def _next_entry(self, current: Optional[RateLimitEntry], now: float) -> RateLimitEntry:
        if current is None or now - current.window_start >= self.window_seconds:
            return RateLimitEntry(window_start=now, count=1)

        if current.count >= self.limit:
            retry_after = max(0.0, current.window_start + self.window_seconds - now)
            raise RateLimitedError(retry_after=retry_after)

        return RateLimitEntry(window_start=current.window_start, count=current.count + 1)

    def admit(self, client_key: str) -> Optional[RateLimitEntry]:
        """
        Admit one save for a client or reject it.

        Args:
            client_key: Stable client key (see client_key_for)

        Returns:
            The updated counter entry, or None when admitted fail-open

        Raises:
            RateLimitedError: If the client already used its quota
            RateLimitStorageError: If counters cannot be updated (fail-closed)
        """
        try:
            for attempt in range(1, self.limit + self.max_attempts + 1):
                now = self.clock()
                current = self.storage.get(client_key)
                try:
                    updated = self._next_entry(current, now)
                except RateLimitedError:
                    logger.warning(
                        "rate_limit_exceeded",
                        client_key=client_key,
                        count=current.count if current else 0,
                        limit=self.limit,
                    )
                    raise

                if self.storage.compare_and_swap(client_key, current, updated):
                    return updated

                logger.debug("rate_limit_contention", client_key=client_key, attempt=attempt)
        except OSError as e:
            return self._storage_failed(client_key, str(e))

        logger.error("rate_limit_contention_exhausted", client_key=client_key, limit=self.limit)
        raise RateLimitStorageError()

    def _storage_failed(self, client_key: str, reason: str) -> None:
        if self.fail_open:
            logger.warning("rate_limit_storage_failed_open", client_key=client_key, error=reason)
            return None

        logger.error("rate_limit_storage_failed", client_key=client_key, error=reason)
        raise RateLimitStorageError()


def create_rate_limiter(
    storage: Optional[CounterStorage] = None,
    limit: int = RATE_LIMIT,
    window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
) -> RateLimiter:
    """
    Create a rate limiter instance.

    Args:
        storage: Counter storage (default: FileCounterStorage in RATE_LIMIT_DIR)
        limit: Maximum saves allowed per window per client
        window_seconds: Window length in seconds

    Returns:
        RateLimiter instance
    """
    return RateLimiter(storage or FileCounterStorage(), limit, window_seconds)
