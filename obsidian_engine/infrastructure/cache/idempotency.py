"""In-memory idempotency store for POST endpoints with TTL eviction"""

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from obsidian_engine.domain.exceptions import IdempotencyConflictError


@dataclass(frozen=True)
class StoredResponse:
    body_hash: str
    status_code: int
    payload: Any
    expires_at: float


def hash_body(body: Any) -> str:
    """Stable sha256 of a JSON-compatible body, independent of key order"""
    encoded = json.dumps(body if body is not None else {}, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class IdempotencyStore:
    """
    Remembers responses by idempotency key for `ttl_seconds`.

    One instance lives on the application and is shared by all request
    threads, so every access to the entries goes through the lock.
    Expired entries are dropped when looked up and on every write.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, StoredResponse] = {}
        self._lock = threading.Lock()

    def get(self, key: Optional[str], body: Any) -> Optional[StoredResponse]:
        """
        Look up a stored response.

        Returns:
            The stored response, or None when the key is absent or expired

        Raises:
            IdempotencyConflictError: the key was stored for a different body
        """
        if not key:
            return None

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None

        if entry.body_hash != hash_body(body):
            raise IdempotencyConflictError(key)
        return entry

    def put(self, key: Optional[str], body: Any, status_code: int, payload: Any) -> None:
        if not key:
            return

        now = self._clock()
        entry = StoredResponse(
            body_hash=hash_body(body),
            status_code=status_code,
            payload=payload,
            expires_at=now + self.ttl_seconds,
        )
        with self._lock:
            self._evict_expired(now)
            self._entries[key] = entry

    def evict_expired(self) -> int:
        """Drop every expired entry, returning how many were removed"""
        with self._lock:
            return self._evict_expired(self._clock())

    def _evict_expired(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
