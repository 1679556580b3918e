# face_reading/services/stores.py
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from face_reading.core.config import (
    CACHE_TTL_SECONDS,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
)
from face_reading.schemas.face_reading_schema import AnalysisPayload


class RateLimitStore(ABC):
    @abstractmethod
    def hit(self, key: str, now: float) -> bool:
        """Record an attempt for `key` at `now`. Returns True when admitted."""
        raise NotImplementedError


class AnalysisCache(ABC):
    @abstractmethod
    def get(self, key: str, now: float) -> Optional[AnalysisPayload]:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, payload: AnalysisPayload, now: float) -> None:
        raise NotImplementedError


# Sliding-window counter kept in process memory
# Single process only: multi-instance deployments need a shared store behind the same interface.
# Buckets are pruned lazily per key; idle keys are never removed.
class InMemoryRateLimitStore(RateLimitStore):
    def __init__(
        self,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
    ) -> None:
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._buckets: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, now: float) -> bool:
        window_start = now - self.window_seconds
        with self._lock:
            timestamps = [ts for ts in self._buckets.get(key, []) if ts > window_start]
            if len(timestamps) >= self.max_requests:
                self._buckets[key] = timestamps
                return False
            timestamps.append(now)
            self._buckets[key] = timestamps
            return True


# Entries are only checked against the TTL on read; nothing evicts them.
class InMemoryAnalysisCache(AnalysisCache):
    def __init__(self, ttl_seconds: float = CACHE_TTL_SECONDS) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[str, Tuple[float, AnalysisPayload]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, now: float) -> Optional[AnalysisPayload]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, payload = entry
        if now - stored_at >= self.ttl_seconds:
            return None
        return payload.model_copy(deep=True)

    def put(self, key: str, payload: AnalysisPayload, now: float) -> None:
        with self._lock:
            self._entries[key] = (now, payload.model_copy(deep=True))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
