"""Fixed-window request limiting for the public enquiry intake."""
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass


def _now_ms():
    return int(time.time() * 1000)


@dataclass
class RateLimitRecord:
    count: int
    window_reset_at: int


class RateLimiter(ABC):
    """Interface: swap in a shared counter store for multi-process deployments."""

    @abstractmethod
    def allow(self, identity: str, max_requests: int, window_ms: int) -> bool:
        """Count one request for ``identity`` and say whether it may proceed."""


class InMemoryRateLimiter(RateLimiter):
    """Per-process fixed-window counter.

    A record is replaced, not incremented, once its window has expired.
    Records are never evicted, so memory grows with the number of distinct
    identities seen. Only suitable for a single long-running process.
    """

    def __init__(self, clock=_now_ms):
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = threading.Lock()

    def allow(self, identity: str, max_requests: int, window_ms: int) -> bool:
        now = self._clock()
        with self._lock:
            record = self._records.get(identity)
            if record is None or now > record.window_reset_at:
                self._records[identity] = RateLimitRecord(count=1, window_reset_at=now + window_ms)
                return True

            if record.count >= max_requests:
                return False

            record.count += 1
            return True

    def get(self, identity: str) -> RateLimitRecord | None:
        with self._lock:
            return self._records.get(identity)

    def __len__(self):
        return len(self._records)


def resolve_identity(headers, unknown_label: str = 'unknown') -> str:
    """First present of X-Forwarded-For, X-Real-IP, else the shared fallback bucket."""
    return headers.get('X-Forwarded-For') or headers.get('X-Real-IP') or unknown_label
