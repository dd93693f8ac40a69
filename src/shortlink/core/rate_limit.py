"""Token bucket rate limiting for the request pipeline."""

import threading
import time
from collections import OrderedDict
from typing import Callable, Hashable, Optional


class TokenBucket:
    """
    Holds up to ``capacity`` permits, refilled at ``rate`` permits per second.

    Not thread safe on its own; the gates below serialize access.
    """

    def __init__(self, rate: float, capacity: int, clock: Callable[[], float] = time.monotonic):
        if rate <= 0 or capacity <= 0:
            raise ValueError("rate and capacity must be positive")
        self.rate = rate
        self.capacity = capacity
        self.clock = clock
        self.tokens = float(capacity)
        self.updated_at = clock()

    def _refill(self) -> None:
        now = self.clock()
        elapsed = now - self.updated_at
        if elapsed > 0:
            self.tokens = min(float(self.capacity), self.tokens + elapsed * self.rate)
        self.updated_at = now

    def try_consume(self) -> bool:
        self._refill()
        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False

    def retry_after(self) -> float:
        """Seconds until the next permit is available."""
        self._refill()
        if self.tokens >= 1:
            return 0.0
        return (1 - self.tokens) / self.rate


class RateGate:
    """
    One bucket shared by every client and every route.

    ``try_admit`` never blocks: it returns False as soon as the bucket is
    empty. The key argument is accepted and ignored so both gates can be
    used interchangeably by the pipeline.
    """

    def __init__(self, rate: float = 1.0, burst: int = 5, clock: Callable[[], float] = time.monotonic):
        self._bucket = TokenBucket(rate, burst, clock)
        self._lock = threading.Lock()

    def try_admit(self, key: Optional[Hashable] = None) -> bool:
        with self._lock:
            return self._bucket.try_consume()

    def retry_after(self, key: Optional[Hashable] = None) -> float:
        with self._lock:
            return self._bucket.retry_after()


class ClientRateGate:
    """
    One independent bucket per client key.

    Memory is bounded by ``max_clients``: when a new key would exceed it,
    the least recently used bucket is dropped. That is the idlest client,
    and a dropped client starts again with a full bucket.
    """

    def __init__(
        self,
        rate: float = 1.0,
        burst: int = 5,
        max_clients: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_clients <= 0:
            raise ValueError("max_clients must be positive")
        self.rate = rate
        self.burst = burst
        self.max_clients = max_clients
        self.clock = clock
        self._buckets: "OrderedDict[Hashable, TokenBucket]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._buckets)

    def _bucket_for(self, key: Hashable) -> TokenBucket:
        bucket = self._buckets.get(key)
        if bucket is not None:
            self._buckets.move_to_end(key)
            return bucket

        if len(self._buckets) >= self.max_clients:
            self._evict()
        bucket = TokenBucket(self.rate, self.burst, self.clock)
        self._buckets[key] = bucket
        return bucket

    def _evict(self) -> None:
        # Constant time per call: only the least recently used end is touched
        while len(self._buckets) >= self.max_clients:
            self._buckets.popitem(last=False)

    def try_admit(self, key: Optional[Hashable] = None) -> bool:
        with self._lock:
            return self._bucket_for(key).try_consume()

    def retry_after(self, key: Optional[Hashable] = None) -> float:
        with self._lock:
            bucket = self._buckets.get(key)
            return bucket.retry_after() if bucket is not None else 0.0
