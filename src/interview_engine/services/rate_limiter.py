# Copyright 2025 John Brosnihan
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Per-actor fixed-window rate limiting.

The limiter counts requests per actor key inside a fixed window. When the
window expires the record is replaced rather than incremented, so bursts at
a window boundary are tolerated. Window state lives behind a store interface
so a shared cache can replace the in-process map in multi-instance setups.
"""

import math
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass
from typing import Protocol

from interview_engine.config.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateWindow:
    """Request count for one actor within the current window.

    Attributes:
        count: Requests observed since the window started
        reset_at: Epoch milliseconds at which the window expires
    """

    count: int
    reset_at: int


class RateLimitStore(Protocol):
    """Storage for rate windows keyed by actor."""

    def get(self, key: str) -> RateWindow | None: ...

    def set(self, key: str, window: RateWindow, ttl_ms: int) -> None: ...

    def lock(self, key: str) -> AbstractContextManager[None]: ...


class InMemoryRateLimitStore:
    """Process-local window store with one lock per key.

    Requests for the same key serialize on that key's lock; different keys
    never contend beyond the brief registry lookup.
    """

    def __init__(self) -> None:
        self._windows: dict[str, RateWindow] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get(self, key: str) -> RateWindow | None:
        return self._windows.get(key)

    def set(self, key: str, window: RateWindow, ttl_ms: int) -> None:
        # Expiry is decided by reset_at; ttl_ms only matters for external caches
        self._windows[key] = window

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        with self._registry_lock:
            key_lock = self._locks.get(key)
            if key_lock is None:
                key_lock = threading.Lock()
                self._locks[key] = key_lock
        with key_lock:
            yield

    def clear(self) -> None:
        """Drop every window."""
        with self._registry_lock:
            self._windows.clear()
            self._locks.clear()


def _now_ms() -> int:
    return int(time.time() * 1000)


class FixedWindowRateLimiter:
    """Fixed-window request counter.

    Attributes:
        store: Window storage shared by all requests of this process
        clock: Zero-argument callable returning the current time in milliseconds
    """

    def __init__(
        self,
        store: RateLimitStore | None = None,
        clock: Callable[[], int] | None = None,
    ):
        """Initialize the limiter.

        Args:
            store: Window storage (defaults to an in-memory store)
            clock: Millisecond clock (defaults to wall time)
        """
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.clock = clock or _now_ms

    def is_allowed(self, key: str, limit: int, window_ms: int) -> bool:
        """Record one request for key and report whether it is within limit.

        Args:
            key: Actor key
            limit: Maximum requests per window
            window_ms: Window length in milliseconds

        Returns:
            True if the request is allowed, False if the window is exhausted
        """
        with self.store.lock(key):
            now = self.clock()
            window = self.store.get(key)

            if window is None or now >= window.reset_at:
                self.store.set(key, RateWindow(count=1, reset_at=now + window_ms), window_ms)
                return True

            updated = RateWindow(count=window.count + 1, reset_at=window.reset_at)
            self.store.set(key, updated, window.reset_at - now)

        allowed = updated.count <= limit
        if not allowed:
            logger.debug(
                "Rate limit window exhausted",
                extra={"count": updated.count, "limit": limit},
            )
        return allowed

    def remaining(self, key: str, limit: int) -> int:
        """Get the number of requests left in key's current window.

        Args:
            key: Actor key
            limit: Maximum requests per window

        Returns:
            Remaining requests, never negative
        """
        window = self.store.get(key)
        if window is None or self.clock() >= window.reset_at:
            return limit
        return max(0, limit - window.count)

    def retry_after_seconds(self, key: str) -> int:
        """Get whole seconds until key's window resets.

        Args:
            key: Actor key

        Returns:
            Seconds to wait, at least 1
        """
        window = self.store.get(key)
        if window is None:
            return 1
        return max(1, math.ceil((window.reset_at - self.clock()) / 1000))
