"""
Attempt limiter for sensitive endpoints.

Counts attempts per client address inside a window that opens with the
client's first attempt. Once ``max_attempts`` is reached further attempts
are refused until the window closes. Stale entries are pruned lazily on
every check.

Key features:
- Safe under concurrent requests via asyncio.Lock
- Injectable clock for tests
- In-memory only: not shared across worker processes
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class _Window:
    count: int
    first_attempt: float


class AttemptLimiter:
    """
    Per-key fixed-window attempt counter.

    Attributes:
        max_attempts: Attempts allowed per window
        window_seconds: Window length, measured from the first attempt
    """

    def __init__(
        self,
        max_attempts: int = 5,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        expired = [
            key for key, window in self._windows.items()
            if now - window.first_attempt > self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

    async def hit(self, key: str) -> Optional[int]:
        """
        Record one attempt for ``key``.

        Returns:
            None if the attempt is allowed, otherwise the number of seconds
            until the key's window closes
        """
        async with self._lock:
            now = self._clock()
            self._prune(now)

            window = self._windows.get(key)
            if window is None:
                self._windows[key] = _Window(count=1, first_attempt=now)
                return None

            if window.count >= self.max_attempts:
                remaining = self.window_seconds - (now - window.first_attempt)
                return max(1, math.ceil(remaining))

            window.count += 1
            return None

    def attempts(self, key: str) -> int:
        """Attempts recorded for ``key`` in its current window (monitoring only)."""
        window = self._windows.get(key)
        return window.count if window else 0

    def __len__(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        """Forget every key. Used by tests and admin tooling."""
        self._windows.clear()
