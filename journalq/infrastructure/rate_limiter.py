"""
Per-caller sliding-window admission control.

Each caller owns a window of request timestamps. Only timestamps inside the
trailing window are kept; a request is admitted while the window holds fewer
than `limit` timestamps. A denial reports how many whole seconds remain until
the oldest timestamp leaves the window.

Memory stays bounded two ways: windows live in a cachetools TTLCache (an idle
caller's window expires one window-length after its last admission, and the
cache caps the caller count), and sweep() drops windows left empty.
"""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from cachetools import TTLCache

from journalq.config import RATE_LIMIT_MAX_CALLERS, RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW_SECONDS
from journalq.observability.telemetry import counter, log_event


class RateLimitExceeded(RuntimeError):
    """Caller is over the limit; the request must not be processed."""

    def __init__(self, caller_id: str, retry_after_seconds: int):
        super().__init__(f"Rate limit exceeded. Retry after {retry_after_seconds} seconds.")
        self.caller_id = caller_id
        self.retry_after_seconds = retry_after_seconds


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_seconds: int = 0
    remaining: int = 0


class SlidingWindowRateLimiter:
    """Sliding-window limiter keyed by caller id (10 requests per 60s by default)."""

    def __init__(
        self,
        limit: int = RATE_LIMIT_REQUESTS,
        window_seconds: float = RATE_LIMIT_WINDOW_SECONDS,
        max_callers: int = RATE_LIMIT_MAX_CALLERS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: TTLCache[str, deque[float]] = TTLCache(
            maxsize=max_callers, ttl=window_seconds, timer=clock
        )
        self._lock = threading.Lock()

    def _prune(self, window: deque[float], now: float) -> None:
        while window and now - window[0] >= self.window_seconds:
            window.popleft()

    def admit(self, caller_id: str) -> RateLimitDecision:
        """
        Decide on one request from caller_id and record it when admitted.

        Side Effects:
            - Appends the current instant to the caller's window when admitted
            - Increments telemetry counters (rate_limit.allowed, rate_limit.denied)
        """
        with self._lock:
            now = self._clock()
            window = self._windows.get(caller_id)
            if window is None:
                window = deque()
            self._prune(window, now)

            if len(window) >= self.limit:
                retry_after = max(1, math.ceil(self.window_seconds - (now - window[0])))
                decision = RateLimitDecision(allowed=False, retry_after_seconds=retry_after)
            else:
                window.append(now)
                # Reassign so the TTL restarts from this admission
                self._windows[caller_id] = window
                decision = RateLimitDecision(allowed=True, remaining=self.limit - len(window))

        if decision.allowed:
            counter("rate_limit.allowed")
        else:
            counter("rate_limit.denied")
            log_event(
                "rate_limit.exceeded",
                caller=caller_id,
                retry_after=decision.retry_after_seconds,
            )
        return decision

    def check(self, caller_id: str) -> None:
        """
        Admit or raise.

        Raises:
            RateLimitExceeded: With the retry-after hint
        """
        decision = self.admit(caller_id)
        if not decision.allowed:
            raise RateLimitExceeded(caller_id, decision.retry_after_seconds)

    def sweep(self) -> int:
        """
        Drop windows with no timestamps left in the trailing window.

        Returns:
            Number of caller windows removed
        """
        with self._lock:
            now = self._clock()
            expired = self._windows.expire()
            removed = len(expired) if expired else 0
            for caller_id in list(self._windows.keys()):
                window = self._windows.get(caller_id)
                if window is None:
                    continue
                self._prune(window, now)
                if not window:
                    del self._windows[caller_id]
                    removed += 1
        log_event("rate_limit.swept", removed=removed)
        return removed

    def active_callers(self) -> int:
        with self._lock:
            return len(self._windows)
