"""
Rate limiting. In-memory sliding window per key (e.g. per IP).
Used for POST /login and POST /register to slow down credential guessing and account spraying.
Keys whose window has emptied are dropped, so memory tracks recent clients only.
"""
import math
import threading
import time

_WINDOW_SECONDS = 60


class SlidingWindowLimiter:
    def __init__(self, limit: int, window_seconds: int = _WINDOW_SECONDS):
        self.limit = limit
        self.window_seconds = window_seconds
        self._store: dict[str, list[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = time.monotonic()

    def _sweep(self, cutoff: float) -> None:
        """Drop keys with no request inside the window. Caller holds the lock."""
        stale = [key for key, timestamps in self._store.items() if not timestamps or timestamps[-1] <= cutoff]
        for key in stale:
            del self._store[key]

    def check_and_consume(self, key: str) -> tuple[bool, int | None]:
        """
        Check if the key is under the limit for the sliding window; if so, record this request.
        Returns (allowed, retry_after_seconds). When not allowed, retry_after_seconds is the
        suggested Retry-After value (>= 1).
        """
        if self.limit <= 0:
            return True, None
        now = time.monotonic()
        cutoff = now - self.window_seconds
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now
            timestamps = [t for t in self._store.get(key, ()) if t > cutoff]
            if len(timestamps) >= self.limit:
                self._store[key] = timestamps
                oldest = timestamps[0]
                retry_after = max(1, math.ceil(self.window_seconds - (now - oldest)))
                return False, retry_after
            timestamps.append(now)
            self._store[key] = timestamps
            return True, None

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._store)

    def reset(self) -> None:
        with self._lock:
            self._store.clear()
