import threading
import time
from typing import Dict, List

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    """Sliding window per key; state lives in this process only."""

    # Full sweeps for idle keys happen at most this often (seconds)
    SWEEP_INTERVAL = 60.0

    def __init__(self) -> None:
        self._store: Dict[str, List[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = time.time()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = time.time()
        window_start = now - window_seconds
        with self._lock:
            if now - self._last_sweep >= self.SWEEP_INTERVAL:
                self._sweep(window_start)
                self._last_sweep = now
            times = [t for t in self._store.get(key, []) if t > window_start]
            if len(times) >= max_requests:
                self._store[key] = times
                return False
            times.append(now)
            self._store[key] = times
            return True

    def _sweep(self, window_start: float) -> None:
        # drop keys with no hit left inside the window
        idle = [k for k, times in self._store.items() if not times or times[-1] <= window_start]
        for k in idle:
            del self._store[k]

    def __len__(self) -> int:
        return len(self._store)
