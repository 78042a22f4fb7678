"""Call pacing for the public routing and geocoding services."""

import threading
import time
from typing import Callable, Optional

from .config import CONFIG


class Pacer:
    """Fixed pause between discovery directions.

    The pause waits on a cancel event when one is given, so cancelling a
    discovery does not have to sit out the remaining delay.
    """

    def __init__(self, delay: Optional[float] = None,
                 sleep: Optional[Callable[[float], None]] = None):
        self.delay = CONFIG["pacing_delay"] if delay is None else delay
        self._sleep = sleep

    def pause(self, cancel: Optional[threading.Event] = None) -> bool:
        """Wait out the delay. Returns False if cancelled while waiting."""
        if self.delay <= 0:
            return not (cancel and cancel.is_set())
        if self._sleep is not None:
            self._sleep(self.delay)
            return not (cancel and cancel.is_set())
        if cancel is not None:
            return not cancel.wait(self.delay)
        time.sleep(self.delay)
        return True


class RateLimiter:
    """Thread-safe token bucket shared by the external service clients"""

    def __init__(self, rate: Optional[float] = None, burst: Optional[int] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.rate = CONFIG["rate_limit_per_second"] if rate is None else rate
        self.burst = CONFIG["rate_limit_burst"] if burst is None else burst
        if self.rate <= 0 or self.burst < 1:
            raise ValueError("rate must be positive and burst at least 1")
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(self.burst)
        self._updated = clock()
        self._lock = threading.Lock()

    def _refill(self):
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate)
        self._updated = now

    def try_acquire(self) -> bool:
        """Take a token if one is available right now"""
        with self._lock:
            self._refill()
            if self._tokens >= 1:
                self._tokens -= 1
                return True
            return False

    def acquire(self) -> float:
        """Block until a token is available. Returns seconds spent waiting."""
        waited = 0.0
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= 1:
                    self._tokens -= 1
                    return waited
                wait = (1 - self._tokens) / self.rate
            self._sleep(wait)
            waited += wait
