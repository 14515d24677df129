"""
Registration rate limiter - one successful signup per IP per window.

Entries are keyed by client IP and hold the timestamp of the last
*successful* registration from that address.

A request that passes check() holds a reservation for its IP until it
either succeeds (record) or fails (release). While the reservation is
held, further requests from the same IP are denied, so simultaneous
submissions cannot all slip through before the first one is recorded.
Failed validation, failed challenges and duplicates release the
reservation and never consume the slot.

State lives in process memory and is lost on restart. A deployment with
several app instances would need a shared expiring store instead.
"""

import logging
import math
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 600


@dataclass(frozen=True)
class RateLimitDecision:
    """Answer from RegistrationRateLimiter.check()."""

    allowed: bool
    retry_after_seconds: int = 0

    @property
    def retry_after_minutes(self) -> int:
        return math.ceil(self.retry_after_seconds / 60)


class RegistrationRateLimiter:
    """
    In-memory IP -> last registration timestamp map, plus the set of IPs
    with a registration in flight.

    All access goes through a lock, so it is safe to share one instance
    between the threadpool workers that serve requests. Timestamps are
    plain floats in seconds, supplied by the caller.
    """

    def __init__(self, window_seconds: int = DEFAULT_WINDOW_SECONDS) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self._window = float(window_seconds)
        self._last_seen: dict[str, float] = {}
        self._in_flight: set[str] = set()
        self._lock = threading.Lock()

    @property
    def window_seconds(self) -> int:
        return int(self._window)

    def __len__(self) -> int:
        """Number of IPs with a recorded registration inside the window."""
        with self._lock:
            return len(self._last_seen)

    def is_reserved(self, ip: str) -> bool:
        with self._lock:
            return ip in self._in_flight

    def check(self, ip: str, now: float) -> RateLimitDecision:
        """
        Decide whether `ip` may register at time `now`, reserving the IP
        when it may.

        An allowed decision must be followed by exactly one record() or
        release() for the same IP. Sweeps stale entries first so the map
        stays bounded without a background task.
        """
        with self._lock:
            self._sweep_locked(now)
            if ip in self._in_flight:
                # Outcome unknown yet; assume it will succeed
                return RateLimitDecision(
                    allowed=False, retry_after_seconds=math.ceil(self._window)
                )
            last = self._last_seen.get(ip)
            if last is not None and now - last < self._window:
                remaining = self._window - (now - last)
                return RateLimitDecision(allowed=False, retry_after_seconds=math.ceil(remaining))
            self._in_flight.add(ip)
            return RateLimitDecision(allowed=True)

    def record(self, ip: str, now: float) -> None:
        """Mark a successful registration from `ip` at `now` and drop its reservation."""
        with self._lock:
            self._in_flight.discard(ip)
            previous = self._last_seen.get(ip)
            # Never move an entry backwards when two requests finish out of order
            if previous is None or now > previous:
                self._last_seen[ip] = now

    def release(self, ip: str) -> None:
        """Drop the reservation for `ip` without consuming its slot."""
        with self._lock:
            self._in_flight.discard(ip)

    def sweep(self, now: float) -> int:
        """Drop entries older than the window. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(now)

    def _sweep_locked(self, now: float) -> int:
        stale = [ip for ip, ts in self._last_seen.items() if now - ts >= self._window]
        for ip in stale:
            del self._last_seen[ip]
        if stale:
            logger.debug("Rate limit sweep removed %d entries", len(stale))
        return len(stale)
