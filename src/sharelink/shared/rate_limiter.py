# src/sharelink/shared/rate_limiter.py
"""
Rate Limiter - Abuse Prevention and Resource Protection

This module implements per-client fixed-window request counting for the web
routes. Each named policy (general traffic, form submission, authentication,
file retrieval) gets its own independent limiter, and a background sweep
thread discards expired windows so memory stays bounded under an unbounded
population of distinct clients.

Files that USE this module:
- sharelink.adapters.web.governor (rate_limited wrapper and client keys)
- sharelink.adapters.web.server (builds the governor, starts the sweeper)
- sharelink.application.health (tracked client counts)
- tests.test_rate_limiter (unit tests)

Files that this module USES:
- sharelink.domain.models (RateWindowEntry)
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

from sharelink.domain.models import RateWindowEntry

log = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for rate limiting."""
    max_requests: int
    time_window: int  # in seconds

    def __post_init__(self) -> None:
        if self.max_requests < 1 or self.time_window < 1:
            raise ValueError("max_requests and time_window must be positive")


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one rate limit check."""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds
    now: float

    @property
    def retry_after(self) -> int:
        """Whole seconds until the window resets (never negative)."""
        return max(0, math.ceil(self.reset_at - self.now))


class RateLimiter:
    """Fixed-window counter keyed by client identity; thread-safe."""

    def __init__(self, config: RateLimitConfig, clock: Clock = time.time):
        self.config = config
        self._clock = clock
        self._entries: Dict[str, RateWindowEntry] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> RateLimitDecision:
        """
        Count a request for an identifier and decide whether it is allowed.

        A missing or expired window is replaced with a fresh one (count 1).
        A full window denies without incrementing.

        Args:
            identifier: Client key

        Returns:
            RateLimitDecision with remaining quota and reset time
        """
        limit = self.config.max_requests
        with self._lock:
            now = self._clock()
            entry = self._entries.get(identifier)

            if entry is None or entry.is_expired(now):
                entry = RateWindowEntry(
                    client_key=identifier,
                    count=1,
                    window_reset_at=now + self.config.time_window,
                )
                self._entries[identifier] = entry
                return RateLimitDecision(True, limit, limit - 1, entry.window_reset_at, now)

            if entry.count >= limit:
                return RateLimitDecision(False, limit, 0, entry.window_reset_at, now)

            entry.count += 1
            return RateLimitDecision(True, limit, limit - entry.count, entry.window_reset_at, now)

    def sweep(self) -> int:
        """
        Delete every entry whose window has expired.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for k in expired:
                del self._entries[k]
        return len(expired)

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._entries)


# Predefined rate limit configurations
RATE_LIMITS: Dict[str, RateLimitConfig] = {
    "general": RateLimitConfig(max_requests=100, time_window=15 * 60),  # 100 per 15 minutes
    "form_submission": RateLimitConfig(max_requests=50, time_window=15 * 60),  # bursty form posts
    "auth": RateLimitConfig(max_requests=5, time_window=15 * 60),  # rare logins
    "file_retrieval": RateLimitConfig(max_requests=20, time_window=60 * 60),  # 20 per hour
}


class RateGovernor:
    """
    One independent RateLimiter per named policy plus the expiry sweep.

    The sweep thread only ever deletes expired windows, so it cannot undo a
    live increment.
    """

    def __init__(
        self,
        policies: Optional[Mapping[str, RateLimitConfig]] = None,
        clock: Clock = time.time,
        sweep_interval: float = 300,
    ):
        self.limiters: Dict[str, RateLimiter] = {
            name: RateLimiter(config, clock=clock)
            for name, config in (policies if policies is not None else RATE_LIMITS).items()
        }
        self.sweep_interval = sweep_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def limiter(self, policy: str) -> RateLimiter:
        """
        Get the limiter for a policy.

        Raises:
            KeyError: If the policy is not configured
        """
        try:
            return self.limiters[policy]
        except KeyError:
            raise KeyError(f"Unknown rate limit policy: {policy!r}") from None

    def check(self, policy: str, identifier: str) -> RateLimitDecision:
        return self.limiter(policy).check(identifier)

    def sweep(self) -> int:
        """Sweep every limiter; returns the total number of removed entries."""
        removed = sum(limiter.sweep() for limiter in self.limiters.values())
        if removed:
            log.debug("Rate limit sweep removed %d expired windows", removed)
        return removed

    def start_sweeper(self) -> None:
        """Start the background sweep thread (idempotent)."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run_sweeper, name="rate-limit-sweeper", daemon=True)
        self._thread.start()
        log.info("Rate limit sweeper started (interval=%ss)", self.sweep_interval)

    def stop_sweeper(self, timeout: float = 5.0) -> None:
        """Signal the sweep thread to stop and wait for it."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            log.info("Rate limit sweeper stopped")

    def _run_sweeper(self) -> None:
        while not self._stop.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception as e:
                log.error("Rate limit sweep failed: %s", e, exc_info=True)
