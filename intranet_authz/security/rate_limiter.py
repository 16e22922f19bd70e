"""Per-connecting-address window limiter for unauthenticated audit ingestion. Metrics-integrated."""

import time
from typing import Optional, Protocol

from intranet_authz.observability.metrics import MetricsCollector


class RateLimitBackend(Protocol):
    """Backend for rate limit state (e.g. Redis). Injected."""

    async def incr_window(self, key: str, window_seconds: int) -> int: ...


class InMemoryRateLimitBackend:
    """In-memory sliding window: key -> list of timestamps. For tests or single-node."""

    def __init__(self) -> None:
        self._windows: dict[str, list[float]] = {}

    async def incr_window(self, key: str, window_seconds: int) -> int:
        now = time.monotonic()
        cutoff = now - window_seconds
        hits = [t for t in self._windows.get(key, []) if t > cutoff]
        hits.append(now)
        self._windows[key] = hits
        return len(hits)


class BootstrapRateLimiter:
    """
    Caps pre-authentication writes (failed-login logging) per client IP.
    Defaults mirror the login budget: 12 attempts per 15 minutes.
    """

    def __init__(
        self,
        backend: RateLimitBackend,
        requests_per_window: int = 12,
        window_seconds: int = 15 * 60,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self._backend = backend
        self._limit = requests_per_window
        self._window = window_seconds
        self._metrics = metrics
        self._key_prefix = "rate:bootstrap:"

    def _key(self, client_ip: str) -> str:
        return f"{self._key_prefix}{client_ip}"

    async def allow_request(self, client_ip: str) -> bool:
        """Count this request against the window. Returns True if still under the limit."""
        count = await self._backend.incr_window(self._key(client_ip), self._window)
        allowed = count <= self._limit
        if self._metrics is not None and not allowed:
            self._metrics.increment("bootstrap_rate_limited")
        return allowed
