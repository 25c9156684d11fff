# app/core/ratelimit.py
"""
Fixed-window rate limiter.

State is process-local; one instance lives on ``app.state.rate_limiter``.
"""
import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from fastapi import HTTPException, Request

from app.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimit:
    max_requests: int
    window_seconds: float


@dataclass
class RateLimitResult:
    allowed: bool
    retry_after: Optional[int] = None


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    def __init__(self, limits: Dict[str, RateLimit], clock: Callable[[], float] = time.monotonic):
        self.limits = dict(limits)
        self.clock = clock
        self._windows: Dict[Tuple[str, str], _Window] = {}

    @classmethod
    def from_settings(cls, cfg: Settings, clock: Callable[[], float] = time.monotonic) -> "RateLimiter":
        return cls(
            {
                "auth": RateLimit(*cfg.RATE_LIMIT_AUTH),
                "email": RateLimit(*cfg.RATE_LIMIT_EMAIL),
                "openai": RateLimit(*cfg.RATE_LIMIT_OPENAI),
            },
            clock=clock,
        )

    def check(self, limit_type: str, key: str) -> RateLimitResult:
        limit = self.limits[limit_type]
        now = self.clock()
        store_key = (limit_type, key)
        win = self._windows.get(store_key)

        if win is None or now >= win.reset_at:
            self._windows[store_key] = _Window(count=1, reset_at=now + limit.window_seconds)
            return RateLimitResult(allowed=True)

        if win.count >= limit.max_requests:
            return RateLimitResult(allowed=False, retry_after=max(1, math.ceil(win.reset_at - now)))

        win.count += 1
        return RateLimitResult(allowed=True)

    def hit(self, limit_type: str, key: str) -> None:
        """check() that raises 429 with Retry-After when the window is full."""
        result = self.check(limit_type, key)
        if not result.allowed:
            logger.warning("rate limit hit: type=%s key=%s retry_after=%s", limit_type, key, result.retry_after)
            raise HTTPException(
                status_code=429,
                detail="Too many requests. Please try again later.",
                headers={"Retry-After": str(result.retry_after)},
            )

    def sweep(self) -> int:
        now = self.clock()
        expired = [k for k, w in self._windows.items() if now >= w.reset_at]
        for k in expired:
            del self._windows[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


async def sweep_forever(limiter: RateLimiter, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        removed = limiter.sweep()
        if removed:
            logger.debug("rate limit sweep removed %d windows", removed)


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter
