"""Rate limiter for LLM completion calls."""

import asyncio
import time
from typing import Awaitable, Callable, Optional
from pydantic import BaseModel, Field

from src.utils.generation_config import GenerationConfig
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

WINDOW_SECONDS = 60.0


class RateLimitConfig(BaseModel):
    """Rate limit configuration."""
    max_requests_per_minute: int = Field(
        default_factory=lambda: GenerationConfig.LLM_MAX_REQUESTS_PER_MINUTE,
        gt=0,
    )

    @property
    def min_interval_seconds(self) -> float:
        """Minimum spacing between two permits."""
        return WINDOW_SECONDS / self.max_requests_per_minute


class RateLimitState(BaseModel):
    """Current rate limit state."""
    requests_in_window: int = 0
    window_reset_at: Optional[float] = None
    last_request_at: Optional[float] = None
    total_wait_seconds: float = 0.0


class RateLimiter:
    """
    Per-minute request ceiling with minimum spacing between requests.

    State is owned by the instance; ``clock`` and ``sleep`` are injectable so
    pacing can be tested without waiting.
    """

    def __init__(
        self,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or RateLimitConfig()
        self.state = RateLimitState()
        self._clock = clock
        self._sleep = sleep

    async def _wait(self, seconds: float, reason: str) -> None:
        if seconds <= 0:
            return
        logger.debug(
            "Rate limiter waiting",
            wait_seconds=round(seconds, 3),
            reason=reason,
            requests_in_window=self.state.requests_in_window,
        )
        self.state.total_wait_seconds += seconds
        await self._sleep(seconds)

    def _start_window(self, now: float) -> None:
        self.state.requests_in_window = 0
        self.state.window_reset_at = now + WINDOW_SECONDS

    async def acquire(self) -> None:
        """Block until one more request may be sent, then record it."""
        now = self._clock()

        if self.state.window_reset_at is None or now >= self.state.window_reset_at:
            self._start_window(now)

        if self.state.requests_in_window >= self.config.max_requests_per_minute:
            await self._wait(self.state.window_reset_at - now, reason="window_full")
            now = self._clock()
            self._start_window(now)

        if self.state.last_request_at is not None:
            since_last = now - self.state.last_request_at
            if since_last < self.config.min_interval_seconds:
                await self._wait(self.config.min_interval_seconds - since_last, reason="min_interval")
                now = self._clock()

        self.state.last_request_at = now
        self.state.requests_in_window += 1

    def status(self) -> dict:
        """Current counters, for logging."""
        return {
            "max_requests_per_minute": self.config.max_requests_per_minute,
            "requests_in_window": self.state.requests_in_window,
            "total_wait_seconds": round(self.state.total_wait_seconds, 3),
        }
