"""
Pacing between client calls in a batch.

WhatsApp flags accounts that fire lookups back to back, so batch checks
wait on a ThrottlePolicy after every client call. Tests inject NoDelay.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional


class ThrottlePolicy(ABC):
    """Awaited after each client call in a batch."""

    @abstractmethod
    async def wait(self) -> None:
        raise NotImplementedError


class NoDelay(ThrottlePolicy):
    """Never waits."""

    async def wait(self) -> None:
        return None


class FixedDelay(ThrottlePolicy):
    """Sleep a fixed interval after every call."""

    def __init__(self, seconds: float = 0.5):
        if seconds < 0:
            raise ValueError("delay must not be negative")
        self.seconds = seconds

    async def wait(self) -> None:
        await asyncio.sleep(self.seconds)

    def __repr__(self) -> str:
        return f"FixedDelay(seconds={self.seconds})"


class TokenBucket(ThrottlePolicy):
    """
    Token bucket pacing.

    Allows bursts of up to `capacity` calls, refilled at `rate` tokens per
    second. wait() consumes one token, sleeping until one is available.
    """

    def __init__(
        self,
        rate: float,
        capacity: int = 1,
        clock: Optional[Callable[[], float]] = None,
    ):
        if rate <= 0:
            raise ValueError("rate must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.rate = rate
        self.capacity = capacity
        self._clock = clock or time.monotonic
        self._tokens = float(capacity)
        self._updated = self._clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
        self._updated = now

    async def wait(self) -> None:
        self._refill()
        if self._tokens < 1:
            deficit = 1 - self._tokens
            await asyncio.sleep(deficit / self.rate)
            self._refill()
        self._tokens = max(0.0, self._tokens - 1)

    def __repr__(self) -> str:
        return f"TokenBucket(rate={self.rate}, capacity={self.capacity})"
