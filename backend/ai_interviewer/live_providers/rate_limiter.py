import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class RateLimiter:
    """Keeps outbound model requests at least `min_interval_s` apart.

    The slot is reserved under a thread lock before sleeping, so callers
    running on different event loops (async_to_sync spins up its own) still
    observe the spacing.
    """

    def __init__(
        self,
        min_interval_s: float = 3.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval_s = min_interval_s
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_request_time: Optional[float] = None

    def _reserve(self) -> float:
        with self._lock:
            now = self._clock()
            if self._last_request_time is None:
                wait = 0.0
            else:
                wait = max(0.0, self._last_request_time + self.min_interval_s - now)
            self._last_request_time = now + wait
            return wait

    async def await_slot(self) -> None:
        wait = self._reserve()
        if wait > 0:
            logger.debug(f"Rate limiter: waiting {wait:.2f}s before next model request")
            await self._sleep(wait)

    def reset(self) -> None:
        with self._lock:
            self._last_request_time = None


_rate_limiter: Optional[RateLimiter] = None
_rate_limiter_lock = threading.Lock()


def get_rate_limiter(min_interval_s: Optional[float] = None) -> RateLimiter:
    """Process-wide limiter shared by every model client."""
    global _rate_limiter
    with _rate_limiter_lock:
        if _rate_limiter is None:
            if min_interval_s is None:
                from ..interviewer.config import PipelineConfig
                min_interval_s = PipelineConfig.from_env().min_request_interval_s
            _rate_limiter = RateLimiter(min_interval_s=min_interval_s)
            logger.info(f"✅ Initialized shared RateLimiter (min interval {min_interval_s:.2f}s)")
        return _rate_limiter
