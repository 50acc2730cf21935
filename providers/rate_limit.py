"""Request rate limiter shared by all mutations issued through one client."""

import asyncio
import logging
import time

from aiolimiter import AsyncLimiter

logger = logging.getLogger(__name__)


class RequestLimiter:
    """
    Rate limiter that blocks all requests when the remote service
    signals a rate limit (reactive) and throttles requests (proactive)
    using aiolimiter.

    Proactive limits - throttles requests to stay within API limits.
    Reactive limits - pauses all requests until a retry-after window passes.
    """

    def __init__(self, rate_limit: int = 50, rate_window: float = 1.0):
        self.limiter = AsyncLimiter(rate_limit, rate_window)
        self._blocked_until: float = 0

        logger.info(f"RequestLimiter initialized ({rate_limit} req / {rate_window}s)")

    async def wait_if_blocked(self) -> bool:
        """
        Wait if currently rate limited or throttle to meet quota.

        Returns:
            True if was reactively blocked and waited, False otherwise.
        """
        # 1. Reactive check: the block may be extended while we sleep
        waited_reactively = False
        while (wait_time := self.remaining_wait()) > 0:
            logger.warning(
                f"Request rate limit active (reactive), waiting {wait_time:.3f}s..."
            )
            await asyncio.sleep(wait_time)
            waited_reactively = True

        # 2. Proactive check: Acquire slot from aiolimiter
        async with self.limiter:
            return waited_reactively

    def set_blocked(self, seconds: float) -> None:
        """
        Block requests for the specified seconds (reactive).

        An existing longer block is kept.
        """
        self._blocked_until = max(self._blocked_until, time.monotonic() + seconds)
        logger.warning(f"Request rate limit set for {seconds:.3f}s (reactive)")

    def is_blocked(self) -> bool:
        """Check if currently reactively blocked."""
        return time.monotonic() < self._blocked_until

    def remaining_wait(self) -> float:
        """Get remaining reactive wait time in seconds."""
        return max(0.0, self._blocked_until - time.monotonic())
