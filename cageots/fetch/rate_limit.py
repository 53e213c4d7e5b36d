"""Polite per-domain pacing of requests."""
import asyncio
import logging
import time
from collections import defaultdict
from typing import Dict
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class RateLimiter:
    """Keeps at least 1/rate seconds between two requests to the same domain."""

    def __init__(self, rate_per_second: float):
        self.rate_per_second = rate_per_second
        self.min_interval = 1.0 / rate_per_second if rate_per_second > 0 else 0
        self._last_request: Dict[str, float] = defaultdict(float)

    def _get_domain(self, url: str) -> str:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"

    async def acquire(self, url: str) -> None:
        """Wait if necessary to respect rate limit."""
        domain = self._get_domain(url)
        elapsed = time.monotonic() - self._last_request[domain]

        if self._last_request[domain] and elapsed < self.min_interval:
            wait_time = self.min_interval - elapsed
            logger.debug(f"Rate limit: waiting {wait_time:.2f}s before {domain}")
            await asyncio.sleep(wait_time)

        self._last_request[domain] = time.monotonic()
