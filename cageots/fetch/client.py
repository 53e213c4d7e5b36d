"""HTTP client owning the session of a single run."""
import logging
from typing import Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
)

from cageots.auth.login_detector import is_login_page
from cageots.auth.session import Authenticator
from cageots.config import config
from cageots.errors import AuthenticationError, AuthErrorKind
from cageots.fetch.endpoints import order_history_url
from cageots.fetch.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0"
)


def is_retryable_status(response: httpx.Response) -> bool:
    """Check if status code is retryable."""
    return response.status_code in (429, 500, 502, 503, 504)


def _is_retryable_error(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return is_retryable_status(exc.response)
    return False


class FetchClient:
    """Cookie-carrying client: login, listing fetch and invoice downloads.

    One instance per run. The cookie jar is dropped when the context exits.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rate_per_second: Optional[float] = None,
    ):
        self.base_url = base_url or config.BASE_URL
        self.client = httpx.AsyncClient(
            http2=transport is None,
            timeout=config.TIMEOUT,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )
        self.rate_limiter = RateLimiter(
            config.RATE_PER_DOMAIN if rate_per_second is None else rate_per_second
        )
        self.authenticator = Authenticator(self.client, base_url=self.base_url)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    async def login(self, username: str, password: str) -> None:
        """Open the session or raise AuthenticationError."""
        await self.authenticator.login(username, password)

    @retry(
        stop=stop_after_attempt(config.MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    )
    async def fetch(self, url: str) -> httpx.Response:
        """GET a URL with the session cookies, pacing and retries."""
        await self.rate_limiter.acquire(url)
        try:
            response = await self.client.get(url)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            logger.warning(f"Network error for {url}: {e}")
            raise

        if is_retryable_status(response):
            logger.warning(f"Retryable status {response.status_code} for {url}")
        response.raise_for_status()
        return response

    async def fetch_order_history(self) -> str:
        """Fetch the order history page HTML."""
        if not self.authenticator.is_authenticated():
            raise AuthenticationError(AuthErrorKind.SESSION_EXPIRED, "Not authenticated. Call login() first.")

        url = order_history_url(self.base_url)
        response = await self.fetch(url)
        if is_login_page(response.text, str(response.url)):
            logger.error(f"Redirected to login page while fetching {url}")
            raise AuthenticationError(AuthErrorKind.SESSION_EXPIRED)
        return response.text

    async def download(self, url: str) -> bytes:
        """Download an invoice file with the session cookies."""
        response = await self.fetch(url)
        if is_login_page(response.text if _is_text(response) else None, str(response.url)):
            raise AuthenticationError(AuthErrorKind.SESSION_EXPIRED)
        return response.content


def _is_text(response: httpx.Response) -> bool:
    return response.headers.get("content-type", "").startswith("text/")
