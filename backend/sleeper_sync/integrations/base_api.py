import asyncio
import httpx
from typing import Any, Optional
from sleeper_sync.config import settings
from sleeper_sync.exceptions import HttpError, ExhaustedRetries, is_not_found
import logging

logger = logging.getLogger(__name__)

RATE_LIMITED = 429

class BaseAPIClient:
    """Base class for API integrations with retry and exponential backoff"""

    def __init__(
        self,
        base_url: str,
        max_retries: int = settings.max_retries,
        initial_backoff: float = settings.initial_backoff,
        timeout: float = settings.request_timeout,
        session: Optional[httpx.AsyncClient] = None
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be zero or more")

        self.base_url = base_url.rstrip('/')
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.timeout = timeout
        self.session = session or httpx.AsyncClient()

    async def _make_request(self, endpoint: str) -> Any:
        """GET an endpoint relative to the base URL"""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        return await self.fetch(url)

    async def fetch(self, url: str) -> Any:
        """
        GET a URL and return the decoded JSON body.

        Rate limited (429) and failed requests are retried up to max_retries
        times, waiting initial_backoff seconds before the first retry and
        doubling the wait after each one. When the last attempt was rate
        limited ExhaustedRetries is raised, otherwise the last error is.
        """
        attempts = self.max_retries + 1
        backoff = self.initial_backoff
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                await asyncio.sleep(backoff)
                backoff *= 2

            try:
                response = await self.session.get(url, timeout=self.timeout)

                if response.status_code == RATE_LIMITED:
                    last_error = ExhaustedRetries(url, attempt)
                    logger.warning(f"Rate limited on {url} (attempt {attempt}/{attempts})")
                    continue

                if not response.is_success:
                    raise HttpError(response.status_code, url)

                return response.json()

            except (httpx.HTTPError, HttpError, ValueError) as e:
                last_error = e
                if attempt < attempts:
                    # Missing seasons and future weeks come back as 404
                    log = logger.debug if is_not_found(e) else logger.warning
                    log(f"Request to {url} failed (attempt {attempt}/{attempts}): {e}")

        raise last_error

    async def close(self):
        """Close the HTTP session"""
        await self.session.aclose()
