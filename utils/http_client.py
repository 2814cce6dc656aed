import asyncio
import logging
from typing import Optional

import httpx

from config.settings import Settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a page could not be downloaded.

    Wraps the underlying httpx error (available as ``__cause__``) and keeps its
    message unchanged. ``status_code`` is set when the remote answered with a
    non-success status.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PageFetcher:
    """Downloads HTML pages for metadata extraction"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout_ms = settings.fetch_timeout_ms
        self.timeout = settings.fetch_timeout_seconds
        self.max_redirects = settings.fetch_max_redirects
        self.user_agent = settings.user_agent
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=self.max_redirects,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )

    async def _get(self, url: str) -> str:
        async with self._client() as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text

    async def fetch(self, url: str) -> str:
        """
        GET ``url`` and return the response body as text.

        The timeout is a single deadline over the whole exchange, redirects
        and body download included.

        Args:
            url: An http(s) URL with an explicit scheme

        Raises:
            FetchError: on timeout, too many redirects, connection failure or
                a non-success status from the remote
        """
        logger.info(f"Fetching page: {url}")
        try:
            return await asyncio.wait_for(self._get(url), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(f"timeout of {self.timeout_ms}ms exceeded") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(str(e), status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            raise FetchError(str(e) or e.__class__.__name__) from e
