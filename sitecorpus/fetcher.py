"""
Page Fetcher
Single-attempt HTML fetch over a shared aiohttp session.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from .dom import Document, load_document
from .errors import FetchFailed, ParseFailed
from .run_config import CrawlerRunConfig
from .utils import extract_hostname

logger = logging.getLogger(__name__)


class PageFetcher:
    """
    Fetches pages and parses them into Documents.

    One ``aiohttp.ClientSession`` is kept for the fetcher's lifetime, so
    cookies set by the site are sent back on later same-site requests.
    """

    ACCEPT_HEADER = 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8'

    def __init__(
        self,
        config: CrawlerRunConfig = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize the fetcher.

        Args:
            config: Run configuration (timeouts, user agent, cookies, parser)
            session: Externally managed session; not closed by the fetcher
        """
        self.config = config or CrawlerRunConfig()
        self._session = session
        self._owns_session = session is None

    async def open(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
                headers={
                    'User-Agent': self.config.user_agent,
                    'Accept': self.ACCEPT_HEADER,
                    'Accept-Language': 'en-US,en;q=0.9',
                },
                cookies=dict(self.config.cookies),
            )
            self._owns_session = True

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def __aenter__(self) -> 'PageFetcher':
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch(self, url: str, allow_offsite: bool = False) -> Document:
        """
        Fetch one page, following redirects.

        Args:
            url: Absolute URL to fetch
            allow_offsite: Accept a redirect that ends on another host

        Returns:
            Parsed Document whose ``url`` is the final URL after redirects

        Raises:
            FetchFailed: Non-2xx status, network error or off-site redirect
            ParseFailed: Non-HTML response or unparseable body
        """
        await self.open()

        logger.debug(f"[FETCH] {url}")
        try:
            async with self._session.get(url, allow_redirects=True) as response:
                final_url = str(response.url)
                if final_url != url:
                    logger.debug(f"[REDIRECT] {url} → {final_url}")
                if not allow_offsite and extract_hostname(final_url) != extract_hostname(url):
                    raise FetchFailed(url, f"Redirected off-site to {final_url}")

                if not 200 <= response.status < 300:
                    raise FetchFailed(url, f"HTTP {response.status}", status=response.status)

                content_type = response.headers.get('Content-Type', '')
                if not self._is_html(content_type):
                    raise ParseFailed(url, f"Not HTML content ({content_type})")

                html = await response.text(errors='replace')
        except asyncio.TimeoutError as e:
            raise FetchFailed(url, "Request timeout") from e
        except aiohttp.ClientError as e:
            raise FetchFailed(url, f"Network error: {e}") from e

        return load_document(html, final_url, parser=self.config.html_parser)

    @staticmethod
    def _is_html(content_type: str) -> bool:
        """Accept text/html, xhtml, or a missing content type."""
        ct_lower = content_type.lower()
        return 'text/html' in ct_lower or 'xhtml' in ct_lower or not content_type
