"""
Page fetchers: the retrieval contract used by the crawler and a live HTTP implementation.
"""

import abc
import asyncio
import aiohttp
import logging
import time
from typing import Dict, List, Optional, Tuple
from aiohttp import ClientSession, ClientTimeout, ClientError

from .parser import ContentParser


class FetchError(Exception):
    """Raised by a fetcher when a URL cannot be retrieved."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class Fetcher(abc.ABC):
    """
    Retrieval capability consumed by the crawl coordinator.

    Implementations return the page content and its outbound links in
    document order, or raise FetchError.
    """

    @abc.abstractmethod
    async def fetch(self, url: str) -> Tuple[str, List[str]]:
        """Fetch a single URL and return (content, links)."""


class WebFetcher(Fetcher):
    """
    Fetches web pages over HTTP and extracts their title and links.
    """

    TEXT_TYPES = (
        'text/html',
        'text/plain',
        'text/xml',
        'application/xml',
        'application/xhtml+xml',
    )

    def __init__(self, user_agent: str, request_timeout: int = 30,
                 max_concurrent_requests: int = 10,
                 parser: Optional[ContentParser] = None,
                 max_content_size: int = 10 * 1024 * 1024):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_concurrent_requests = max_concurrent_requests
        self.max_content_size = max_content_size
        self.parser = parser or ContentParser()

        self.logger = logging.getLogger(__name__)

        # Session management
        self.session: Optional[ClientSession] = None
        self.semaphore = asyncio.Semaphore(max_concurrent_requests)

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)
            headers = {'User-Agent': self.user_agent}

            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers=headers,
                connector=aiohttp.TCPConnector(
                    limit=self.max_concurrent_requests * 2,
                    limit_per_host=10,
                    ttl_dns_cache=300,
                    use_dns_cache=True
                )
            )
            self.logger.info("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.info("WebFetcher session closed")

    async def fetch(self, url: str) -> Tuple[str, List[str]]:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            Tuple of (page title or empty string, outbound links)

        Raises:
            FetchError: if the page could not be retrieved or is not text
        """
        if self.session is None:
            raise FetchError(f"fetcher not started: {url}", url=url)

        start_time = time.time()

        async with self.semaphore:
            self.stats['total_requests'] += 1
            try:
                async with self.session.get(url) as response:
                    if response.status >= 400:
                        raise FetchError(f"HTTP {response.status}: {url}", url=url)

                    content_type = response.headers.get('content-type', '').lower()
                    if not self._is_text_content(content_type):
                        raise FetchError(f"non-text content ({content_type or 'unknown'}): {url}", url=url)

                    html = await self._read_content_safely(response)
                    final_url = str(response.url)

            except FetchError:
                self.stats['failed_requests'] += 1
                raise

            except asyncio.TimeoutError:
                self.stats['failed_requests'] += 1
                self.logger.warning(f"Timeout fetching {url}")
                raise FetchError(f"request timeout: {url}", url=url)

            except ClientError as e:
                self.stats['failed_requests'] += 1
                self.logger.warning(f"Client error fetching {url}: {e}")
                raise FetchError(f"client error: {e}", url=url) from e

        self.stats['successful_requests'] += 1
        self.stats['total_bytes_downloaded'] += len(html)

        page = self.parser.parse(final_url, html)
        self.logger.debug(f"Fetched {url} in {time.time() - start_time:.2f}s "
                          f"({len(html)} chars, {len(page.links)} links)")
        return page.title or "", page.links

    def _is_text_content(self, content_type: str) -> bool:
        """Check if content type is text-based."""
        return any(text_type in content_type for text_type in self.TEXT_TYPES)

    async def _read_content_safely(self, response) -> str:
        """
        Read response content with a size limit.

        Raises:
            FetchError: if the body exceeds max_content_size
        """
        content_length = response.headers.get('content-length')
        try:
            declared_size = int(content_length) if content_length else None
        except ValueError:
            # Malformed header; the chunked read below still enforces the limit
            self.logger.debug(f"Ignoring invalid content-length {content_length!r}: {response.url}")
            declared_size = None

        if declared_size is not None and declared_size > self.max_content_size:
            raise FetchError(f"content too large ({content_length} bytes): {response.url}",
                             url=str(response.url))

        # Read content in chunks to respect size limit
        content_bytes = b''
        async for chunk in response.content.iter_chunked(8192):
            content_bytes += chunk
            if len(content_bytes) > self.max_content_size:
                raise FetchError(f"content exceeded size limit: {response.url}",
                                 url=str(response.url))

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            return content_bytes.decode('utf-8', errors='ignore')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
