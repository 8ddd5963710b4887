"""
Web page fetcher built on a shared aiohttp session.
"""

import asyncio
import aiohttp
import logging
import time
from typing import Optional, Dict
from dataclasses import dataclass
from aiohttp import ClientSession, ClientTimeout, ClientError

DEFAULT_REQUEST_TIMEOUT = 2.0
DEFAULT_MAX_CONTENT_BYTES = 10 * 1024 * 1024


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status_code: int
    content: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    error: Optional[str] = None
    fetch_time: float = 0.0
    content_type: Optional[str] = None
    encoding: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code == 200


class WebFetcher:
    """
    Fetches web pages with a bounded timeout and error handling.
    Transport failures are reported in the FetchResult, never raised.
    """

    def __init__(self, user_agent: str, request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 max_concurrent_requests: int = 10,
                 max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_concurrent_requests = max_concurrent_requests
        self.max_content_bytes = max_content_bytes

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

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult object containing the response data or error information
        """
        if self.session is None:
            await self.start()

        start_time = time.time()

        async with self.semaphore:
            try:
                self.stats['total_requests'] += 1

                async with self.session.get(url) as response:
                    fetch_time = time.time() - start_time

                    headers = dict(response.headers)
                    content_type = response.headers.get('content-type', '').lower()

                    if response.status != 200:
                        self.stats['failed_requests'] += 1
                        return FetchResult(
                            url=url,
                            status_code=response.status,
                            headers=headers,
                            content_type=content_type,
                            error=f"HTTP {response.status}",
                            fetch_time=fetch_time
                        )

                    # Only download text content
                    if not self._is_text_content(content_type):
                        self.logger.debug(f"Skipping non-text content: {url} ({content_type})")
                        return FetchResult(
                            url=url,
                            status_code=response.status,
                            headers=headers,
                            content_type=content_type,
                            error="Non-text content type",
                            fetch_time=fetch_time
                        )

                    content = await self._read_content_safely(response)

                    if content is not None:
                        self.stats['total_bytes_downloaded'] += len(content)
                        self.stats['successful_requests'] += 1

                    result = FetchResult(
                        url=url,
                        status_code=response.status,
                        content=content,
                        headers=headers,
                        content_type=content_type,
                        encoding=response.charset,
                        error=None if content is not None else "Unreadable content",
                        fetch_time=time.time() - start_time
                    )

                    self.logger.debug(f"Fetched {url}: {response.status} ({len(content) if content else 0} chars)")
                    return result

            except asyncio.TimeoutError:
                self.stats['failed_requests'] += 1
                error_msg = "Request timeout"
                self.logger.warning(f"Timeout fetching {url}")

            except ClientError as e:
                self.stats['failed_requests'] += 1
                error_msg = f"Client error: {str(e)}"
                self.logger.warning(f"Client error fetching {url}: {e}")

            except ValueError as e:
                # yarl rejects some URLs the resolver accepts
                self.stats['failed_requests'] += 1
                error_msg = f"Invalid URL: {str(e)}"
                self.logger.warning(f"Invalid URL {url}: {e}")

            return FetchResult(
                url=url,
                status_code=0,
                error=error_msg,
                fetch_time=time.time() - start_time
            )

    def _is_text_content(self, content_type: str) -> bool:
        """Check if content type is text-based. A missing header counts as text."""
        if not content_type:
            return True

        text_types = [
            'text/html',
            'text/plain',
            'text/xml',
            'application/xml',
            'application/xhtml+xml',
        ]

        return any(text_type in content_type for text_type in text_types)

    async def _read_content_safely(self, response) -> Optional[str]:
        """
        Read response content, giving up past max_content_bytes.

        Returns:
            Content string or None if too large or unreadable
        """
        max_size = self.max_content_bytes
        try:
            content_length = response.headers.get('content-length')
            if content_length and int(content_length) > max_size:
                self.logger.warning(f"Content too large ({content_length} bytes): {response.url}")
                return None

            content_bytes = b''
            async for chunk in response.content.iter_chunked(8192):
                content_bytes += chunk
                if len(content_bytes) > max_size:
                    self.logger.warning(f"Content exceeded size limit during reading: {response.url}")
                    return None

            encoding = response.charset or 'utf-8'
            try:
                return content_bytes.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                return content_bytes.decode('utf-8', errors='ignore')

        except (ClientError, asyncio.TimeoutError, ValueError) as e:
            self.logger.warning(f"Error reading content from {response.url}: {e}")
            return None

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
