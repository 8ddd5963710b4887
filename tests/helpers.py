"""
Test doubles shared by the crawler tests.
"""

import asyncio
from typing import Dict, List, Optional

from frontier_crawler.crawler.fetcher import FetchResult


class FakeFetcher:
    """
    In-memory transport keyed by URL.

    ``pages`` maps a URL to its HTML body; ``errors`` maps a URL to either a
    status code or an error message. Unknown URLs answer 404.
    """

    def __init__(self, pages: Optional[Dict[str, str]] = None,
                 errors: Optional[Dict[str, object]] = None, delay: float = 0.0):
        self.pages = pages or {}
        self.errors = errors or {}
        self.delay = delay
        self.requests: List[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.requests.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)

        if url in self.errors:
            error = self.errors[url]
            if isinstance(error, int):
                return FetchResult(url=url, status_code=error, error=f"HTTP {error}")
            return FetchResult(url=url, status_code=0, error=str(error))

        if url in self.pages:
            return FetchResult(url=url, status_code=200, content=self.pages[url],
                               content_type='text/html')

        return FetchResult(url=url, status_code=404, error="HTTP 404")


def links_page(*hrefs: str) -> str:
    anchors = ''.join(f'<a href="{href}">link</a>' for href in hrefs)
    return f"<html><body>{anchors}</body></html>"
