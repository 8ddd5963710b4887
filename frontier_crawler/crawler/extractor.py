"""
Page link extraction: fetch a page and return the raw links it contains.
"""

import logging
from typing import List, Optional

from .fetcher import FetchResult
from .parser import LinkParser
from ..utils.monitoring import CrawlMetrics


def _failure_reason(result: FetchResult) -> str:
    if result.status_code == 0:
        return 'transport'
    if result.status_code != 200:
        return 'http_status'
    return 'content'


class LinkExtractor:
    """
    Combines the transport and the markup parser.

    Any failure to fetch or parse a page is logged and reported as a page
    with no links; nothing is raised to the caller.
    """

    def __init__(self, fetcher, parser: Optional[LinkParser] = None,
                 metrics: Optional[CrawlMetrics] = None):
        self.fetcher = fetcher
        self.parser = parser or LinkParser()
        self.metrics = metrics
        self.logger = logging.getLogger(__name__)

    async def extract_links(self, base: str) -> List[str]:
        """
        Fetch ``base`` and return every anchor href found on it, unresolved.
        """
        result: FetchResult = await self.fetcher.fetch(base)

        if not result.ok or result.content is None:
            reason = _failure_reason(result)
            self.logger.warning(f"Could not find links on {base}: {result.error or 'empty body'} "
                                f"(status {result.status_code})")
            if self.metrics:
                self.metrics.record_fetch(False, result.fetch_time, reason)
            return []

        try:
            links = self.parser.extract_anchors(result.content)
        except Exception as e:
            self.logger.error(f"Error parsing links from {base}: {e}")
            if self.metrics:
                self.metrics.record_fetch(False, result.fetch_time, 'parse')
            return []

        if self.metrics:
            self.metrics.record_fetch(True, result.fetch_time)
        return links
