"""
Crawl worker: the per-task loop that drains the frontier.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .extractor import LinkExtractor
from .resolver import resolve
from .url_frontier import URLFrontier
from ..utils.config import CrawlerConfig
from ..utils.errors import ResolutionError
from ..utils.logger import get_crawler_logger
from ..utils.monitoring import CrawlMetrics


@dataclass
class CrawlStats:
    """Statistics for crawl operations, shared by all workers of a run."""
    start_time: float
    pages_processed: int = 0
    links_discovered: int = 0
    links_rejected: int = 0
    links_queued: int = 0
    errors: int = 0

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    @property
    def pages_per_minute(self) -> float:
        elapsed_minutes = self.elapsed_time / 60
        return self.pages_processed / elapsed_minutes if elapsed_minutes > 0 else 0


class WorkerState(Enum):
    POLLING = 'polling'
    FETCHING = 'fetching'
    UPDATING = 'updating'
    DONE = 'done'


class CrawlWorker:
    """
    Repeatedly takes an address from the frontier, fetches it, resolves
    the links found there and offers them back, until the frontier says
    the crawl should stop.
    """

    def __init__(self, worker_id: str, frontier: URLFrontier, extractor: LinkExtractor,
                 config: CrawlerConfig, stats: CrawlStats,
                 metrics: Optional[CrawlMetrics] = None):
        self.worker_id = worker_id
        self.frontier = frontier
        self.extractor = extractor
        self.config = config
        self.stats = stats
        self.metrics = metrics
        self.state = WorkerState.POLLING
        self.logger = get_crawler_logger(__name__, worker_id=worker_id)

    async def run(self):
        """Run until the budget is spent, the frontier is exhausted or closed."""
        self.logger.debug("Worker started")
        if self.metrics:
            self.metrics.active_workers.inc()

        try:
            while True:
                self.state = WorkerState.POLLING
                if self.frontier.should_stop(self.config.max_links):
                    break

                url = await self.frontier.try_take_next()
                if url is None:
                    # Other workers may still be discovering links
                    await asyncio.sleep(self.config.idle_delay)
                    continue

                try:
                    await self._process_url(url)
                except Exception as e:
                    self.logger.error(f"Error processing {url}: {e}", exc_info=True)
                    self.stats.errors += 1
                    if self.metrics:
                        self.metrics.worker_errors.inc()

                await self.frontier.mark_visited(url)
                self.stats.pages_processed += 1
        finally:
            self.state = WorkerState.DONE
            if self.metrics:
                self.metrics.active_workers.dec()
            self.logger.debug("Worker finished")

    async def _process_url(self, url: str):
        self.state = WorkerState.FETCHING
        raw_links = await self.extractor.extract_links(url)

        self.state = WorkerState.UPDATING
        resolved = self.resolve_links(raw_links, url)
        queued = await self.frontier.offer_many(resolved)

        self.stats.links_discovered += len(raw_links)
        self.stats.links_queued += queued
        if self.metrics:
            self.metrics.record_links(len(raw_links), queued)

        self.logger.log_url_event(
            logging.DEBUG, url,
            f"Processed {url}: {len(raw_links)} links, {len(resolved)} resolved, {queued} new"
        )

    def resolve_links(self, raw_links: List[str], base: str) -> List[str]:
        """Resolve raw hrefs against ``base``, dropping any that fail."""
        resolved = []
        for link in raw_links:
            try:
                resolved.append(resolve(
                    link, base,
                    max_url_length=self.config.max_url_length,
                    allowed_schemes=self.config.allowed_schemes
                ))
            except ResolutionError as e:
                self.stats.links_rejected += 1
                if self.metrics:
                    self.metrics.record_rejected(e.reason)
                self.logger.debug(f"Dropped link {link!r} from {base}: {e.message}")
        return resolved
