"""
Crawler scheduler that coordinates the worker pool and the shared frontier.
"""

import asyncio
import logging
import time
from typing import List, Optional, Set

from .extractor import LinkExtractor
from .fetcher import WebFetcher
from .parser import LinkParser
from .resolver import parse_starting_url
from .url_frontier import URLFrontier, PopPolicy
from .worker import CrawlWorker, CrawlStats
from ..utils.config import Config
from ..utils.monitoring import CrawlMetrics


class CrawlerScheduler:
    """
    Main scheduler that coordinates all crawler components.

    Creates one frontier per run, spawns the workers and the optional status
    reporter, waits for all of them and returns the visited set.
    """

    def __init__(self, config: Config, fetcher=None, parser: Optional[LinkParser] = None,
                 metrics: Optional[CrawlMetrics] = None):
        self.config = config
        self.logger = logging.getLogger(__name__)

        # A fetcher passed in is owned by the caller
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher
        self.parser = parser or LinkParser()
        self.metrics = metrics or CrawlMetrics(
            enable_server=config.monitoring.metrics_enabled,
            prometheus_port=config.monitoring.prometheus_port
        )

        # Crawl state
        self.frontier: Optional[URLFrontier] = None
        self.stats = CrawlStats(start_time=time.time())
        self.is_running = False
        self.workers: List[asyncio.Task] = []

    def _create_fetcher(self, crawler) -> WebFetcher:
        return WebFetcher(
            user_agent=crawler.user_agent,
            request_timeout=crawler.request_timeout,
            max_concurrent_requests=crawler.worker_count,
            max_content_bytes=crawler.max_content_bytes
        )

    async def run(self, starting_url: Optional[str] = None, worker_count: Optional[int] = None,
                  max_links: Optional[int] = None, log_status: Optional[bool] = None) -> Set[str]:
        """
        Crawl from ``starting_url`` until more than ``max_links`` pages are visited.

        Arguments left as None fall back to the crawler configuration; they
        apply to this run only.

        Returns:
            The set of addresses that were fetched

        Raises:
            InvalidStartingUrlError: The starting URL cannot be parsed
        """
        config = self.config.with_overrides(
            starting_url=starting_url,
            worker_count=worker_count,
            max_links=max_links,
            log_status=log_status
        )
        crawler = config.crawler

        seed = parse_starting_url(crawler.starting_url, crawler.max_url_length,
                                  crawler.allowed_schemes)

        if self.is_running:
            raise RuntimeError("Crawler is already running")

        self.is_running = True
        self.stats = CrawlStats(start_time=time.time())
        self.frontier = URLFrontier(
            pop_policy=PopPolicy(crawler.pop_policy),
            dedupe_pending=crawler.dedupe_pending
        )
        await self.frontier.seed(seed)

        if self.fetcher is None:
            self.fetcher = self._create_fetcher(crawler)
        if self._owns_fetcher:
            await self.fetcher.start()

        self.metrics.start_server()
        extractor = LinkExtractor(self.fetcher, self.parser, self.metrics)

        try:
            self.workers = []
            for i in range(crawler.worker_count):
                worker = CrawlWorker(f"worker-{i}", self.frontier, extractor,
                                     crawler, self.stats, self.metrics)
                self.workers.append(asyncio.create_task(worker.run(), name=f"worker-{i}"))

            status_task = None
            if crawler.log_status:
                status_task = asyncio.create_task(self._status_reporter(crawler), name="status-reporter")

            self.logger.info(f"Started crawling {seed} with {crawler.worker_count} workers, "
                             f"max_links={crawler.max_links}")

            results = await asyncio.gather(*self.workers, return_exceptions=True)
            for task, result in zip(self.workers, results):
                if isinstance(result, BaseException):
                    self.logger.error(f"Task {task.get_name()} failed: {result!r}")

            if status_task:
                status_task.cancel()
                await asyncio.gather(status_task, return_exceptions=True)

            self._log_final_stats()
            return set(self.frontier.visited_snapshot())
        finally:
            self.is_running = False
            await self._cleanup_workers()
            if self._owns_fetcher:
                await self.fetcher.close()

    async def _status_reporter(self, crawler):
        """Periodically report visited and pending counts until the crawl stops."""
        while not self.frontier.should_stop(crawler.max_links):
            visited = self.frontier.size_visited()
            pending = self.frontier.size_pending()
            self.metrics.update_frontier(visited, pending)

            print(f"Number of links visited: {visited}")
            print(f"Number of links in the queue: {pending}")
            self.logger.info(f"Crawl Progress: Visited={visited}, Queued={pending}, "
                             f"Rate={self.stats.pages_per_minute:.1f} pages/min")

            await asyncio.sleep(crawler.status_interval)

    def _log_final_stats(self):
        """Log final crawl statistics."""
        frontier_stats = self.frontier.get_stats()
        self.metrics.update_frontier(frontier_stats['total_visited'], frontier_stats['total_queued'])

        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Pages visited: {frontier_stats['total_visited']}")
        self.logger.info(f"Links discovered: {self.stats.links_discovered}")
        self.logger.info(f"Links rejected: {self.stats.links_rejected}")
        self.logger.info(f"Links queued: {self.stats.links_queued}")
        self.logger.info(f"Errors: {self.stats.errors}")
        self.logger.info(f"Total time: {self.stats.elapsed_time:.2f} seconds")
        self.logger.info(f"Average rate: {self.stats.pages_per_minute:.1f} pages/min")
        self.logger.info(f"URLs remaining in queue: {frontier_stats['total_queued']}")
        if hasattr(self.fetcher, 'get_stats'):
            self.logger.info(f"Fetcher stats: {self.fetcher.get_stats()}")

    def stop_crawling(self):
        """Ask the workers to stop after their current page."""
        self.logger.info("Stopping crawler...")
        if self.frontier:
            self.frontier.close()

    async def _cleanup_workers(self):
        """Cancel and cleanup worker tasks."""
        if self.workers:
            for worker in self.workers:
                if not worker.done():
                    worker.cancel()

            await asyncio.gather(*self.workers, return_exceptions=True)
            self.workers.clear()

    def get_stats(self) -> dict:
        """Get current crawl statistics."""
        frontier_stats = self.frontier.get_stats() if self.frontier else {}
        return {
            'pages_processed': self.stats.pages_processed,
            'links_discovered': self.stats.links_discovered,
            'links_rejected': self.stats.links_rejected,
            'links_queued': self.stats.links_queued,
            'errors': self.stats.errors,
            'elapsed_time': self.stats.elapsed_time,
            'pages_per_minute': self.stats.pages_per_minute,
            'urls_in_queue': frontier_stats.get('total_queued', 0),
            'urls_visited': frontier_stats.get('total_visited', 0),
            'is_running': self.is_running
        }
