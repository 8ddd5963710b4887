"""
Monitoring and metrics collection for the web crawler system.
"""

import logging
from typing import Dict, Optional

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry
from prometheus_client import start_http_server


class CrawlMetrics:
    """
    Prometheus metrics for one crawl run.

    Each instance owns a private registry, so several crawls (or tests) in
    the same process never collide on metric names.
    """

    def __init__(self, enable_server: bool = False, prometheus_port: int = 8000):
        self.logger = logging.getLogger(__name__)
        self.enable_server = enable_server
        self.prometheus_port = prometheus_port
        self.registry = CollectorRegistry()

        self.pages_fetched = Counter(
            'crawler_pages_fetched_total',
            'Total number of pages fetched successfully',
            registry=self.registry
        )
        self.fetch_failures = Counter(
            'crawler_fetch_failures_total',
            'Total number of pages that yielded no links due to a fetch failure',
            ['reason'],
            registry=self.registry
        )
        self.links_discovered = Counter(
            'crawler_links_discovered_total',
            'Raw links found in fetched pages',
            registry=self.registry
        )
        self.links_rejected = Counter(
            'crawler_links_rejected_total',
            'Links dropped during resolution',
            ['reason'],
            registry=self.registry
        )
        self.links_queued = Counter(
            'crawler_links_queued_total',
            'Resolved links added to the frontier',
            registry=self.registry
        )
        self.worker_errors = Counter(
            'crawler_worker_errors_total',
            'Unexpected errors caught inside worker loops',
            registry=self.registry
        )
        self.fetch_duration = Histogram(
            'crawler_fetch_duration_seconds',
            'Time spent fetching a page',
            registry=self.registry
        )
        self.visited_urls = Gauge(
            'crawler_visited_urls',
            'Number of addresses fetched so far',
            registry=self.registry
        )
        self.pending_urls = Gauge(
            'crawler_pending_urls',
            'Number of addresses waiting in the frontier',
            registry=self.registry
        )
        self.active_workers = Gauge(
            'crawler_active_workers',
            'Number of running crawl workers',
            registry=self.registry
        )

    def start_server(self):
        """Expose the registry over HTTP if enabled."""
        if not self.enable_server:
            return

        try:
            start_http_server(self.prometheus_port, registry=self.registry)
            self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")
        except OSError as e:
            self.logger.error(f"Failed to start Prometheus server: {e}")

    def record_fetch(self, success: bool, fetch_time: float, reason: Optional[str] = None):
        self.fetch_duration.observe(fetch_time)
        if success:
            self.pages_fetched.inc()
        else:
            self.fetch_failures.labels(reason=reason or 'unknown').inc()

    def record_links(self, discovered: int, queued: int):
        self.links_discovered.inc(discovered)
        self.links_queued.inc(queued)

    def record_rejected(self, reason: str):
        self.links_rejected.labels(reason=reason).inc()

    def update_frontier(self, visited: int, pending: int):
        self.visited_urls.set(visited)
        self.pending_urls.set(pending)

    def _value(self, name: str, labels: Optional[Dict[str, str]] = None) -> float:
        value = self.registry.get_sample_value(name, labels or {})
        return value or 0.0

    def snapshot(self) -> Dict[str, float]:
        """Current values of the unlabelled metrics plus labelled totals."""
        failures = 0.0
        rejected = 0.0
        for metric in self.registry.collect():
            for sample in metric.samples:
                if sample.name == 'crawler_fetch_failures_total':
                    failures += sample.value
                elif sample.name == 'crawler_links_rejected_total':
                    rejected += sample.value

        return {
            'pages_fetched': self._value('crawler_pages_fetched_total'),
            'fetch_failures': failures,
            'links_discovered': self._value('crawler_links_discovered_total'),
            'links_rejected': rejected,
            'links_queued': self._value('crawler_links_queued_total'),
            'worker_errors': self._value('crawler_worker_errors_total'),
            'visited_urls': self._value('crawler_visited_urls'),
            'pending_urls': self._value('crawler_pending_urls'),
            'active_workers': self._value('crawler_active_workers'),
        }
