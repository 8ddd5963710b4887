"""
Web crawler core components.
"""

from .url_frontier import URLFrontier, PopPolicy
from .fetcher import WebFetcher, FetchResult
from .parser import LinkParser
from .resolver import resolve, normalize_url, parse_starting_url
from .extractor import LinkExtractor
from .worker import CrawlWorker, CrawlStats, WorkerState
from .scheduler import CrawlerScheduler

__all__ = [
    'URLFrontier', 'PopPolicy',
    'WebFetcher', 'FetchResult',
    'LinkParser',
    'resolve', 'normalize_url', 'parse_starting_url',
    'LinkExtractor',
    'CrawlWorker', 'CrawlStats', 'WorkerState',
    'CrawlerScheduler'
]
