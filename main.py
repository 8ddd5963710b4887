#!/usr/bin/env python3
"""
Main entry point for the web crawler.
"""

import asyncio
import argparse
import logging
import signal
import sys
from typing import Optional

from frontier_crawler import __version__
from frontier_crawler.crawler.scheduler import CrawlerScheduler
from frontier_crawler.utils.config import Config, POP_POLICIES, load_config
from frontier_crawler.utils.errors import CrawlerError
from frontier_crawler.utils.logger import setup_logging, log_system_info


class CrawlerApp:
    """Main application class for the web crawler."""

    def __init__(self):
        self.scheduler: Optional[CrawlerScheduler] = None
        self.logger = logging.getLogger(__name__)

    def setup_signal_handlers(self):
        """Stop the crawl gracefully on SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum):
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            if self.scheduler:
                self.scheduler.stop_crawling()

        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, signal_handler, signum)
            except NotImplementedError:
                # Not supported on Windows event loops
                pass

    async def run(self, config: Config) -> int:
        """Run the web crawler and print the visited set."""
        self.setup_signal_handlers()
        crawler = config.crawler

        self.logger.info("=== WEB CRAWLER STARTING ===")
        self.logger.info(f"Starting URL: {crawler.starting_url}")
        self.logger.info(f"Max links: {crawler.max_links}")
        self.logger.info(f"Workers: {crawler.worker_count}")
        self.logger.info(f"Pop policy: {crawler.pop_policy}")

        self.scheduler = CrawlerScheduler(config)
        try:
            visited = await self.scheduler.run()
        except CrawlerError as e:
            self.logger.error(f"Error: {e}")
            return 1
        finally:
            self.logger.info("=== WEB CRAWLER FINISHED ===")

        for url in sorted(visited):
            print(url)

        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Concurrent frontier web crawler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py -s https://example.com/                  # Crawl 100 links with 4 workers
  python main.py -s https://example.com/ -m 500 -n 16 -l  # Bigger crawl with status output
  python main.py --config config.yaml                     # Settings from a YAML file
        """
    )

    parser.add_argument(
        '-s', '--starting-url',
        help='Initial URL to crawl from'
    )

    parser.add_argument(
        '-m', '--max-links',
        type=int,
        help='Stop once more than this many pages were visited (default: 100)'
    )

    parser.add_argument(
        '-n', '--n-workers',
        type=int,
        dest='worker_count',
        help='Number of concurrent workers (default: 4)'
    )

    parser.add_argument(
        '-l', '--log-status',
        action='store_true',
        default=None,
        help='Periodically report visited and queued counts'
    )

    parser.add_argument(
        '--pop-policy',
        choices=POP_POLICIES,
        help='Which end of the queue workers take from (default: random)'
    )

    parser.add_argument(
        '--config',
        help='Path to a YAML configuration file'
    )

    parser.add_argument(
        '--log-level',
        help='Override the configured log level'
    )

    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit logs as JSON lines'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'frontier-crawler {__version__}'
    )

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        config = config.with_overrides(
            starting_url=args.starting_url,
            max_links=args.max_links,
            worker_count=args.worker_count,
            log_status=args.log_status,
            pop_policy=args.pop_policy
        )
        if args.log_level:
            config.logging.level = args.log_level
        if args.json_logs:
            config.logging.json = True
    except CrawlerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.crawler.starting_url:
        print("Error: a starting URL is required (--starting-url or crawler.starting_url)",
              file=sys.stderr)
        return 1

    try:
        setup_logging(config.logging)
    except (AttributeError, OSError) as e:
        print(f"Error: could not set up logging: {e}", file=sys.stderr)
        return 1
    log_system_info()

    app = CrawlerApp()
    try:
        return asyncio.run(app.run(config))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
