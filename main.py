#!/usr/bin/env python3
"""
Main entry point for the crawler.
"""

import asyncio
import argparse
import logging
import signal
import sys
from typing import Optional

from depthcrawl import __version__
from depthcrawl.crawler.coordinator import CrawlCoordinator, CrawlStats
from depthcrawl.crawler.fake import DEMO_MAX_DEPTH, DEMO_SEED_URL, golang_fetcher
from depthcrawl.crawler.fetcher import Fetcher, WebFetcher
from depthcrawl.crawler.output import CrawlObserver
from depthcrawl.crawler.parser import ContentParser
from depthcrawl.utils.config import Config, ConfigError, load_config, validate_config
from depthcrawl.utils.logger import get_crawler_logger, log_system_info, setup_logging
from depthcrawl.utils.monitoring import CrawlerMonitor, MetricsCollector


EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


class CrawlerApp:
    """Main application class for the crawler."""

    def __init__(self, config: Config, observer: Optional[CrawlObserver] = None):
        self.config = config
        self.observer = observer
        self.coordinator: Optional[CrawlCoordinator] = None
        self.monitor: Optional[CrawlerMonitor] = None
        self.interrupted = False
        self.logger = get_crawler_logger(__name__)

    def setup_signal_handlers(self):
        """Stop the crawl on SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum):
            self.logger.info(f"Received signal {signum}, initiating shutdown...")
            self.interrupted = True
            if self.coordinator:
                self.coordinator.stop()

        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, signal_handler, signum)
            except (NotImplementedError, RuntimeError):
                # Not supported on this platform or outside the main thread
                self.logger.debug(f"Signal handler for {signum} not installed")

    def setup_monitoring(self):
        """Start the metrics exporter if enabled."""
        if not self.config.monitoring.metrics_enabled:
            return
        collector = MetricsCollector(self.config.monitoring.prometheus_port)
        collector.start_server()
        self.monitor = CrawlerMonitor(collector)

    async def run(self, seed_url: str, max_depth: int, demo: bool = False) -> Optional[CrawlStats]:
        """Run one crawl. Returns None if the crawl was cancelled or timed out."""
        crawler_config = self.config.crawler

        self.logger.info("=== CRAWLER STARTING ===")
        self.logger.log_url_event(logging.INFO, seed_url, f"Seed URL: {seed_url}")
        self.logger.info(f"Max depth: {max_depth}")
        self.logger.info(f"Fetcher: {'canned golang.org pages' if demo else 'live HTTP'}")

        self.setup_signal_handlers()
        self.setup_monitoring()

        try:
            if demo:
                return await self._run_crawl(golang_fetcher(), seed_url, max_depth)

            parser = ContentParser(
                allowed_domains=crawler_config.allowed_domains,
                blocked_domains=crawler_config.blocked_domains,
            )
            async with WebFetcher(
                user_agent=crawler_config.user_agent,
                request_timeout=crawler_config.request_timeout,
                max_concurrent_requests=crawler_config.max_concurrent_requests,
                parser=parser,
            ) as fetcher:
                stats = await self._run_crawl(fetcher, seed_url, max_depth)
                self.logger.info(f"Fetcher stats: {fetcher.get_stats()}")
                return stats

        finally:
            if self.monitor:
                self.logger.info(f"Monitoring summary: {self.monitor.get_summary()}")
            self.logger.info("=== CRAWLER FINISHED ===")

    async def _run_crawl(self, fetcher: Fetcher, seed_url: str, max_depth: int) -> Optional[CrawlStats]:
        crawler_config = self.config.crawler
        self.coordinator = CrawlCoordinator(
            fetcher,
            observer=self.observer,
            fetch_timeout=crawler_config.fetch_timeout,
            max_concurrent_requests=crawler_config.max_concurrent_requests,
            monitor=self.monitor,
        )

        max_duration = crawler_config.max_duration
        try:
            if max_duration is not None:
                return await asyncio.wait_for(self.coordinator.run(seed_url, max_depth), max_duration)
            return await self.coordinator.run(seed_url, max_depth)

        except asyncio.TimeoutError:
            self.logger.warning(f"Reached max duration: {max_duration} seconds")
            return None

        except asyncio.CancelledError:
            self.logger.info("Crawl cancelled")
            return None


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Depth-bounded concurrent web crawler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  depthcrawl --demo                           # Crawl canned golang.org pages
  depthcrawl https://example.com --depth 2    # Crawl a live site two hops deep
  depthcrawl --config config.yaml             # Take seed and depth from config
        """
    )

    parser.add_argument(
        'url',
        nargs='?',
        help='Seed URL (overrides crawler.seed_url from the config file)'
    )

    parser.add_argument(
        '--depth',
        type=int,
        help='Maximum link depth (overrides crawler.max_depth)'
    )

    parser.add_argument(
        '--config',
        help='Path to YAML configuration file'
    )

    parser.add_argument(
        '--demo',
        action='store_true',
        help='Crawl the built-in golang.org pages instead of the network'
    )

    parser.add_argument(
        '--max-duration',
        type=float,
        help='Maximum crawl duration in seconds'
    )

    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit logs as JSON'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'depthcrawl {__version__}'
    )

    return parser


def main(argv=None, observer: Optional[CrawlObserver] = None) -> int:
    """Main entry point."""
    args = build_arg_parser().parse_args(argv)

    try:
        config = load_config(args.config) if args.config else Config()
        if args.max_duration is not None:
            config.crawler.max_duration = args.max_duration
            validate_config(config)
    except (FileNotFoundError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    # Logs go to stderr so they never interleave with crawl output on stdout
    setup_logging(config.logging, enable_json=args.json_logs or None, stream=sys.stderr)
    log_system_info()

    if args.demo:
        seed_url = args.url or DEMO_SEED_URL
        max_depth = args.depth if args.depth is not None else DEMO_MAX_DEPTH
    else:
        seed_url = args.url or config.crawler.seed_url
        max_depth = args.depth if args.depth is not None else config.crawler.max_depth

    if not seed_url:
        print("Error: no seed URL given on the command line or in the config file.", file=sys.stderr)
        return EXIT_ERROR

    app = CrawlerApp(config, observer=observer)
    try:
        asyncio.run(app.run(seed_url, max_depth, demo=args.demo))
        if app.interrupted:
            return EXIT_INTERRUPTED
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        logging.getLogger(__name__).error(f"Fatal error: {e}", exc_info=True)
        return EXIT_ERROR

    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
