"""
Crawler core components.
"""

from .fetcher import Fetcher, FetchError, WebFetcher
from .parser import ContentParser, ParsedPage
from .fake import FakeFetcher, FakePage, GOLANG_PAGES, golang_fetcher
from .output import CrawlObserver, ConsoleObserver, quote_content
from .coordinator import CrawlCoordinator, CrawlOutcome, CrawlStats, crawl

__all__ = [
    'Fetcher', 'FetchError', 'WebFetcher',
    'ContentParser', 'ParsedPage',
    'FakeFetcher', 'FakePage', 'GOLANG_PAGES', 'golang_fetcher',
    'CrawlObserver', 'ConsoleObserver', 'quote_content',
    'CrawlCoordinator', 'CrawlOutcome', 'CrawlStats', 'crawl',
]
