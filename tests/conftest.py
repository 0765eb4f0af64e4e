"""Shared fixtures for crawler tests."""

import asyncio
import logging
from typing import Dict, List, Tuple

import pytest

from depthcrawl.crawler.fetcher import Fetcher, FetchError
from depthcrawl.crawler.output import CrawlObserver


class RecordingObserver(CrawlObserver):
    """Observer that keeps every notification in memory."""

    def __init__(self):
        self.found_pages: List[Tuple[str, str]] = []
        self.failures: List[Tuple[str, str]] = []
        self.events: List[Tuple[str, str]] = []

    def found(self, url, content):
        self.found_pages.append((url, content))
        self.events.append(('found', url))

    def failed(self, url, message):
        self.failures.append((url, message))
        self.events.append(('failed', url))

    @property
    def found_urls(self) -> List[str]:
        return [url for url, _ in self.found_pages]

    @property
    def messages(self) -> List[str]:
        return [message for _, message in self.failures]


class GatedFetcher(Fetcher):
    """Fetcher whose responses are released per URL by the test."""

    def __init__(self, pages: Dict[str, Tuple[str, List[str]]]):
        self.pages = pages
        self.gates: Dict[str, asyncio.Event] = {}
        self.started: List[str] = []
        self.cancelled: List[str] = []

    def gate(self, url: str) -> asyncio.Event:
        return self.gates.setdefault(url, asyncio.Event())

    async def fetch(self, url):
        self.started.append(url)
        try:
            await self.gate(url).wait()
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        if url not in self.pages:
            raise FetchError(f"not found: {url}", url=url)
        body, links = self.pages[url]
        return body, list(links)


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
