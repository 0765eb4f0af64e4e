"""
In-memory fetcher that serves canned pages.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple, Union

from .fetcher import Fetcher, FetchError


@dataclass(frozen=True)
class FakePage:
    """A canned page body and its outbound links."""
    body: str
    urls: Tuple[str, ...] = field(default_factory=tuple)


PageSpec = Union[FakePage, Tuple[str, Sequence[str]]]


class FakeFetcher(Fetcher):
    """
    Fetcher backed by a fixed url -> page mapping.

    Lookups never mutate the table, so fetching the same URL twice yields the
    same result. Every requested URL is appended to ``calls``.
    """

    def __init__(self, pages: Mapping[str, PageSpec], latency: float = 0.0):
        self.pages: Dict[str, FakePage] = {}
        for url, page in pages.items():
            if not isinstance(page, FakePage):
                body, urls = page
                page = FakePage(body, tuple(urls))
            self.pages[url] = page
        self.latency = latency
        self.calls: List[str] = []
        self.logger = logging.getLogger(__name__)

    async def fetch(self, url: str) -> Tuple[str, List[str]]:
        self.calls.append(url)
        # Always yield once so fetches interleave like real I/O
        await asyncio.sleep(self.latency)

        page = self.pages.get(url)
        if page is None:
            raise FetchError(f"not found: {url}", url=url)

        self.logger.debug(f"Serving canned page for {url}")
        return page.body, list(page.urls)


GOLANG_PAGES: Dict[str, FakePage] = {
    "http://golang.org/": FakePage(
        "The Go Programming Language",
        (
            "http://golang.org/pkg/",
            "http://golang.org/cmd/",
        ),
    ),
    "http://golang.org/pkg/": FakePage(
        "Packages",
        (
            "http://golang.org/",
            "http://golang.org/cmd/",
            "http://golang.org/pkg/fmt/",
            "http://golang.org/pkg/os/",
        ),
    ),
    "http://golang.org/pkg/fmt/": FakePage(
        "Package fmt",
        (
            "http://golang.org/",
            "http://golang.org/pkg/",
        ),
    ),
    "http://golang.org/pkg/os/": FakePage(
        "Package os",
        (
            "http://golang.org/",
            "http://golang.org/pkg/",
        ),
    ),
}

DEMO_SEED_URL = "http://golang.org/"
DEMO_MAX_DEPTH = 4


def golang_fetcher() -> FakeFetcher:
    """Return a fresh fetcher over the canned golang.org pages."""
    return FakeFetcher(GOLANG_PAGES)
