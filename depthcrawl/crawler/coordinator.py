"""
Crawl coordinator: dispatches concurrent fetches and consumes their outcomes.

All dispatch decisions and all bookkeeping (visited set, in-flight count) run
on the coroutine executing ``CrawlCoordinator.run``. Fetch tasks only ever
touch the results queue, so no locks are needed.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .fetcher import Fetcher, FetchError
from .output import ConsoleObserver, CrawlObserver
from ..utils.monitoring import CrawlerMonitor


@dataclass
class CrawlOutcome:
    """Result of one dispatched fetch."""
    url: str
    depth: int
    content: Optional[str] = None
    links: List[str] = field(default_factory=list)
    error: Optional[FetchError] = None
    fetch_time: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CrawlStats:
    """Statistics for a single crawl run."""
    start_time: float
    pages_found: int = 0
    failures: int = 0
    dispatched: int = 0
    duplicates_skipped: int = 0
    max_in_flight: int = 0

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time


class CrawlCoordinator:
    """
    Depth-bounded concurrent crawl over a fetcher.

    Each URL is fetched at most once per run. Children of a page are
    dispatched with the page's depth minus one, and only while that depth is
    above zero. A run ends exactly when no fetch is outstanding.
    """

    def __init__(self, fetcher: Fetcher, observer: Optional[CrawlObserver] = None,
                 fetch_timeout: Optional[float] = None,
                 max_concurrent_requests: Optional[int] = None,
                 monitor: Optional[CrawlerMonitor] = None):
        self.fetcher = fetcher
        self.observer = observer if observer is not None else ConsoleObserver()
        self.fetch_timeout = fetch_timeout
        self.max_concurrent_requests = max_concurrent_requests
        self.monitor = monitor
        self.logger = logging.getLogger(__name__)

        # Per-run state, reset by run()
        self.visited: Set[str] = set()
        self.in_flight = 0
        self.stats = CrawlStats(start_time=time.time())
        self._results: Optional[asyncio.Queue] = None
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._tasks: Set[asyncio.Task] = set()
        self._run_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._results is not None

    def dispatch(self, url: str, depth: int) -> bool:
        """
        Start fetching ``url`` unless it was already dispatched in this run.

        Returns True if a fetch was started.
        """
        if self._results is None:
            raise RuntimeError("dispatch() called outside of a running crawl")

        if url in self.visited:
            self.stats.duplicates_skipped += 1
            return False

        self.visited.add(url)
        self.in_flight += 1
        self.stats.dispatched += 1
        self.stats.max_in_flight = max(self.stats.max_in_flight, self.in_flight)

        task = asyncio.create_task(self._fetch(url, depth, self._results))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        if self.monitor:
            self.monitor.record_dispatch(url)
            self.monitor.update_in_flight(self.in_flight)

        self.logger.debug(f"Dispatched {url} (depth={depth}, in_flight={self.in_flight})")
        return True

    async def _fetch(self, url: str, depth: int, results: asyncio.Queue):
        """Run one fetch and put exactly one outcome on the queue."""
        start_time = time.time()
        try:
            if self._semaphore is not None:
                async with self._semaphore:
                    content, links = await self._call_fetcher(url)
            else:
                content, links = await self._call_fetcher(url)
            outcome = CrawlOutcome(url=url, depth=depth, content=content, links=list(links))

        except FetchError as e:
            outcome = CrawlOutcome(url=url, depth=depth, error=e)

        except asyncio.TimeoutError:
            outcome = CrawlOutcome(url=url, depth=depth,
                                   error=FetchError(f"timeout: {url}", url=url))

        except Exception as e:
            self.logger.error(f"Unexpected error fetching {url}: {e}", exc_info=True)
            outcome = CrawlOutcome(url=url, depth=depth,
                                   error=FetchError(f"unexpected error fetching {url}: {e}", url=url))

        outcome.fetch_time = time.time() - start_time
        results.put_nowait(outcome)

    async def _call_fetcher(self, url: str):
        if self.fetch_timeout is not None:
            return await asyncio.wait_for(self.fetcher.fetch(url), self.fetch_timeout)
        return await self.fetcher.fetch(url)

    def _handle(self, outcome: CrawlOutcome):
        """Apply failure and depth policy to one consumed outcome."""
        if self.monitor:
            self.monitor.update_in_flight(self.in_flight)
            self.monitor.observe_fetch_time(outcome.fetch_time)

        if not outcome.ok:
            message = str(outcome.error)
            self.stats.failures += 1
            self.logger.warning(f"Failed to fetch {outcome.url}: {message}")
            if self.monitor:
                self.monitor.record_failure(outcome.url, message)
            self.observer.failed(outcome.url, message)
            return

        self.stats.pages_found += 1
        if self.monitor:
            self.monitor.record_found(outcome.url)
        self.observer.found(outcome.url, outcome.content if outcome.content is not None else "")

        # Depth exhausted
        if outcome.depth <= 0:
            return

        for link in outcome.links:
            self.dispatch(link, outcome.depth - 1)

    async def run(self, seed_url: str, max_depth: int) -> CrawlStats:
        """
        Crawl from ``seed_url`` and return once no fetch is outstanding.

        Cancelling this coroutine cancels every outstanding fetch.
        """
        if self.is_running:
            raise RuntimeError("crawl already running")

        self.visited = set()
        self.in_flight = 0
        self.stats = CrawlStats(start_time=time.time())
        self._results = asyncio.Queue()
        self._semaphore = (asyncio.Semaphore(self.max_concurrent_requests)
                           if self.max_concurrent_requests else None)
        self._run_task = asyncio.current_task()

        self.logger.info(f"Starting crawl at {seed_url} (max_depth={max_depth})")

        try:
            self.dispatch(seed_url, max_depth)

            while self.in_flight > 0:
                outcome = await self._results.get()
                self.in_flight -= 1
                self._handle(outcome)

        finally:
            await self._cancel_pending()
            self._results = None
            self._semaphore = None
            self._run_task = None

        self.logger.info(
            f"Crawl finished: found={self.stats.pages_found}, "
            f"failures={self.stats.failures}, "
            f"dispatched={self.stats.dispatched}, "
            f"elapsed={self.stats.elapsed_time:.2f}s"
        )
        return self.stats

    def stop(self):
        """Cancel a running crawl from another task."""
        if self._run_task is not None and not self._run_task.done():
            self.logger.info("Stopping crawl...")
            self._run_task.cancel()

    async def _cancel_pending(self):
        """Cancel and reap outstanding fetch tasks."""
        if not self._tasks:
            return

        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        self.logger.debug(f"Cancelled {len(pending)} outstanding fetches")


async def crawl(seed_url: str, max_depth: int, fetcher: Fetcher,
                observer: Optional[CrawlObserver] = None,
                fetch_timeout: Optional[float] = None,
                max_concurrent_requests: Optional[int] = None,
                monitor: Optional[CrawlerMonitor] = None) -> CrawlStats:
    """
    Crawl the link graph reachable from ``seed_url``.

    Args:
        seed_url: URL to start from
        max_depth: Number of link hops to follow from the seed
        fetcher: Object providing ``async fetch(url) -> (content, links)``
        observer: Receives found/failed notifications (defaults to stdout)
        fetch_timeout: Optional per-fetch timeout in seconds
        max_concurrent_requests: Optional cap on simultaneous fetches
        monitor: Optional metrics sink

    Returns:
        Statistics for the run
    """
    coordinator = CrawlCoordinator(
        fetcher,
        observer=observer,
        fetch_timeout=fetch_timeout,
        max_concurrent_requests=max_concurrent_requests,
        monitor=monitor,
    )
    return await coordinator.run(seed_url, max_depth)
