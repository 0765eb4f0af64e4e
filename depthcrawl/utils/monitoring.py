"""
Monitoring and metrics collection for the crawler.
"""

import time
import logging
from typing import Dict, Optional, Any
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
from prometheus_client import start_http_server


class MetricsCollector:
    """Owns the Prometheus registry and the crawler's metric objects."""

    def __init__(self, prometheus_port: int = 8000):
        self.logger = logging.getLogger(__name__)
        self.prometheus_port = prometheus_port
        self.registry = CollectorRegistry()

        self.pages_found = Counter(
            'crawler_pages_found_total',
            'Total number of pages fetched successfully',
            registry=self.registry
        )
        self.fetch_failures = Counter(
            'crawler_fetch_failures_total',
            'Total number of failed fetches',
            registry=self.registry
        )
        self.dispatched = Counter(
            'crawler_dispatched_total',
            'Total number of URLs dispatched for fetching',
            registry=self.registry
        )
        self.in_flight = Gauge(
            'crawler_in_flight',
            'Number of fetches whose outcome has not been consumed yet',
            registry=self.registry
        )
        self.fetch_seconds = Histogram(
            'crawler_fetch_seconds',
            'Time spent in a single fetch',
            registry=self.registry
        )

    def start_server(self):
        """Start the Prometheus metrics HTTP server."""
        start_http_server(self.prometheus_port, registry=self.registry)
        self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")

    def export_text(self) -> str:
        """Render all metrics in the Prometheus text format."""
        return generate_latest(self.registry).decode('utf-8')


class CrawlerMonitor:
    """High-level monitoring interface for the crawler."""

    def __init__(self, metrics_collector: Optional[MetricsCollector] = None):
        self.metrics = metrics_collector or MetricsCollector()
        self.logger = logging.getLogger(__name__)
        self.start_time = time.time()

        self.counts = {
            'pages_found': 0,
            'fetch_failures': 0,
            'dispatched': 0,
        }

    def record_dispatch(self, url: str):
        self.counts['dispatched'] += 1
        self.metrics.dispatched.inc()

    def record_found(self, url: str):
        self.counts['pages_found'] += 1
        self.metrics.pages_found.inc()

    def record_failure(self, url: str, message: str = ""):
        self.counts['fetch_failures'] += 1
        self.metrics.fetch_failures.inc()

    def update_in_flight(self, count: int):
        self.metrics.in_flight.set(count)

    def observe_fetch_time(self, seconds: float):
        self.metrics.fetch_seconds.observe(seconds)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all recorded counts."""
        runtime = time.time() - self.start_time

        return {
            'runtime_seconds': runtime,
            'metrics': self.counts.copy(),
            'rates': {
                'pages_per_second': self.counts['pages_found'] / runtime if runtime > 0 else 0,
            }
        }
