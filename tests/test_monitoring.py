"""Tests for crawler metrics."""

from depthcrawl.utils.monitoring import CrawlerMonitor, MetricsCollector


def test_monitor_updates_prometheus_metrics():
    collector = MetricsCollector()
    monitor = CrawlerMonitor(collector)

    monitor.record_dispatch("A")
    monitor.record_dispatch("B")
    monitor.record_found("A")
    monitor.record_failure("B", "not found: B")
    monitor.update_in_flight(1)
    monitor.observe_fetch_time(0.25)

    registry = collector.registry
    assert registry.get_sample_value("crawler_dispatched_total") == 2
    assert registry.get_sample_value("crawler_pages_found_total") == 1
    assert registry.get_sample_value("crawler_fetch_failures_total") == 1
    assert registry.get_sample_value("crawler_in_flight") == 1
    assert registry.get_sample_value("crawler_fetch_seconds_count") == 1


def test_summary_counts():
    monitor = CrawlerMonitor()
    monitor.record_found("A")

    summary = monitor.get_summary()

    assert summary["metrics"]["pages_found"] == 1
    assert summary["runtime_seconds"] >= 0


def test_export_text_lists_metrics():
    collector = MetricsCollector()

    text = collector.export_text()

    assert "crawler_pages_found_total" in text
    assert "crawler_in_flight" in text
