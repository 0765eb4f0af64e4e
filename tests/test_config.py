"""Tests for configuration loading."""

import pytest

from depthcrawl.utils.config import (
    Config,
    ConfigError,
    ConfigManager,
    DEFAULT_USER_AGENT,
    load_config,
    validate_config,
)


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_defaults():
    config = Config()

    assert config.crawler.max_depth == 4
    assert config.crawler.seed_url is None
    assert config.crawler.user_agent == DEFAULT_USER_AGENT
    assert config.logging.level == "INFO"
    assert config.monitoring.metrics_enabled is False


def test_load_full_config(tmp_path):
    path = write_config(tmp_path, """
crawler:
  seed_url: "https://example.com/"
  max_depth: 2
  fetch_timeout: 5
  allowed_domains: [example.com]
logging:
  level: debug
  json: true
monitoring:
  metrics_enabled: true
  prometheus_port: 9100
""")

    config = load_config(path)

    assert config.crawler.seed_url == "https://example.com/"
    assert config.crawler.max_depth == 2
    assert config.crawler.fetch_timeout == 5
    assert config.crawler.allowed_domains == ["example.com"]
    assert config.crawler.max_concurrent_requests == 10
    assert config.logging.json is True
    assert config.monitoring.prometheus_port == 9100


def test_empty_file_gives_defaults(tmp_path):
    config = load_config(write_config(tmp_path, ""))

    assert config == Config()


def test_negative_depth_is_accepted(tmp_path):
    config = load_config(write_config(tmp_path, "crawler:\n  max_depth: -1\n"))

    assert config.crawler.max_depth == -1


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize("text,message", [
    ("crawler:\n  bogus: 1\n", "Unknown keys"),
    ("storage:\n  type: file\n", "Unknown configuration sections"),
    ("crawler: 3\n", "must be a mapping"),
    ("- a\n- b\n", "root must be a mapping"),
    ("crawler:\n  request_timeout: 0\n", "request_timeout"),
    ("crawler:\n  max_concurrent_requests: 0\n", "max_concurrent_requests"),
    ("crawler:\n  fetch_timeout: -2\n", "fetch_timeout"),
    ("crawler:\n  max_duration: 0\n", "max_duration"),
    ("crawler:\n  max_depth: deep\n", "max_depth"),
    ("logging:\n  level: LOUD\n", "logging level"),
    ("crawler: [unclosed\n", "Invalid YAML"),
    ("crawler:\n  max_concurrent_requests: 'five'\n", "must be an integer"),
    ("crawler:\n  max_concurrent_requests: 2.5\n", "must be an integer"),
    ("crawler:\n  request_timeout: soon\n", "request_timeout must be a number"),
    ("crawler:\n  fetch_timeout: true\n", "fetch_timeout must be a number"),
    ("monitoring:\n  prometheus_port: http\n", "prometheus_port must be an integer"),
    ("logging:\n  level: 10\n", "logging level"),
])
def test_invalid_config(tmp_path, text, message):
    with pytest.raises(ConfigError, match=message):
        load_config(write_config(tmp_path, text))


def test_manager_requires_load(tmp_path):
    manager = ConfigManager(str(tmp_path / "config.yaml"))

    with pytest.raises(ValueError):
        manager.config


def test_manager_keeps_loaded_config(tmp_path):
    manager = ConfigManager(write_config(tmp_path, "crawler:\n  max_depth: 1\n"))

    loaded = manager.load_config()

    assert manager.config is loaded


def test_validate_defaults():
    validate_config(Config())
