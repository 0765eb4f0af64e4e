"""
Configuration management for the crawler.
"""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, fields


DEFAULT_USER_AGENT = "depthcrawl/1.0 (+https://example.invalid/depthcrawl)"


class ConfigError(ValueError):
    """Raised when a configuration file holds invalid values."""


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    seed_url: Optional[str] = None
    max_depth: int = 4
    request_timeout: int = 30
    fetch_timeout: Optional[float] = None
    max_concurrent_requests: int = 10
    max_duration: Optional[float] = None
    user_agent: str = DEFAULT_USER_AGENT
    allowed_domains: List[str] = field(default_factory=list)
    blocked_domains: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    metrics_enabled: bool = False
    prometheus_port: int = 8000


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


def _build_section(cls, name: str, data: Optional[Dict[str, Any]]):
    """Instantiate a config section, rejecting unknown keys."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in section '{name}': {', '.join(unknown)}")
    return cls(**data)


class ConfigManager:
    """Manages configuration loading and validation."""

    SECTIONS = {
        'crawler': CrawlerConfig,
        'logging': LoggingConfig,
        'monitoring': MonitoringConfig,
    }

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as file:
            try:
                config_data = yaml.safe_load(file) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {self.config_path}")

        unknown = sorted(set(config_data) - set(self.SECTIONS))
        if unknown:
            raise ConfigError(f"Unknown configuration sections: {', '.join(unknown)}")

        self._config = Config(**{
            name: _build_section(cls, name, config_data.get(name))
            for name, cls in self.SECTIONS.items()
        })

        validate_config(self._config)
        return self._config

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


def _require_number(name: str, value, optional: bool = False, integer: bool = False):
    """Reject values of the wrong type before they are compared."""
    if value is None and optional:
        return
    allowed = int if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, allowed):
        kind = "an integer" if integer else "a number"
        raise ConfigError(f"{name} must be {kind}, got {value!r}")


def validate_config(config: Config):
    """Validate configuration values."""
    crawler = config.crawler

    _require_number("request_timeout", crawler.request_timeout)
    _require_number("fetch_timeout", crawler.fetch_timeout, optional=True)
    _require_number("max_duration", crawler.max_duration, optional=True)
    _require_number("max_concurrent_requests", crawler.max_concurrent_requests, integer=True)
    _require_number("prometheus_port", config.monitoring.prometheus_port, integer=True)

    if crawler.request_timeout <= 0:
        raise ConfigError("request_timeout must be positive")

    if crawler.fetch_timeout is not None and crawler.fetch_timeout <= 0:
        raise ConfigError("fetch_timeout must be positive when set")

    if crawler.max_duration is not None and crawler.max_duration <= 0:
        raise ConfigError("max_duration must be positive when set")

    if crawler.max_concurrent_requests < 1:
        raise ConfigError("max_concurrent_requests must be at least 1")

    if not isinstance(crawler.max_depth, int):
        raise ConfigError("max_depth must be an integer")

    if (not isinstance(config.logging.level, str)
            or not isinstance(logging.getLevelName(config.logging.level.upper()), int)):
        raise ConfigError(f"Unknown logging level: {config.logging.level}")

    logging.getLogger(__name__).debug("Configuration validation passed")


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from file."""
    return ConfigManager(config_path).load_config()
