"""
Configuration management for the web crawler system.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field, fields, replace

from .errors import ConfigurationError


POP_POLICIES = ('front', 'back', 'random')


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    starting_url: Optional[str] = None
    max_links: int = 100
    worker_count: int = 4
    max_url_length: int = 2048
    request_timeout: float = 2.0
    idle_delay: float = 0.5
    status_interval: float = 3.0
    log_status: bool = False
    pop_policy: str = 'random'
    dedupe_pending: bool = True
    user_agent: str = 'frontier-crawler/1.0'
    max_content_bytes: int = 10 * 1024 * 1024
    allowed_schemes: List[str] = field(default_factory=lambda: ['http', 'https'])


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = 'INFO'
    file: str = 'logs/crawler.log'
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    prometheus_port: int = 8000
    metrics_enabled: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def with_overrides(self, **overrides) -> 'Config':
        """Return a copy with crawler settings replaced; None values are ignored."""
        values = {key: value for key, value in overrides.items() if value is not None}
        unknown = set(values) - {f.name for f in fields(CrawlerConfig)}
        if unknown:
            raise ConfigurationError(f"Unknown crawler settings: {sorted(unknown)}")
        config = replace(self, crawler=replace(self.crawler, **values))
        validate_config(config)
        return config


def _build_section(cls, data: Optional[Dict[str, Any]], section: str):
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigurationError(f"Unknown keys in section '{section}': {sorted(unknown)}")
    return cls(**data)


def validate_config(config: Config):
    """Validate configuration values."""
    crawler = config.crawler

    if crawler.max_links < 0:
        raise ConfigurationError("max_links must be non-negative")

    if crawler.worker_count < 1:
        raise ConfigurationError("worker_count must be at least 1")

    if crawler.max_url_length < 1:
        raise ConfigurationError("max_url_length must be at least 1")

    if crawler.request_timeout <= 0:
        raise ConfigurationError("request_timeout must be positive")

    if crawler.idle_delay <= 0:
        raise ConfigurationError("idle_delay must be positive")

    if crawler.status_interval <= 0:
        raise ConfigurationError("status_interval must be positive")

    if crawler.pop_policy not in POP_POLICIES:
        raise ConfigurationError(f"pop_policy must be one of {', '.join(POP_POLICIES)}")

    if not crawler.allowed_schemes:
        raise ConfigurationError("allowed_schemes must not be empty")

    if crawler.max_content_bytes < 1:
        raise ConfigurationError("max_content_bytes must be at least 1")

    if not hasattr(logging, str(config.logging.level).upper()):
        raise ConfigurationError(f"Unknown log level: {config.logging.level}")


def load_config_from_dict(config_data: Optional[Dict[str, Any]]) -> Config:
    """Build and validate a Config from parsed YAML data."""
    config_data = config_data or {}
    if not isinstance(config_data, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    unknown = set(config_data) - {'crawler', 'logging', 'monitoring'}
    if unknown:
        raise ConfigurationError(f"Unknown configuration sections: {sorted(unknown)}")

    try:
        config = Config(
            crawler=_build_section(CrawlerConfig, config_data.get('crawler'), 'crawler'),
            logging=_build_section(LoggingConfig, config_data.get('logging'), 'logging'),
            monitoring=_build_section(MonitoringConfig, config_data.get('monitoring'), 'monitoring')
        )
        validate_config(config)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    return config


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file, or defaults when no path is set."""
        if self.config_path is None:
            self._config = load_config_from_dict({})
            return self._config

        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, 'r') as file:
                config_data = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {self.config_path}: {e}") from e

        self._config = load_config_from_dict(config_data)
        logging.getLogger(__name__).debug(f"Configuration loaded from {self.config_path}")
        return self._config

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ConfigurationError("Configuration not loaded. Call load_config() first.")
        return self._config


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file."""
    return ConfigManager(config_path).load_config()
