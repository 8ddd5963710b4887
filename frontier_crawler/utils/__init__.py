"""
Utility modules for the web crawler.
"""

from .config import Config, ConfigManager, load_config, load_config_from_dict
from .errors import CrawlerError, ConfigurationError

__all__ = [
    'Config', 'ConfigManager', 'load_config', 'load_config_from_dict',
    'CrawlerError', 'ConfigurationError'
]
