"""
Exception classes for the web crawler system.
"""

from typing import Optional, Dict, Any


class CrawlerError(Exception):
    """Base exception for all crawler errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CrawlerError):
    """Exception raised for configuration-related issues."""
    pass


class InvalidStartingUrlError(CrawlerError):
    """Raised when the seed URL cannot be used to start a crawl."""
    pass


class ResolutionError(CrawlerError):
    """Raised when a discovered link cannot be turned into a crawlable URL."""

    def __init__(self, message: str, link: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.link = link

    @property
    def reason(self) -> str:
        return 'unresolvable'


class UrlTooLongError(ResolutionError):
    """The resolved URL exceeds the configured maximum length."""

    @property
    def reason(self) -> str:
        return 'too_long'


class MalformedUrlError(ResolutionError):
    """The link could not be parsed or joined against its base."""

    @property
    def reason(self) -> str:
        return 'malformed'


class UnsupportedSchemeError(ResolutionError):
    """The link uses a scheme the crawler does not fetch."""

    @property
    def reason(self) -> str:
        return 'unsupported_scheme'
