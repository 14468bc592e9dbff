"""
Exception types for pagelens.

The extraction engine never raises; these are used by the fetcher,
the page façade and the configuration layer.
"""
from __future__ import annotations

from typing import Optional


class PageLensError(Exception):
    """Base exception for pagelens errors."""
    pass


class InvalidURLError(PageLensError):
    """Raised when a page URL cannot be parsed into scheme and host."""
    pass


class FetchError(PageLensError):
    """Raised when a page could not be retrieved."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigError(PageLensError):
    """Raised when a configuration file cannot be loaded."""
    pass
