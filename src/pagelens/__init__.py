"""
PageLens - HTML metadata extraction for web pages.
"""

from __future__ import annotations

__version__ = "0.1.0"

from typing import Optional

from .config import Config
from .document import Document
from .exceptions import ConfigError, FetchError, InvalidURLError, PageLensError
from .inspector import Inspector
from .page import Page
from .urls import PageContext, UrlResolver

__all__ = [
    "__version__",
    "Config",
    "ConfigError",
    "Document",
    "FetchError",
    "Inspector",
    "InvalidURLError",
    "Page",
    "PageContext",
    "PageLensError",
    "UrlResolver",
    "inspect",
]


def inspect(url: str, config: Optional[Config] = None) -> Page:
    """Fetch and inspect ``url``."""
    return Page(url, config=config)
