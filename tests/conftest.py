"""
Shared test configuration for PageLens.

Provides sample documents, page contexts and isolation fixtures for the
configuration loader, logging and metrics.
"""

# Standard library imports
import logging
import os
from typing import Callable, Generator

# Third-party imports
import pytest

# Local imports
from pagelens.config.config import LazyConfig
from pagelens.document import Document
from pagelens.inspector import Inspector
from pagelens.observability import set_enabled
from pagelens.urls import PageContext
from tests.helpers.pages import SAMPLE_HTML, SAMPLE_PAGE_URL

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests across modules")


# ============================================================================
# Isolation Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch, tmp_path) -> Generator[None, None, None]:
    """Run every test from an empty directory with no PAGELENS_ environment."""
    for name in list(os.environ):
        if name.startswith("PAGELENS_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    LazyConfig.reset()
    yield
    LazyConfig.reset()


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo root logger changes made by ``configure_logging``."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def metrics_enabled() -> Generator[None, None, None]:
    set_enabled(True)
    yield
    set_enabled(True)


# ============================================================================
# Document Fixtures
# ============================================================================


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture
def sample_context() -> PageContext:
    return PageContext.from_url(SAMPLE_PAGE_URL)


@pytest.fixture
def make_inspector() -> Callable[..., Inspector]:
    """Build an inspector for markup served from ``url``."""

    def _make(html: str, url: str = SAMPLE_PAGE_URL, **kwargs) -> Inspector:
        document = Document.parse(html)
        return Inspector(document, PageContext.from_url(url, document), **kwargs)

    return _make
