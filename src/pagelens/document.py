"""
Parsed HTML documents.

The extraction engine only needs a handful of capabilities from a parsed
document: CSS-selector queries, attribute and text reads, subtree
serialization and tag names. ``ParsedDocument`` names that contract and
``Document`` provides it on top of BeautifulSoup.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Protocol, runtime_checkable

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)


@runtime_checkable
class ParsedDocument(Protocol):
    """Read-only view of a parsed HTML document."""

    def select(self, selector: str) -> List[Tag]:
        ...

    def select_one(self, selector: str) -> Optional[Tag]:
        ...

    def elements(self) -> Iterator[Tag]:
        ...

    def text(self) -> str:
        ...


class Document:
    """BeautifulSoup-backed ``ParsedDocument``."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    @classmethod
    def parse(cls, markup: str | bytes, backend: str = "html.parser") -> "Document":
        """Parse markup with the given BeautifulSoup tree builder.

        Attributes are kept as plain strings (``rel="shortcut icon"`` stays a
        single value) so selectors and attribute reads see exactly what the
        author wrote.
        """
        soup = BeautifulSoup(markup or "", backend, multi_valued_attributes=None)
        logger.debug("document parsed", backend=backend, size=len(markup or ""))
        return cls(soup)

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    def select(self, selector: str) -> List[Tag]:
        return list(self._soup.select(selector))

    def select_one(self, selector: str) -> Optional[Tag]:
        return self._soup.select_one(selector)

    def elements(self) -> Iterator[Tag]:
        """Every element in document order."""
        return iter(self._soup.find_all(True))

    def text(self) -> str:
        """Text content of the whole document, script and style bodies excluded."""
        return self._soup.get_text()

    def __repr__(self) -> str:
        return f"<Document elements={len(self._soup.find_all(True))}>"


def attr(element: Tag, name: str) -> Optional[str]:
    """Read an attribute as a string, ``None`` when absent."""
    value = element.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def inner_text(element: Tag) -> str:
    return element.get_text().strip()


def outer_html(element: Tag) -> str:
    return str(element)
