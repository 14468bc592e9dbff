"""
URL resolution for href/src candidates found in a document.

``UrlResolver`` turns any candidate into an absolute URL by trying an ordered
list of strategies. Every strategy returns ``None`` when it does not apply or
fails, so resolution always terminates with a value: the candidate itself is
the last resort.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence
from urllib.parse import urljoin, urlsplit

import structlog

from .document import ParsedDocument, attr

logger = structlog.get_logger(__name__)

# Characters that are never legal unescaped in a URI reference, non-ASCII included.
_INVALID_URI_CHARS = re.compile(r'[\s<>"{}|\\^`]|[^\x00-\x7f]')

_ABSOLUTE_PREFIXES = ("http://", "https://")

_UNSET = object()


class PageContext:
    """
    Where a document came from.

    Holds the source URL, host and scheme of a page plus the document's
    ``<base href>``, which is looked up on first use and then cached for the
    lifetime of the context.
    """

    __slots__ = ("_url", "_host", "_scheme", "_document", "_base_href")

    def __init__(
        self,
        url: Optional[str] = None,
        host: Optional[str] = None,
        scheme: Optional[str] = None,
        document: Optional[ParsedDocument] = None,
        base_href: Optional[str] | object = _UNSET,
    ) -> None:
        self._url = url or None
        self._host = host or None
        self._scheme = scheme or None
        self._document = document
        self._base_href = base_href

    @classmethod
    def from_url(cls, url: str, document: Optional[ParsedDocument] = None) -> "PageContext":
        """Build a context from a page URL, deriving host and scheme from it."""
        try:
            parts = urlsplit(url)
            host, scheme = parts.hostname, parts.scheme
        except ValueError:
            host, scheme = None, None
        return cls(url=url, host=host, scheme=scheme, document=document)

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def host(self) -> Optional[str]:
        return self._host

    @property
    def scheme(self) -> Optional[str]:
        return self._scheme

    @property
    def base_href(self) -> Optional[str]:
        """The document's ``<base href>``, queried at most once."""
        if self._base_href is _UNSET:
            base = None
            if self._document is not None:
                tag = self._document.select_one("base[href]")
                base = attr(tag, "href") if tag is not None else None
            self._base_href = base
        return self._base_href  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"PageContext(url={self._url!r}, host={self._host!r}, scheme={self._scheme!r})"


def join(base: Optional[str], candidate: str) -> Optional[str]:
    """Join ``candidate`` against ``base`` with RFC 3986 semantics.

    Returns ``None`` when the base is not an absolute URI or either side is not
    a well-formed URI reference.
    """
    if not base:
        return None
    if _INVALID_URI_CHARS.search(base) or _INVALID_URI_CHARS.search(candidate):
        return None
    try:
        if not urlsplit(base).scheme:
            return None
        return urljoin(base, candidate)
    except ValueError:
        return None


# --- Strategies ---

Strategy = Callable[[str, PageContext], Optional[str]]


def already_absolute(candidate: str, context: PageContext) -> Optional[str]:
    return candidate if candidate.startswith(_ABSOLUTE_PREFIXES) else None


def join_base_href(candidate: str, context: PageContext) -> Optional[str]:
    base = context.base_href
    if not base:
        return None
    joined = join(base, candidate)
    if joined is None:
        logger.debug("base href join failed", base=base, candidate=candidate)
    return joined


def join_page_url(candidate: str, context: PageContext) -> Optional[str]:
    if not context.url:
        return None
    joined = join(context.url, candidate)
    if joined is None:
        logger.debug("page url join failed", url=context.url, candidate=candidate)
    return joined


def root_relative(candidate: str, context: PageContext) -> Optional[str]:
    if not candidate.startswith("/"):
        return None
    if not context.host:
        return None
    return f"{context.scheme or 'http'}://{context.host}{candidate}"


def host_relative(candidate: str, context: PageContext) -> Optional[str]:
    if not context.host or candidate.startswith("/"):
        return None
    return f"http://{context.host}/{candidate}"


DEFAULT_STRATEGIES: Sequence[Strategy] = (
    already_absolute,
    join_base_href,
    join_page_url,
    root_relative,
    host_relative,
)


class UrlResolver:
    """Resolves candidates by trying each strategy in order."""

    def __init__(self, strategies: Optional[Sequence[Strategy]] = None) -> None:
        self.strategies: List[Strategy] = list(strategies or DEFAULT_STRATEGIES)

    def absolutize(self, candidate: Optional[str], context: PageContext) -> Optional[str]:
        """
        Make ``candidate`` absolute.

        Args:
            candidate: href/src value as found in the document
            context: Origin of the document

        Returns:
            The first non-empty strategy result, the candidate itself when no
            strategy applies, or ``None`` for an empty candidate.
        """
        if not candidate:
            return None
        for strategy in self.strategies:
            try:
                result = strategy(candidate, context)
            except ValueError as e:
                logger.debug("url strategy failed", strategy=strategy.__name__, candidate=candidate, error=str(e))
                continue
            if result:
                return result
        return candidate


_default_resolver = UrlResolver()


def absolutize(candidate: Optional[str], context: PageContext) -> Optional[str]:
    """Resolve ``candidate`` with the default strategy chain."""
    return _default_resolver.absolutize(candidate, context)
