"""
Inspector - turns a parsed document into page metadata.

``Inspector`` walks the document once per requested field and memoizes the
result. Every href/src goes through the URL resolver, domain-scoped views go
through the domain matcher, and the canonical meta map comes from the meta
aggregator. Nothing here raises on malformed markup: a bad item is dropped and
a missing field resolves to ``None`` or an empty value.
"""

from __future__ import annotations

import json
import re
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import structlog
from bs4 import Tag

from .config import ExtractionConfig
from .document import ParsedDocument, attr, inner_text, outer_html
from .domains import filter_by_domain
from .meta import MetaAggregator
from .models import MicrodataItem
from .observability import increment
from .urls import PageContext, UrlResolver

logger = structlog.get_logger(__name__)

_UNSET = object()


# --- Microdata value extraction ---

ValueExtractor = Callable[[Tag, "Inspector"], Optional[str]]


def _content_value(element: Tag, inspector: "Inspector") -> Optional[str]:
    return attr(element, "content")


def _src_value(element: Tag, inspector: "Inspector") -> Optional[str]:
    return inspector.absolutize(attr(element, "src"))


def _href_value(element: Tag, inspector: "Inspector") -> Optional[str]:
    return inspector.absolutize(attr(element, "href"))


def _time_value(element: Tag, inspector: "Inspector") -> Optional[str]:
    datetime = attr(element, "datetime")
    return datetime if datetime is not None else inner_text(element)


def _text_value(element: Tag, inspector: "Inspector") -> Optional[str]:
    return inner_text(element)


MICRODATA_VALUE_EXTRACTORS: Dict[str, ValueExtractor] = {
    "meta": _content_value,
    "img": _src_value,
    "audio": _src_value,
    "embed": _src_value,
    "iframe": _src_value,
    "source": _src_value,
    "track": _src_value,
    "video": _src_value,
    "a": _href_value,
    "area": _href_value,
    "link": _href_value,
    "time": _time_value,
}


class Inspector:
    """
    Extracts metadata from one parsed document.

    Each field is computed on first access and cached in an explicit slot for
    the lifetime of the instance. Extraction is deterministic, so two threads
    racing on the first access merely compute the same value twice.
    """

    def __init__(
        self,
        document: ParsedDocument,
        context: Optional[PageContext] = None,
        config: Optional[ExtractionConfig] = None,
        resolver: Optional[UrlResolver] = None,
    ) -> None:
        self.document = document
        self.context = context or PageContext(document=document)
        self.config = config or ExtractionConfig()
        self.resolver = resolver or UrlResolver()
        self.meta_aggregator = MetaAggregator(
            document,
            snippet_min_length=self.config.snippet_min_length,
            snippet_max_length=self.config.snippet_max_length,
        )
        self._cache: Dict[str, Any] = {}

    @property
    def url(self) -> Optional[str]:
        return self.context.url

    @property
    def host(self) -> Optional[str]:
        return self.context.host

    def _cached(self, name: str, compute: Callable[[], Any]) -> Any:
        value = self._cache.get(name, _UNSET)
        if value is _UNSET:
            value = compute()
            self._cache[name] = value
        return value

    def absolutize(self, candidate: Optional[str]) -> Optional[str]:
        return self.resolver.absolutize(candidate, self.context)

    # --- Text fields ---

    def title(self) -> Optional[str]:
        return self._cached("title", self._extract_title)

    def _extract_title(self) -> Optional[str]:
        try:
            element = self.document.select_one("title")
            return inner_text(element) if element is not None else None
        except Exception as e:
            logger.debug("title extraction failed", error=str(e))
            return None

    def body(self) -> str:
        def compute() -> str:
            element = self.document.select_one("body")
            return outer_html(element) if element is not None else ""

        return self._cached("body", compute)

    def meta(self) -> Dict[str, str]:
        return self._cached("meta", self.meta_aggregator.build_meta_map)

    def charset(self) -> str:
        return self._cached("charset", self.meta_aggregator.charset)

    def description(self) -> str:
        return self._cached("description", lambda: self.meta_aggregator.description(self.meta()))

    def language(self) -> Optional[str]:
        def compute() -> Optional[str]:
            html = self.document.select_one("html[lang]")
            lang = attr(html, "lang") if html is not None else None
            if lang:
                return lang
            return self.meta().get("content-language")

        return self._cached("language", compute)

    # --- URL collections ---

    def _collect(self, values: Iterable[Optional[str]], skipped: Sequence[str] = ()) -> List[str]:
        """Absolutize, filter and dedupe candidates, keeping first-seen order."""
        seen: Dict[str, None] = {}
        for value in values:
            if value is None:
                continue
            candidate = value.strip()
            if not candidate or candidate.startswith(tuple(skipped)):
                continue
            absolute = self.absolutize(candidate)
            if absolute:
                seen.setdefault(absolute, None)
        return list(seen)

    def _attribute_values(self, selector: str, attribute: str) -> List[Optional[str]]:
        return [attr(element, attribute) for element in self.document.select(selector)]

    def links(self) -> List[str]:
        return self._cached(
            "links",
            lambda: self._collect(
                self._attribute_values("a[href]", "href"),
                skipped=self.config.skipped_link_schemes,
            ),
        )

    def images(self) -> List[str]:
        return self._cached("images", lambda: self._collect(self._attribute_values("img[src]", "src")))

    def javascripts(self) -> List[str]:
        return self._cached("javascripts", lambda: self._collect(self._attribute_values("script[src]", "src")))

    def stylesheets(self) -> List[str]:
        return self._cached(
            "stylesheets",
            lambda: self._collect(self._attribute_values('link[rel="stylesheet"][href]', "href")),
        )

    def domain_links(self, domain: Optional[str] = None, host: Optional[str] = None) -> List[str]:
        """Links whose host contains ``domain`` (the page host when empty)."""
        return filter_by_domain(self.links(), domain, host or self.host)

    def domain_images(self, domain: Optional[str] = None, host: Optional[str] = None) -> List[str]:
        """Images whose host contains ``domain`` (the page host when empty)."""
        return filter_by_domain(self.images(), domain, host or self.host)

    # --- Structured data ---

    def structured_data(self) -> List[Any]:
        return self._cached("structured_data", self._extract_structured_data)

    def _extract_structured_data(self) -> List[Any]:
        items: List[Any] = []
        for script in self.document.select('script[type="application/ld+json"]'):
            source = script.string if script.string is not None else script.get_text()
            try:
                items.append(json.loads(source))
            except (json.JSONDecodeError, RecursionError) as e:
                logger.debug("invalid JSON-LD block skipped", error=str(e))
                increment("items_skipped", labels={"field": "structured_data"})
        return items

    def microdata(self) -> List[MicrodataItem]:
        return self._cached("microdata", self._extract_microdata)

    def _extract_microdata(self) -> List[MicrodataItem]:
        items: List[MicrodataItem] = []
        for scope in self.document.select("[itemscope]"):
            properties: Dict[str, Optional[str]] = {}
            for element in scope.select("[itemprop]"):
                name = attr(element, "itemprop")
                if name is None:
                    continue
                extract = MICRODATA_VALUE_EXTRACTORS.get((element.name or "").lower(), _text_value)
                properties[name] = extract(element, self)
            items.append(MicrodataItem(type=attr(scope, "itemtype"), properties=properties))
        return items

    # --- Statistics and search ---

    def tag_count(self) -> Dict[str, int]:
        def compute() -> Dict[str, int]:
            counts: Counter[str] = Counter(element.name.lower() for element in self.document.elements())
            return dict(counts)

        return self._cached("tag_count", compute)

    def _search_text(self) -> str:
        return self._cached("search_text", lambda: self.document.text().lower())

    def find(self, words: Sequence[str]) -> List[Dict[str, int]]:
        """
        Count case-insensitive, literal occurrences of each word.

        Returns one single-entry mapping per input word, in input order.
        """
        text = self._search_text()
        return [{word: len(re.findall(re.escape(word.lower()), text))} for word in words]
