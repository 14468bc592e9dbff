"""
Page façade - one inspected URL.

``Page`` ties the collaborators together: it validates the URL, fetches it,
parses the body, and exposes the inspector's fields along with the response
level facts (content type, size, load time, security headers). A page that
failed to load reports the failure through ``success`` and ``error_message``;
its extraction fields are ``None`` and no extraction is attempted.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from .config import Config, settings
from .document import Document, attr
from .exceptions import InvalidURLError
from .fetcher import Fetcher
from .inspector import Inspector
from .models import FetchResult
from .observability import increment
from .request import RequestInfo
from .technologies import detect_technologies
from .urls import PageContext, join

logger = structlog.get_logger(__name__)

_UNSET = object()

FAVICON_SELECTOR = 'link[rel="shortcut icon"], link[rel="icon"], link[rel="apple-touch-icon"]'


class Page:
    """
    An inspected web page.

    Args:
        url: Page URL; ``http://`` is assumed when no scheme is given
        config: Settings; the lazily loaded global settings when omitted
        fetcher: Fetcher to retrieve the page with
        response: Already retrieved response; skips fetching
    """

    def __init__(
        self,
        url: str,
        config: Optional[Config] = None,
        fetcher: Optional[Fetcher] = None,
        response: Optional[FetchResult] = None,
    ) -> None:
        self.config: Config = config if config is not None else settings
        self.request = RequestInfo(url)
        self.response: Optional[FetchResult] = None
        self.status_code: Optional[int] = None
        self._inspector: Optional[Inspector] = None
        self._error: Optional[Exception] = None
        self._cache: Dict[str, Any] = {}

        if not self.request.valid:
            self._fail(InvalidURLError(self.request.error_message), 500)
            return

        if response is None:
            if fetcher is not None:
                response = fetcher.fetch(self.request.url)
            else:
                with Fetcher(self.config.fetch) as owned:
                    response = owned.fetch(self.request.url)
        self._load(response)

    @classmethod
    def from_html(
        cls,
        html: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        status_code: int = 200,
        config: Optional[Config] = None,
    ) -> "Page":
        """Build a page from markup that was retrieved elsewhere."""
        response = FetchResult(
            url=url,
            final_url=url,
            status_code=status_code,
            headers={key.lower(): value for key, value in (headers or {}).items()},
            content=html.encode("utf-8"),
            encoding="utf-8",
        )
        return cls(url, config=config, response=response)

    def _fail(self, error: Exception, status_code: Optional[int]) -> None:
        self._error = error
        self.status_code = status_code
        increment("pages", labels={"outcome": "failed"})
        logger.info("Page not inspected", url=self.request.raw_url, error=str(error))

    def _load(self, response: FetchResult) -> None:
        self.response = response
        self.status_code = response.status_code
        if response.error is not None:
            self._fail(response.error, response.status_code)
            return

        markup: str | bytes = response.text if response.encoding else response.content
        try:
            document = Document.parse(markup, backend=self.config.parser.backend)
        except Exception as e:
            # bs4 raises FeatureNotFound when the configured tree builder is not installed.
            self._fail(e, 500)
            return

        context = PageContext.from_url(response.final_url or self.request.url, document)
        self._inspector = Inspector(document, context, config=self.config.extraction)
        increment("pages", labels={"outcome": "success"})

    # --- Status ---

    @property
    def success(self) -> bool:
        return self._inspector is not None and self._error is None

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def error_message(self) -> Optional[str]:
        return str(self._error) if self._error is not None else None

    @property
    def inspector(self) -> Optional[Inspector]:
        return self._inspector

    # --- Request parts ---

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def host(self) -> Optional[str]:
        return self.request.host

    @property
    def domain(self) -> str:
        return self.request.domain

    @property
    def scheme(self) -> Optional[str]:
        return self.request.scheme

    @property
    def port(self) -> Optional[int]:
        return self.request.port

    # --- Extraction fields ---

    def _delegate(self, extract: Callable[[Inspector], Any]) -> Any:
        if not self.success or self._inspector is None:
            return None
        return extract(self._inspector)

    @property
    def title(self) -> Optional[str]:
        return self._delegate(Inspector.title)

    @property
    def description(self) -> Optional[str]:
        return self._delegate(Inspector.description)

    @property
    def body(self) -> Optional[str]:
        return self._delegate(Inspector.body)

    @property
    def meta(self) -> Optional[Dict[str, str]]:
        return self._delegate(Inspector.meta)

    @property
    def charset(self) -> Optional[str]:
        return self._delegate(Inspector.charset)

    @property
    def links(self) -> Optional[List[str]]:
        return self._delegate(Inspector.links)

    @property
    def images(self) -> Optional[List[str]]:
        return self._delegate(Inspector.images)

    @property
    def javascripts(self) -> Optional[List[str]]:
        return self._delegate(Inspector.javascripts)

    @property
    def stylesheets(self) -> Optional[List[str]]:
        return self._delegate(Inspector.stylesheets)

    @property
    def language(self) -> Optional[str]:
        return self._delegate(Inspector.language)

    @property
    def structured_data(self) -> Optional[List[Any]]:
        return self._delegate(Inspector.structured_data)

    json_ld = structured_data

    @property
    def microdata(self) -> Optional[List[Dict[str, Any]]]:
        items = self._delegate(Inspector.microdata)
        return [item.to_dict() for item in items] if items is not None else None

    @property
    def tag_count(self) -> Optional[Dict[str, int]]:
        return self._delegate(Inspector.tag_count)

    def find(self, words: Sequence[str]) -> Optional[List[Dict[str, int]]]:
        return self._delegate(lambda inspector: inspector.find(words))

    def domain_links(self, domain: Optional[str] = None) -> List[str]:
        """Links on this page within ``domain``, the page's registrable domain by default."""
        if not self.success or self._inspector is None:
            return []
        target = self.domain if domain is None else domain
        return self._inspector.domain_links(target, self.host)

    def domain_images(self, domain: Optional[str] = None) -> List[str]:
        """Images on this page within ``domain``, the page's registrable domain by default."""
        if not self.success or self._inspector is None:
            return []
        target = self.domain if domain is None else domain
        return self._inspector.domain_images(target, self.host)

    # --- Page-level fields ---

    @property
    def favicon(self) -> Optional[str]:
        if not self.success or self._inspector is None:
            return None
        cached = self._cache.get("favicon", _UNSET)
        if cached is _UNSET:
            cached = self._find_favicon(self._inspector)
            self._cache["favicon"] = cached
        return cached

    def _find_favicon(self, inspector: Inspector) -> str:
        link = inspector.document.select_one(FAVICON_SELECTOR)
        href = attr(link, "href") if link is not None else None
        if href:
            joined = join(self.url, href)
            if joined:
                return joined
        return f"{self.scheme}://{self.host}/favicon.ico"

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.response.headers) if self.response is not None else {}

    @property
    def security_info(self) -> Dict[str, Any]:
        headers = self.headers
        return {
            "secure": self.scheme == "https",
            "hsts": "strict-transport-security" in headers,
            "content_security_policy": "content-security-policy" in headers,
        }

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def size(self) -> Optional[int]:
        if self.response is None or (self.response.error is not None and not self.response.content):
            return None
        length = self.response.headers.get("content-length")
        if length is not None:
            try:
                return int(length)
            except ValueError:
                logger.debug("Ignoring malformed content-length", value=length)
        return len(self.response.content)

    @property
    def load_time(self) -> Optional[float]:
        return self.response.elapsed if self.response is not None else None

    @property
    def technologies(self) -> Dict[str, Any]:
        return detect_technologies(
            javascripts=self.javascripts,
            stylesheets=self.stylesheets,
            body=self.body,
            meta=self.meta,
            headers=self.headers,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flat projection of every page field."""
        return {
            "url": self.url,
            "scheme": self.scheme,
            "host": self.host,
            "port": self.port,
            "title": self.title,
            "description": self.description,
            "meta": self.meta,
            "links": self.links,
            "images": self.images,
            "javascripts": self.javascripts,
            "stylesheets": self.stylesheets,
            "favicon": self.favicon,
            "language": self.language,
            "structured_data": self.structured_data,
            "microdata": self.microdata,
            "security_info": self.security_info,
            "content_type": self.content_type,
            "size": self.size,
            "load_time": self.load_time,
            "technologies": self.technologies,
            "tag_count": self.tag_count,
            "response": {
                "status": self.status_code,
                "headers": self.headers,
                "success": self.success,
            },
            "error": self.error_message,
        }

    def __repr__(self) -> str:
        state = "ok" if self.success else "failed"
        return f"<Page {self.url or self.request.raw_url!r} {state}>"
