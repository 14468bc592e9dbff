"""
Normalized view of the URL a page was requested with.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import SplitResult, urlsplit, urlunsplit

from .domains import registrable_domain

DEFAULT_PORTS = {"http": 80, "https": 443}

INVALID_URL_MESSAGE = "Invalid URL: Unable to parse the provided URL"


def with_default_scheme(url: str) -> str:
    """Prefix ``http://`` when ``url`` carries no scheme."""
    url = (url or "").strip()
    if url and "://" not in url and not url.startswith("//"):
        return f"http://{url}"
    if url.startswith("//"):
        return f"http:{url}"
    return url


class RequestInfo:
    """URL parts of a requested page: normalized URL, host, scheme, port and domain."""

    def __init__(self, url: str) -> None:
        self.raw_url = url
        self._parts = self._split(with_default_scheme(url))
        self._domain: Optional[str] = None

    @staticmethod
    def _split(url: str) -> Optional[SplitResult]:
        try:
            parts = urlsplit(url)
            # Accessing port validates it.
            parts.port
        except ValueError:
            return None
        return parts

    @property
    def url(self) -> str:
        """Normalized URL: lowercase scheme and host, default port dropped, ``/`` for an empty path."""
        parts = self._parts
        if parts is None or not parts.scheme:
            return ""
        scheme = parts.scheme.lower()
        host = (parts.hostname or "").lower()
        if ":" in host:
            host = f"[{host}]"
        netloc = host
        if parts.username:
            userinfo = parts.username + (f":{parts.password}" if parts.password is not None else "")
            netloc = f"{userinfo}@{netloc}"
        if parts.port is not None and parts.port != DEFAULT_PORTS.get(scheme):
            netloc = f"{netloc}:{parts.port}"
        path = parts.path or ("/" if host else "")
        return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))

    @property
    def host(self) -> Optional[str]:
        return self._parts.hostname if self._parts is not None else None

    @property
    def scheme(self) -> Optional[str]:
        if self._parts is None or not self._parts.scheme:
            return None
        return self._parts.scheme.lower()

    @property
    def port(self) -> Optional[int]:
        if self._parts is None:
            return None
        if self._parts.port is not None:
            return self._parts.port
        return DEFAULT_PORTS.get(self.scheme or "")

    @property
    def domain(self) -> str:
        """Registrable domain of the host, ``""`` when it cannot be determined."""
        if self._domain is None:
            self._domain = registrable_domain(self.host)
        return self._domain

    @property
    def valid(self) -> bool:
        return self._parts is not None and bool(self.host)

    @property
    def ssl(self) -> bool:
        return self.scheme == "https"

    @property
    def error_message(self) -> Optional[str]:
        return None if self.valid else INVALID_URL_MESSAGE

    def __repr__(self) -> str:
        return f"RequestInfo({self.raw_url!r})"
