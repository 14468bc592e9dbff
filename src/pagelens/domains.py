"""
Hostname normalization and domain-scoped URL filtering.

Matching is deliberately loose: a host matches a target domain when the
normalized target appears anywhere inside the normalized host. That accepts
subdomains (``blog.example.com`` for ``example.com``) but also unrelated hosts
that merely share the text (``notexample.com``).
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

import tldextract

_WHITESPACE = re.compile(r"\s+")

# Bundled public suffix snapshot only; never fetched at runtime.
_extract = tldextract.TLDExtract(suffix_list_urls=())


def normalize(domain: Optional[str]) -> str:
    """Lowercase, drop all whitespace and one leading ``www.``."""
    value = _WHITESPACE.sub("", (domain or "").lower())
    if value.startswith("www."):
        value = value[4:]
    return value


def matches(url_host: Optional[str], target_domain: Optional[str]) -> bool:
    return normalize(target_domain) in normalize(url_host)


def host_of(url: str) -> Optional[str]:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def filter_by_domain(
    urls: Iterable[str],
    target_domain: Optional[str],
    fallback_host: Optional[str] = None,
) -> List[str]:
    """
    Keep the URLs whose host matches ``target_domain``.

    An empty target falls back to ``fallback_host``. URLs without a parseable
    host are dropped. Order is preserved.
    """
    target = target_domain if target_domain else (fallback_host or "")
    kept: List[str] = []
    for url in urls:
        host = host_of(url)
        if not host:
            continue
        if matches(host, target):
            kept.append(url)
    return kept


@lru_cache(maxsize=1024)
def registrable_domain(host: Optional[str]) -> str:
    """Registrable domain of ``host`` (``example.co.uk`` for ``a.b.example.co.uk``).

    Returns ``""`` for IP addresses, bare suffixes and unparseable input.
    """
    if not host:
        return ""
    parts = _extract(host)
    if not parts.domain or not parts.suffix:
        return ""
    return f"{parts.domain}.{parts.suffix}"
