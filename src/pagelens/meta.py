"""
Meta Aggregator - merges scattered ``<meta>`` declarations into one map.

Declarations are grouped by the attribute that names them (``name``,
``http-equiv``, ``property``, ``itemprop``). Within a group the first value
declared for a key wins. Groups are then merged in a fixed order so that a key
declared under several attribute kinds resolves predictably:

    name -> http-equiv -> property -> itemprop -> charset -> author/publisher

Later groups overwrite earlier ones.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

import structlog

from .document import ParsedDocument, attr

logger = structlog.get_logger(__name__)

META_ATTRIBUTE_KINDS = ("name", "http-equiv", "property", "itemprop")

DEFAULT_CHARSET = "utf-8"

_CHARSET_PARAM = re.compile(r"charset\s*=\s*[\"']?([^\s;\"']+)", re.IGNORECASE)


def _first_present(
    primary: Dict[str, str], primary_key: str, secondary: Dict[str, str], secondary_key: str
) -> Optional[str]:
    if primary_key in primary:
        return primary[primary_key]
    return secondary.get(secondary_key)


class MetaAggregator:
    """Builds the canonical meta map and the fields derived from it."""

    def __init__(
        self,
        document: ParsedDocument,
        snippet_min_length: int = 120,
        snippet_max_length: int = 256,
    ) -> None:
        self.document = document
        self.snippet_min_length = snippet_min_length
        self.snippet_max_length = snippet_max_length

    def tags_by(self, attribute: str) -> Dict[str, List[str]]:
        """Group ``content`` values of ``<meta {attribute}>`` tags by lowercased key."""
        grouped: Dict[str, List[str]] = {}
        for tag in self.document.select(f"meta[{attribute}]"):
            key = attr(tag, attribute)
            content = attr(tag, "content")
            if key is None or content is None:
                continue
            grouped.setdefault(key.lower(), []).append(content)
        return grouped

    def first_values_by(self, attribute: str) -> Dict[str, str]:
        return {key: values[0] for key, values in self.tags_by(attribute).items()}

    def meta_charset(self) -> Optional[str]:
        tag = self.document.select_one("meta[charset]")
        return attr(tag, "charset") if tag is not None else None

    def build_meta_map(self) -> Dict[str, str]:
        groups = {kind: self.first_values_by(kind) for kind in META_ATTRIBUTE_KINDS}
        name, property_ = groups["name"], groups["property"]

        meta: Dict[str, str] = {}
        meta.update(name)
        meta.update(groups["http-equiv"])
        meta.update(property_)
        if groups["itemprop"]:
            meta.update(groups["itemprop"])

        charset = self.meta_charset()
        if charset is not None:
            meta["charset"] = charset

        author = _first_present(name, "author", property_, "article:author")
        if author is not None:
            meta["author"] = author
        publisher = _first_present(property_, "article:publisher", property_, "og:site_name")
        if publisher is not None:
            meta["publisher"] = publisher

        logger.debug("meta map built", keys=len(meta))
        return meta

    def charset(self) -> str:
        """Declared document charset, ``utf-8`` when nothing is declared."""
        declared = self.meta_charset()
        if declared:
            return declared
        tag = self.document.select_one('meta[http-equiv="Content-Type" i][content]')
        if tag is not None:
            match = _CHARSET_PARAM.search(attr(tag, "content") or "")
            if match:
                return match.group(1)
        return DEFAULT_CHARSET

    def description(self, meta: Dict[str, str]) -> str:
        if "description" in meta:
            return meta["description"]
        if "og:description" in meta:
            return meta["og:description"]
        return self.snippet()

    def snippet(self) -> str:
        """Leading text of the first paragraph long enough to stand as a summary."""
        for paragraph in self.document.select("p"):
            text = paragraph.get_text()
            if len(text) >= self.snippet_min_length:
                return text.strip()[: self.snippet_max_length]
        return ""
