"""
Data models shared by the fetcher, the inspector and the page façade.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(slots=True, frozen=True)
class MicrodataItem:
    """One ``itemscope`` element and the ``itemprop`` values beneath it."""

    type: Optional[str]
    properties: Dict[str, Optional[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "properties": dict(self.properties)}


@dataclass(slots=True)
class FetchResult:
    """Snapshot of an HTTP exchange as seen by the page façade."""

    url: str
    final_url: str
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    content: bytes = b""
    encoding: Optional[str] = None
    elapsed: Optional[float] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        """Body decoded with the response encoding, falling back to UTF-8."""
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")
