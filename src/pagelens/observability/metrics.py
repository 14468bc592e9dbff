"""
Defines the Prometheus metrics recorded while inspecting pages.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test collection, reloads) must not raise
# "Duplicated timeseries" from the default registry.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "pages": Counter(
            "pagelens_pages_total",
            "Total number of pages inspected, by outcome",
            ["outcome"],
        ),
        "fetch_duration_seconds": Histogram(
            "pagelens_fetch_duration_seconds",
            "Time taken to fetch a page including retries",
            buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
        ),
        "fetch_retries": Counter(
            "pagelens_fetch_retries_total",
            "Total number of fetch retries after transport errors",
        ),
        "items_skipped": Counter(
            "pagelens_items_skipped_total",
            "Total number of malformed items dropped during extraction",
            ["field"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()

_enabled = True


def set_enabled(enabled: bool) -> None:
    """Turn metric recording on or off process-wide."""
    global _enabled
    _enabled = enabled


def is_enabled() -> bool:
    return _enabled
