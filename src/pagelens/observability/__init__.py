"""Logging and metrics for pagelens."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .logging import configure_logging, use_stdlib_defaults
from .metrics import METRICS, is_enabled, set_enabled

__all__ = [
    "configure_logging",
    "use_stdlib_defaults",
    "METRICS",
    "increment",
    "observe",
    "set_enabled",
    "export_prometheus",
]

use_stdlib_defaults()


def increment(name: str, value: float = 1.0, labels: Optional[Dict[str, Any]] = None) -> None:
    """Increment a counter metric."""
    if not is_enabled() or name not in METRICS:
        return
    metric = METRICS[name]
    if labels is not None:
        metric.labels(**labels).inc(value)
    else:
        metric.inc(value)


def observe(name: str, value: float, labels: Optional[Dict[str, Any]] = None) -> None:
    """Observe a histogram metric."""
    if not is_enabled() or name not in METRICS:
        return
    metric = METRICS[name]
    if labels is not None:
        metric.labels(**labels).observe(value)
    else:
        metric.observe(value)


def export_prometheus() -> str:
    """Export metrics in Prometheus text format."""
    from prometheus_client import generate_latest

    return generate_latest().decode("utf-8")
