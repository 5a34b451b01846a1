"""
Defines Prometheus metrics for duplicate detection runs.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (e.g. across a test session) must reuse the
# collectors already registered instead of raising on duplicate names.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race; use the collector that won.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]

METRICS: Dict[str, Any] = {
    "detect_runs": Counter(
        "lshdedup_detect_runs_total",
        "Total number of detection runs",
    ),
    "comparisons": Counter(
        "lshdedup_comparisons_total",
        "Pairwise similarity comparisons performed on candidate pairs",
    ),
    "duplicates": Counter(
        "lshdedup_duplicates_total",
        "Duplicate pairs accepted at or above the threshold",
    ),
    "detect_duration_seconds": Histogram(
        "lshdedup_detect_duration_seconds",
        "Time spent in each detection phase",
        ["phase"],
    ),
}


def record_run(comparisons: int, duplicates: int, phase_seconds: Dict[str, float]) -> None:
    """Record the outcome of one detection run."""
    METRICS["detect_runs"].inc()
    METRICS["comparisons"].inc(comparisons)
    METRICS["duplicates"].inc(duplicates)
    for phase, seconds in phase_seconds.items():
        METRICS["detect_duration_seconds"].labels(phase=phase).observe(seconds)
