"""Prometheus metric definitions shared across AlmanacEngine components."""

from __future__ import annotations

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = [
    "APPARENT_PLACE_SOLVES",
    "COMPUTE_ERRORS",
    "EPHEMERIS_CACHE_HITS",
    "EPHEMERIS_CACHE_MISSES",
    "EPHEMERIS_COMPUTE_DURATION",
    "LIGHT_TIME_ITERATIONS",
    "REFINEMENT_OUTCOMES",
    "ensure_metrics_registered",
]


APPARENT_PLACE_SOLVES = Counter(
    "almanacengine_apparent_place_solves_total",
    "Total apparent-place evaluations.",
    ("target",),
    registry=None,
)

LIGHT_TIME_ITERATIONS = Histogram(
    "almanacengine_light_time_iterations",
    "Iterations needed for the light-time solution to converge.",
    buckets=(1, 2, 3, 4, 5, 8, 13, 21, 50),
    registry=None,
)

REFINEMENT_OUTCOMES = Counter(
    "almanacengine_refinement_outcomes_total",
    "Outcomes of rise/set refinement per sampled interval.",
    ("method", "status"),
    registry=None,
)

EPHEMERIS_CACHE_HITS = Counter(
    "almanacengine_ephemeris_cache_hits_total",
    "Total ephemeris cache hits served from in-memory backends.",
    ("backend",),
    registry=None,
)

EPHEMERIS_CACHE_MISSES = Counter(
    "almanacengine_ephemeris_cache_misses_total",
    "Total ephemeris cache misses that required kernel evaluation.",
    ("backend",),
    registry=None,
)

EPHEMERIS_COMPUTE_DURATION = Histogram(
    "almanacengine_ephemeris_compute_duration_seconds",
    "Duration of ephemeris kernel evaluations.",
    ("backend", "body"),
    registry=None,
)

COMPUTE_ERRORS = Counter(
    "almanacengine_compute_errors_total",
    "Count of runtime failures across compute-heavy routines.",
    ("component", "error"),
    registry=None,
)


def _iter_metrics() -> Iterable[Counter | Histogram]:
    yield APPARENT_PLACE_SOLVES
    yield LIGHT_TIME_ITERATIONS
    yield REFINEMENT_OUTCOMES
    yield EPHEMERIS_CACHE_HITS
    yield EPHEMERIS_CACHE_MISSES
    yield EPHEMERIS_COMPUTE_DURATION
    yield COMPUTE_ERRORS


def ensure_metrics_registered(
    registry: CollectorRegistry | None = None,
) -> None:
    """Register shared metrics with ``registry`` if not already present."""

    target = registry or REGISTRY
    for metric in _iter_metrics():
        try:
            target.register(metric)
        except ValueError:
            # Prometheus raises when a metric name already exists in the registry.
            continue
