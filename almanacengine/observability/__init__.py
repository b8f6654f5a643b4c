"""Runtime observability primitives for AlmanacEngine modules."""

from __future__ import annotations

from .metrics import (
    APPARENT_PLACE_SOLVES,
    COMPUTE_ERRORS,
    EPHEMERIS_CACHE_HITS,
    EPHEMERIS_CACHE_MISSES,
    EPHEMERIS_COMPUTE_DURATION,
    LIGHT_TIME_ITERATIONS,
    REFINEMENT_OUTCOMES,
    ensure_metrics_registered,
)

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
