"""Computation engines built on the position providers."""

from __future__ import annotations

from .observational import (
    ApparentPlace,
    ApparentPlaceSolver,
    AltitudePolicy,
    Event,
    EventKind,
    IAUEarthRotationModel,
    LocalVisibility,
    Place,
    TerrestrialObserver,
)

__all__ = [
    "AltitudePolicy",
    "ApparentPlace",
    "ApparentPlaceSolver",
    "Event",
    "EventKind",
    "IAUEarthRotationModel",
    "LocalVisibility",
    "Place",
    "TerrestrialObserver",
]
