"""Apparent places and local visibility of solar-system bodies."""

from __future__ import annotations

from .apparent import (
    ApparentPlace,
    ApparentPlaceSolver,
    OfDateUnavailableError,
    SkyDirection,
    direction_to_radec,
    light_deflection,
    relativistic_aberration,
)
from .earth import (
    EarthRotationModel,
    IAUEarthRotationModel,
    NutationAngles,
    PrecessionAngles,
)
from .events import (
    AltitudePolicy,
    CrossingOutcome,
    CrossingStatus,
    Event,
    EventKind,
    LocalVisibility,
)
from .place import Place
from .topocentric import (
    HorizontalCoordinates,
    MetConditions,
    TerrestrialObserver,
    apparent_from_geometric_altitude,
    ecef_from_geodetic,
    geometric_from_apparent_altitude,
    horizontal_from_equatorial,
    refraction_bennett,
    refraction_saemundsson,
)

__all__ = [
    "AltitudePolicy",
    "ApparentPlace",
    "ApparentPlaceSolver",
    "CrossingOutcome",
    "CrossingStatus",
    "EarthRotationModel",
    "Event",
    "EventKind",
    "HorizontalCoordinates",
    "IAUEarthRotationModel",
    "LocalVisibility",
    "MetConditions",
    "NutationAngles",
    "OfDateUnavailableError",
    "Place",
    "PrecessionAngles",
    "SkyDirection",
    "TerrestrialObserver",
    "apparent_from_geometric_altitude",
    "direction_to_radec",
    "ecef_from_geodetic",
    "geometric_from_apparent_altitude",
    "horizontal_from_equatorial",
    "light_deflection",
    "refraction_bennett",
    "refraction_saemundsson",
    "relativistic_aberration",
]
