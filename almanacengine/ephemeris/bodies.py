"""Body codes and physical constants used by the position providers."""

from __future__ import annotations

from enum import IntEnum
from typing import Final

__all__ = [
    "AU_KM",
    "Body",
    "DEFAULT_EMRAT",
    "EARTH_EQUATORIAL_RADIUS_KM",
    "J2000",
    "SPEED_OF_LIGHT_AU_PER_DAY",
    "WGS84_FLATTENING",
]

# Julian Date of the J2000.0 epoch (TDB).
J2000: Final[float] = 2451545.0

AU_KM: Final[float] = 149_597_870.700
SPEED_OF_LIGHT_AU_PER_DAY: Final[float] = 173.1446
EARTH_EQUATORIAL_RADIUS_KM: Final[float] = 6378.137
WGS84_FLATTENING: Final[float] = 1 / 298.257_223_563

# Earth/Moon mass ratio of DE421/DE430.
DEFAULT_EMRAT: Final[float] = 81.300_569_074_190_62


class Body(IntEnum):
    """Body codes following the JPL ephemeris numbering.

    ``MOON`` denotes the geocentric Moon when requested from a backend and
    the barycentric Moon when carried by a moving point.  ``EARTH`` and
    ``SMALL_BODY`` have no JPL table of their own.
    """

    SMALL_BODY = 0
    MERCURY = 1
    VENUS = 2
    EARTH_MOON_BARYCENTRE = 3
    MARS = 4
    JUPITER = 5
    SATURN = 6
    URANUS = 7
    NEPTUNE = 8
    PLUTO = 9
    MOON = 10
    SUN = 11
    EARTH = -1
