"""Geographic observer locations."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from ...ephemeris.bodies import WGS84_FLATTENING

__all__ = ["Place"]


@dataclass(frozen=True, slots=True)
class Place:
    """Geodetic site on the WGS-84 spheroid.

    ``longitude_deg`` is positive east and ``timezone_hours`` is the offset
    of local civil time from UT.  The geocentric latitude and distance (in
    equatorial Earth radii, height ignored) are derived at construction.
    """

    latitude_deg: float
    longitude_deg: float
    elevation_m: float = 0.0
    timezone_hours: float = 0.0
    geocentric_latitude_rad: float = field(init=False, repr=False, compare=False)
    geocentric_distance: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude_deg <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude_deg}")
        if not math.isfinite(self.longitude_deg):
            raise ValueError("longitude must be finite")
        sphi = math.sin(self.latitude_rad)
        cphi = math.cos(self.latitude_rad)
        q = (1.0 - WGS84_FLATTENING) ** 2
        c = 1.0 / math.sqrt(cphi * cphi + q * sphi * sphi)
        x = c * cphi
        y = q * c * sphi
        object.__setattr__(self, "geocentric_latitude_rad", math.atan2(y, x))
        object.__setattr__(self, "geocentric_distance", math.hypot(x, y))

    @property
    def latitude_rad(self) -> float:
        return math.radians(self.latitude_deg)

    @property
    def longitude_rad(self) -> float:
        return math.radians(self.longitude_deg)
