"""Topocentric observers, horizontal coordinates and refraction utilities."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ...core.vectors import StateVector, Vec3
from ...ephemeris.bodies import AU_KM, WGS84_FLATTENING, Body
from ...ephemeris.points import MovingPoint
from ...utils.angles import norm_2pi, reduce_angle
from .earth import EarthRotationModel
from .place import Place

__all__ = [
    "EARTH_ROTATION_RATE",
    "HorizontalCoordinates",
    "MetConditions",
    "TerrestrialObserver",
    "apparent_from_geometric_altitude",
    "ecef_from_geodetic",
    "geometric_from_apparent_altitude",
    "horizontal_from_equatorial",
    "refraction_bennett",
    "refraction_saemundsson",
]

_AU_METERS = AU_KM * 1000.0
_WGS84_A = 6_378_137.0  # semi-major axis in meters
_WGS84_E2 = WGS84_FLATTENING * (2 - WGS84_FLATTENING)

# Sidereal rotation rate of the Earth in radians per second.
EARTH_ROTATION_RATE = 7.2921151467e-5


@dataclass(frozen=True)
class MetConditions:
    """Atmospheric conditions used when modelling refraction."""

    temperature_c: float = 10.0
    pressure_hpa: float = 1010.0


@dataclass(frozen=True)
class HorizontalCoordinates:
    """Alt/Az coordinates measured from the local horizon, in degrees.

    Azimuth is reckoned from north through east.
    """

    altitude_deg: float
    azimuth_deg: float


def ecef_from_geodetic(lat_deg: float, lon_deg: float, height_m: float = 0.0) -> Vec3:
    """Return the WGS-84 Earth-fixed vector (meters) for a geodetic observer."""

    lat_rad = math.radians(lat_deg)
    lon_rad = math.radians(lon_deg)
    sin_lat = math.sin(lat_rad)
    cos_lat = math.cos(lat_rad)

    N = _WGS84_A / math.sqrt(1.0 - _WGS84_E2 * sin_lat * sin_lat)
    x = (N + height_m) * cos_lat * math.cos(lon_rad)
    y = (N + height_m) * cos_lat * math.sin(lon_rad)
    z = (N * (1 - _WGS84_E2) + height_m) * sin_lat
    return Vec3(x, y, z)


# -------------------- Refraction --------------------


def _pressure_temperature_factor(temperature_c: float, pressure_hpa: float) -> float:
    return (pressure_hpa / 1010.0) * (283.0 / (273.0 + temperature_c))


def refraction_saemundsson(
    altitude_deg: float, temperature_c: float, pressure_hpa: float
) -> float:
    """Return refraction in arcminutes at the geometric altitude ``altitude_deg``."""

    if altitude_deg < -1.0 or altitude_deg > 90.0:
        return 0.0
    denom = math.tan(math.radians(altitude_deg + 10.3 / (altitude_deg + 5.11)))
    if denom == 0:
        return 0.0
    R = 1.02 / denom
    R *= _pressure_temperature_factor(temperature_c, pressure_hpa)
    return R


def refraction_bennett(
    altitude_deg: float, temperature_c: float, pressure_hpa: float
) -> float:
    """Return refraction in arcminutes at the apparent altitude ``altitude_deg``."""

    if altitude_deg < -1.0 or altitude_deg > 90.0:
        return 0.0
    denom = math.tan(math.radians(altitude_deg + 7.31 / (altitude_deg + 4.4)))
    if denom == 0:
        return 0.0
    return _pressure_temperature_factor(temperature_c, pressure_hpa) / denom


def apparent_from_geometric_altitude(
    altitude_rad: float, temperature_c: float = 10.0, pressure_hpa: float = 1010.0
) -> float:
    """Lift a geometric altitude (radians) by atmospheric refraction."""

    correction = refraction_saemundsson(
        math.degrees(altitude_rad), temperature_c, pressure_hpa
    )
    return altitude_rad + math.radians(correction / 60.0)


def geometric_from_apparent_altitude(
    altitude_rad: float, temperature_c: float = 10.0, pressure_hpa: float = 1010.0
) -> float:
    """Remove atmospheric refraction from an apparent altitude (radians)."""

    correction = refraction_bennett(
        math.degrees(altitude_rad), temperature_c, pressure_hpa
    )
    return altitude_rad - math.radians(correction / 60.0)


# -------------------- Horizontal coordinates --------------------


def horizontal_from_equatorial(
    ra_rad: float,
    dec_rad: float,
    local_sidereal_rad: float,
    place: Place,
    *,
    refraction: bool = False,
    met: MetConditions | None = None,
) -> HorizontalCoordinates:
    """Convert of-date equatorial coordinates to horizontal Alt/Az."""

    phi = place.latitude_rad
    H = reduce_angle(local_sidereal_rad - ra_rad)
    sin_alt = (
        math.sin(dec_rad) * math.sin(phi)
        + math.cos(dec_rad) * math.cos(phi) * math.cos(H)
    )
    sin_alt = max(-1.0, min(1.0, sin_alt))
    alt = math.asin(sin_alt)
    cos_alt = math.cos(alt)
    if abs(cos_alt) < 1e-12 or abs(math.cos(phi)) < 1e-12:
        az = 0.0
    else:
        sin_az = -math.sin(H) * math.cos(dec_rad) / cos_alt
        cos_az = (math.sin(dec_rad) - sin_alt * math.sin(phi)) / (
            cos_alt * math.cos(phi)
        )
        az = math.degrees(norm_2pi(math.atan2(sin_az, cos_az)))

    if refraction:
        met = met or MetConditions()
        alt = apparent_from_geometric_altitude(alt, met.temperature_c, met.pressure_hpa)
    return HorizontalCoordinates(math.degrees(alt), az)


# -------------------- Terrestrial observer --------------------


class TerrestrialObserver:
    """Moving point fixed to the rotating Earth at ``place``.

    Wraps a geocentre point and adds the observer's offset and rotational
    velocity, rotated from the true equator of date to J2000.
    """

    def __init__(
        self,
        centre: MovingPoint,
        rotation_model: EarthRotationModel,
        place: Place,
    ) -> None:
        self._centre = centre
        self._rotation_model = rotation_model
        self._place = place
        fixed = ecef_from_geodetic(place.latitude_deg, 0.0, place.elevation_m)
        # Distance from the rotation axis and height above the equator, in AU.
        self._rho_cos = fixed.x / _AU_METERS
        self._rho_sin = fixed.z / _AU_METERS

    @property
    def centre(self) -> MovingPoint:
        return self._centre

    @property
    def place(self) -> Place:
        return self._place

    @property
    def rotation_model(self) -> EarthRotationModel:
        return self._rotation_model

    @property
    def body(self) -> Body:
        return self._centre.body

    @property
    def epoch(self) -> float:
        return self._centre.epoch

    @property
    def earliest_date(self) -> float:
        return self._centre.earliest_date

    @property
    def latest_date(self) -> float:
        return self._centre.latest_date

    def is_valid_date(self, jd: float) -> bool:
        return self._centre.is_valid_date(jd)

    def local_sidereal_time(self, jd_tdb: float) -> float:
        model = self._rotation_model
        ut = jd_tdb - model.delta_t(jd_tdb)
        return norm_2pi(model.sidereal_time(ut) + self._place.longitude_rad)

    def _to_j2000(self, jd: float, vec: Vec3) -> Vec3:
        model = self._rotation_model
        nutation = model.nutation_matrix(jd).transpose()
        precession = model.precession_matrix(self.epoch, jd).transpose()
        return precession.apply(nutation.apply(vec))

    def topocentric_offset(self, jd: float) -> StateVector:
        """Observer position (AU) and velocity (AU/day) relative to the geocentre."""

        lst = self.local_sidereal_time(jd)
        c = math.cos(lst)
        s = math.sin(lst)
        position = Vec3(self._rho_cos * c, self._rho_cos * s, self._rho_sin)
        omega = EARTH_ROTATION_RATE * 86400.0
        velocity = Vec3(-omega * self._rho_cos * s, omega * self._rho_cos * c, 0.0)
        return StateVector(self._to_j2000(jd, position), self._to_j2000(jd, velocity))

    def position(self, jd: float) -> Vec3:
        offset = self.topocentric_offset(jd)
        return self._centre.position(jd).plus(offset.position)

    def state_vector(self, jd: float) -> StateVector:
        centre = self._centre.state_vector(jd)
        offset = self.topocentric_offset(jd)
        return StateVector(
            centre.position.plus(offset.position),
            centre.velocity.plus(offset.velocity),
        )

    def __repr__(self) -> str:
        return f"TerrestrialObserver({self._place!r})"
