"""Earth orientation: precession, nutation, sidereal time and ΔT."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import numpy as np

from ...core.vectors import Matrix3
from ...ephemeris.bodies import J2000
from ...utils.angles import ARCSEC, norm_2pi
from ._nutation import IAU1980_NUTATION_TERMS

__all__ = [
    "EarthRotationModel",
    "IAUEarthRotationModel",
    "NutationAngles",
    "PrecessionAngles",
]

JULIAN_CENTURY = 36525.0
_SECONDS_PER_REVOLUTION = 360.0 * 3600.0
_HOURS_TO_RAD = math.pi / 12.0

# IAU 1976 precession: rows are ζ, z, θ; columns multiply t, tT, tT², t², t²T, t³.
_PRECESSION_COEFFS = (
    (2306.2181, 1.39656, -0.000139, 0.30188, -0.000344, 0.017998),
    (2306.2181, 1.39656, -0.000139, 1.09468, 0.000066, 0.018203),
    (2004.3109, -0.85330, -0.000217, -0.42665, -0.000217, -0.041833),
)


@dataclass(frozen=True, slots=True)
class PrecessionAngles:
    """Equatorial precession angles ζ, z, θ in radians."""

    zeta: float
    z: float
    theta: float


@dataclass(frozen=True, slots=True)
class NutationAngles:
    """Nutation in longitude and obliquity, in radians."""

    dpsi: float
    deps: float


@runtime_checkable
class EarthRotationModel(Protocol):
    """Orientation of the Earth's axis and its rotation about it.

    ``precession_matrix`` and ``nutation_matrix`` rotate a direction from
    the fixed equator of ``jd_fixed`` to the mean, respectively true,
    equator of date.  ``delta_t`` is TDB − UT in days.
    """

    def mean_obliquity(self, jd: float) -> float:
        ...

    def delta_t(self, jd: float) -> float:
        ...

    def precession_matrix(self, jd_fixed: float, jd_of_date: float) -> Matrix3:
        ...

    def nutation_matrix(self, jd: float) -> Matrix3:
        ...

    def sidereal_time(self, jd_ut: float) -> float:
        ...


def _centuries(jd: float) -> float:
    return (jd - J2000) / JULIAN_CENTURY


def _frac(x: float) -> float:
    return x - math.floor(x)


class IAUEarthRotationModel:
    """IAU 1976 precession, IAU 1980 nutation and IAU 1982 sidereal time."""

    def mean_obliquity(self, jd: float) -> float:
        """Mean obliquity of the ecliptic (radians)."""

        T = _centuries(jd)
        seconds = 84381.448 - 46.8150 * T - 0.00059 * T * T + 0.001813 * T * T * T
        return seconds * ARCSEC

    def delta_t(self, jd: float) -> float:
        """Approximate ΔT = TDB − UT, in days."""

        year = 2000.0 + (jd - J2000) / 365.25
        if 1900.0 <= year <= 2050.0:
            t = year - 2000.0
            seconds = 62.92 + 0.32217 * t + 0.005589 * t * t
        else:
            u = (year - 1820.0) / 100.0
            seconds = 32.0 * u * u - 20.0
        return seconds / 86400.0

    # ------------------------------------------------------------------
    # Precession
    # ------------------------------------------------------------------
    def precession_angles(self, jd_fixed: float, jd_of_date: float) -> PrecessionAngles:
        T = _centuries(jd_fixed)
        t = (jd_of_date - jd_fixed) / JULIAN_CENTURY
        angles = []
        for a0, a1, a2, b0, b1, c0 in _PRECESSION_COEFFS:
            seconds = (
                (a0 + a1 * T + a2 * T * T) * t
                + (b0 + b1 * T) * t * t
                + c0 * t * t * t
            )
            angles.append(seconds * ARCSEC)
        return PrecessionAngles(*angles)

    def precession_matrix(self, jd_fixed: float, jd_of_date: float) -> Matrix3:
        pa = self.precession_angles(jd_fixed, jd_of_date)
        czeta, szeta = math.cos(pa.zeta), math.sin(pa.zeta)
        cz, sz = math.cos(pa.z), math.sin(pa.z)
        ct, st = math.cos(pa.theta), math.sin(pa.theta)
        return Matrix3(
            (
                (cz * ct * czeta - sz * szeta, -cz * ct * szeta - sz * czeta, -cz * st),
                (sz * ct * czeta + cz * szeta, -sz * ct * szeta + cz * czeta, -sz * st),
                (st * czeta, -st * szeta, ct),
            )
        )

    # ------------------------------------------------------------------
    # Nutation
    # ------------------------------------------------------------------
    def nutation_angles(self, jd: float) -> NutationAngles:
        T = _centuries(jd)
        rev = _SECONDS_PER_REVOLUTION

        # Delaunay arguments in arcseconds.
        l_moon = (
            ((0.064 * T + 31.310) * T + 715922.633) * T
            + 485866.733
            + _frac(1325.0 * T) * rev
        ) % rev
        l_sun = (
            ((-0.012 * T - 0.577) * T + 1292581.224) * T
            + 1287099.804
            + _frac(99.0 * T) * rev
        ) % rev
        f_arg = (
            ((0.011 * T - 13.257) * T + 295263.137) * T
            + 335778.877
            + _frac(1342.0 * T) * rev
        ) % rev
        d_arg = (
            ((0.019 * T - 6.891) * T + 1105601.328) * T
            + 1072261.307
            + _frac(1236.0 * T) * rev
        ) % rev
        node = (
            ((0.008 * T + 7.455) * T - 482890.539) * T
            + 450160.280
            - _frac(5.0 * T) * rev
        ) % rev

        fundamentals = np.array([l_moon, l_sun, f_arg, d_arg, node])
        terms = IAU1980_NUTATION_TERMS
        args = np.remainder(terms[:, :5] @ fundamentals, rev) * ARCSEC
        dpsi = np.sum((terms[:, 5] + terms[:, 6] * T) * np.sin(args))
        deps = np.sum((terms[:, 7] + terms[:, 8] * T) * np.cos(args))
        return NutationAngles(float(dpsi) * 1.0e-4 * ARCSEC, float(deps) * 1.0e-4 * ARCSEC)

    def nutation_matrix(self, jd: float) -> Matrix3:
        na = self.nutation_angles(jd)
        eps0 = self.mean_obliquity(jd)
        eps = eps0 + na.deps
        ce0, se0 = math.cos(eps0), math.sin(eps0)
        ce, se = math.cos(eps), math.sin(eps)
        cdpsi, sdpsi = math.cos(na.dpsi), math.sin(na.dpsi)
        return Matrix3(
            (
                (cdpsi, -sdpsi * ce0, -sdpsi * se0),
                (sdpsi * ce, cdpsi * ce * ce0 + se * se0, cdpsi * ce * se0 - se * ce0),
                (sdpsi * se, cdpsi * se * ce0 - ce * se0, cdpsi * se * se0 + ce * ce0),
            )
        )

    # ------------------------------------------------------------------
    # Sidereal time
    # ------------------------------------------------------------------
    def mean_sidereal_time(self, jd_ut: float) -> float:
        """Greenwich mean sidereal time (radians) at ``jd_ut``."""

        T = _centuries(jd_ut)
        seconds = 67310.54841 + 8640184.812866 * T + 0.093104 * T * T - 6.2e-6 * T * T * T
        hours = (seconds % 86400.0) / 3600.0
        hours = (hours + 876600.0 * T) % 24.0
        return norm_2pi(hours * _HOURS_TO_RAD)

    def sidereal_time(self, jd_ut: float) -> float:
        """Greenwich apparent sidereal time (radians) at ``jd_ut``."""

        na = self.nutation_angles(jd_ut)
        eps = self.mean_obliquity(jd_ut) + na.deps
        return norm_2pi(self.mean_sidereal_time(jd_ut) + na.dpsi * math.cos(eps))

    def __repr__(self) -> str:
        return "IAUEarthRotationModel()"
