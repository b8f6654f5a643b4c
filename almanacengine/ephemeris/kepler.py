"""Two-body Keplerian orbits exposed as moving points.

Useful for comets and asteroids with published osculating elements, and
for building synthetic solar systems with known geometry.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from ..core.vectors import Matrix3, StateVector, Vec3
from .bodies import J2000, Body
from .errors import EphemerisRangeError
from .points import MovingPoint
from .refinement import NonConvergenceError

__all__ = [
    "J2000_OBLIQUITY_DEG",
    "KeplerianBody",
    "KeplerianElements",
    "solve_kepler",
]

J2000_OBLIQUITY_DEG = 84381.448 / 3600.0


@dataclass(frozen=True, slots=True)
class KeplerianElements:
    """Osculating elliptic elements at ``epoch_jd``."""

    semi_major_axis_au: float
    eccentricity: float
    inclination_deg: float
    ascending_node_deg: float
    argument_of_perihelion_deg: float
    mean_anomaly_deg: float
    epoch_jd: float
    mean_motion_deg_per_day: float
    reference_plane: Literal["ecliptic", "equator"] = "ecliptic"

    def __post_init__(self) -> None:
        if self.semi_major_axis_au <= 0.0:
            raise ValueError("semi-major axis must be positive")
        if not 0.0 <= self.eccentricity < 1.0:
            raise ValueError("only elliptic orbits (0 <= e < 1) are supported")
        if self.mean_motion_deg_per_day <= 0.0:
            raise ValueError("mean motion must be positive")
        if self.reference_plane not in {"ecliptic", "equator"}:
            raise ValueError(f"unsupported reference plane: {self.reference_plane}")


def solve_kepler(
    mean_anomaly: float,
    eccentricity: float,
    *,
    tolerance: float = 1e-14,
    max_iter: int = 50,
) -> float:
    """Return the eccentric anomaly for ``mean_anomaly`` (radians)."""

    E = mean_anomaly if eccentricity < 0.8 else math.copysign(math.pi, mean_anomaly)
    for _ in range(max_iter):
        delta = (E - eccentricity * math.sin(E) - mean_anomaly) / (
            1.0 - eccentricity * math.cos(E)
        )
        E -= delta
        if abs(delta) < tolerance:
            return E
    raise NonConvergenceError(
        "Kepler's equation did not converge",
        iterations=max_iter,
        context={"mean_anomaly": mean_anomaly, "eccentricity": eccentricity},
    )


class KeplerianBody:
    """Moving point following a fixed Keplerian ellipse about ``centre``.

    When ``centre`` is ``None`` the orbit is referred to the solar-system
    barycentre.
    """

    def __init__(
        self,
        elements: KeplerianElements,
        centre: MovingPoint | None = None,
        *,
        body: Body = Body.SMALL_BODY,
        earliest_date: float = -math.inf,
        latest_date: float = math.inf,
        epoch: float = J2000,
    ) -> None:
        self._elements = elements
        self._centre = centre
        self._body = Body(body)
        self._earliest = earliest_date
        self._latest = latest_date
        self._epoch = epoch
        self._rotation = self._orientation(elements)
        self._mean_motion = math.radians(elements.mean_motion_deg_per_day)
        self._mean_anomaly0 = math.radians(elements.mean_anomaly_deg)
        self._minor_factor = math.sqrt(1.0 - elements.eccentricity**2)

    @staticmethod
    def _orientation(elements: KeplerianElements) -> Matrix3:
        perifocal = (
            Matrix3.rotation_z(-math.radians(elements.ascending_node_deg))
            .multiply(Matrix3.rotation_x(-math.radians(elements.inclination_deg)))
            .multiply(Matrix3.rotation_z(-math.radians(elements.argument_of_perihelion_deg)))
        )
        if elements.reference_plane == "ecliptic":
            to_equator = Matrix3.rotation_x(-math.radians(J2000_OBLIQUITY_DEG))
            return to_equator.multiply(perifocal)
        return perifocal

    @property
    def elements(self) -> KeplerianElements:
        return self._elements

    @property
    def centre(self) -> MovingPoint | None:
        return self._centre

    @property
    def body(self) -> Body:
        return self._body

    @property
    def epoch(self) -> float:
        return self._epoch

    @property
    def earliest_date(self) -> float:
        if self._centre is None:
            return self._earliest
        return max(self._earliest, self._centre.earliest_date)

    @property
    def latest_date(self) -> float:
        if self._centre is None:
            return self._latest
        return min(self._latest, self._centre.latest_date)

    def is_valid_date(self, jd: float) -> bool:
        return self.earliest_date <= jd <= self.latest_date

    def _check_date(self, jd: float) -> None:
        if not self._earliest <= jd <= self._latest:
            raise EphemerisRangeError(
                jd, self._earliest, self._latest, context={"body": self._body.name}
            )

    def _relative_state(self, jd: float) -> StateVector:
        el = self._elements
        a = el.semi_major_axis_au
        e = el.eccentricity
        M = self._mean_anomaly0 + self._mean_motion * (jd - el.epoch_jd)
        M = math.remainder(M, 2.0 * math.pi)
        E = solve_kepler(M, e)
        cos_e = math.cos(E)
        sin_e = math.sin(E)
        e_dot = self._mean_motion / (1.0 - e * cos_e)
        position = Vec3(a * (cos_e - e), a * self._minor_factor * sin_e, 0.0)
        velocity = Vec3(
            -a * sin_e * e_dot, a * self._minor_factor * cos_e * e_dot, 0.0
        )
        return StateVector(self._rotation.apply(position), self._rotation.apply(velocity))

    def position(self, jd: float) -> Vec3:
        self._check_date(jd)
        relative = self._relative_state(jd).position
        if self._centre is None:
            return relative
        return self._centre.position(jd).plus(relative)

    def state_vector(self, jd: float) -> StateVector:
        self._check_date(jd)
        relative = self._relative_state(jd)
        if self._centre is None:
            return relative
        centre = self._centre.state_vector(jd)
        return StateVector(
            centre.position.plus(relative.position),
            centre.velocity.plus(relative.velocity),
        )

    def __repr__(self) -> str:
        return f"KeplerianBody({self._body.name}, a={self._elements.semi_major_axis_au})"
