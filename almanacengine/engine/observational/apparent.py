"""Apparent places of solar-system bodies.

The solver combines an observer, a target and the Sun (all
:class:`~almanacengine.ephemeris.points.MovingPoint` instances) and
corrects the geometric direction for light-travel time, gravitational
light deflection by the Sun and relativistic annual aberration.  When an
Earth-rotation model is supplied the direction is also rotated to the true
equator and equinox of date.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from ...config.settings import Settings
from ...core.vectors import Vec3
from ...ephemeris.bodies import SPEED_OF_LIGHT_AU_PER_DAY, Body
from ...ephemeris.points import MovingPoint
from ...ephemeris.refinement import NonConvergenceError
from ...observability.metrics import (
    APPARENT_PLACE_SOLVES,
    COMPUTE_ERRORS,
    LIGHT_TIME_ITERATIONS,
)
from ...utils.angles import norm_2pi
from .earth import EarthRotationModel

LOG = logging.getLogger(__name__)

__all__ = [
    "ApparentPlace",
    "ApparentPlaceSolver",
    "OfDateUnavailableError",
    "SkyDirection",
    "direction_to_radec",
    "light_deflection",
    "relativistic_aberration",
]

# Heliocentric gravitational constant expressed as a length, GM☉/c² in AU.
SOLAR_GRAVITATIONAL_RADIUS_AU = 9.87e-9


class OfDateUnavailableError(RuntimeError):
    """Raised when an of-date coordinate is requested without a rotation model."""


@dataclass(frozen=True, slots=True)
class SkyDirection:
    """Unit direction with its right ascension / declination (radians)."""

    direction: Vec3
    right_ascension: float
    declination: float

    @classmethod
    def from_direction(cls, direction: Vec3) -> "SkyDirection":
        ra, dec = direction_to_radec(direction)
        return cls(direction, ra, dec)


@dataclass(frozen=True, slots=True)
class ApparentPlace:
    """Result of :meth:`ApparentPlaceSolver.solve` at one instant (TDB)."""

    jd_tdb: float
    geometric_distance: float
    light_path_distance: float
    heliocentric_distance: float
    light_time: float
    light_time_iterations: int
    j2000: SkyDirection
    of_date: SkyDirection | None = None

    @property
    def has_of_date(self) -> bool:
        return self.of_date is not None

    @property
    def right_ascension_j2000(self) -> float:
        return self.j2000.right_ascension

    @property
    def declination_j2000(self) -> float:
        return self.j2000.declination

    @property
    def direction_cosines_j2000(self) -> Vec3:
        return self.j2000.direction

    def _require_of_date(self) -> SkyDirection:
        if self.of_date is None:
            raise OfDateUnavailableError(
                "the position referred to the equator and equinox of date is "
                "not available without an Earth-rotation model"
            )
        return self.of_date

    @property
    def right_ascension_of_date(self) -> float:
        return self._require_of_date().right_ascension

    @property
    def declination_of_date(self) -> float:
        return self._require_of_date().declination

    @property
    def direction_cosines_of_date(self) -> Vec3:
        return self._require_of_date().direction


def direction_to_radec(direction: Vec3) -> tuple[float, float]:
    """Return ``(ra, dec)`` in radians, with ``ra`` in ``[0, 2π)``."""

    x, y, z = direction.as_tuple()
    ra = norm_2pi(math.atan2(y, x))
    dec = math.atan2(z, math.hypot(x, y))
    return ra, dec


def light_deflection(p: Vec3, q: Vec3, e: Vec3, earth_sun_distance: float) -> Vec3:
    """Deflect unit direction ``p`` for the Sun's gravitational field.

    ``q`` is the unit heliocentric direction of the target, ``e`` the unit
    heliocentric direction of the observer and ``earth_sun_distance`` the
    observer's heliocentric distance in AU.  The result is not normalised.
    """

    factor = (2.0 * SOLAR_GRAVITATIONAL_RADIUS_AU / earth_sun_distance) / (
        1.0 + q.dot(e)
    )
    bend = e.scaled(p.dot(q)).minus(q.scaled(e.dot(p)))
    return p.plus(bend.scaled(factor))


def relativistic_aberration(p: Vec3, velocity: Vec3) -> Vec3:
    """Apply annual aberration for an observer moving at ``velocity`` (AU/day).

    Returns the normalised apparent direction.
    """

    v = velocity.scaled(1.0 / SPEED_OF_LIGHT_AU_PER_DAY)
    beta = math.sqrt(1.0 - v.dot(v))
    p_dot_v = p.dot(v)
    denominator = 1.0 + p_dot_v
    moved = p.scaled(beta / denominator).plus(
        v.scaled((1.0 + p_dot_v / (1.0 + beta)) / denominator)
    )
    return moved.normalized()


class ApparentPlaceSolver:
    """Compute :class:`ApparentPlace` values for one observer/target pair.

    ``solve`` is pure: it keeps no state between calls, so repeated calls
    at the same instant return identical results and a failed call leaves
    nothing half-updated.
    """

    def __init__(
        self,
        observer: MovingPoint,
        target: MovingPoint,
        sun: MovingPoint,
        rotation_model: EarthRotationModel | None = None,
        *,
        settings: Settings | None = None,
    ) -> None:
        if observer is None or target is None or sun is None:
            raise ValueError("observer, target and sun are all required")
        self._observer = observer
        self._target = target
        self._sun = sun
        self._rotation_model = rotation_model
        self._settings = settings or Settings()

    @property
    def observer(self) -> MovingPoint:
        return self._observer

    @property
    def target(self) -> MovingPoint:
        return self._target

    @property
    def sun(self) -> MovingPoint:
        return self._sun

    @property
    def rotation_model(self) -> EarthRotationModel | None:
        return self._rotation_model

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def target_is_sun(self) -> bool:
        return self._target is self._sun or self._target.body is Body.SUN

    def solve(self, jd_tdb: float) -> ApparentPlace:
        """Return the apparent place of the target at ``jd_tdb``."""

        cfg = self._settings.solver
        target_is_sun = self.target_is_sun
        factor = 2.0 * SOLAR_GRAVITATIONAL_RADIUS_AU

        observer_state = self._observer.state_vector(jd_tdb)
        eb = observer_state.position
        e_vec = eb.minus(self._sun.position(jd_tdb))
        ee = e_vec.magnitude()

        tau = 0.0
        iterations = 0
        geometric_distance = 0.0
        while True:
            iterations += 1
            if iterations > cfg.max_light_time_iterations:
                COMPUTE_ERRORS.labels(
                    component="apparent_place", error="NonConvergenceError"
                ).inc()
                LOG.warning(
                    "light-time iteration did not converge",
                    extra={
                        "err_code": "LIGHT_TIME_NONCONVERGENCE",
                        "target": self._target.body.name,
                        "jd_tdb": jd_tdb,
                    },
                )
                raise NonConvergenceError(
                    "light-time iteration did not converge",
                    iterations=cfg.max_light_time_iterations,
                    context={"jd_tdb": jd_tdb, "target": self._target.body.name},
                )
            qb = self._target.position(jd_tdb - tau)
            sb = self._sun.position(jd_tdb - tau)
            p_vec = qb.minus(eb)
            q_vec = qb.minus(sb)
            pp = p_vec.magnitude()
            qq = q_vec.magnitude()
            if iterations == 1:
                geometric_distance = pp
            path = pp
            if not target_is_sun:
                path += factor * math.log((ee + pp + qq) / (ee - pp + qq))
            new_tau = path / SPEED_OF_LIGHT_AU_PER_DAY
            dtau = new_tau - tau
            tau = new_tau
            if abs(dtau) < cfg.light_time_tolerance_days:
                break

        direction = p_vec.normalized()
        if not target_is_sun:
            direction = light_deflection(
                direction, q_vec.normalized(), e_vec.normalized(), ee
            )
        direction = relativistic_aberration(direction, observer_state.velocity)
        j2000 = SkyDirection.from_direction(direction)

        of_date = None
        if self._rotation_model is not None:
            model = self._rotation_model
            ut = jd_tdb - model.delta_t(jd_tdb)
            rotated = model.nutation_matrix(ut).apply(
                model.precession_matrix(self._target.epoch, ut).apply(direction)
            )
            of_date = SkyDirection.from_direction(rotated)

        APPARENT_PLACE_SOLVES.labels(target=self._target.body.name).inc()
        LIGHT_TIME_ITERATIONS.observe(iterations)
        LOG.debug(
            "apparent place solved",
            extra={
                "target": self._target.body.name,
                "jd_tdb": jd_tdb,
                "iterations": iterations,
                "light_time": tau,
            },
        )
        return ApparentPlace(
            jd_tdb=jd_tdb,
            geometric_distance=geometric_distance,
            light_path_distance=path,
            heliocentric_distance=qq,
            light_time=tau,
            light_time_iterations=iterations,
            j2000=j2000,
            of_date=of_date,
        )

    def __repr__(self) -> str:
        return (
            f"ApparentPlaceSolver(observer={self._observer!r}, "
            f"target={self._target!r})"
        )
