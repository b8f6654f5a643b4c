"""Meridian transits, rising, setting and twilight for a fixed observer.

All instants handled by :class:`LocalVisibility` are Julian Dates in UT.
The apparent place of the target is evaluated at ``jd + ΔT`` (TDB).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum

from ...config.settings import Settings
from ...ephemeris.bodies import AU_KM, EARTH_EQUATORIAL_RADIUS_KM, Body
from ...ephemeris.refinement import (
    NonConvergenceError,
    RefineResult,
    parabolic_vertex_offset,
    refine_root,
)
from ...observability.metrics import COMPUTE_ERRORS, REFINEMENT_OUTCOMES
from ...utils.angles import ARCMIN, TWO_PI, has_opposite_sign, norm_2pi, reduce_angle
from .apparent import ApparentPlace, ApparentPlaceSolver
from .place import Place
from .topocentric import (
    HorizontalCoordinates,
    MetConditions,
    apparent_from_geometric_altitude,
    horizontal_from_equatorial,
)

LOG = logging.getLogger(__name__)

__all__ = [
    "AltitudePolicy",
    "CrossingOutcome",
    "CrossingStatus",
    "Event",
    "EventKind",
    "HORIZONTAL_REFRACTION",
    "LocalVisibility",
    "SOLAR_SEMIDIAMETER",
]

HORIZONTAL_REFRACTION = -34.0 * ARCMIN
SOLAR_SEMIDIAMETER = 16.0 * ARCMIN

_TWILIGHT_DEPRESSION = {
    "civil_twilight": math.radians(-6.0),
    "nautical_twilight": math.radians(-12.0),
    "astronomical_twilight": math.radians(-18.0),
}

# Fraction of the lunar horizontal parallax subtracted from the altitude.
_MOON_PARALLAX_FACTOR = {
    "upper_limb": 0.7276,
    "centre_of_disk": 1.0,
    "lower_limb": 1.2724,
}


class EventKind(StrEnum):
    RISE = "rise"
    SET = "set"
    UPPER_TRANSIT = "upper_transit"
    LOWER_TRANSIT = "lower_transit"


class AltitudePolicy(StrEnum):
    """Which point of the target defines a horizon or twilight crossing."""

    UPPER_LIMB = "upper_limb"
    LOWER_LIMB = "lower_limb"
    CENTRE_OF_DISK = "centre_of_disk"
    CIVIL_TWILIGHT = "civil_twilight"
    NAUTICAL_TWILIGHT = "nautical_twilight"
    ASTRONOMICAL_TWILIGHT = "astronomical_twilight"

    @property
    def is_twilight(self) -> bool:
        return self.value in _TWILIGHT_DEPRESSION


class CrossingStatus(StrEnum):
    FOUND = "found"
    NO_CROSSING = "no_crossing"
    FAILED_TO_CONVERGE = "failed_to_converge"


@dataclass(frozen=True, slots=True)
class Event:
    """A visibility event at ``jd`` (UT)."""

    kind: EventKind
    jd: float


@dataclass(frozen=True, slots=True)
class CrossingOutcome:
    """Result of searching one sampled interval for a threshold crossing."""

    status: CrossingStatus
    start_jd: float
    end_jd: float
    event: Event | None = None
    refinement: RefineResult | None = None


@dataclass(frozen=True, slots=True)
class _AltitudeSample:
    jd: float
    value: float


def _mean_sidereal_rate(body: Body) -> float:
    """Mean daily rate of change of the target's hour angle (radians/day)."""

    if body is Body.SUN:
        return TWO_PI
    if body is Body.MOON:
        return TWO_PI * (1.0 - 1.0 / 27.322)
    return TWO_PI * 366.0 / 365.0


class LocalVisibility:
    """Transit and altitude-crossing searches for one target and one place.

    The solver must carry an Earth-rotation model, since hour angles are
    measured against the equator and equinox of date.
    """

    def __init__(
        self,
        solver: ApparentPlaceSolver,
        place: Place,
        *,
        settings: Settings | None = None,
    ) -> None:
        if solver.rotation_model is None:
            raise ValueError(
                "LocalVisibility requires an ApparentPlaceSolver with an Earth-rotation model"
            )
        self._solver = solver
        self._place = place
        self._settings = settings or solver.settings
        self._model = solver.rotation_model

    @property
    def solver(self) -> ApparentPlaceSolver:
        return self._solver

    @property
    def place(self) -> Place:
        return self._place

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def body(self) -> Body:
        return self._solver.target.body

    # ------------------------------------------------------------------
    # Hour angle and altitude
    # ------------------------------------------------------------------
    def _apparent(self, jd: float, delta_t: float | None = None) -> ApparentPlace:
        if delta_t is None:
            delta_t = self._model.delta_t(jd)
        return self._solver.solve(jd + delta_t)

    def local_sidereal_time(self, jd: float) -> float:
        """Local apparent sidereal time (radians) at ``jd`` (UT)."""

        return norm_2pi(self._model.sidereal_time(jd) + self._place.longitude_rad)

    def hour_angle(self, jd: float) -> float:
        """Hour angle of the target (radians, in (-π, π]) at ``jd`` (UT)."""

        place = self._apparent(jd)
        return reduce_angle(self.local_sidereal_time(jd) - place.right_ascension_of_date)

    def _altitude_of(self, jd: float, place: ApparentPlace) -> float:
        phi = self._place.latitude_rad
        dec = place.declination_of_date
        ha = reduce_angle(self.local_sidereal_time(jd) - place.right_ascension_of_date)
        return math.asin(
            math.sin(phi) * math.sin(dec) + math.cos(phi) * math.cos(dec) * math.cos(ha)
        )

    def geometric_altitude(self, jd: float) -> float:
        """Geometric altitude (radians) of the target at ``jd`` (UT)."""

        return self._altitude_of(jd, self._apparent(jd))

    def apparent_altitude(
        self, jd: float, temperature_c: float = 10.0, pressure_hpa: float = 1010.0
    ) -> float:
        """Refracted altitude (radians) of the target at ``jd`` (UT)."""

        return apparent_from_geometric_altitude(
            self.geometric_altitude(jd), temperature_c, pressure_hpa
        )

    def horizontal_coordinates(
        self,
        jd: float,
        *,
        refraction: bool = False,
        met: MetConditions | None = None,
    ) -> HorizontalCoordinates:
        """Altitude and azimuth (degrees) of the target at ``jd`` (UT)."""

        place = self._apparent(jd)
        return horizontal_from_equatorial(
            place.right_ascension_of_date,
            place.declination_of_date,
            self.local_sidereal_time(jd),
            self._place,
            refraction=refraction,
            met=met,
        )

    def threshold_altitude(self, policy: AltitudePolicy) -> float:
        """Constant part of the altitude defining a crossing for ``policy``."""

        policy = AltitudePolicy(policy)
        if policy.is_twilight:
            if self.body is not Body.SUN:
                raise ValueError(
                    f"{policy.value} is only defined for the Sun, not {self.body.name}"
                )
            return _TWILIGHT_DEPRESSION[policy.value]
        if self.body is Body.SUN:
            if policy is AltitudePolicy.UPPER_LIMB:
                return HORIZONTAL_REFRACTION - SOLAR_SEMIDIAMETER
            if policy is AltitudePolicy.LOWER_LIMB:
                return HORIZONTAL_REFRACTION + SOLAR_SEMIDIAMETER
        return HORIZONTAL_REFRACTION

    def moon_parallax_correction(self, policy: AltitudePolicy, geometric_distance: float) -> float:
        """Altitude reduction (radians) for the Moon's parallax and semidiameter."""

        if self.body is not Body.MOON:
            return 0.0
        factor = _MOON_PARALLAX_FACTOR.get(AltitudePolicy(policy).value, 0.0)
        hp = math.asin(EARTH_EQUATORIAL_RADIUS_KM / (AU_KM * geometric_distance))
        return factor * hp

    def altitude_above_threshold(self, jd: float, policy: AltitudePolicy) -> float:
        """Signed distance (radians) of the target above the ``policy`` threshold."""

        threshold = self.threshold_altitude(policy)
        place = self._apparent(jd)
        altitude = self._altitude_of(jd, place)
        altitude -= self.moon_parallax_correction(policy, place.geometric_distance)
        return altitude - threshold

    # ------------------------------------------------------------------
    # Transits
    # ------------------------------------------------------------------
    def find_transits(self, jdstart: float) -> list[Event]:
        """Return the meridian transits in ``[jdstart, jdstart + 1)``.

        Upper and lower transits alternate; at most three are returned.
        """

        cfg = self._settings.transits
        delta_t = self._model.delta_t(jdstart)
        longitude = self._place.longitude_rad
        rate = _mean_sidereal_rate(self.body)

        def hour_angle_at(jd: float) -> float:
            place = self._apparent(jd, delta_t)
            return self._model.sidereal_time(jd) - place.right_ascension_of_date + longitude

        ha = reduce_angle(hour_angle_at(jdstart))
        upper = ha < 0.0
        target_ha = 0.0 if upper else math.pi

        events: list[Event] = []
        jd = jdstart
        for _ in range(3):
            for _iteration in range(cfg.max_iterations):
                dt = -reduce_angle(hour_angle_at(jd) - target_ha) / rate
                jd += dt
                if abs(dt) < cfg.tolerance_days:
                    break
            else:
                COMPUTE_ERRORS.labels(
                    component="transit_search", error="NonConvergenceError"
                ).inc()
                raise NonConvergenceError(
                    "transit search did not converge",
                    iterations=cfg.max_iterations,
                    context={"jdstart": jdstart, "target_ha": target_ha, "jd": jd},
                )
            if jdstart <= jd < jdstart + 1.0:
                kind = EventKind.UPPER_TRANSIT if upper else EventKind.LOWER_TRANSIT
                events.append(Event(kind, jd))
            upper = not upper
            target_ha += math.pi
            jd += math.pi / rate

        LOG.debug(
            "transits found",
            extra={"jdstart": jdstart, "count": len(events), "body": self.body.name},
        )
        return events

    # ------------------------------------------------------------------
    # Altitude crossings
    # ------------------------------------------------------------------
    def _samples(self, jdstart: float, policy: AltitudePolicy) -> list[_AltitudeSample]:
        jdfinish = jdstart + 1.0
        h = self._settings.crossings.extremum_half_width_minutes / 1440.0

        def f(jd: float) -> float:
            return self.altitude_above_threshold(jd, policy)

        samples = [_AltitudeSample(jdstart, f(jdstart))]
        for transit in self.find_transits(jdstart):
            centre = transit.jd
            offset = parabolic_vertex_offset(f(centre - h), f(centre), f(centre + h), h)
            extremum = min(max(centre + offset, jdstart), jdfinish)
            samples.append(_AltitudeSample(extremum, f(extremum)))
        samples.append(_AltitudeSample(jdfinish, f(jdfinish)))
        return samples

    def scan_altitude_crossings(
        self, jdstart: float, policy: AltitudePolicy
    ) -> list[CrossingOutcome]:
        """Classify every sampled interval of ``[jdstart, jdstart + 1]``."""

        policy = AltitudePolicy(policy)
        # Validate the policy before any sampling.
        self.threshold_altitude(policy)
        cfg = self._settings.crossings
        tolerance = cfg.altitude_tolerance_arcmin * ARCMIN

        def f(jd: float) -> float:
            return self.altitude_above_threshold(jd, policy)

        samples = self._samples(jdstart, policy)
        outcomes: list[CrossingOutcome] = []
        for lo, hi in zip(samples, samples[1:]):
            if not has_opposite_sign(lo.value, hi.value):
                outcomes.append(CrossingOutcome(CrossingStatus.NO_CROSSING, lo.jd, hi.jd))
                continue
            result = refine_root(
                f,
                lo.jd,
                hi.jd,
                tolerance=tolerance,
                max_false_position=cfg.max_false_position_iterations,
                max_bisection=cfg.max_bisection_iterations,
            )
            REFINEMENT_OUTCOMES.labels(method=result.method, status=result.status).inc()
            if result.converged:
                kind = EventKind.RISE if lo.value < 0.0 else EventKind.SET
                outcomes.append(
                    CrossingOutcome(
                        CrossingStatus.FOUND,
                        lo.jd,
                        hi.jd,
                        event=Event(kind, result.root),
                        refinement=result,
                    )
                )
            else:
                outcomes.append(
                    CrossingOutcome(
                        CrossingStatus.FAILED_TO_CONVERGE,
                        lo.jd,
                        hi.jd,
                        refinement=result,
                    )
                )
        return outcomes

    def find_altitude_crossings(
        self,
        jdstart: float,
        policy: AltitudePolicy,
        *,
        strict: bool | None = None,
    ) -> list[Event]:
        """Return rise/set (or twilight) events in ``[jdstart, jdstart + 1]``.

        An empty list means the target never crossed the threshold.  When
        refinement fails for an interval a :class:`NonConvergenceError` is
        raised if ``strict``; otherwise the interval is logged and skipped.
        """

        if strict is None:
            strict = self._settings.crossings.strict
        events: list[Event] = []
        for outcome in self.scan_altitude_crossings(jdstart, policy):
            if outcome.status is CrossingStatus.FOUND and outcome.event is not None:
                events.append(outcome.event)
            elif outcome.status is CrossingStatus.FAILED_TO_CONVERGE:
                iterations = outcome.refinement.iterations if outcome.refinement else 0
                if strict:
                    COMPUTE_ERRORS.labels(
                        component="altitude_crossing", error="NonConvergenceError"
                    ).inc()
                    raise NonConvergenceError(
                        "altitude crossing refinement did not converge",
                        iterations=iterations,
                        context={
                            "start_jd": outcome.start_jd,
                            "end_jd": outcome.end_jd,
                            "policy": AltitudePolicy(policy).value,
                        },
                    )
                LOG.warning(
                    "altitude crossing refinement did not converge",
                    extra={
                        "err_code": "CROSSING_NONCONVERGENCE",
                        "start_jd": outcome.start_jd,
                        "end_jd": outcome.end_jd,
                        "body": self.body.name,
                    },
                )
        events.sort(key=lambda event: event.jd)
        return events

    def __repr__(self) -> str:
        return f"LocalVisibility({self.body.name}, {self._place!r})"
