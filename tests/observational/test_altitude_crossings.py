from __future__ import annotations

import logging
import math

import pytest

from almanacengine.config import CrossingCfg, Settings
from almanacengine.engine.observational import (
    AltitudePolicy,
    ApparentPlaceSolver,
    CrossingStatus,
    EventKind,
    LocalVisibility,
    Place,
)
from almanacengine.ephemeris import NonConvergenceError
from almanacengine.utils.angles import ARCMIN

from tests.conftest import EQUINOX_JD, far_target


def _hours(jd: float) -> float:
    return (jd - EQUINOX_JD) * 24.0


def test_equinox_sunrise_and_sunset(sun_visibility) -> None:
    events = sun_visibility.find_altitude_crossings(EQUINOX_JD, AltitudePolicy.UPPER_LIMB)
    assert [event.kind for event in events] == [EventKind.RISE, EventKind.SET]
    rise, set_ = events
    assert _hours(rise.jd) == pytest.approx(6.05, abs=0.35)
    assert _hours(set_.jd) == pytest.approx(18.2, abs=0.35)
    for event in events:
        residual = sun_visibility.altitude_above_threshold(event.jd, AltitudePolicy.UPPER_LIMB)
        assert abs(residual) < 0.1 * ARCMIN


def test_scan_reports_each_interval(sun_visibility) -> None:
    outcomes = sun_visibility.scan_altitude_crossings(EQUINOX_JD, AltitudePolicy.CENTRE_OF_DISK)
    # Midnight to the lower transit stays below the horizon.
    assert [outcome.status for outcome in outcomes] == [
        CrossingStatus.NO_CROSSING,
        CrossingStatus.FOUND,
        CrossingStatus.FOUND,
    ]
    assert outcomes[0].event is None and outcomes[0].refinement is None
    for outcome in outcomes[1:]:
        assert outcome.refinement is not None and outcome.refinement.converged
        assert outcome.start_jd <= outcome.event.jd <= outcome.end_jd
    for first, second in zip(outcomes, outcomes[1:]):
        assert first.end_jd == second.start_jd
    assert outcomes[0].start_jd == EQUINOX_JD
    assert outcomes[-1].end_jd == EQUINOX_JD + 1.0


def test_limb_policies_are_ordered(sun_visibility) -> None:
    def rise_of(policy: AltitudePolicy) -> float:
        events = sun_visibility.find_altitude_crossings(EQUINOX_JD, policy)
        return next(event.jd for event in events if event.kind is EventKind.RISE)

    upper = rise_of(AltitudePolicy.UPPER_LIMB)
    centre = rise_of(AltitudePolicy.CENTRE_OF_DISK)
    lower = rise_of(AltitudePolicy.LOWER_LIMB)
    assert upper < centre < lower
    # The semidiameter takes a minute or two to clear at 45 degrees latitude.
    assert 0.5 < (centre - upper) * 1440.0 < 3.0


def test_civil_twilight_brackets_the_day(sun_visibility) -> None:
    sun_events = sun_visibility.find_altitude_crossings(EQUINOX_JD, AltitudePolicy.UPPER_LIMB)
    twilight = sun_visibility.find_altitude_crossings(EQUINOX_JD, AltitudePolicy.CIVIL_TWILIGHT)
    assert [event.kind for event in twilight] == [EventKind.RISE, EventKind.SET]
    dawn_gap = (sun_events[0].jd - twilight[0].jd) * 1440.0
    dusk_gap = (twilight[1].jd - sun_events[1].jd) * 1440.0
    assert 15.0 < dawn_gap < 60.0
    assert 15.0 < dusk_gap < 60.0


def test_threshold_table(sun_visibility, moon_visibility) -> None:
    assert sun_visibility.threshold_altitude(AltitudePolicy.UPPER_LIMB) == pytest.approx(-50 * ARCMIN)
    assert sun_visibility.threshold_altitude(AltitudePolicy.LOWER_LIMB) == pytest.approx(-18 * ARCMIN)
    assert sun_visibility.threshold_altitude(AltitudePolicy.CENTRE_OF_DISK) == pytest.approx(-34 * ARCMIN)
    assert sun_visibility.threshold_altitude(AltitudePolicy.NAUTICAL_TWILIGHT) == pytest.approx(
        math.radians(-12.0)
    )
    assert sun_visibility.threshold_altitude("astronomical_twilight") == pytest.approx(
        math.radians(-18.0)
    )
    for policy in (AltitudePolicy.UPPER_LIMB, AltitudePolicy.LOWER_LIMB):
        assert moon_visibility.threshold_altitude(policy) == pytest.approx(-34 * ARCMIN)


@pytest.mark.parametrize(
    "policy",
    [
        AltitudePolicy.CIVIL_TWILIGHT,
        AltitudePolicy.NAUTICAL_TWILIGHT,
        AltitudePolicy.ASTRONOMICAL_TWILIGHT,
    ],
)
def test_twilight_is_only_defined_for_the_sun(moon_visibility, policy) -> None:
    with pytest.raises(ValueError):
        moon_visibility.threshold_altitude(policy)
    with pytest.raises(ValueError):
        moon_visibility.find_altitude_crossings(EQUINOX_JD, policy)


@pytest.mark.parametrize("latitude", [70.0, -70.0])
def test_circumpolar_and_never_rising_bodies(sun, earth, rotation_model, latitude) -> None:
    place = Place(latitude_deg=latitude, longitude_deg=15.0)
    solver = ApparentPlaceSolver(earth, far_target(80.0), sun, rotation_model)
    visibility = LocalVisibility(solver, place)
    assert visibility.find_altitude_crossings(EQUINOX_JD, AltitudePolicy.CENTRE_OF_DISK) == []
    outcomes = visibility.scan_altitude_crossings(EQUINOX_JD, AltitudePolicy.CENTRE_OF_DISK)
    assert outcomes
    assert all(outcome.status is CrossingStatus.NO_CROSSING for outcome in outcomes)
    altitude = visibility.geometric_altitude(EQUINOX_JD)
    assert (altitude > 0.0) == (latitude > 0.0)


def _starved_visibility(sun, earth, rotation_model, place) -> LocalVisibility:
    settings = Settings(
        crossings=CrossingCfg(
            altitude_tolerance_arcmin=1e-6,
            max_false_position_iterations=1,
            max_bisection_iterations=1,
        )
    )
    solver = ApparentPlaceSolver(earth, sun, sun, rotation_model)
    return LocalVisibility(solver, place, settings=settings)


def test_failed_refinement_is_reported(sun, earth, rotation_model, mid_latitude) -> None:
    visibility = _starved_visibility(sun, earth, rotation_model, mid_latitude)
    outcomes = visibility.scan_altitude_crossings(EQUINOX_JD, AltitudePolicy.UPPER_LIMB)
    assert [outcome.status for outcome in outcomes] == [
        CrossingStatus.NO_CROSSING,
        CrossingStatus.FAILED_TO_CONVERGE,
        CrossingStatus.FAILED_TO_CONVERGE,
    ]
    assert all(outcome.event is None for outcome in outcomes)
    assert outcomes[1].refinement.status == "max_iter"
    assert outcomes[1].refinement.method == "false_position+bisection"


def test_strict_mode_raises(sun, earth, rotation_model, mid_latitude) -> None:
    visibility = _starved_visibility(sun, earth, rotation_model, mid_latitude)
    with pytest.raises(NonConvergenceError) as excinfo:
        visibility.find_altitude_crossings(EQUINOX_JD, AltitudePolicy.UPPER_LIMB)
    assert excinfo.value.context["policy"] == "upper_limb"


def test_lenient_mode_logs_and_skips(sun, earth, rotation_model, mid_latitude, caplog) -> None:
    visibility = _starved_visibility(sun, earth, rotation_model, mid_latitude)
    with caplog.at_level(logging.WARNING, logger="almanacengine.engine.observational.events"):
        events = visibility.find_altitude_crossings(
            EQUINOX_JD, AltitudePolicy.UPPER_LIMB, strict=False
        )
    assert events == []
    codes = [getattr(record, "err_code", None) for record in caplog.records]
    assert codes.count("CROSSING_NONCONVERGENCE") == 2


def test_apparent_altitude_includes_refraction(sun_visibility) -> None:
    rise = sun_visibility.find_altitude_crossings(EQUINOX_JD, AltitudePolicy.UPPER_LIMB)[0]
    jd = rise.jd + 0.03
    geometric = sun_visibility.geometric_altitude(jd)
    apparent = sun_visibility.apparent_altitude(jd)
    assert 0.0 < geometric < math.radians(10.0)
    assert 0.0 < (apparent - geometric) / ARCMIN < 35.0
    colder = sun_visibility.apparent_altitude(jd, temperature_c=-20.0, pressure_hpa=1030.0)
    assert colder > apparent


def test_horizontal_coordinates_at_noon(sun_visibility) -> None:
    upper = next(
        event
        for event in sun_visibility.find_transits(EQUINOX_JD)
        if event.kind is EventKind.UPPER_TRANSIT
    )
    horizontal = sun_visibility.horizontal_coordinates(upper.jd)
    assert horizontal.azimuth_deg == pytest.approx(180.0, abs=0.1)
    assert horizontal.altitude_deg == pytest.approx(45.0, abs=0.5)
