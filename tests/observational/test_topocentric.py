from __future__ import annotations

import math

import pytest

from almanacengine.engine.observational import (
    MetConditions,
    Place,
    TerrestrialObserver,
    apparent_from_geometric_altitude,
    ecef_from_geodetic,
    geometric_from_apparent_altitude,
    horizontal_from_equatorial,
    refraction_bennett,
    refraction_saemundsson,
)
from almanacengine.ephemeris.bodies import AU_KM, J2000, Body


def _approx(a: float, b: float, tol: float = 1e-6) -> bool:
    return math.isclose(a, b, rel_tol=tol, abs_tol=tol)


def test_refraction_standard_conditions() -> None:
    assert refraction_saemundsson(0.0, 10.0, 1010.0) == pytest.approx(28.98192738444997, rel=1e-6)
    assert refraction_saemundsson(5.0, 10.0, 1010.0) == pytest.approx(9.674126604114392, rel=1e-6)
    assert refraction_saemundsson(10.0, 10.0, 1010.0) == pytest.approx(5.4076808031353245, rel=1e-6)


def test_refraction_scales_with_density() -> None:
    cold = refraction_saemundsson(2.0, -10.0, 1030.0)
    warm = refraction_saemundsson(2.0, 30.0, 990.0)
    assert cold > warm
    assert refraction_saemundsson(-5.0, 10.0, 1010.0) == 0.0
    assert refraction_bennett(95.0, 10.0, 1010.0) == 0.0


@pytest.mark.parametrize("altitude_deg", [0.0, 0.5, 2.0, 10.0, 45.0, 60.0])
def test_refraction_directions_are_near_inverses(altitude_deg: float) -> None:
    geometric = math.radians(altitude_deg)
    apparent = apparent_from_geometric_altitude(geometric)
    assert apparent > geometric
    recovered = geometric_from_apparent_altitude(apparent)
    assert abs(math.degrees(recovered - geometric)) * 60.0 < 0.2


def test_ecef_equator_origin() -> None:
    vec = ecef_from_geodetic(0.0, 0.0, 0.0)
    assert _approx(vec.x, 6_378_137.0)
    assert _approx(vec.y, 0.0)
    assert _approx(vec.z, 0.0)


def test_ecef_pole_and_height() -> None:
    pole = ecef_from_geodetic(90.0, 0.0, 0.0)
    assert _approx(pole.z, 6_356_752.314245179)
    raised = ecef_from_geodetic(45.0, 45.0, 1000.0)
    assert _approx(raised.x, raised.y)
    assert _approx(raised.z, 4_488_055.515647106)


def test_horizontal_meridian_geometry() -> None:
    place = Place(latitude_deg=45.0, longitude_deg=0.0)
    south = horizontal_from_equatorial(1.0, 0.0, 1.0, place)
    assert south.altitude_deg == pytest.approx(45.0)
    assert south.azimuth_deg == pytest.approx(180.0)

    east = horizontal_from_equatorial(1.0 + math.pi / 2, 0.0, 1.0, place)
    assert east.altitude_deg == pytest.approx(0.0, abs=1e-9)
    assert east.azimuth_deg == pytest.approx(90.0)


def test_horizontal_refraction_lifts_altitude() -> None:
    place = Place(latitude_deg=45.0, longitude_deg=0.0)
    plain = horizontal_from_equatorial(0.0, 0.0, math.pi / 2 - 0.01, place)
    refracted = horizontal_from_equatorial(
        0.0, 0.0, math.pi / 2 - 0.01, place, refraction=True, met=MetConditions()
    )
    assert refracted.altitude_deg > plain.altitude_deg
    assert refracted.azimuth_deg == plain.azimuth_deg


def test_observer_offset_on_the_equator(earth, rotation_model) -> None:
    place = Place(latitude_deg=0.0, longitude_deg=0.0)
    observer = TerrestrialObserver(earth, rotation_model, place)
    offset = observer.topocentric_offset(J2000)
    assert offset.position.magnitude() == pytest.approx(6378.137 / AU_KM, rel=1e-9)
    rotation_speed_km_s = 7.2921151467e-5 * 6378.137
    assert offset.velocity.magnitude() == pytest.approx(
        rotation_speed_km_s * 86400.0 / AU_KM, rel=1e-9
    )
    assert offset.position.dot(offset.velocity) == pytest.approx(0.0, abs=1e-18)


def test_observer_at_the_pole_sits_on_the_axis(earth, rotation_model) -> None:
    place = Place(latitude_deg=90.0, longitude_deg=0.0)
    observer = TerrestrialObserver(earth, rotation_model, place)
    offset = observer.topocentric_offset(J2000)
    assert offset.position.z == pytest.approx(6356.752314245179 / AU_KM, rel=1e-6)
    assert offset.velocity.magnitude() < 1e-12


def test_observer_wraps_the_geocentre(earth, rotation_model) -> None:
    place = Place(latitude_deg=-33.9, longitude_deg=18.4, elevation_m=10.0)
    observer = TerrestrialObserver(earth, rotation_model, place)
    jd = J2000 + 800.25
    state = observer.state_vector(jd)
    centre = earth.state_vector(jd)
    offset = observer.topocentric_offset(jd)
    assert state.position == centre.position.plus(offset.position)
    assert observer.position(jd) == state.position
    assert state.velocity == centre.velocity.plus(offset.velocity)
    assert observer.body is Body.EARTH
    assert observer.epoch == earth.epoch
    assert observer.is_valid_date(jd)


def test_local_sidereal_time_includes_longitude(earth, rotation_model) -> None:
    greenwich = TerrestrialObserver(earth, rotation_model, Place(0.0, 0.0))
    east = TerrestrialObserver(earth, rotation_model, Place(0.0, 90.0))
    jd = J2000 + 10.0
    delta = math.remainder(
        east.local_sidereal_time(jd) - greenwich.local_sidereal_time(jd), 2.0 * math.pi
    )
    assert delta == pytest.approx(math.pi / 2)
