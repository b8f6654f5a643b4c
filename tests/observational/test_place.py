from __future__ import annotations

import math

import pytest

from almanacengine.engine.observational import Place
from almanacengine.ephemeris.bodies import WGS84_FLATTENING


def test_equator_is_on_the_reference_radius() -> None:
    place = Place(latitude_deg=0.0, longitude_deg=10.0)
    assert place.geocentric_latitude_rad == 0.0
    assert place.geocentric_distance == pytest.approx(1.0)


def test_pole_sits_on_the_polar_radius() -> None:
    place = Place(latitude_deg=90.0, longitude_deg=0.0)
    assert place.geocentric_latitude_rad == pytest.approx(math.pi / 2)
    assert place.geocentric_distance == pytest.approx(1.0 - WGS84_FLATTENING)


def test_mid_latitude_reduction() -> None:
    place = Place(latitude_deg=45.0, longitude_deg=0.0, elevation_m=120.0, timezone_hours=1.0)
    reduction = math.degrees(place.latitude_rad - place.geocentric_latitude_rad)
    # About 11.5 arcminutes at 45 degrees.
    assert reduction == pytest.approx(0.1924, abs=5e-4)
    assert 0.998 < place.geocentric_distance < 0.999
    assert place.longitude_rad == 0.0
    assert place.timezone_hours == 1.0


def test_derived_fields_do_not_affect_equality() -> None:
    assert Place(51.5, -0.1) == Place(51.5, -0.1)
    assert Place(51.5, -0.1) != Place(51.5, -0.2)


@pytest.mark.parametrize("latitude", [-90.5, 91.0])
def test_invalid_latitude_rejected(latitude: float) -> None:
    with pytest.raises(ValueError):
        Place(latitude_deg=latitude, longitude_deg=0.0)


def test_place_is_immutable() -> None:
    place = Place(10.0, 20.0)
    with pytest.raises(AttributeError):
        place.latitude_deg = 11.0  # type: ignore[misc]
