from __future__ import annotations

import math

import pytest

from almanacengine.core import Vec3
from almanacengine.engine.observational import (
    ApparentPlaceSolver,
    IAUEarthRotationModel,
    direction_to_radec,
)
from almanacengine.ephemeris.bodies import J2000, SPEED_OF_LIGHT_AU_PER_DAY, Body

from tests.conftest import StationaryPoint, make_earth, make_moon

hypothesis = pytest.importorskip("hypothesis")
given = hypothesis.given
st = hypothesis.strategies
settings = hypothesis.settings

EARTH = make_earth()
MOON = make_moon(EARTH)
SUN = StationaryPoint(Vec3.zero())
MODEL = IAUEarthRotationModel()

DATES = st.floats(min_value=J2000 - 36525.0, max_value=J2000 + 36525.0)
COMPONENTS = st.floats(min_value=-1.0, max_value=1.0, allow_nan=False)


def _target(x: float, y: float, z: float) -> StationaryPoint:
    return StationaryPoint(Vec3(5.0 + x, 3.0 * y, 2.0 * z), body=Body.SMALL_BODY)


@settings(deadline=None, max_examples=60)
@given(x=COMPONENTS, y=COMPONENTS, z=COMPONENTS)
def test_direction_to_radec_ranges(x: float, y: float, z: float) -> None:
    hypothesis.assume(x * x + y * y + z * z > 1e-6)
    ra, dec = direction_to_radec(Vec3(x, y, z).normalized())
    assert 0.0 <= ra < 2.0 * math.pi
    assert -math.pi / 2 <= dec <= math.pi / 2


@settings(deadline=None, max_examples=40)
@given(jd=DATES, x=COMPONENTS, y=COMPONENTS, z=COMPONENTS)
def test_solve_is_idempotent_and_in_range(
    jd: float, x: float, y: float, z: float
) -> None:
    solver = ApparentPlaceSolver(EARTH, _target(x, y, z), SUN, MODEL)
    first = solver.solve(jd)
    second = solver.solve(jd)
    assert first == second
    for ra, dec in (
        (first.right_ascension_j2000, first.declination_j2000),
        (first.right_ascension_of_date, first.declination_of_date),
    ):
        assert 0.0 <= ra < 2.0 * math.pi
        assert -math.pi / 2 <= dec <= math.pi / 2
    assert first.direction_cosines_of_date.magnitude() == pytest.approx(1.0)


@settings(deadline=None, max_examples=40)
@given(jd=DATES)
def test_light_time_matches_light_path(jd: float) -> None:
    solver = ApparentPlaceSolver(EARTH, MOON, SUN)
    place = solver.solve(jd)
    assert place.light_time * SPEED_OF_LIGHT_AU_PER_DAY == pytest.approx(
        place.light_path_distance, rel=1e-6
    )
    assert place.light_path_distance == pytest.approx(place.geometric_distance, rel=1e-3)
    assert place.light_time_iterations <= solver.settings.solver.max_light_time_iterations
