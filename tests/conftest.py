from __future__ import annotations

import importlib.util
import math
import os
from pathlib import Path

import pytest

from almanacengine.config import Settings
from almanacengine.core import StateVector, Vec3
from almanacengine.engine.observational import (
    ApparentPlaceSolver,
    IAUEarthRotationModel,
    LocalVisibility,
    Place,
    TerrestrialObserver,
)
from almanacengine.ephemeris.bodies import J2000, Body
from almanacengine.ephemeris.kepler import KeplerianBody, KeplerianElements

# 2024 March 20, 0h UT: within a day of the vernal equinox.
EQUINOX_JD = 2460389.5


def _flag_enabled(name: str) -> bool:
    """Return True when the boolean-like environment flag is enabled."""

    value = os.getenv(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def kernel_path() -> Path | None:
    value = os.getenv("ALMANACENGINE_KERNEL")
    if not value:
        return None
    path = Path(value)
    return path if path.is_file() else None


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "kernel: requires skyfield and a JPL kernel via ALMANACENGINE_KERNEL"
    )


def pytest_collection_modifyitems(config, items):
    """Skip kernel-backed tests when skyfield or a kernel is unavailable."""

    skyfield_missing = importlib.util.find_spec("skyfield") is None
    kernel_missing = kernel_path() is None
    if not (skyfield_missing or kernel_missing) or _flag_enabled(
        "ALMANACENGINE_FORCE_KERNEL_TESTS"
    ):
        return
    reason = (
        "skyfield not installed"
        if skyfield_missing
        else "set ALMANACENGINE_KERNEL to a local JPL kernel (e.g. de421.bsp)"
    )
    skip_kernel = pytest.mark.skip(reason=reason)
    for item in items:
        if "kernel" in item.keywords:
            item.add_marker(skip_kernel)


class StationaryPoint:
    """Moving point that never moves; used for the Sun and distant targets."""

    def __init__(self, position: Vec3, body: Body = Body.SUN) -> None:
        self._position = position
        self._body = body

    @property
    def body(self) -> Body:
        return self._body

    @property
    def epoch(self) -> float:
        return J2000

    @property
    def earliest_date(self) -> float:
        return -math.inf

    @property
    def latest_date(self) -> float:
        return math.inf

    def is_valid_date(self, jd: float) -> bool:
        return True

    def position(self, jd: float) -> Vec3:
        return self._position

    def state_vector(self, jd: float) -> StateVector:
        return StateVector(self._position, Vec3.zero())


def make_earth() -> KeplerianBody:
    return KeplerianBody(
        KeplerianElements(
            semi_major_axis_au=1.00000261,
            eccentricity=0.01671123,
            inclination_deg=0.0,
            ascending_node_deg=0.0,
            argument_of_perihelion_deg=102.93768193,
            mean_anomaly_deg=100.46457166 - 102.93768193,
            epoch_jd=J2000,
            mean_motion_deg_per_day=0.9856091,
        ),
        body=Body.EARTH,
    )


def make_moon(earth: KeplerianBody) -> KeplerianBody:
    return KeplerianBody(
        KeplerianElements(
            semi_major_axis_au=0.00257,
            eccentricity=0.0,
            inclination_deg=5.145,
            ascending_node_deg=125.0,
            argument_of_perihelion_deg=0.0,
            mean_anomaly_deg=0.0,
            epoch_jd=J2000,
            mean_motion_deg_per_day=360.0 / 27.321661,
        ),
        centre=earth,
        body=Body.MOON,
    )


def far_target(dec_deg: float, distance_au: float = 30.0) -> StationaryPoint:
    dec = math.radians(dec_deg)
    return StationaryPoint(
        Vec3(distance_au * math.cos(dec), 0.0, distance_au * math.sin(dec)),
        body=Body.SMALL_BODY,
    )


@pytest.fixture
def sun() -> StationaryPoint:
    return StationaryPoint(Vec3.zero())


@pytest.fixture
def earth() -> KeplerianBody:
    return make_earth()


@pytest.fixture
def moon(earth: KeplerianBody) -> KeplerianBody:
    return make_moon(earth)


@pytest.fixture
def rotation_model() -> IAUEarthRotationModel:
    return IAUEarthRotationModel()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def mid_latitude() -> Place:
    return Place(latitude_deg=45.0, longitude_deg=0.0)


@pytest.fixture
def sun_visibility(sun, earth, rotation_model, mid_latitude) -> LocalVisibility:
    observer = TerrestrialObserver(earth, rotation_model, mid_latitude)
    solver = ApparentPlaceSolver(observer, sun, sun, rotation_model)
    return LocalVisibility(solver, mid_latitude)


@pytest.fixture
def moon_visibility(sun, earth, moon, rotation_model, mid_latitude) -> LocalVisibility:
    solver = ApparentPlaceSolver(earth, moon, sun, rotation_model)
    return LocalVisibility(solver, mid_latitude)
