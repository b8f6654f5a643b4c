"""Moving points: bodies whose barycentric state is known as a function of time.

Every point reports positions in AU and velocities in AU/day, referred to
the equator and equinox of J2000 and the solar-system barycentre.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..core.vectors import StateVector, Vec3
from .bodies import Body

__all__ = [
    "EarthCentre",
    "EphemerisBackend",
    "MoonCentre",
    "MovingPoint",
    "PlanetCentre",
]


class EphemerisBackend(Protocol):
    """Source of tabulated barycentric states, typically a JPL kernel.

    Following the JPL convention, :attr:`Body.MOON` is returned relative to
    the geocentre while every other body is barycentric.
    """

    @property
    def epoch(self) -> float:
        ...

    @property
    def earliest_date(self) -> float:
        ...

    @property
    def latest_date(self) -> float:
        ...

    @property
    def emrat(self) -> float:
        ...

    def state(self, body: Body, jd: float) -> StateVector:
        ...

    def position(self, body: Body, jd: float) -> Vec3:
        ...


@runtime_checkable
class MovingPoint(Protocol):
    """Contract shared by observers, targets and the Sun."""

    @property
    def body(self) -> Body:
        ...

    @property
    def epoch(self) -> float:
        ...

    @property
    def earliest_date(self) -> float:
        ...

    @property
    def latest_date(self) -> float:
        ...

    def position(self, jd: float) -> Vec3:
        ...

    def state_vector(self, jd: float) -> StateVector:
        ...

    def is_valid_date(self, jd: float) -> bool:
        ...


class _BackendPoint:
    """Shared plumbing for points read straight from an :class:`EphemerisBackend`."""

    def __init__(self, backend: EphemerisBackend, body: Body) -> None:
        self._backend = backend
        self._body = Body(body)

    @property
    def backend(self) -> EphemerisBackend:
        return self._backend

    @property
    def body(self) -> Body:
        return self._body

    @property
    def epoch(self) -> float:
        return self._backend.epoch

    @property
    def earliest_date(self) -> float:
        return self._backend.earliest_date

    @property
    def latest_date(self) -> float:
        return self._backend.latest_date

    def is_valid_date(self, jd: float) -> bool:
        return self.earliest_date <= jd <= self.latest_date

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._body.name})"


class PlanetCentre(_BackendPoint):
    """Barycentric centre of a planet, the Sun or a system barycentre."""

    def __init__(self, backend: EphemerisBackend, body: Body) -> None:
        if Body(body) in {Body.MOON, Body.EARTH}:
            raise ValueError(
                f"{Body(body).name} is derived from the Earth-Moon barycentre; "
                "use MoonCentre or EarthCentre"
            )
        super().__init__(backend, body)

    def position(self, jd: float) -> Vec3:
        return self._backend.position(self._body, jd)

    def state_vector(self, jd: float) -> StateVector:
        return self._backend.state(self._body, jd)


class _EarthMoonPoint(_BackendPoint):
    """Earth or Moon reconstructed from the Earth-Moon barycentre."""

    # Fraction of the geocentric Moon vector added to the barycentre.
    _moon_fraction: float

    def position(self, jd: float) -> Vec3:
        emb = self._backend.position(Body.EARTH_MOON_BARYCENTRE, jd)
        moon = self._backend.position(Body.MOON, jd)
        return emb.plus(moon.scaled(self._moon_fraction))

    def state_vector(self, jd: float) -> StateVector:
        emb = self._backend.state(Body.EARTH_MOON_BARYCENTRE, jd)
        moon = self._backend.state(Body.MOON, jd)
        return StateVector(
            emb.position.plus(moon.position.scaled(self._moon_fraction)),
            emb.velocity.plus(moon.velocity.scaled(self._moon_fraction)),
        )


class EarthCentre(_EarthMoonPoint):
    """Barycentric position of the geocentre."""

    def __init__(self, backend: EphemerisBackend) -> None:
        super().__init__(backend, Body.EARTH)
        self._moon_fraction = -1.0 / (1.0 + backend.emrat)


class MoonCentre(_EarthMoonPoint):
    """Barycentric position of the centre of the Moon."""

    def __init__(self, backend: EphemerisBackend) -> None:
        super().__init__(backend, Body.MOON)
        self._moon_fraction = backend.emrat / (1.0 + backend.emrat)
