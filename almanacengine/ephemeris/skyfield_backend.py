"""JPL SPK kernel backend built on :mod:`skyfield`."""

from __future__ import annotations

import logging
from collections import OrderedDict
from pathlib import Path
from time import perf_counter
from typing import Final

from skyfield.api import load, load_file

from ..config.settings import EphemerisCfg
from ..core.vectors import StateVector, Vec3
from ..observability.metrics import (
    COMPUTE_ERRORS,
    EPHEMERIS_CACHE_HITS,
    EPHEMERIS_CACHE_MISSES,
    EPHEMERIS_COMPUTE_DURATION,
)
from .bodies import DEFAULT_EMRAT, J2000, Body
from .errors import EphemerisFormatError, EphemerisRangeError

LOG = logging.getLogger(__name__)

__all__ = ["SkyfieldBackend"]

# NAIF identifiers of the barycentric segments carried by DE4xx kernels.
_NAIF_CODES: Final[dict[Body, int]] = {
    Body.MERCURY: 1,
    Body.VENUS: 2,
    Body.EARTH_MOON_BARYCENTRE: 3,
    Body.MARS: 4,
    Body.JUPITER: 5,
    Body.SATURN: 6,
    Body.URANUS: 7,
    Body.NEPTUNE: 8,
    Body.PLUTO: 9,
    Body.SUN: 10,
}
_NAIF_MOON: Final[int] = 301
_NAIF_EARTH: Final[int] = 399


class SkyfieldBackend:
    """Barycentric states read from a local kernel such as ``de421.bsp``.

    Positions are ICRF (J2000 equator) in AU, velocities in AU/day.  The
    Moon is returned geocentric, every other body barycentric.  Results are
    memoised in a bounded LRU cache keyed by ``(jd, body)``.
    """

    _DEFAULT_CACHE_SIZE: Final[int] = 2048

    def __init__(
        self,
        kernel_path: str | Path,
        *,
        cache_size: int | None = None,
        emrat: float | None = None,
    ) -> None:
        path = Path(kernel_path)
        try:
            self._kernel = load_file(str(path))
        except (OSError, ValueError) as exc:
            LOG.error(
                "failed to open JPL kernel",
                extra={"err_code": "EPHEMERIS_FORMAT", "kernel": str(path)},
                exc_info=True,
            )
            raise EphemerisFormatError(
                f"unable to read ephemeris kernel {path}",
                context={"kernel": str(path), "reason": str(exc)},
            ) from exc
        self._path = path
        self._ts = load.timescale(builtin=True)
        self._emrat = float(emrat) if emrat is not None else DEFAULT_EMRAT
        self._earliest, self._latest = self._coverage()
        self._cache: OrderedDict[tuple[float, int], StateVector] = OrderedDict()
        if cache_size is None:
            self._cache_capacity = self._DEFAULT_CACHE_SIZE
        else:
            self._cache_capacity = max(0, int(cache_size))
        LOG.debug(
            "loaded JPL kernel",
            extra={
                "kernel": str(path),
                "earliest": self._earliest,
                "latest": self._latest,
            },
        )

    @classmethod
    def from_config(cls, cfg: EphemerisCfg) -> "SkyfieldBackend":
        if not cfg.kernel_path:
            raise ValueError("EphemerisCfg.kernel_path is not configured")
        return cls(cfg.kernel_path, cache_size=cfg.cache_size, emrat=cfg.emrat)

    def _coverage(self) -> tuple[float, float]:
        starts: list[float] = []
        ends: list[float] = []
        for segment in self._kernel.segments:
            spk = getattr(segment, "spk_segment", None)
            if spk is None:
                continue
            starts.append(float(spk.start_jd))
            ends.append(float(spk.end_jd))
        if not starts:
            raise EphemerisFormatError(
                "kernel carries no SPK segments",
                context={"kernel": str(self._path)},
            )
        return max(starts), min(ends)

    # ------------------------------------------------------------------
    # EphemerisBackend protocol
    # ------------------------------------------------------------------
    @property
    def epoch(self) -> float:
        return J2000

    @property
    def earliest_date(self) -> float:
        return self._earliest

    @property
    def latest_date(self) -> float:
        return self._latest

    @property
    def emrat(self) -> float:
        return self._emrat

    def position(self, body: Body, jd: float) -> Vec3:
        return self.state(body, jd).position

    def state(self, body: Body, jd: float) -> StateVector:
        body = Body(body)
        if not self._earliest <= jd <= self._latest:
            raise EphemerisRangeError(
                jd, self._earliest, self._latest, context={"body": body.name}
            )

        cache_key = (jd, int(body))
        backend_label = self.__class__.__name__
        if self._cache_capacity > 0:
            cached = self._cache.get(cache_key)
            if cached is not None:
                self._cache.move_to_end(cache_key)
                EPHEMERIS_CACHE_HITS.labels(backend=backend_label).inc()
                return cached

        EPHEMERIS_CACHE_MISSES.labels(backend=backend_label).inc()
        start = perf_counter()
        try:
            state = self._compute(body, jd)
        except Exception as exc:
            COMPUTE_ERRORS.labels(
                component="skyfield_backend",
                error=exc.__class__.__name__,
            ).inc()
            raise
        finally:
            EPHEMERIS_COMPUTE_DURATION.labels(
                backend=backend_label, body=body.name
            ).observe(perf_counter() - start)
        self._store(cache_key, state)
        return state

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _vector_function(self, body: Body):
        if body is Body.MOON:
            return self._kernel[_NAIF_MOON] - self._kernel[_NAIF_EARTH]
        try:
            code = _NAIF_CODES[body]
        except KeyError as exc:
            raise ValueError(f"{body.name} has no table in a JPL kernel") from exc
        try:
            return self._kernel[code]
        except KeyError as exc:
            raise EphemerisFormatError(
                f"kernel has no segment for {body.name}",
                context={"kernel": str(self._path), "naif": code},
            ) from exc

    def _compute(self, body: Body, jd: float) -> StateVector:
        t = self._ts.tdb_jd(jd)
        observed = self._vector_function(body).at(t)
        return StateVector(
            Vec3.from_sequence(observed.position.au),
            Vec3.from_sequence(observed.velocity.au_per_d),
        )

    def _store(self, key: tuple[float, int], state: StateVector) -> None:
        if self._cache_capacity <= 0:
            return
        self._cache[key] = state
        self._cache.move_to_end(key)
        if len(self._cache) > self._cache_capacity:
            self._cache.popitem(last=False)

    def clear_cache(self) -> None:
        self._cache.clear()

    def __repr__(self) -> str:
        return f"SkyfieldBackend({self._path.name!r})"
