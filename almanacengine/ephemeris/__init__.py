"""Position providers and refinement helpers exposed by :mod:`almanacengine`."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "Body",
    "EarthCentre",
    "EphemerisBackend",
    "EphemerisError",
    "EphemerisFormatError",
    "EphemerisRangeError",
    "KeplerianBody",
    "KeplerianElements",
    "MoonCentre",
    "MovingPoint",
    "NonConvergenceError",
    "PlanetCentre",
    "RefineResult",
    "SkyfieldBackend",
    "bracket_root",
    "refine_root",
]

if TYPE_CHECKING:  # pragma: no cover - import cycle guard for static analysis
    from .bodies import Body
    from .errors import EphemerisError, EphemerisFormatError, EphemerisRangeError
    from .kepler import KeplerianBody, KeplerianElements
    from .points import (
        EarthCentre,
        EphemerisBackend,
        MoonCentre,
        MovingPoint,
        PlanetCentre,
    )
    from .refinement import NonConvergenceError, RefineResult, bracket_root, refine_root
    from .skyfield_backend import SkyfieldBackend

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "Body": ("bodies", "Body"),
    "EphemerisError": ("errors", "EphemerisError"),
    "EphemerisFormatError": ("errors", "EphemerisFormatError"),
    "EphemerisRangeError": ("errors", "EphemerisRangeError"),
    "KeplerianBody": ("kepler", "KeplerianBody"),
    "KeplerianElements": ("kepler", "KeplerianElements"),
    "EarthCentre": ("points", "EarthCentre"),
    "EphemerisBackend": ("points", "EphemerisBackend"),
    "MoonCentre": ("points", "MoonCentre"),
    "MovingPoint": ("points", "MovingPoint"),
    "PlanetCentre": ("points", "PlanetCentre"),
    "NonConvergenceError": ("refinement", "NonConvergenceError"),
    "RefineResult": ("refinement", "RefineResult"),
    "bracket_root": ("refinement", "bracket_root"),
    "refine_root": ("refinement", "refine_root"),
    "SkyfieldBackend": ("skyfield_backend", "SkyfieldBackend"),
}


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _LAZY_ATTRS[name]
    except KeyError as exc:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from exc
    module = import_module(f".{module_name}", __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(__all__) | set(globals().keys()))
