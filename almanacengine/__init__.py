"""AlmanacEngine package bootstrap and curated public API surface."""

from __future__ import annotations

import logging
from importlib import import_module
from importlib.metadata import PackageNotFoundError, version as _get_version
from typing import Any

LOG = logging.getLogger(__name__)

try:
    __version__ = _get_version("almanacengine")
except PackageNotFoundError:  # pragma: no cover - metadata may be unavailable in source checkouts
    __version__ = "0.0.0"


def get_version() -> str:
    """Return the resolved AlmanacEngine package version."""

    return __version__


_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "ApparentPlace": ("engine.observational", "ApparentPlace"),
    "ApparentPlaceSolver": ("engine.observational", "ApparentPlaceSolver"),
    "AltitudePolicy": ("engine.observational", "AltitudePolicy"),
    "Event": ("engine.observational", "Event"),
    "EventKind": ("engine.observational", "EventKind"),
    "IAUEarthRotationModel": ("engine.observational", "IAUEarthRotationModel"),
    "LocalVisibility": ("engine.observational", "LocalVisibility"),
    "Place": ("engine.observational", "Place"),
    "Settings": ("config", "Settings"),
    "bootstrap": ("boot", "bootstrap"),
    "load_settings": ("config", "load_settings"),
}

__all__ = ["__version__", "get_version", *sorted(_LAZY_ATTRS)]


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _LAZY_ATTRS[name]
    except KeyError as exc:
        raise AttributeError(name) from exc
    module = import_module(f".{module_name}", __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(__all__) | set(globals().keys()))
