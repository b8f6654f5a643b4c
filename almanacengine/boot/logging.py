"""Logging helpers for AlmanacEngine entry points."""

from __future__ import annotations

import logging
import os
from typing import Any

__all__ = ["LOG_LEVEL_ENV", "configure_logging"]

LOG_LEVEL_ENV = "ALMANACENGINE_LOG_LEVEL"

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _coerce_level(value: str | int | None, default: int) -> int:
    """Return a logging level derived from ``value``.

    Level names are case insensitive; numeric strings are accepted as-is.
    Anything unrecognised resolves to ``default``.
    """

    if value is None:
        return default
    if isinstance(value, int):
        return value

    candidate = value.strip()
    if not candidate:
        return default
    if candidate.isdigit():
        return int(candidate)

    resolved = logging.getLevelName(candidate.upper())
    if isinstance(resolved, int):
        return resolved
    return default


def configure_logging(
    *,
    level: str | int | None = None,
    default: int = logging.WARNING,
    **kwargs: Any,
) -> int:
    """Configure the root logger for scripts embedding AlmanacEngine.

    ``level`` wins over the ``ALMANACENGINE_LOG_LEVEL`` environment
    variable.  Remaining ``kwargs`` go to :func:`logging.basicConfig`.
    Returns the effective level.
    """

    requested: str | int | None = level
    if requested is None:
        requested = os.environ.get(LOG_LEVEL_ENV)
    effective_level = _coerce_level(requested, default)

    logging.basicConfig(
        level=effective_level,
        format=kwargs.pop("format", _DEFAULT_FORMAT),
        datefmt=kwargs.pop("datefmt", _DEFAULT_DATEFMT),
        force=kwargs.pop("force", True),
        **kwargs,
    )
    return effective_level
