"""Angle utilities shared across AlmanacEngine modules."""

from __future__ import annotations

import math

__all__ = [
    "ARCMIN",
    "ARCSEC",
    "TWO_PI",
    "has_opposite_sign",
    "norm_2pi",
    "reduce_angle",
]

TWO_PI = 2.0 * math.pi
ARCMIN = math.pi / (180.0 * 60.0)
ARCSEC = math.pi / (180.0 * 3600.0)


def norm_2pi(x: float) -> float:
    """Normalize angle to [0, 2π)."""

    y = math.fmod(x, TWO_PI)
    if y < 0.0:
        y += TWO_PI
    # fmod of a tiny negative value can round up to exactly 2π
    return 0.0 if y >= TWO_PI else y


def reduce_angle(x: float) -> float:
    """Reduce ``x`` (radians) to the half-open interval (-π, π]."""

    y = math.fmod(x, TWO_PI)
    if y > math.pi:
        y -= TWO_PI
    elif y <= -math.pi:
        y += TWO_PI
    return y


def has_opposite_sign(a: float, b: float) -> bool:
    """Return ``True`` when ``a`` and ``b`` are strictly of opposite sign."""

    return (a < 0.0 < b) or (b < 0.0 < a)
