"""Utility helpers for AlmanacEngine."""

from __future__ import annotations

from .angles import ARCMIN, ARCSEC, TWO_PI, has_opposite_sign, norm_2pi, reduce_angle

__all__ = [
    "ARCMIN",
    "ARCSEC",
    "TWO_PI",
    "has_opposite_sign",
    "norm_2pi",
    "reduce_angle",
]
