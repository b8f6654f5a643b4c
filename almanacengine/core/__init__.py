"""Core value types shared across AlmanacEngine."""

from __future__ import annotations

from .vectors import Matrix3, StateVector, Vec3

__all__ = ["Matrix3", "StateVector", "Vec3"]
