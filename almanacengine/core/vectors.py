"""Immutable 3-vectors and 3×3 rotation matrices."""

from __future__ import annotations

import math
from dataclasses import dataclass

__all__ = ["Matrix3", "StateVector", "Vec3"]


@dataclass(frozen=True, slots=True)
class Vec3:
    """Simple 3D vector container.

    Positions are expressed in AU, velocities in AU/day and directions are
    dimensionless unit vectors.  Instances are values: every operation
    returns a new vector.
    """

    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> "Vec3":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def from_sequence(cls, values) -> "Vec3":
        x, y, z = values
        return cls(float(x), float(y), float(z))

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def plus(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def minus(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scaled(self, factor: float) -> "Vec3":
        return Vec3(self.x * factor, self.y * factor, self.z * factor)

    def dot(self, other: "Vec3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> "Vec3":
        r = self.magnitude()
        if r == 0.0:
            raise ValueError("cannot normalise a zero-length vector")
        return self.scaled(1.0 / r)


@dataclass(frozen=True, slots=True)
class Matrix3:
    """Row-major 3×3 matrix, used for precession and nutation rotations."""

    rows: tuple[
        tuple[float, float, float],
        tuple[float, float, float],
        tuple[float, float, float],
    ]

    @classmethod
    def identity(cls) -> "Matrix3":
        return cls(((1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0)))

    @classmethod
    def rotation_x(cls, angle: float) -> "Matrix3":
        """Rotate the reference frame about the x-axis by ``angle`` radians."""

        c = math.cos(angle)
        s = math.sin(angle)
        return cls(((1.0, 0.0, 0.0), (0.0, c, s), (0.0, -s, c)))

    @classmethod
    def rotation_z(cls, angle: float) -> "Matrix3":
        """Rotate the reference frame about the z-axis by ``angle`` radians."""

        c = math.cos(angle)
        s = math.sin(angle)
        return cls(((c, s, 0.0), (-s, c, 0.0), (0.0, 0.0, 1.0)))

    def apply(self, vec: Vec3) -> Vec3:
        (a, b, c), (d, e, f), (g, h, i) = self.rows
        return Vec3(
            a * vec.x + b * vec.y + c * vec.z,
            d * vec.x + e * vec.y + f * vec.z,
            g * vec.x + h * vec.y + i * vec.z,
        )

    def transpose(self) -> "Matrix3":
        r = self.rows
        return Matrix3(
            (
                (r[0][0], r[1][0], r[2][0]),
                (r[0][1], r[1][1], r[2][1]),
                (r[0][2], r[1][2], r[2][2]),
            )
        )

    def multiply(self, other: "Matrix3") -> "Matrix3":
        """Return ``self · other``."""

        cols = other.transpose().rows
        return Matrix3(
            tuple(
                tuple(sum(row[k] * col[k] for k in range(3)) for col in cols)
                for row in self.rows
            )  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class StateVector:
    """Position (AU) and velocity (AU/day) of one body at one instant."""

    position: Vec3
    velocity: Vec3
