"""
Point and vector kernel.

Immutable three-component value types used at the public API boundary.
Bulk computations inside the engine work on numpy arrays directly; these
types wrap single points, directions and normals.
"""

import math
from typing import Iterable, NamedTuple, Optional, Union

import numpy as np

#: Length below which a vector is treated as zero.
ZERO_LENGTH = 1e-12


class Vector3(NamedTuple):
    """A direction or displacement in 3D space."""

    x: float
    y: float
    z: float

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> "Vector3":
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(0.0, 0.0, 0.0)

    def to_array(self) -> np.ndarray:
        return np.array(self, dtype=float)

    def __add__(self, other: "Vector3") -> "Vector3":  # type: ignore[override]
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vector3") -> "Vector3":
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> "Vector3":  # type: ignore[override]
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector3":
        return Vector3(-self.x, -self.y, -self.z)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vector3") -> "Vector3":
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def is_zero(self, tolerance: float = ZERO_LENGTH) -> bool:
        return self.length() <= tolerance

    def normalized(self, tolerance: float = ZERO_LENGTH) -> Optional["Vector3"]:
        """
        Unit vector in the same direction.

        Returns:
            The unit vector, or None when the length is at or below
            ``tolerance``.
        """
        length = self.length()
        if length <= tolerance:
            return None
        return Vector3(self.x / length, self.y / length, self.z / length)

    def angle_to(self, other: "Vector3") -> float:
        """
        Unsigned angle to ``other`` in radians, within [0, pi].

        Returns:
            The angle, or ``math.pi`` if either vector has zero length.
        """
        a = self.normalized()
        b = other.normalized()
        if a is None or b is None:
            return math.pi
        return math.acos(max(-1.0, min(1.0, a.dot(b))))

    def any_perpendicular(self) -> "Vector3":
        """A unit vector perpendicular to this one (zero vector for zero input)."""
        # Cross with the axis least aligned with self for numeric stability
        ax, ay, az = abs(self.x), abs(self.y), abs(self.z)
        if ax <= ay and ax <= az:
            axis = Vector3(1.0, 0.0, 0.0)
        elif ay <= az:
            axis = Vector3(0.0, 1.0, 0.0)
        else:
            axis = Vector3(0.0, 0.0, 1.0)
        return self.cross(axis).normalized() or Vector3.zero()

    def eq_with_tolerance(self, other: "Vector3", tolerance: float) -> bool:
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
        )


class Point3(NamedTuple):
    """A location in 3D space."""

    x: float
    y: float
    z: float

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> "Point3":
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    @classmethod
    def origin(cls) -> "Point3":
        return cls(0.0, 0.0, 0.0)

    def to_array(self) -> np.ndarray:
        return np.array(self, dtype=float)

    def __add__(self, other: Vector3) -> "Point3":  # type: ignore[override]
        return Point3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Union["Point3", Vector3]) -> Union[Vector3, "Point3"]:
        if isinstance(other, Vector3):
            return Point3(self.x - other.x, self.y - other.y, self.z - other.z)
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def vector_to(self, other: "Point3") -> Vector3:
        return Vector3(other.x - self.x, other.y - self.y, other.z - self.z)

    def distance_to(self, other: "Point3") -> float:
        return self.vector_to(other).length()

    def midpoint(self, other: "Point3") -> "Point3":
        return Point3(
            (self.x + other.x) / 2.0,
            (self.y + other.y) / 2.0,
            (self.z + other.z) / 2.0,
        )

    def eq_with_tolerance(self, other: "Point3", tolerance: float) -> bool:
        return (
            abs(self.x - other.x) <= tolerance
            and abs(self.y - other.y) <= tolerance
            and abs(self.z - other.z) <= tolerance
        )
