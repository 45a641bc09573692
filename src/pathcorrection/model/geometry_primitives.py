"""
Geometric Primitives for path correction and scene building.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector:
    """
    A vector in 3D space representing direction and magnitude.
    Also used for positions, where it is convenient to subtract two of them.
    Immutable, so shared constants (X_AXIS, Z_AXIS) cannot be changed through an alias.
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector:
        if scalar == 0.0: raise ZeroDivisionError
        return Vector(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector:
        return Vector(-self.x, -self.y, -self.z)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0: return Vector(0.0, 0.0, 0.0)
        return self / mag

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector) -> Vector:
        return Vector(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def rotate_x(self, angle_rad: float) -> Vector:
        """Rotate vector around X axis."""
        cos_a = math.cos(angle_rad)
        sin_a = math.sin(angle_rad)
        return Vector(
            self.x,
            self.y * cos_a - self.z * sin_a,
            self.y * sin_a + self.z * cos_a
        )

    def to_tuple(self) -> tuple[float, float, float]:
        return self.x, self.y, self.z

    @classmethod
    def from_array(cls, values: Sequence[float]) -> Vector:
        return cls(float(values[0]), float(values[1]), float(values[2]))


X_AXIS = Vector(1.0, 0.0, 0.0)
Z_AXIS = Vector(0.0, 0.0, 1.0)


@dataclass
class BoundingBox:
    """Axis aligned box around a set of positions."""
    minimum: Vector
    maximum: Vector

    @classmethod
    def from_points(cls, points: npt.NDArray[np.float64]) -> Optional[BoundingBox]:
        """Returns None for an empty (0, 3) array."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if pts.shape[0] == 0:
            return None
        return cls(
            minimum=Vector.from_array(pts.min(axis=0)),
            maximum=Vector.from_array(pts.max(axis=0)),
        )

    @property
    def center(self) -> Vector:
        return (self.minimum + self.maximum) * 0.5

    @property
    def extents(self) -> Vector:
        return self.maximum - self.minimum

    @property
    def max_extent(self) -> float:
        e = self.extents
        return max(e.x, e.y, e.z)
