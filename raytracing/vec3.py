"""
Vector3 class for 3D math operations.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors
- RGB color values

Vectors are immutable: every operation returns a new value.
"""

from __future__ import annotations
from typing import Iterator, Union
import numpy as np

from .errors import NumericInvariantError

# Magnitudes below this are treated as zero when dividing or normalizing
DIVISION_EPSILON = 1e-12


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


class Vec3:
    """An immutable 3D vector.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = _frozen(np.array([x, y, z], dtype=np.float64))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array (the array is copied)."""
        return cls._wrap(np.array(arr, dtype=np.float64))

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> Vec3:
        v = cls.__new__(cls)
        v._data = _frozen(arr)
        return v

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    # Aliases for color operations
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    # Equality is approximate, so no hash can agree with it
    __hash__ = None

    def __iter__(self) -> Iterator[float]:
        return (float(c) for c in self._data)

    def __neg__(self) -> Vec3:
        return Vec3._wrap(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3._wrap(self._data + other._data)
        return Vec3._wrap(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3._wrap(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3._wrap(self._data - other._data)
        return Vec3._wrap(self._data - other)

    def __rsub__(self, other: float) -> Vec3:
        return Vec3._wrap(other - self._data)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3._wrap(self._data * other._data)
        return Vec3._wrap(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3._wrap(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        """Divide componentwise or by a scalar.

        Raises:
            NumericInvariantError: if the divisor (or any divisor component)
                is near zero
        """
        if isinstance(other, Vec3):
            if np.any(np.abs(other._data) < DIVISION_EPSILON):
                raise NumericInvariantError(f"Division of {self} by near-zero vector {other}")
            return Vec3._wrap(self._data / other._data)
        if abs(other) < DIVISION_EPSILON:
            raise NumericInvariantError(f"Division of {self} by near-zero scalar {other!r}")
        return Vec3._wrap(self._data / other)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return float(np.linalg.norm(self._data))

    norm = length

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        Raises:
            NumericInvariantError: if the vector has (near) zero length
        """
        length = self.length()
        if length < DIVISION_EPSILON:
            raise NumericInvariantError(f"Cannot normalize near-zero vector {self}")
        return Vec3._wrap(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3._wrap(np.cross(self._data, other._data))

    def near_zero(self, epsilon: float = 1e-8) -> bool:
        """Check if vector is close to zero in all dimensions."""
        return bool(np.all(np.abs(self._data) < epsilon))

    def is_finite(self) -> bool:
        """Check that no component is NaN or infinite."""
        return bool(np.all(np.isfinite(self._data)))

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()

    def clamp(self, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        """Clamp all components to the given range."""
        return Vec3._wrap(np.clip(self._data, min_val, max_val))

    def sqrt(self) -> Vec3:
        """Componentwise square root of the non-negative part."""
        return Vec3._wrap(np.sqrt(np.maximum(self._data, 0.0)))

    @staticmethod
    def random(rng: np.random.Generator, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        """Generate a random vector with components in [min_val, max_val)."""
        return Vec3._wrap(rng.uniform(min_val, max_val, 3))

    @staticmethod
    def random_in_unit_sphere(rng: np.random.Generator) -> Vec3:
        """Generate a random point inside the unit sphere."""
        while True:
            p = Vec3.random(rng, -1, 1)
            if p.length_squared() < 1:
                return p

    @staticmethod
    def random_unit_vector(rng: np.random.Generator) -> Vec3:
        """Generate a random unit vector (uniform on sphere surface)."""
        while True:
            p = Vec3.random_in_unit_sphere(rng)
            if p.length() >= DIVISION_EPSILON:
                return p.normalize()

    @staticmethod
    def random_in_unit_disk(rng: np.random.Generator) -> Vec3:
        """Generate a random point inside the unit disk (z=0)."""
        while True:
            x, y = rng.uniform(-1, 1, 2)
            if x * x + y * y < 1:
                return Vec3(x, y, 0.0)


# Convenience type aliases
Point3 = Vec3
Color = Vec3
