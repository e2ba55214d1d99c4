"""
Geometric shapes for the ray tracer.

Each shape must implement the Hittable protocol with a `hit` method and
report its axis-aligned bounding box.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import math

from .vec3 import Vec3, Point3
from .ray import Ray


class Pointing(Enum):
    """Which side of the surface the stored normal points to."""
    INWARD = "inward"
    OUTWARD = "outward"


@dataclass(frozen=True)
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        hit_at: The intersection point in world space
        normal: The unit surface normal (always points against the ray)
        t: The ray parameter at intersection
        pointing: OUTWARD if the normal is the geometric outward normal,
            INWARD if it had to be flipped
    """
    hit_at: Point3
    normal: Vec3
    t: float
    pointing: Pointing

    @classmethod
    def from_outward_normal(cls, ray: Ray, t: float, outward_normal: Vec3) -> HitRecord:
        """Build a record whose normal opposes the incoming ray.

        Args:
            ray: The incoming ray
            t: The ray parameter at the hit
            outward_normal: The unit geometric normal pointing outward from surface
        """
        if ray.direction.dot(outward_normal) < 0:
            return cls(ray.at(t), outward_normal, t, Pointing.OUTWARD)
        return cls(ray.at(t), -outward_normal, t, Pointing.INWARD)


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Minimum t value to consider (avoid self-intersection)
            t_max: Maximum t value to consider

        Returns:
            HitRecord if intersection found, None otherwise
        """
        pass

    @abstractmethod
    def bounding_box(self) -> Optional[AABB]:
        """Get the axis-aligned bounding box for this object.

        Returns:
            AABB if the object is bounded, None otherwise
        """
        pass


class AABB:
    """Axis-Aligned Bounding Box for acceleration structures."""

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values

        Raises:
            ValueError: if minimum exceeds maximum on some axis
        """
        for i in range(3):
            if minimum[i] > maximum[i]:
                raise ValueError(f"AABB minimum {minimum} exceeds maximum {maximum} on axis {i}")
        self.minimum = minimum
        self.maximum = maximum

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Test if ray intersects this AABB within [t_min, t_max] (slab method)."""
        for i in range(3):
            origin = ray.origin[i]
            direction = ray.direction[i]

            if direction == 0:
                # Parallel to the slab: either always inside it or never
                if origin < self.minimum[i] or origin > self.maximum[i]:
                    return False
                continue

            inv_d = 1.0 / direction
            t0 = (self.minimum[i] - origin) * inv_d
            t1 = (self.maximum[i] - origin) * inv_d

            if inv_d < 0:
                t0, t1 = t1, t0

            t_min = max(t0, t_min)
            t_max = min(t1, t_max)

            if t_max < t_min:
                return False

        return True

    def merge(self, other: AABB) -> AABB:
        """Return the smallest AABB containing this box and other."""
        return AABB.surrounding_box(self, other)

    @staticmethod
    def surrounding_box(box0: AABB, box1: AABB) -> AABB:
        """Return the AABB that contains both input boxes."""
        small = Point3(
            min(box0.minimum.x, box1.minimum.x),
            min(box0.minimum.y, box1.minimum.y),
            min(box0.minimum.z, box1.minimum.z)
        )
        big = Point3(
            max(box0.maximum.x, box1.maximum.x),
            max(box0.maximum.y, box1.maximum.y),
            max(box0.maximum.z, box1.maximum.z)
        )
        return AABB(small, big)

    def contains(self, other: AABB) -> bool:
        """Check whether other lies entirely inside this box."""
        return all(
            self.minimum[i] <= other.minimum[i] and other.maximum[i] <= self.maximum[i]
            for i in range(3)
        )

    def is_finite(self) -> bool:
        return self.minimum.is_finite() and self.maximum.is_finite()

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"


class Sphere(Hittable):
    """A sphere defined by center and radius.

    A negative radius keeps the same surface but flips the geometric normal
    inward, which models the inner wall of a hollow shell.
    """

    __slots__ = ('center', 'radius')

    def __init__(self, center: Point3, radius: float):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (can be negative for inward normals)
        """
        self.center = center
        self.radius = float(radius)

    @classmethod
    def unit(cls) -> Sphere:
        """The sphere of radius 1 centered at the origin."""
        return cls(Point3(0, 0, 0), 1.0)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        which is the quadratic at² + 2·half_b·t + c = 0.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Find the nearest root in the acceptable range
        root = (-half_b - sqrtd) / a
        if root < t_min or root > t_max:
            root = (-half_b + sqrtd) / a
            if root < t_min or root > t_max:
                return None

        outward_normal = (ray.at(root) - self.center) / self.radius
        return HitRecord.from_outward_normal(ray, root, outward_normal)

    def bounding_box(self) -> Optional[AABB]:
        """Return the AABB containing this sphere, or None if degenerate."""
        if self.radius == 0 or not math.isfinite(self.radius) or not self.center.is_finite():
            return None
        r = abs(self.radius)
        r_vec = Vec3(r, r, r)
        return AABB(self.center - r_vec, self.center + r_vec)

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class HittableList(Hittable):
    """A collection of hittable objects searched by linear scan."""

    def __init__(self, objects: Optional[list[Hittable]] = None):
        self.objects: list[Hittable] = objects if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def bounding_box(self) -> Optional[AABB]:
        """Return the AABB containing all objects, None if any is unbounded."""
        result: Optional[AABB] = None
        for obj in self.objects:
            box = obj.bounding_box()
            if box is None:
                return None
            result = box if result is None else result.merge(box)
        return result

    def __len__(self) -> int:
        return len(self.objects)
