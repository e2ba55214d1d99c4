"""
Materials and their light scattering laws.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)

Materials are immutable and may be shared by any number of spheres.
Randomness is always drawn from the generator passed to `scatter`.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

import numpy as np

from .vec3 import Vec3, Color
from .color import WHITE
from .ray import Ray
from .shapes import HitRecord, Pointing


@dataclass(frozen=True)
class Scatter:
    """Result of a material scatter operation.

    Attributes:
        direction: Unnormalized direction of the outgoing ray
        attenuation: Fraction of light kept per channel, each in [0, 1]
    """
    direction: Vec3
    attenuation: Color


def reflect(direction: Vec3, normal: Vec3) -> Vec3:
    """Mirror a direction about a unit normal."""
    return direction - normal * (2.0 * direction.dot(normal))


def refract(uv: Vec3, normal: Vec3, eta_ratio: float) -> Vec3:
    """Refract a unit direction through a surface (Snell's law, vector form).

    Args:
        uv: Unit incoming direction
        normal: Unit normal on the incoming side
        eta_ratio: Ratio of refractive indices (n1/n2)
    """
    cos_theta = min(-uv.dot(normal), 1.0)
    r_out_perp = (uv + normal * cos_theta) * eta_ratio
    r_out_parallel = normal * (-math.sqrt(abs(1.0 - r_out_perp.length_squared())))
    return r_out_perp + r_out_parallel


def reflectance(cosine: float, ref_idx: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1 - ref_idx) / (1 + ref_idx)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, rng: np.random.Generator, ray_in: Ray, record: HitRecord) -> Optional[Scatter]:
        """Compute the scattered direction and attenuation.

        Args:
            rng: Random generator owned by the calling worker
            ray_in: The incoming ray
            record: Where and how the ray hit the surface

        Returns:
            Scatter if the ray scatters, None if absorbed
        """
        pass


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    __slots__ = ('albedo',)

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        self.albedo = albedo

    @classmethod
    def random(cls, rng: np.random.Generator) -> Lambertian:
        """A Lambertian material with a random, mostly dark albedo."""
        return cls(Color.random(rng) * Color.random(rng))

    def scatter(self, rng: np.random.Generator, ray_in: Ray, record: HitRecord) -> Optional[Scatter]:
        direction = record.normal + Vec3.random_unit_vector(rng)

        # Catch degenerate scatter direction
        if direction.near_zero():
            direction = record.normal

        return Scatter(direction, self.albedo)

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with specular reflection."""

    __slots__ = ('albedo', 'fuzz')

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Surface roughness, clamped to [0, 1] (0 = mirror)
        """
        self.albedo = albedo
        self.fuzz = max(0.0, min(float(fuzz), 1.0))

    @classmethod
    def random(cls, rng: np.random.Generator) -> Metal:
        """A bright metal with a random tint and a little fuzz."""
        return cls(Color.random(rng, 0.5, 1.0), rng.uniform(0.0, 0.5))

    def scatter(self, rng: np.random.Generator, ray_in: Ray, record: HitRecord) -> Optional[Scatter]:
        reflected = reflect(ray_in.direction.normalize(), record.normal)
        direction = reflected + Vec3.random_in_unit_sphere(rng) * self.fuzz

        # The surface absorbs every ray whose mirror direction points into it
        if reflected.dot(record.normal) > 0:
            return Scatter(direction, self.albedo)
        return None

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, fuzz={self.fuzz})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    __slots__ = ('ior',)

    def __init__(self, ior: float = 1.5):
        """Create a dielectric material.

        Args:
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        if ior <= 0:
            raise ValueError(f"Index of refraction must be positive, got {ior}")
        self.ior = float(ior)

    def scatter(self, rng: np.random.Generator, ray_in: Ray, record: HitRecord) -> Optional[Scatter]:
        if record.pointing is Pointing.INWARD:
            refraction_ratio = self.ior
        else:
            refraction_ratio = 1.0 / self.ior

        unit_direction = ray_in.direction.normalize()
        cos_theta = min(-unit_direction.dot(record.normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or reflectance(cos_theta, refraction_ratio) > rng.random():
            direction = reflect(unit_direction, record.normal)
        else:
            direction = refract(unit_direction, record.normal, refraction_ratio)

        return Scatter(direction, WHITE)

    def __repr__(self) -> str:
        return f"Dielectric(ior={self.ior})"
