"""
Built-in demo scenes.
"""

from __future__ import annotations

import numpy as np

from .camera import Camera, CameraBuilder
from .materials import Dielectric, Lambertian, Material, Metal
from .shapes import Sphere
from .vec3 import Color, Point3, Vec3
from .world import World, WorldBuilder

# Material mix of the small spheres: (kind, weight in percent)
SMALL_SPHERE_MIX = (('lambertian', 80), ('metal', 15), ('dielectric', 5))


def _pick_material(rng: np.random.Generator, glass: Dielectric) -> Material:
    kinds = [kind for kind, _ in SMALL_SPHERE_MIX]
    weights = np.array([w for _, w in SMALL_SPHERE_MIX], dtype=np.float64)
    kind = kinds[rng.choice(len(kinds), p=weights / weights.sum())]
    if kind == 'lambertian':
        return Lambertian.random(rng)
    if kind == 'metal':
        return Metal.random(rng)
    return glass


def random_world(rng: np.random.Generator) -> World:
    """The cover scene: a field of small random spheres around three big ones."""
    builder = WorldBuilder()

    glass = Dielectric(1.5)
    builder.add(Sphere(Point3(0, -1000, 0), 1000), Lambertian(Color(0.5, 0.5, 0.5)))

    empty_spot = Point3(4, 0.2, 0)
    small_radius = 0.2

    for a in range(-11, 11):
        for b in range(-11, 11):
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
            # Keep the view onto the big metal sphere clear
            if (center - empty_spot).length() > 0.9:
                builder.add(Sphere(center, small_radius), _pick_material(rng, glass))

    builder.add(Sphere(Point3(0, 1, 0), 1.0), glass)
    builder.add(Sphere(Point3(-4, 1, 0), 1.0), Lambertian(Color(0.4, 0.2, 0.1)))
    builder.add(Sphere(Point3(4, 1, 0), 1.0), Metal(Color(0.7, 0.6, 0.5), 0.0))

    return builder.build(rng)


def cover_camera(aspect_ratio: float) -> Camera:
    return (
        CameraBuilder()
        .look_from(Point3(13, 2, 3))
        .look_at(Point3(0, 0, 0))
        .vup(Vec3(0, 1, 0))
        .aspect_ratio(aspect_ratio)
        .focus_dist(10.0)
        .vfov(20.0)
        .aperture(0.1)
        .build()
    )


def hollow_glass_world(rng: np.random.Generator) -> World:
    """Three spheres on a ground plane; the left one is a hollow glass bubble.

    The bubble is two concentric dielectric spheres, the inner one with a
    negative radius so its surface faces inward.
    """
    glass = Dielectric(1.5)
    return (
        WorldBuilder()
        .add(Sphere(Point3(0, -100.5, -1), 100), Lambertian(Color(0.8, 0.8, 0.0)))
        .add(Sphere(Point3(0, 0, -1), 0.5), Lambertian(Color(0.1, 0.2, 0.5)))
        .add(Sphere(Point3(-1, 0, -1), 0.5), glass)
        .add(Sphere(Point3(-1, 0, -1), -0.45), glass)
        .add(Sphere(Point3(1, 0, -1), 0.5), Metal(Color(0.8, 0.6, 0.2), 0.0))
        .build(rng)
    )


def hollow_glass_camera(aspect_ratio: float) -> Camera:
    return (
        CameraBuilder()
        .look_from(Point3(-2, 2, 1))
        .look_at(Point3(0, 0, -1))
        .vup(Vec3(0, 1, 0))
        .aspect_ratio(aspect_ratio)
        .vfov(20.0)
        .build()
    )


SCENES = {
    'cover': (random_world, cover_camera),
    'hollow': (hollow_glass_world, hollow_glass_camera),
}
