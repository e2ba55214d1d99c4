"""Tests for the world builder and world queries."""

import pytest
import math
import numpy as np

from raytracing.errors import ObjectNotBounded
from raytracing.vec3 import Vec3, Point3, Color
from raytracing.ray import Ray
from raytracing.shapes import Sphere
from raytracing.materials import Lambertian, Dielectric
from raytracing.world import World, WorldBuilder

MATTE = Lambertian(Color(0.5, 0.5, 0.5))


class TestWorldBuilder:
    """Test world construction."""

    def test_chaining(self):
        builder = WorldBuilder()
        result = builder.add(Sphere(Point3(0, 0, -1), 0.5), MATTE).add(Sphere(Point3(2, 0, -1), 0.5), MATTE)

        assert result is builder
        assert len(builder) == 2

    def test_build(self):
        world = (
            WorldBuilder()
            .add(Sphere(Point3(0, 0, -1), 0.5), MATTE)
            .add(Sphere(Point3(0, -100.5, -1), 100), MATTE)
            .build(np.random.default_rng(0))
        )

        assert isinstance(world, World)
        assert len(world) == 2

    def test_build_without_generator(self):
        world = WorldBuilder().add(Sphere.unit(), MATTE).build()
        assert len(world) == 1

    def test_unbounded_geometry_rejected(self):
        builder = WorldBuilder().add(Sphere.unit(), MATTE).add(Sphere(Point3(1, 1, 1), 0), MATTE)
        with pytest.raises(ObjectNotBounded):
            builder.build(np.random.default_rng(0))

    def test_non_finite_center_rejected(self):
        builder = WorldBuilder().add(Sphere(Point3(math.inf, 0, 0), 1.0), MATTE)
        with pytest.raises(ObjectNotBounded):
            builder.build(np.random.default_rng(0))


class TestEmptyWorld:
    """An empty world is valid and is hit by nothing."""

    def test_empty(self):
        world = WorldBuilder().build(np.random.default_rng(0))

        assert len(world) == 0
        assert world.root is None
        assert world.bounding_box() is None

    def test_never_hit(self):
        world = WorldBuilder().build(np.random.default_rng(0))
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert world.hit(np.random.default_rng(0), ray, 0.001, math.inf) is None


class TestWorldHit:
    """Test hit queries."""

    def test_closest_hit_and_scatter(self):
        world = (
            WorldBuilder()
            .add(Sphere(Point3(0, 0, -10), 1.0), MATTE)
            .add(Sphere(Point3(0, 0, -3), 1.0), Dielectric(1.5))
            .build(np.random.default_rng(1))
        )

        event = world.hit(np.random.default_rng(0), Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), 0.001, math.inf)

        assert abs(event.record.t - 2.0) < 1e-12
        assert event.record.hit_at == Point3(0, 0, -2)
        # Glass never absorbs
        assert event.scatter.attenuation == Color(1, 1, 1)

    def test_bounding_box(self):
        world = (
            WorldBuilder()
            .add(Sphere(Point3(-2, 0, 0), 1.0), MATTE)
            .add(Sphere(Point3(2, 0, 0), 0.5), MATTE)
            .build(np.random.default_rng(0))
        )

        box = world.bounding_box()
        assert box.minimum == Point3(-3, -1, -1)
        assert box.maximum == Point3(2.5, 1, 1)

    def test_same_answer_for_any_build_generator(self):
        spheres = [Sphere(Point3(x, 0, -5), 0.4) for x in range(-3, 4)]
        worlds = []
        for seed in range(4):
            builder = WorldBuilder()
            for sphere in spheres:
                builder.add(sphere, MATTE)
            worlds.append(builder.build(np.random.default_rng(seed)))

        for x in np.linspace(-3.5, 3.5, 29):
            ray = Ray(Point3(x, 0, 0), Vec3(0, 0, -1))
            hits = [w.hit(np.random.default_rng(0), ray, 0.001, math.inf) for w in worlds]
            ts = {None if h is None else round(h.record.t, 9) for h in hits}
            assert len(ts) == 1
