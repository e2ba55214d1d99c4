"""Tests for Ray class."""

import pytest
from raytracing.vec3 import Vec3, Point3
from raytracing.ray import Ray


class TestRayCreation:
    """Test Ray construction."""

    def test_stores_origin(self):
        origin = Point3(1, 2, 3)
        ray = Ray(origin, Vec3(1, 0, 0))
        assert ray.origin == origin

    def test_stores_direction(self):
        direction = Vec3(1, 2, 3)
        ray = Ray(Point3(0, 0, 0), direction)
        assert ray.direction == direction

    def test_direction_not_normalized(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -3))
        assert ray.direction.length() == 3.0

    def test_read_only(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 0, 0))
        with pytest.raises(AttributeError):
            ray.origin = Point3(1, 1, 1)


class TestRayAt:
    """Test Ray.at() method."""

    def test_at_zero(self):
        ray = Ray(Point3(1, 2, 3), Vec3(1, 0, 0))
        assert ray.at(0) == Point3(1, 2, 3)

    def test_at_positive(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 2, 3))
        assert ray.at(2) == Point3(2, 4, 6)

    def test_at_negative(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 0, 0))
        assert ray.at(-1) == Point3(-1, 0, 0)
