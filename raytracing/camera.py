"""
Camera module for generating primary rays.

Supports:
- Perspective projection
- Depth of field (defocus blur)
- Configurable field of view
- Arbitrary positioning via look-at
"""

from __future__ import annotations
import math
from typing import List, Optional

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A camera with perspective projection and depth of field.

    Cameras are immutable once built; all derived vectors are computed in
    the constructor.
    """

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: Optional[float] = None
    ):
        """Create a camera.

        Args:
            look_from: Camera position in world space
            look_at: Point the camera is looking at
            vup: World up vector (usually (0, 1, 0))
            vfov: Vertical field of view in degrees
            aspect_ratio: Width / Height ratio
            aperture: Lens aperture for depth of field (0 = pinhole)
            focus_dist: Distance to the focus plane (defaults to the
                distance between look_from and look_at)

        Raises:
            NumericInvariantError: if look_from equals look_at or vup is
                parallel to the viewing direction
            ValueError: if vfov, aspect_ratio, aperture or focus_dist is out
                of range
        """
        if not 0 < vfov < 180:
            raise ValueError(f"Vertical field of view must be in (0, 180), got {vfov}")
        if aspect_ratio <= 0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")
        if aperture < 0:
            raise ValueError(f"Aperture must not be negative, got {aperture}")
        if focus_dist is not None and focus_dist <= 0:
            raise ValueError(f"Focus distance must be positive, got {focus_dist}")
        if focus_dist is None:
            focus_dist = (look_from - look_at).length()

        theta = math.radians(vfov)
        h = math.tan(theta / 2)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        # Compute orthonormal camera basis
        self.w = (look_from - look_at).normalize()  # Points backward from camera
        self.u = vup.cross(self.w).normalize()       # Points right
        self.v = self.w.cross(self.u)                # Points up

        self.origin = look_from
        self.focus_dist = focus_dist
        self.aspect_ratio = aspect_ratio
        self.horizontal = self.u * (viewport_width * focus_dist)
        self.vertical = self.v * (viewport_height * focus_dist)
        self.lower_left_corner = (
            self.origin
            - self.horizontal / 2
            - self.vertical / 2
            - self.w * focus_dist
        )

        self.lens_radius = aperture / 2

    def get_ray(self, rng: np.random.Generator, s: float, t: float) -> Ray:
        """Generate a ray for the given coordinates on the image plane.

        Args:
            rng: Random generator for the lens sample
            s: Horizontal coordinate [0, 1] (0 = left, 1 = right)
            t: Vertical coordinate [0, 1] (0 = bottom, 1 = top)

        Returns:
            A ray from the camera lens through the specified point
        """
        # Depth of field: random point on lens
        if self.lens_radius > 0:
            rd = Vec3.random_in_unit_disk(rng) * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y
        else:
            offset = Vec3(0, 0, 0)

        direction = (
            self.lower_left_corner
            + self.horizontal * s
            + self.vertical * t
            - self.origin
            - offset
        )

        return Ray(self.origin + offset, direction)

    def cast(self, width: int, height: int) -> List[PixelSampler]:
        """Return one sampler per pixel, row by row from the top row down."""
        return [
            PixelSampler(self, i, j, width, height)
            for j in range(height)
            for i in range(width)
        ]

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, looking_at={self.lower_left_corner + self.horizontal/2 + self.vertical/2})"


class PixelSampler:
    """Generates antialiased camera rays through one pixel.

    Pixel (0, 0) is the top-left corner of the image.
    """

    __slots__ = ('camera', 'i', 'j', 'width', 'height')

    def __init__(self, camera: Camera, i: int, j: int, width: int, height: int):
        self.camera = camera
        self.i = i
        self.j = j
        self.width = width
        self.height = height

    @property
    def index(self) -> int:
        """Row-major index of the pixel, counted from the top row."""
        return self.j * self.width + self.i

    def sample(self, rng: np.random.Generator) -> Ray:
        """A ray through a uniformly jittered point inside the pixel."""
        du, dv = rng.random(2)
        s = (self.i + du) / self.width
        t = (self.height - 1 - self.j + dv) / self.height
        return self.camera.get_ray(rng, s, t)

    def __repr__(self) -> str:
        return f"PixelSampler(i={self.i}, j={self.j})"


class CameraBuilder:
    """Fluent builder for Camera."""

    def __init__(self):
        self._look_from = Point3(0, 0, 0)
        self._look_at = Point3(0, 0, -1)
        self._vup = Vec3(0, 1, 0)
        self._vfov = 90.0
        self._aspect_ratio = 16.0 / 9.0
        self._aperture = 0.0
        self._focus_dist: Optional[float] = None

    def look_from(self, point: Point3) -> CameraBuilder:
        self._look_from = point
        return self

    def look_at(self, point: Point3) -> CameraBuilder:
        self._look_at = point
        return self

    def vup(self, up: Vec3) -> CameraBuilder:
        self._vup = up
        return self

    def vfov(self, degrees: float) -> CameraBuilder:
        self._vfov = degrees
        return self

    def aspect_ratio(self, ratio: float) -> CameraBuilder:
        self._aspect_ratio = ratio
        return self

    def aperture(self, aperture: float) -> CameraBuilder:
        self._aperture = aperture
        return self

    def focus_dist(self, distance: float) -> CameraBuilder:
        self._focus_dist = distance
        return self

    def build(self) -> Camera:
        return Camera(
            look_from=self._look_from,
            look_at=self._look_at,
            vup=self._vup,
            vfov=self._vfov,
            aspect_ratio=self._aspect_ratio,
            aperture=self._aperture,
            focus_dist=self._focus_dist
        )
