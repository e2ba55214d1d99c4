"""
The world: every object of a scene behind a single hit query.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Tuple

import numpy as np

from .bvh import BVHTree, HitEvent, build_bvh
from .materials import Material
from .ray import Ray
from .shapes import AABB, Hittable

logger = logging.getLogger(__name__)


class WorldBuilder:
    """Collects (geometry, material) pairs and freezes them into a World."""

    def __init__(self):
        self.objects: List[Tuple[Hittable, Material]] = []

    def add(self, geometry: Hittable, material: Material) -> WorldBuilder:
        """Add a hittable object to the world.

        Returns:
            The builder itself, so calls can be chained
        """
        self.objects.append((geometry, material))
        return self

    def build(self, rng: Optional[np.random.Generator] = None) -> World:
        """Build a world with efficient hit detection.

        Args:
            rng: Generator for the BVH split axes (a fresh one if None)

        Raises:
            ObjectNotBounded: if any geometry lacks a finite bounding box
        """
        root = build_bvh(self.objects, rng)
        if root is None:
            logger.debug("Built an empty world")
        else:
            logger.debug("Built BVH over %d objects, depth %d", len(root), root.depth())
        return World(root)

    def __len__(self) -> int:
        return len(self.objects)


class World:
    """A read-only collection of objects queried through a BVH."""

    __slots__ = ('_root',)

    def __init__(self, root: Optional[BVHTree]):
        self._root = root

    @property
    def root(self) -> Optional[BVHTree]:
        return self._root

    def hit(self, rng: np.random.Generator, ray: Ray, t_min: float, t_max: float) -> Optional[HitEvent]:
        """Hit the world with a ray.

        Args:
            rng: Random generator used by the material of the hit object
            ray: The ray to trace
            t_min: Minimum accepted ray parameter
            t_max: Maximum accepted ray parameter

        Returns:
            The closest hit in range together with its scatter, or None
        """
        if self._root is None:
            return None
        return self._root.hit(rng, ray, t_min, t_max)

    def bounding_box(self) -> Optional[AABB]:
        """Return the bounding box of the whole world."""
        if self._root is None:
            return None
        return self._root.bounding_box()

    def __len__(self) -> int:
        return 0 if self._root is None else len(self._root)

    def __repr__(self) -> str:
        return f"World(objects={len(self)})"
