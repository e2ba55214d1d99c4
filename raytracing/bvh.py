"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

BVH is a binary tree where each node is either:
- A leaf holding one geometry and its material
- An interior node holding an AABB and two exclusively owned children

The tree is built once and never mutated afterwards, so any number of
threads may traverse it without locking.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from .errors import NumericInvariantError, ObjectNotBounded
from .ray import Ray
from .shapes import AABB, Hittable, HitRecord
from .materials import Material, Scatter


@dataclass(frozen=True)
class HitEvent:
    """The result of a ray hitting the world.

    Attributes:
        record: When, where and how the ray hit an object
        scatter: Whether and how the ray scattered after the hit
    """
    record: HitRecord
    scatter: Optional[Scatter]


class BVHLeaf:
    """A single geometry paired with its material."""

    __slots__ = ('geometry', 'material', '_bbox')

    def __init__(self, geometry: Hittable, material: Material, bbox: AABB):
        self.geometry = geometry
        self.material = material
        self._bbox = bbox

    def bounding_box(self) -> AABB:
        return self._bbox

    def hit(self, rng: np.random.Generator, ray: Ray, t_min: float, t_max: float) -> Optional[HitEvent]:
        record = self.geometry.hit(ray, t_min, t_max)
        if record is None:
            return None
        return HitEvent(record, self.material.scatter(rng, ray, record))

    def depth(self) -> int:
        return 1

    def __len__(self) -> int:
        return 1

    def __repr__(self) -> str:
        return f"BVHLeaf({self.geometry!r}, {self.material!r})"


class BVHNode:
    """An interior node: a bounding box around two subtrees."""

    __slots__ = ('bbox', 'left', 'right', '_size')

    def __init__(self, bbox: AABB, left: BVHTree, right: BVHTree):
        self.bbox = bbox
        self.left = left
        self.right = right
        self._size = len(left) + len(right)

    def bounding_box(self) -> AABB:
        return self.bbox

    def hit(self, rng: np.random.Generator, ray: Ray, t_min: float, t_max: float) -> Optional[HitEvent]:
        """Test ray intersection with this subtree."""
        # Prune the whole subtree if the ray misses the box
        if not self.bbox.hit(ray, t_min, t_max):
            return None

        hit_left = self.left.hit(rng, ray, t_min, t_max)
        t_right = hit_left.record.t if hit_left is not None else t_max
        hit_right = self.right.hit(rng, ray, t_min, t_right)

        # A right hit found under the tightened bound is the closer one
        if hit_right is not None:
            return hit_right
        return hit_left

    def depth(self) -> int:
        return 1 + max(self.left.depth(), self.right.depth())

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"BVHNode(bbox={self.bbox}, objects={self._size})"


BVHTree = Union[BVHLeaf, BVHNode]


def _min_key(node: BVHTree, axis: int) -> float:
    key = node.bounding_box().minimum[axis]
    if math.isnan(key):
        raise NumericInvariantError(f"NaN bounding box coordinate in {node!r}")
    return key


def build_bvh(
    objects: Iterable[Tuple[Hittable, Material]],
    rng: Optional[np.random.Generator] = None
) -> Optional[BVHTree]:
    """Build a BVH over (geometry, material) pairs.

    Each round picks a random axis, sorts the pending nodes by the minimum
    corner of their boxes along it, then pairs nodes popped from the end of
    the list into interior nodes. An unmatched node is carried into the next
    round as is. Rounds repeat until a single root remains.

    Args:
        objects: Geometry and material pairs
        rng: Generator for the split axes (a fresh one if None)

    Returns:
        The root of the tree, or None for an empty scene

    Raises:
        ObjectNotBounded: if a geometry has no finite bounding box
    """
    if rng is None:
        rng = np.random.default_rng()

    nodes: List[BVHTree] = []
    for index, (geometry, material) in enumerate(objects):
        bbox = geometry.bounding_box()
        if bbox is None or not bbox.is_finite():
            raise ObjectNotBounded(index, geometry)
        nodes.append(BVHLeaf(geometry, material, bbox))

    if not nodes:
        return None

    while len(nodes) > 1:
        axis = int(rng.integers(0, 3))
        nodes.sort(key=lambda node: _min_key(node, axis))

        merged: List[BVHTree] = []
        while nodes:
            left = nodes.pop()
            if not nodes:
                merged.append(left)
                break
            right = nodes.pop()
            bbox = left.bounding_box().merge(right.bounding_box())
            merged.append(BVHNode(bbox, left, right))

        nodes = merged

    return nodes[0]
