"""
raytracing - A Monte Carlo path tracer for scenes of spheres

A CPU ray tracing renderer with support for:
- Lambertian, metal and dielectric materials
- Hollow shells through negative-radius spheres
- Bounding volume hierarchy (BVH) acceleration
- Depth of field (defocus blur)
- Multi-threaded, seed-reproducible sampling
- PPM and PNG output
"""

__version__ = "0.1.0"

from .errors import (
    RaytracingError, SceneConstructionError, ObjectNotBounded, NumericInvariantError,
    ColorRangeError, ColorOutOfRange, ImageBufferOverflow, IncompleteImage
)
from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Sphere, HittableList, AABB, HitRecord, Hittable, Pointing
from .materials import Material, Lambertian, Metal, Dielectric, Scatter, reflect, refract, reflectance
from .color import WHITE, BLACK, SKY_BLUE, RgbAccumulator, gamma_correct
from .bvh import BVHLeaf, BVHNode, HitEvent, build_bvh
from .world import World, WorldBuilder
from .camera import Camera, CameraBuilder, PixelSampler
from .renderer import Renderer, RenderSettings, ScanDirection, background
from .image import ImageBuilder, PPMBuilder, PNGBuilder, OutOfRangePolicy, builder_for
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .scenes import random_world, cover_camera, hollow_glass_world, hollow_glass_camera
