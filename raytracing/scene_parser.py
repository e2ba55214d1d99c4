"""
Scene description language parser.

Supports a YAML (or JSON) scene description format with:
- Camera configuration
- Render settings
- Materials library
- Spheres with materials

Example scene file:
```yaml
camera:
  look_from: [13, 2, 3]
  look_at: [0, 0, 0]
  vfov: 20
  aperture: 0.1
  focus_dist: 10

render:
  width: 400
  height: 266
  samples: 50
  max_depth: 64
  seed: 7
  scan: top_to_bottom

materials:
  ground:
    type: lambertian
    albedo: [0.5, 0.5, 0.5]

  glass:
    type: dielectric
    ior: 1.5

objects:
  - type: sphere
    center: [0, -1000, 0]
    radius: 1000
    material: ground

  - type: sphere
    center: [0, 1, 0]
    radius: 1
    material: glass
```
"""

from __future__ import annotations
import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
import json

import numpy as np
import yaml

from .errors import RaytracingError
from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderSettings, ScanDirection, fresh_seed
from .world import World, WorldBuilder

logger = logging.getLogger(__name__)


class SceneParseError(RaytracingError):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        """
        Args:
            rng: Generator for BVH construction (seeded from the render
                seed if None)
            seed: Render seed that replaces the one in the file
        """
        self.rng = rng
        self.seed = seed
        self.materials: Dict[str, Material] = {}
        self.builder = WorldBuilder()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: str) -> Tuple[World, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (world, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON
                data = yaml.safe_load(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise SceneParseError(f"Cannot parse {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping, got {type(data).__name__}")

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[World, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (world, camera, settings)
        """
        # Parse materials first (objects reference them)
        if 'materials' in data:
            self._parse_materials(data['materials'])

        if 'objects' in data:
            self._parse_objects(data['objects'])

        # Settings before camera: the default aspect ratio comes from the image size
        if 'render' in data:
            self._parse_settings(data['render'])
        else:
            self.settings = RenderSettings()
        self._resolve_seed()

        self._parse_camera(data.get('camera', {}))

        # The tree shape is part of what the render seed reproduces
        rng = self.rng if self.rng is not None else np.random.default_rng(self.settings.seed)
        world = self.builder.build(rng)
        return world, self.camera, self.settings

    def _resolve_seed(self) -> None:
        """Pin the render seed, drawing a fresh one if neither the file nor the caller set it."""
        seed = self.seed if self.seed is not None else self.settings.seed
        if seed is None:
            seed = fresh_seed()
            logger.info("Scene has no seed, using %d", seed)
        try:
            self.settings = replace(self.settings, seed=seed)
        except ValueError as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Vec3(
                float(data.get('x', 0)),
                float(data.get('y', 0)),
                float(data.get('z', 0))
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            color = Color(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            color = Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0))
            )
        elif isinstance(data, str):
            # Handle hex colors
            hex_color = data[1:] if data.startswith('#') else ''
            if len(hex_color) != 6:
                raise SceneParseError(f"Cannot parse color from string: {data}")
            try:
                return Color(
                    int(hex_color[0:2], 16) / 255.0,
                    int(hex_color[2:4], 16) / 255.0,
                    int(hex_color[4:6], 16) / 255.0
                )
            except ValueError as e:
                raise SceneParseError(f"Cannot parse color from string: {data}") from e
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

        if not all(0.0 <= c <= 1.0 for c in color):
            raise SceneParseError(f"Color channels must be in [0, 1], got {data}")
        return color

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        mat_type = mat_data.get('type', 'lambertian').lower()

        if mat_type == 'lambertian':
            return Lambertian(self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5])))

        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            fuzz = float(mat_data.get('fuzz', 0.0))
            return Metal(albedo, fuzz)

        elif mat_type == 'dielectric':
            ior = float(mat_data.get('ior', 1.5))
            if ior <= 0:
                raise SceneParseError(f"Index of refraction must be positive, got {ior}")
            return Dielectric(ior)

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            raise SceneParseError("Every object needs a material")
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            obj_type = obj_data.get('type', 'sphere').lower()
            material = self._get_material(obj_data.get('material'))

            if obj_type == 'sphere':
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = float(obj_data.get('radius', 1.0))
                self.builder.add(Sphere(center, radius), material)

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        look_from = self._parse_vec3(camera_data.get('look_from', [0, 0, 5]))
        look_at = self._parse_vec3(camera_data.get('look_at', [0, 0, 0]))
        vup = self._parse_vec3(camera_data.get('vup', [0, 1, 0]))
        vfov = float(camera_data.get('vfov', 60))
        aspect_ratio = float(camera_data.get('aspect_ratio', self.settings.aspect_ratio))
        aperture = float(camera_data.get('aperture', 0.0))
        focus_dist = camera_data.get('focus_dist')

        try:
            self.camera = Camera(
                look_from=look_from,
                look_at=look_at,
                vup=vup,
                vfov=vfov,
                aspect_ratio=aspect_ratio,
                aperture=aperture,
                focus_dist=float(focus_dist) if focus_dist is not None else None
            )
        except ValueError as e:
            raise SceneParseError(f"Invalid camera: {e}") from e

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        seed = settings_data.get('seed')
        scan = settings_data.get('scan', ScanDirection.TOP_TO_BOTTOM.value)
        try:
            self.settings = RenderSettings(
                width=int(settings_data.get('width', 400)),
                height=int(settings_data.get('height', 266)),
                samples_per_pixel=int(settings_data.get('samples', 50)),
                max_depth=int(settings_data.get('max_depth', 64)),
                num_threads=int(settings_data.get('threads', 0)),
                seed=int(seed) if seed is not None else None,
                scan_direction=ScanDirection(scan)
            )
        except ValueError as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e


def load_scene(
    filepath: str,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None
) -> Tuple[World, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file
        rng: Generator for BVH construction
        seed: Render seed that replaces the one in the file

    Returns:
        Tuple of (world, camera, settings)
    """
    parser = SceneParser(rng, seed)
    return parser.parse_file(filepath)


def parse_scene(
    data: Dict[str, Any],
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None
) -> Tuple[World, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary
        rng: Generator for BVH construction
        seed: Render seed that replaces the one in the file

    Returns:
        Tuple of (world, camera, settings)
    """
    parser = SceneParser(rng, seed)
    return parser.parse_dict(data)
