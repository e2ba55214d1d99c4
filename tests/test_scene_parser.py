"""Tests for the scene description parser."""

import pytest
import json
from pathlib import Path
import numpy as np

from raytracing.errors import NumericInvariantError, ObjectNotBounded, RaytracingError
from raytracing.vec3 import Vec3, Point3, Color
from raytracing.materials import Dielectric, Lambertian, Metal
from raytracing.renderer import Renderer, RenderSettings, ScanDirection
from raytracing.scene_parser import SceneParseError, SceneParser, load_scene, parse_scene

EXAMPLE = Path(__file__).resolve().parent.parent / "scenes" / "example.yaml"


def scene(**sections):
    data = {
        'materials': {
            'ground': {'type': 'lambertian', 'albedo': [0.5, 0.5, 0.5]},
            'glass': {'type': 'dielectric', 'ior': 1.5},
        },
        'objects': [
            {'type': 'sphere', 'center': [0, -1000, 0], 'radius': 1000, 'material': 'ground'},
            {'type': 'sphere', 'center': [0, 1, 0], 'radius': 1, 'material': 'glass'},
        ],
    }
    data.update(sections)
    return data


def leaf_centers(world):
    stack = [world.root]
    found = []
    while stack:
        node = stack.pop()
        if hasattr(node, 'geometry'):
            found.append(tuple(node.geometry.center))
        else:
            stack.extend([node.left, node.right])
    return found


def grid_scene(seed=None):
    objects = [
        {'center': [x, 0, z], 'radius': 0.3, 'material': 'ground'}
        for x in range(-3, 3) for z in range(-3, 0)
    ]
    render = {'width': 16, 'height': 9}
    if seed is not None:
        render['seed'] = seed
    return scene(objects=objects, render=render)


def materials_of(world):
    stack = [world.root]
    found = []
    while stack:
        node = stack.pop()
        if hasattr(node, 'material'):
            found.append(node.material)
        else:
            stack.extend([node.left, node.right])
    return found


class TestParseDict:
    """Test parsing scene dictionaries."""

    def test_minimal(self):
        world, camera, settings = parse_scene(scene(), np.random.default_rng(0))

        assert len(world) == 2
        assert settings.width == 400
        assert settings.height == 266
        assert camera.aspect_ratio == pytest.approx(400 / 266)

    def test_render_section(self):
        data = scene(render={
            'width': 64, 'height': 32, 'samples': 4, 'max_depth': 8,
            'threads': 2, 'seed': 9, 'scan': 'bottom_to_top'
        })
        _, camera, settings = parse_scene(data)

        assert (settings.width, settings.height) == (64, 32)
        assert settings.samples_per_pixel == 4
        assert settings.max_depth == 8
        assert settings.num_threads == 2
        assert settings.seed == 9
        assert settings.scan_direction is ScanDirection.BOTTOM_TO_TOP
        assert camera.aspect_ratio == 2.0

    def test_camera_section(self):
        data = scene(camera={
            'look_from': [13, 2, 3], 'look_at': [0, 0, 0], 'vup': {'x': 0, 'y': 1, 'z': 0},
            'vfov': 20, 'aperture': 0.1, 'focus_dist': 10, 'aspect_ratio': 1.5
        })
        _, camera, _ = parse_scene(data)

        assert camera.origin == Point3(13, 2, 3)
        assert camera.focus_dist == 10.0
        assert camera.lens_radius == pytest.approx(0.05)
        assert camera.aspect_ratio == 1.5

    def test_material_kinds(self):
        data = scene(
            materials={
                'matte': {'type': 'lambertian', 'albedo': '#ff8000'},
                'gold': {'type': 'metal', 'albedo': {'r': 0.8, 'g': 0.6, 'b': 0.2}, 'fuzz': 0.3},
                'glass': {'type': 'Dielectric', 'ior': 2.4},
            },
            objects=[
                {'center': [0, 0, 0], 'radius': 1, 'material': 'matte'},
                {'center': [3, 0, 0], 'radius': 1, 'material': 'gold'},
                {'center': [6, 0, 0], 'radius': 1, 'material': 'glass'},
            ]
        )
        world, _, _ = parse_scene(data)
        found = materials_of(world)

        matte = next(m for m in found if isinstance(m, Lambertian))
        gold = next(m for m in found if isinstance(m, Metal))
        glass = next(m for m in found if isinstance(m, Dielectric))
        assert matte.albedo == Color(1.0, 128 / 255, 0.0)
        assert gold.albedo == Color(0.8, 0.6, 0.2)
        assert gold.fuzz == 0.3
        assert glass.ior == 2.4

    def test_inline_material(self):
        data = scene(objects=[
            {'type': 'sphere', 'center': [0, 0, 0], 'radius': 1,
             'material': {'type': 'metal', 'albedo': [0.9, 0.9, 0.9]}}
        ])
        world, _, _ = parse_scene(data)

        assert isinstance(world.root.material, Metal)

    def test_shared_material(self):
        world, _, _ = parse_scene(scene(objects=[
            {'center': [0, 0, 0], 'radius': 1, 'material': 'glass'},
            {'center': [3, 0, 0], 'radius': 1, 'material': 'glass'},
        ]))
        first, second = materials_of(world)
        assert first is second

    def test_negative_radius(self):
        world, _, _ = parse_scene(scene(objects=[
            {'center': [0, 0, 0], 'radius': -0.45, 'material': 'glass'},
        ]))
        assert world.root.geometry.radius == -0.45

    def test_no_objects(self):
        world, _, _ = parse_scene({})
        assert len(world) == 0


class TestParseErrors:
    """Invalid scenes are rejected before rendering."""

    @pytest.mark.parametrize("data", [
        scene(objects=[{'center': [0, 0, 0], 'radius': 1, 'material': 'chrome'}]),
        scene(objects=[{'center': [0, 0, 0], 'radius': 1}]),
        scene(objects=[{'center': [0, 0, 0], 'radius': 1, 'material': 42}]),
        scene(objects=[{'type': 'cube', 'center': [0, 0, 0], 'material': 'glass'}]),
        scene(objects=[{'center': [0, 0], 'radius': 1, 'material': 'glass'}]),
        scene(objects=[{'center': 'origin', 'radius': 1, 'material': 'glass'}]),
        scene(materials={'x': {'type': 'plasma'}}),
        scene(materials={'x': {'type': 'lambertian', 'albedo': [1.5, 0, 0]}}),
        scene(materials={'x': {'type': 'lambertian', 'albedo': [0.5, 0.5]}}),
        scene(materials={'x': {'type': 'lambertian', 'albedo': 'red'}}),
        scene(materials={'x': {'type': 'lambertian', 'albedo': '#gg0000'}}),
        scene(materials={'x': {'type': 'dielectric', 'ior': 0}}),
        scene(render={'width': 0}),
        scene(render={'scan': 'sideways'}),
        scene(camera={'vfov': 200}),
        scene(camera={'focus_dist': 0}),
    ])
    def test_invalid(self, data):
        with pytest.raises(SceneParseError):
            parse_scene(data)

    def test_degenerate_camera(self):
        with pytest.raises(NumericInvariantError):
            parse_scene(scene(camera={'look_from': [1, 1, 1], 'look_at': [1, 1, 1]}))

    def test_zero_radius(self):
        with pytest.raises(ObjectNotBounded):
            parse_scene(scene(objects=[{'center': [0, 0, 0], 'radius': 0, 'material': 'glass'}]))

    def test_errors_share_base(self):
        assert issubclass(SceneParseError, RaytracingError)


class TestSeed:
    """The render seed also fixes the BVH, so a seeded scene renders the same every time."""

    def test_file_seed(self):
        _, _, settings = parse_scene(grid_scene(seed=5))
        assert settings.seed == 5

    def test_missing_seed_is_drawn(self):
        _, _, settings = parse_scene(grid_scene())
        assert isinstance(settings.seed, int)
        assert settings.seed >= 0

    def test_override(self):
        _, _, settings = parse_scene(grid_scene(seed=5), seed=11)
        assert settings.seed == 11

    def test_negative_override(self):
        with pytest.raises(SceneParseError):
            parse_scene(grid_scene(), seed=-1)

    def test_same_seed_same_tree(self):
        first, _, _ = parse_scene(grid_scene(seed=5))
        second, _, _ = parse_scene(grid_scene(seed=5))
        assert leaf_centers(first) == leaf_centers(second)

    def test_override_picks_the_tree(self):
        first, _, _ = parse_scene(grid_scene(seed=1), seed=8)
        second, _, _ = parse_scene(grid_scene(seed=2), seed=8)
        assert leaf_centers(first) == leaf_centers(second)

    def test_example_scene_renders_identically(self):
        images = []
        for _ in range(3):
            world, camera, settings = load_scene(str(EXAMPLE))
            small = RenderSettings(
                width=16, height=9, samples_per_pixel=4, max_depth=8,
                num_threads=1, seed=settings.seed
            )
            images.append(Renderer(small).render(world, camera))

        assert np.array_equal(images[0], images[1])
        assert np.array_equal(images[0], images[2])


class TestParseFile:
    """Test loading scene files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(
            "render:\n"
            "  width: 20\n"
            "  height: 10\n"
            "materials:\n"
            "  red:\n"
            "    type: lambertian\n"
            "    albedo: [0.9, 0.1, 0.1]\n"
            "objects:\n"
            "  - type: sphere\n"
            "    center: [0, 0, -1]\n"
            "    radius: 0.5\n"
            "    material: red\n"
        )
        world, camera, settings = load_scene(str(path), np.random.default_rng(0))

        assert len(world) == 1
        assert settings.width == 20
        assert camera.aspect_ratio == 2.0

    def test_json(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps(scene(render={'width': 30, 'height': 10})))

        world, camera, settings = load_scene(str(path))

        assert len(world) == 2
        assert camera.aspect_ratio == 3.0

    def test_example_scene(self):
        world, camera, settings = SceneParser(np.random.default_rng(0)).parse_file(str(EXAMPLE))

        assert len(world) == 5
        assert settings.seed == 7
        assert camera.lens_radius == pytest.approx(0.025)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError):
            load_scene(str(tmp_path / "nope.yaml"))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("objects: [1, 2\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{\"objects\": ")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))
