#!/usr/bin/env python3
"""
raytracing - A Monte Carlo path tracer for scenes of spheres

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

import numpy as np

from raytracing.errors import RaytracingError
from raytracing.image import OutOfRangePolicy, builder_for
from raytracing.renderer import Renderer, RenderSettings, ScanDirection, fresh_seed
from raytracing.scene_parser import load_scene
from raytracing.scenes import SCENES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='raytracing - A Monte Carlo path tracer for scenes of spheres',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene cover --output output/raytrace.png
  python main.py --scene hollow --width 600 --height 400 --samples 100 --seed 7
  python main.py --scene-file scenes/example.yaml --output output/example.ppm
        '''
    )

    parser.add_argument('--scene', type=str, default='cover', choices=sorted(SCENES),
                        help='Built-in scene to render (default: cover)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='YAML/JSON scene file (overrides --scene)')
    parser.add_argument('--width', type=int, default=None, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 266)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel (default: 50)')
    parser.add_argument('--depth', type=int, default=None, help='Max bounces per path (default: 64)')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for a reproducible render')
    parser.add_argument('--bottom-up', action='store_true', help='Scan rows from the bottom up')
    parser.add_argument('--strict-colors', action='store_true',
                        help='Fail on out-of-range colors instead of clamping them')
    parser.add_argument('--output', type=str, default='output/raytrace.png',
                        help='Output filename (.ppm for PPM, PNG otherwise)')
    parser.add_argument('--verbose', action='store_true', help='Log render details')
    return parser


def merge_settings(settings: RenderSettings, args: argparse.Namespace) -> RenderSettings:
    """Override scene settings with the options given on the command line."""
    return RenderSettings(
        width=args.width if args.width is not None else settings.width,
        height=args.height if args.height is not None else settings.height,
        samples_per_pixel=args.samples if args.samples is not None else settings.samples_per_pixel,
        max_depth=args.depth if args.depth is not None else settings.max_depth,
        num_threads=args.threads if args.threads is not None else settings.num_threads,
        seed=args.seed if args.seed is not None else settings.seed,
        scan_direction=ScanDirection.BOTTOM_TO_TOP if args.bottom_up else settings.scan_direction
    )


def run(args: argparse.Namespace) -> int:
    if args.scene_file:
        print(f"Loading scene: {args.scene_file}")
        world, camera, scene_settings = load_scene(args.scene_file, seed=args.seed)
        settings = merge_settings(scene_settings, args)
    else:
        settings = merge_settings(RenderSettings(), args)
        if settings.seed is None:
            settings = replace(settings, seed=fresh_seed())
        print(f"Creating scene: {args.scene}")
        make_world, make_camera = SCENES[args.scene]
        world = make_world(np.random.default_rng(settings.seed))
        camera = make_camera(settings.aspect_ratio)

    print(f"  Objects in scene: {len(world)}")

    print("\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")
    print(f"  Seed: {settings.seed}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    policy = OutOfRangePolicy.RAISE if args.strict_colors else OutOfRangePolicy.CLAMP
    image_builder = builder_for(args.output).with_dimensions(settings.width, settings.height, policy)

    print("\nRendering...")
    start_time = time.time()

    renderer.render(world, camera, sink=image_builder)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds (seed {renderer.last_seed})")

    # Ensure output directory exists
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"Saving to: {args.output}")
    image_builder.output_to_file(output_path)

    print("\nDone!")
    return 0


def main() -> int:
    """Main entry point."""
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        return run(args)
    except (RaytracingError, OSError, ValueError) as e:
        print(f"\nerror: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
