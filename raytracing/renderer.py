"""
Renderer module - the heart of the ray tracer.

Implements:
- Path tracing with a hard bounce limit
- Per-pixel Monte Carlo sampling with gamma correction
- Multi-threaded row-based rendering with per-pixel random generators
"""

from __future__ import annotations
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional, Tuple
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera, PixelSampler
from .color import BLACK, SKY_BLUE, WHITE, RgbAccumulator
from .world import World

if TYPE_CHECKING:
    from .image import ImageBuilder

logger = logging.getLogger(__name__)


class ScanDirection(Enum):
    """Order in which finished rows are emitted."""
    TOP_TO_BOTTOM = "top_to_bottom"
    BOTTOM_TO_TOP = "bottom_to_top"


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 266
    samples_per_pixel: int = 50
    max_depth: int = 64
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None  # None = fresh entropy for every render
    scan_direction: ScanDirection = ScanDirection.TOP_TO_BOTTOM
    t_min: float = 0.001

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width} x {self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"Samples per pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth <= 0:
            raise ValueError(f"Max depth must be positive, got {self.max_depth}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"Seed must not be negative, got {self.seed}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def background(ray: Ray) -> Color:
    """Sky gradient: white at the horizon fading to blue overhead."""
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return WHITE * (1.0 - t) + SKY_BLUE * t


def fresh_seed() -> int:
    """A new seed drawn from OS entropy."""
    return int(np.random.SeedSequence().entropy)


def pixel_rng(seed: int, pixel_index: int) -> np.random.Generator:
    """An independent generator for one pixel of a seeded render."""
    return np.random.default_rng([seed, pixel_index])


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self.last_seed: Optional[int] = None
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def ray_color(self, rng: np.random.Generator, ray: Ray, world: World) -> Color:
        """Compute the color carried back along a ray.

        Follows the ray through at most max_depth scatter events,
        multiplying the attenuations met on the way.

        Args:
            rng: Random generator owned by the calling worker
            ray: The ray to trace
            world: The scene to trace against

        Returns:
            The computed linear color for this ray
        """
        attenuation = WHITE

        for _ in range(self.settings.max_depth):
            event = world.hit(rng, ray, self.settings.t_min, float('inf'))

            if event is None:
                return attenuation * background(ray)

            if event.scatter is None:
                # Absorbed
                return BLACK

            attenuation = attenuation * event.scatter.attenuation
            ray = Ray(event.record.hit_at, event.scatter.direction)

        # Bounce limit reached: the remaining energy is lost
        return BLACK

    def render_pixel(self, rng: np.random.Generator, world: World, sampler: PixelSampler) -> Color:
        """Average samples_per_pixel paths through one pixel.

        Returns:
            Gamma corrected color with every channel in [0, 1]
        """
        acc = RgbAccumulator()
        for _ in range(self.settings.samples_per_pixel):
            acc.feed(self.ray_color(rng, sampler.sample(rng), world))
        return acc.sample()

    def _render_row(self, world: World, samplers: List[PixelSampler], seed: int) -> List[Color]:
        return [
            self.render_pixel(pixel_rng(seed, sampler.index), world, sampler)
            for sampler in samplers
        ]

    def _row_order(self) -> List[int]:
        rows = list(range(self.settings.height))
        if self.settings.scan_direction is ScanDirection.BOTTOM_TO_TOP:
            rows.reverse()
        return rows

    def _resolve_seed(self) -> int:
        seed = self.settings.seed
        if seed is None:
            seed = fresh_seed()
        self.last_seed = seed
        logger.info("Rendering with seed %d", seed)
        return seed

    def render_rows(self, world: World, camera: Camera) -> Iterator[Tuple[int, List[Color]]]:
        """Render the image one full row at a time.

        Rows are computed in parallel but yielded in scan order.

        Args:
            world: The scene to render
            camera: The camera to render from

        Yields:
            (row index counted from the top, list of width colors)
        """
        width = self.settings.width
        height = self.settings.height
        seed = self._resolve_seed()

        samplers = camera.cast(width, height)
        rows = self._row_order()
        total_rows = len(rows)

        def render_row(j: int) -> List[Color]:
            return self._render_row(world, samplers[j * width:(j + 1) * width], seed)

        start_time = time.perf_counter()

        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                for done, (j, row) in enumerate(zip(rows, executor.map(render_row, rows)), 1):
                    self._report_progress(done, total_rows)
                    yield j, row
        else:
            for done, j in enumerate(rows, 1):
                row = render_row(j)
                self._report_progress(done, total_rows)
                yield j, row

        logger.info(
            "Rendered %dx%d at %d spp in %.2fs",
            width, height, self.settings.samples_per_pixel, time.perf_counter() - start_time
        )

    def _report_progress(self, done: int, total: int) -> None:
        if self._progress_callback:
            self._progress_callback(done / total)

    def render(self, world: World, camera: Camera, sink: Optional[ImageBuilder] = None) -> np.ndarray:
        """Render the scene and return the image as a numpy array.

        Args:
            world: The scene to render
            camera: The camera to render from
            sink: Optional pixel sink; it always receives pixels row-major
                from the top row down

        Returns:
            Gamma corrected image of shape (height, width, 3), row 0 at the
            top, every channel in [0, 1]
        """
        image = np.zeros((self.settings.height, self.settings.width, 3), dtype=np.float64)
        stream = sink is not None and self.settings.scan_direction is ScanDirection.TOP_TO_BOTTOM

        for j, row in self.render_rows(world, camera):
            for i, color in enumerate(row):
                image[j, i] = color.to_array()
            if stream:
                for color in row:
                    sink.put(color)

        if sink is not None and not stream:
            for j in range(self.settings.height):
                for i in range(self.settings.width):
                    sink.put(Color.from_array(image[j, i]))

        return image
