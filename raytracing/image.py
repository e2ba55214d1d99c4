"""
Pixel sinks: collect finished colors and write them to image files.

Pixels are put one at a time, left to right within a row and rows from top
to bottom. Channels are quantized with int(255.999 * c).
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Tuple, Union

import numpy as np
from PIL import Image as PILImage

from .errors import ColorOutOfRange, ImageBufferOverflow, IncompleteImage
from .vec3 import Color

logger = logging.getLogger(__name__)

CHANNELS = ('r', 'g', 'b')


class OutOfRangePolicy(Enum):
    """What to do with a channel value outside [0, 1]."""
    RAISE = "raise"
    CLAMP = "clamp"


class ImageBuilder(ABC):
    """An interface to put pixels on an image one by one."""

    def __init__(self, width: int, height: int, policy: OutOfRangePolicy = OutOfRangePolicy.CLAMP):
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width} x {height}")
        self.width = width
        self.height = height
        self.policy = policy
        self.pixels: List[Tuple[int, int, int]] = []

    @classmethod
    def with_dimensions(cls, width: int, height: int, policy: OutOfRangePolicy = OutOfRangePolicy.CLAMP) -> ImageBuilder:
        """Initialize an image with given width and height."""
        return cls(width, height, policy)

    def _cast(self, pixel_index: int, channel: str, value: float) -> int:
        if not 0.0 <= value <= 1.0:
            if self.policy is OutOfRangePolicy.RAISE:
                raise ColorOutOfRange(pixel_index, channel, value)
            logger.warning(
                "Pixel #%d: clamping channel %s = %r into [0, 1]", pixel_index, channel, value
            )
            value = 0.0 if not value > 0.0 else 1.0
        return int(255.999 * value)

    def put(self, rgb: Color) -> None:
        """Put the next pixel onto the image.

        Raises:
            ImageBufferOverflow: if the image is already full
            ColorOutOfRange: if a channel is outside [0, 1] under the RAISE policy
        """
        if self.is_complete():
            raise ImageBufferOverflow(self.width, self.height)

        index = len(self.pixels)
        r, g, b = (self._cast(index, name, value) for name, value in zip(CHANNELS, rgb))
        self.pixels.append((r, g, b))

    def is_complete(self) -> bool:
        return len(self.pixels) >= self.width * self.height

    def to_array(self) -> np.ndarray:
        """The quantized pixels as a (height, width, 3) uint8 array.

        Raises:
            IncompleteImage: if not every pixel has been put
        """
        expected = self.width * self.height
        if len(self.pixels) != expected:
            raise IncompleteImage(expected, len(self.pixels))
        return np.array(self.pixels, dtype=np.uint8).reshape(self.height, self.width, 3)

    @abstractmethod
    def output(self, stream: BinaryIO) -> None:
        """Output the image to the specified binary stream."""
        pass

    def output_to_file(self, path: Union[str, Path]) -> None:
        """Create a file at the given path then write the image to it.

        The file is truncated if it exists.
        """
        with open(path, 'wb') as f:
            self.output(f)


class PPMBuilder(ImageBuilder):
    """Netpbm plain (P3) color image format."""

    def output(self, stream: BinaryIO) -> None:
        pixels = self.to_array().reshape(-1, 3)
        lines = [f"P3\n{self.width} {self.height}\n255"]
        lines.extend(f"{r} {g} {b}" for r, g, b in pixels)
        stream.write(("\n".join(lines) + "\n").encode('ascii'))


class PNGBuilder(ImageBuilder):
    """Lossless PNG encoded through Pillow."""

    def output(self, stream: BinaryIO) -> None:
        PILImage.fromarray(self.to_array()).save(stream, format='PNG')


def builder_for(path: Union[str, Path]) -> type:
    """Pick the image builder class from a file extension (.ppm or PNG)."""
    if Path(path).suffix.lower() == '.ppm':
        return PPMBuilder
    return PNGBuilder
