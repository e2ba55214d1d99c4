"""
Exception types raised by the ray tracer.

Construction errors surface before rendering starts, numeric invariant
violations indicate a logic defect and are never caught inside the package,
and color range errors are raised at the pixel sink boundary.
"""

from __future__ import annotations


class RaytracingError(Exception):
    """Base class for all ray tracer errors."""
    pass


class SceneConstructionError(RaytracingError):
    """The scene could not be assembled."""
    pass


class ObjectNotBounded(SceneConstructionError):
    """An object without a finite bounding box was added to the world."""

    def __init__(self, index: int, obj: object):
        self.index = index
        self.obj = obj
        super().__init__(f"Object #{index} has no finite bounding box: {obj!r}")


class NumericInvariantError(RaytracingError, ArithmeticError):
    """A numeric invariant was violated (near-zero division, NaN key, ...)."""
    pass


class ColorRangeError(RaytracingError):
    """Base class for pixel sink errors."""
    pass


class ColorOutOfRange(ColorRangeError):
    """A color channel outside [0, 1] reached the pixel sink."""

    def __init__(self, pixel_index: int, channel: str, value: float):
        self.pixel_index = pixel_index
        self.channel = channel
        self.value = value
        super().__init__(
            f"Pixel #{pixel_index}: channel {channel} = {value!r} is outside [0, 1]"
        )


class ImageBufferOverflow(ColorRangeError):
    """More pixels were put than the image dimensions allow."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        super().__init__(f"Image builder initialized with dimensions {width} x {height} is full")


class IncompleteImage(ColorRangeError):
    """The image was written before every pixel was put."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Image has {actual} of {expected} pixels")
