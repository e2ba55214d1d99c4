"""
Color constants and Monte Carlo accumulation of pixel samples.
"""

from __future__ import annotations

from .vec3 import Color

WHITE = Color(1.0, 1.0, 1.0)
BLACK = Color(0.0, 0.0, 0.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)


def gamma_correct(color: Color) -> Color:
    """Gamma 2 encode a linear color and clamp every channel to [0, 1]."""
    return color.sqrt().clamp(0.0, 1.0)


class RgbAccumulator:
    """Running sum of color samples.

    The mean is only ever computed from the total sum and count, so partial
    accumulators filled on different workers can be merged in any order.
    """

    __slots__ = ('total', 'count')

    def __init__(self):
        self.total = BLACK
        self.count = 0

    def feed(self, color: Color) -> None:
        """Add one sample."""
        self.total = self.total + color
        self.count += 1

    def merge(self, other: RgbAccumulator) -> RgbAccumulator:
        """Return an accumulator holding the samples of both."""
        merged = RgbAccumulator()
        merged.total = self.total + other.total
        merged.count = self.count + other.count
        return merged

    def mean(self) -> Color:
        """Linear mean of the accumulated samples.

        Raises:
            ValueError: if no sample was fed
        """
        if self.count == 0:
            raise ValueError("No samples accumulated")
        return self.total / self.count

    def sample(self) -> Color:
        """The final pixel color: gamma corrected mean clamped to [0, 1]."""
        return gamma_correct(self.mean())

    def __repr__(self) -> str:
        return f"RgbAccumulator(total={self.total}, count={self.count})"
