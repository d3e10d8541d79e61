"""
Minimal 2D vector value type.

Vectors are immutable: every operation returns a new Vector2, so a body's
position can be handed to the quadtree without the tree ever aliasing
mutable state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector2:
    """An immutable 2D vector."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def zero(cls) -> Vector2:
        return cls(0.0, 0.0)

    def add(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def sub(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def scale(self, factor: float) -> Vector2:
        return Vector2(self.x * factor, self.y * factor)

    def div(self, divisor: float) -> Vector2:
        return Vector2(self.x / divisor, self.y / divisor)

    def __add__(self, other: Vector2) -> Vector2:
        return self.add(other)

    def __sub__(self, other: Vector2) -> Vector2:
        return self.sub(other)

    def __mul__(self, factor: float) -> Vector2:
        return self.scale(factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Vector2:
        return self.div(divisor)

    def __neg__(self) -> Vector2:
        return Vector2(-self.x, -self.y)

    @property
    def magnitude_sq(self) -> float:
        """Squared length."""
        return self.x * self.x + self.y * self.y

    @property
    def magnitude(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.magnitude_sq)

    def dist(self, other: Vector2) -> float:
        """Distance between two points."""
        dx = self.x - other.x
        dy = self.y - other.y
        return math.sqrt(dx * dx + dy * dy)

    def normalize(self) -> Vector2:
        """Unit vector in the same direction. The zero vector stays zero."""
        mag = self.magnitude
        if mag == 0:
            return Vector2.zero()
        return Vector2(self.x / mag, self.y / mag)

    def limit(self, max_magnitude: float) -> Vector2:
        """
        Clamp the magnitude to max_magnitude, keeping the direction.

        Args:
            max_magnitude: Upper bound on the returned vector's length

        Returns:
            self if already short enough, otherwise a rescaled copy
        """
        mag_sq = self.magnitude_sq
        if mag_sq <= max_magnitude * max_magnitude:
            return self
        return self.scale(max_magnitude / math.sqrt(mag_sq))

    def copy(self) -> Vector2:
        return Vector2(self.x, self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"Vector2({self.x:.4g}, {self.y:.4g})"


__all__ = ["Vector2"]
