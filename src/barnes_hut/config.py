"""
Simulation configuration.

All tunables of a step live in one validated, immutable value that is
threaded into the Simulation at construction.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from .body import DEFAULT_MIN_DISTANCE
from .validation import (
    validate_domain_size,
    validate_max_depth,
    validate_positive,
    validate_theta,
)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Parameters of the Barnes-Hut simulation.

    Attributes:
        theta: Opening criterion (0 = exact pairwise sum, 0.5 = balanced,
            higher = faster but coarser)
        width, height: Domain extent; the root quadtree node spans
            [0, 0] to [width, height] and bodies wrap around its edges
        acc_limit: Maximum acceleration magnitude applied per step
        vel_limit: Maximum velocity magnitude
        min_distance: Distance floor used by the force law
        max_depth: Depth at which leaves stop subdividing (coincident bodies)
        use_barnes_hut: If False, forces use the exact O(n^2) pairwise sum
    """

    theta: float = 0.5
    width: float = 1000.0
    height: float = 800.0
    acc_limit: float = 0.1
    vel_limit: float = 3.0
    min_distance: float = DEFAULT_MIN_DISTANCE
    max_depth: int = 64
    use_barnes_hut: bool = True

    def __post_init__(self) -> None:
        # Frozen dataclass: normalized values go through object.__setattr__
        width, height = validate_domain_size((self.width, self.height))
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)
        object.__setattr__(self, "theta", validate_theta(self.theta))
        object.__setattr__(self, "acc_limit", validate_positive(self.acc_limit, "acc_limit"))
        object.__setattr__(self, "vel_limit", validate_positive(self.vel_limit, "vel_limit"))
        object.__setattr__(
            self, "min_distance", validate_positive(self.min_distance, "min_distance")
        )
        object.__setattr__(self, "max_depth", validate_max_depth(self.max_depth))
        object.__setattr__(self, "use_barnes_hut", bool(self.use_barnes_hut))

    @property
    def size(self) -> tuple[float, float]:
        """Domain size as (width, height)."""
        return (self.width, self.height)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Domain bounds as (min_x, min_y, max_x, max_y)."""
        return (0.0, 0.0, self.width, self.height)

    def replace(self, **changes: Any) -> SimulationConfig:
        """Return a validated copy with some fields changed."""
        return dataclasses.replace(self, **changes)


__all__ = ["SimulationConfig"]
