"""
Point masses and the pairwise force law.

A Body carries identity, position, velocity, acceleration and mass. It
accumulates force contributions into ``acc`` during a step and then
integrates once: clamp, advance, wrap around the domain, reset.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from .validation import InvalidBodyError, validate_mass
from .vector import Vector2

if TYPE_CHECKING:
    from .config import SimulationConfig

# Id carried by the aggregate pseudo-body of a tree node. Real ids are >= 0.
PSEUDO_BODY_ID = -1

DEFAULT_MIN_DISTANCE = 0.01


def gravitational_pull(
    receiver_pos: Vector2,
    receiver_mass: float,
    source_pos: Vector2,
    source_mass: float,
    min_distance: float = DEFAULT_MIN_DISTANCE,
) -> Vector2:
    """
    Force exerted on a receiver by a source mass.

    F = m_a * m_b / d^2, pointing from the receiver toward the source. There
    is no gravitational constant; mass units absorb it.

    Args:
        receiver_pos: Position of the body being pulled
        receiver_mass: Its mass
        source_pos: Position of the attracting body or node mass center
        source_mass: Its (possibly aggregated) mass
        min_distance: Distance floor applied before squaring

    Returns:
        Force vector. Zero when the two positions coincide exactly (no
        direction exists) or when the result would not be finite.
    """
    dx = source_pos.x - receiver_pos.x
    dy = source_pos.y - receiver_pos.y
    dist_sq = dx * dx + dy * dy
    if dist_sq == 0:
        return Vector2.zero()

    dist = math.sqrt(dist_sq)
    clamped = max(dist, min_distance)
    force = receiver_mass * source_mass / (clamped * clamped)

    fx = (dx / dist) * force
    fy = (dy / dist) * force
    if not (math.isfinite(fx) and math.isfinite(fy)):
        return Vector2.zero()
    return Vector2(fx, fy)


@dataclass(eq=False)
class Body:
    """
    A point mass taking part in the simulation.

    Attributes:
        id: Identity, unique within a simulation and never negative
        pos: Current position
        mass: Mass (> 0)
        vel: Current velocity, persists across steps
        acc: Accumulated force for the current step
        fixed: If True, the body exerts force but is positioned externally
    """

    id: int
    pos: Vector2
    mass: float = 1.0
    vel: Vector2 = field(default_factory=Vector2.zero)
    acc: Vector2 = field(default_factory=Vector2.zero)
    fixed: bool = False

    def __post_init__(self) -> None:
        if self.id is None:
            raise InvalidBodyError("Body id cannot be None")
        self.id = int(self.id)
        self.mass = validate_mass(self.mass)
        self.pos = _as_vector(self.pos)
        self.vel = _as_vector(self.vel)
        self.acc = _as_vector(self.acc)
        self.fixed = bool(self.fixed)
        if not (self.pos.is_finite() and self.vel.is_finite()):
            raise InvalidBodyError(
                f"Body {self.id} has a non-finite position or velocity: "
                f"pos={self.pos}, vel={self.vel}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Body:
        """
        Build a body from a plain mapping.

        Accepts either ``pos``/``vel`` entries or flat ``x``/``y``/``vx``/``vy``.
        """
        if "pos" in data:
            pos = data["pos"]
        else:
            pos = (data.get("x", 0.0), data.get("y", 0.0))
        if "vel" in data:
            vel = data["vel"]
        else:
            vel = (data.get("vx", 0.0), data.get("vy", 0.0))
        if "id" not in data:
            raise InvalidBodyError(f"Body data is missing an id: {data!r}")
        return cls(
            id=data["id"],
            pos=pos,
            mass=data.get("mass", 1.0),
            vel=vel,
            fixed=data.get("fixed", False),
        )

    @property
    def x(self) -> float:
        return self.pos.x

    @property
    def y(self) -> float:
        return self.pos.y

    def reset_acceleration(self) -> None:
        self.acc = Vector2.zero()

    def apply_force(
        self,
        source_pos: Vector2,
        source_mass: float,
        source_id: int,
        min_distance: float = DEFAULT_MIN_DISTANCE,
    ) -> None:
        """Add the pull of one (pseudo-)body to the accumulator, skipping self."""
        if source_id == self.id:
            return
        self.acc = self.acc + gravitational_pull(
            self.pos, self.mass, source_pos, source_mass, min_distance
        )

    def integrate(self, config: SimulationConfig) -> None:
        """
        Advance the body by one step.

        Clamps acceleration, updates and clamps velocity, moves, wraps around
        the domain edges, then clears the accumulator. Fixed bodies only clear
        the accumulator.
        """
        if not self.fixed:
            acc = self.acc.limit(config.acc_limit)
            self.vel = (self.vel + acc).limit(config.vel_limit)
            self.pos = wrap_position(self.pos + self.vel, config.width, config.height)
        self.reset_acceleration()

    def __repr__(self) -> str:
        return f"Body(id={self.id}, x={self.pos.x:.2f}, y={self.pos.y:.2f}, mass={self.mass:g})"


def wrap_position(pos: Vector2, width: float, height: float) -> Vector2:
    """Toroidal wrap: leaving one edge re-enters at the opposite edge."""
    x, y = pos.x, pos.y
    if x > width:
        x = 0.0
    elif x < 0:
        x = width
    if y > height:
        y = 0.0
    elif y < 0:
        y = height
    return Vector2(x, y)


def _as_vector(value: Union[Vector2, Any]) -> Vector2:
    """Coerce a Vector2 or an (x, y) pair."""
    if isinstance(value, Vector2):
        return value
    try:
        x, y = value
        return Vector2(float(x), float(y))
    except (TypeError, ValueError) as exc:
        raise InvalidBodyError(f"Expected a Vector2 or (x, y) pair, got {value!r}") from exc


__all__ = [
    "Body",
    "PSEUDO_BODY_ID",
    "DEFAULT_MIN_DISTANCE",
    "gravitational_pull",
    "wrap_position",
]
