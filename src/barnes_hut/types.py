"""
Common types for the simulation.

This module provides the small shared types used across the package:
- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
- SimulationState: Phase of the per-step state machine
- BodyState / NodeInfo: Read-only records handed to display consumers
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Sequence, TypedDict, Union

if TYPE_CHECKING:
    from .body import Body


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: A run of steps has begun
    - tick: Fired once per completed step
    - end: The run has finished or was stopped
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    step: int
    state: SimulationState


class SimulationState(Enum):
    """
    Phases of one simulation step.

    IDLE -> TREE_BUILT -> FORCES_ACCUMULATED -> INTEGRATED -> IDLE
    """

    IDLE = "idle"
    TREE_BUILT = "tree_built"
    FORCES_ACCUMULATED = "forces_accumulated"
    INTEGRATED = "integrated"


class BodyState(TypedDict):
    """Display record for one body."""

    id: int
    x: float
    y: float
    mass: float


class NodeInfo(TypedDict):
    """Display record for one quadtree node."""

    top_left: tuple[float, float]
    bottom_right: tuple[float, float]
    depth: int
    mass_center: tuple[float, float]
    mass: float


# Type aliases for the Pythonic API
BodyLike = Union["Body", dict[str, Any], Any]
"""Input type for bodies: Body objects, dicts, or objects with body attributes."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Domain size: (width, height) tuple, list, or sequence."""


__all__ = [
    "EventType",
    "Event",
    "SimulationState",
    "BodyState",
    "NodeInfo",
    "BodyLike",
    "SizeType",
]
