"""
Barnes-Hut gravity simulation.

One step is a small state machine:

    IDLE -> TREE_BUILT -> FORCES_ACCUMULATED -> INTEGRATED -> IDLE

1. build a fresh quadtree over the domain and insert every body
2. traverse the tree once per body, summing the pull into ``acc``
3. integrate every body (clamp, move, wrap)
4. drop the working tree; it is rebuilt from scratch next step
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import numpy as np
from typing_extensions import Self

from .base import BaseSimulation
from .body import Body
from .config import SimulationConfig
from .spatial.quadtree import QuadTree
from .types import BodyLike, BodyState, Event, EventType, NodeInfo, SimulationState
from .validation import InvalidBodyError
from .vector import Vector2


class SimulationStateError(RuntimeError):
    """Raised when a step phase is called out of order."""

    pass


class Simulation(BaseSimulation):
    """
    Barnes-Hut N-body simulation over a toroidal 2D domain.

    Bodies persist across steps: velocity and position carry over, and only
    the tree is rebuilt every step. Fixed bodies exert force but are moved
    from outside with move_body().

    Example:
        sim = Simulation(
            bodies=[
                {"id": 0, "x": 200, "y": 220, "mass": 50},
                {"id": 1, "x": 100, "y": 50, "mass": 20},
            ],
            theta=0.5,
            size=(1000, 800),
        )
        sim.run(steps=100)

        for state in sim.snapshot():
            print(state["id"], state["x"], state["y"])
    """

    def __init__(
        self,
        *,
        bodies: Optional[Sequence[BodyLike]] = None,
        config: Optional[SimulationConfig] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
        **options: Any,
    ) -> None:
        """
        Initialize simulation.

        Args:
            bodies: Initial bodies
            config: Full configuration. Keyword options override its fields.
            on_start: Callback for start event
            on_tick: Callback for tick event (once per step)
            on_end: Callback for end event
            **options: Any SimulationConfig field (theta, width, height,
                acc_limit, vel_limit, min_distance, max_depth,
                use_barnes_hut), or size=(width, height)

        Raises:
            ValidationError: If any configuration value is invalid.
        """
        self._state: SimulationState = SimulationState.IDLE
        self._tree: Optional[QuadTree] = None
        self._last_tree: Optional[QuadTree] = None

        super().__init__(bodies=bodies, on_start=on_start, on_tick=on_tick, on_end=on_end)

        if "size" in options:
            width, height = options.pop("size")
            options["width"] = width
            options["height"] = height
        base = config if config is not None else SimulationConfig()
        self._config: SimulationConfig = base.replace(**options) if options else base

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def bodies(self) -> list[Body]:
        """Get the list of bodies, in insertion order."""
        return self._bodies

    @bodies.setter
    def bodies(self, value: Sequence[BodyLike]) -> None:
        """
        Replace the bodies between steps.

        Raises:
            SimulationStateError: If a step is in progress.
        """
        self._require(SimulationState.IDLE, "replace the bodies")
        BaseSimulation.bodies.fset(self, value)

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @config.setter
    def config(self, value: SimulationConfig) -> None:
        self._require(SimulationState.IDLE, "change the configuration")
        self._config = value

    @property
    def theta(self) -> float:
        """Get Barnes-Hut theta parameter (accuracy)."""
        return self._config.theta

    @theta.setter
    def theta(self, value: float) -> None:
        """Set Barnes-Hut theta parameter."""
        self.config = self._config.replace(theta=value)

    @property
    def size(self) -> tuple[float, float]:
        """Get domain size as (width, height)."""
        return self._config.size

    @size.setter
    def size(self, value: Sequence[float]) -> None:
        """Set domain size."""
        self.config = self._config.replace(width=value[0], height=value[1])

    @property
    def use_barnes_hut(self) -> bool:
        """Get whether Barnes-Hut approximation is enabled."""
        return self._config.use_barnes_hut

    @use_barnes_hut.setter
    def use_barnes_hut(self, value: bool) -> None:
        """Enable/disable Barnes-Hut approximation."""
        self.config = self._config.replace(use_barnes_hut=value)

    @property
    def state(self) -> SimulationState:
        """Current phase of the step state machine."""
        return self._state

    @property
    def tree(self) -> Optional[QuadTree]:
        """The working tree of the step in progress (None while idle)."""
        return self._tree

    @property
    def last_tree(self) -> Optional[QuadTree]:
        """Most recently built tree, kept for display only."""
        return self._last_tree

    # -------------------------------------------------------------------------
    # External input
    # -------------------------------------------------------------------------

    def move_body(self, body_id: int, x: float, y: float) -> None:
        """
        Place a body at a new position between steps.

        Used for externally controlled bodies such as a pointer-driven mass.

        Raises:
            InvalidBodyError: If no body has this id or the position is not finite.
            SimulationStateError: If a step is in progress.
        """
        self._require(SimulationState.IDLE, "move a body")
        body = self.get_body(body_id)
        pos = Vector2(float(x), float(y))
        if not pos.is_finite():
            raise InvalidBodyError(f"Cannot move body {body_id} to non-finite position {pos}")
        body.pos = pos

    # -------------------------------------------------------------------------
    # Step phases
    # -------------------------------------------------------------------------

    def build_tree(self) -> QuadTree:
        """
        IDLE -> TREE_BUILT: insert every body into a fresh tree.

        Also clears each body's accumulator so forces start from zero.
        """
        self._require(SimulationState.IDLE, "build the tree")
        cfg = self._config
        tree = QuadTree(
            cfg.bounds,
            theta=cfg.theta,
            max_depth=cfg.max_depth,
            min_distance=cfg.min_distance,
        )
        for body in self._bodies:
            body.reset_acceleration()
            tree.insert(body)

        self._tree = tree
        self._last_tree = tree
        self._state = SimulationState.TREE_BUILT
        return tree

    def accumulate_forces(self) -> None:
        """TREE_BUILT -> FORCES_ACCUMULATED: sum the pull on every body."""
        self._require(SimulationState.TREE_BUILT, "accumulate forces")
        assert self._tree is not None

        if self._config.use_barnes_hut:
            for body in self._bodies:
                body.acc = body.acc + self._tree.calculate_force(body, self._config.theta)
        else:
            self._accumulate_exact()

        self._state = SimulationState.FORCES_ACCUMULATED

    def _accumulate_exact(self) -> None:
        """Compute forces using O(n^2) pairwise calculation."""
        min_distance = self._config.min_distance
        for body in self._bodies:
            for other in self._bodies:
                body.apply_force(other.pos, other.mass, other.id, min_distance)

    def integrate(self) -> None:
        """FORCES_ACCUMULATED -> INTEGRATED: clamp, move and wrap every body."""
        self._require(SimulationState.FORCES_ACCUMULATED, "integrate")
        for body in self._bodies:
            body.integrate(self._config)
        self._state = SimulationState.INTEGRATED

    def finish(self) -> None:
        """INTEGRATED -> IDLE: discard the working tree."""
        self._require(SimulationState.INTEGRATED, "finish the step")
        self._tree = None
        self._state = SimulationState.IDLE

    def step(self) -> Self:
        """
        Run one full step and fire the tick event.

        Returns:
            self (for chaining)
        """
        self.build_tree()
        self.accumulate_forces()
        self.integrate()
        self.finish()
        self._step_count += 1

        self.trigger({"type": EventType.tick, "step": self._step_count, "state": self._state})
        return self

    def _require(self, expected: SimulationState, action: str) -> None:
        if self._state is not expected:
            raise SimulationStateError(
                f"Cannot {action} in state {self._state.value}; expected {expected.value}"
            )

    # -------------------------------------------------------------------------
    # Outbound (read-only, for display)
    # -------------------------------------------------------------------------

    def snapshot(self) -> list[BodyState]:
        """Position and mass of every body."""
        return [
            {"id": body.id, "x": body.pos.x, "y": body.pos.y, "mass": body.mass}
            for body in self._bodies
        ]

    def positions(self) -> np.ndarray:
        """Body positions as an (n, 2) array, in body order."""
        if not self._bodies:
            return np.zeros((0, 2), dtype=np.float64)
        return np.array([body.pos.as_tuple() for body in self._bodies], dtype=np.float64)

    def masses(self) -> np.ndarray:
        """Body masses as an (n,) array, in body order."""
        return np.array([body.mass for body in self._bodies], dtype=np.float64)

    def tree_snapshot(self) -> list[NodeInfo]:
        """Display records for every node of the most recently built tree."""
        if self._last_tree is None:
            return []
        return self._last_tree.describe()


__all__ = ["Simulation", "SimulationStateError"]
