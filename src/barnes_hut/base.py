"""
Base class for simulations.

This module provides the abstract base that defines the common interface
and shared functionality of a stepped simulation:

- Event system (start/tick/end events)
- Body management via properties (normalizes Body objects, dicts, objects)
- Step counting and stopping
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Optional, Sequence

if TYPE_CHECKING:
    from typing_extensions import Self

from .body import Body
from .types import BodyLike, Event, EventType
from .validation import InvalidBodyError, validate_body_ids


class BaseSimulation(ABC):
    """
    Abstract base class for stepped simulations.

    Provides shared infrastructure:
    - Event system (start/tick/end events)
    - Body list normalization and lookup by id
    - Step counting and stopping

    Example:
        sim = SomeSimulation(bodies=bodies)
        sim.run(steps=100)

        # Access results via properties
        for body in sim.bodies:
            print(f"Body {body.id}: ({body.x}, {body.y})")
    """

    def __init__(
        self,
        *,
        bodies: Optional[Sequence[BodyLike]] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Initialize simulation with bodies and callbacks.

        Args:
            bodies: Bodies (Body objects, dicts, or objects with body attributes)
            on_start: Callback for start event
            on_tick: Callback for tick event (once per step)
            on_end: Callback for end event
        """
        self._bodies: list[Body] = []
        self._bodies_by_id: dict[int, Body] = {}
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}
        self._step_count: int = 0
        self._running: bool = False

        if bodies is not None:
            self.bodies = bodies

        # Register event callbacks
        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

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
        Set bodies from a sequence of Body objects, dicts, or objects.

        Raises:
            InvalidBodyError: If ids are missing, negative or duplicated.
            InvalidMassError: If a mass is not positive.
        """
        bodies: list[Body] = []
        for i, body_data in enumerate(value):
            if isinstance(body_data, Body):
                bodies.append(body_data)
            elif isinstance(body_data, dict):
                data = dict(body_data)
                data.setdefault("id", i)
                bodies.append(Body.from_dict(data))
            else:
                # Generic object - copy known attributes
                data = {"id": getattr(body_data, "id", i)}
                for attr in ["pos", "vel", "x", "y", "vx", "vy", "mass", "fixed"]:
                    if hasattr(body_data, attr):
                        data[attr] = getattr(body_data, attr)
                bodies.append(Body.from_dict(data))

        validate_body_ids(bodies, strict=True)
        self._bodies = bodies
        self._bodies_by_id = {body.id: body for body in bodies}

    @property
    def step_count(self) -> int:
        """Number of completed steps."""
        return self._step_count

    def get_body(self, body_id: int) -> Body:
        """
        Look up a body by id.

        Raises:
            InvalidBodyError: If no body has this id.
        """
        try:
            return self._bodies_by_id[body_id]
        except KeyError:
            raise InvalidBodyError(f"No body with id {body_id}") from None

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    def step(self) -> Self:
        """
        Advance the simulation by one step.

        Returns:
            self (for chaining)
        """
        pass

    def run(self, steps: int = 1) -> Self:
        """
        Run a number of steps, firing start and end events around them.

        Args:
            steps: Number of steps to run (stops early if stop() is called
                from a tick callback)

        Returns:
            self (for chaining)
        """
        self._running = True
        self.trigger({"type": EventType.start, "step": self._step_count})
        for _ in range(max(0, int(steps))):
            if not self._running:
                break
            self.step()
        self._running = False
        self.trigger({"type": EventType.end, "step": self._step_count})
        return self

    def stop(self) -> Self:
        """Stop a run after the current step."""
        self._running = False
        return self


__all__ = ["BaseSimulation"]
