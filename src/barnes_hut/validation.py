"""
Input validation utilities for the simulation.

Provides centralized validation functions for bodies, domain size, theta
and the integration limits. Raises descriptive exceptions on invalid input,
and defines the warning categories used for recoverable conditions.
"""

from __future__ import annotations

import math
from typing import Any, Sequence


class ValidationError(ValueError):
    """Base exception for simulation validation errors."""

    pass


class InvalidDomainSizeError(ValidationError):
    """Raised when domain dimensions are invalid."""

    pass


class InvalidMassError(ValidationError):
    """Raised when a body has zero, negative or non-finite mass."""

    pass


class InvalidThetaError(ValidationError):
    """Raised when the Barnes-Hut theta parameter is invalid."""

    pass


class InvalidBodyError(ValidationError):
    """Raised when a body is malformed or its id collides with another."""

    pass


class SimulationWarning(UserWarning):
    """Base category for recoverable simulation conditions."""

    pass


class OutOfDomainWarning(SimulationWarning):
    """A body was inserted outside the root region of the quadtree."""

    pass


class CoincidentBodiesWarning(SimulationWarning):
    """Bodies share a position so closely the tree hit its depth limit."""

    pass


def validate_domain_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate domain dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        InvalidDomainSizeError: If dimensions are invalid
    """
    if len(size) < 2:
        raise InvalidDomainSizeError(
            f"Domain size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if not width > 0 or not math.isfinite(width):
        raise InvalidDomainSizeError(f"Domain width must be positive, got {width}")
    if not height > 0 or not math.isfinite(height):
        raise InvalidDomainSizeError(f"Domain height must be positive, got {height}")

    return width, height


def validate_mass(mass: float) -> float:
    """
    Validate a body mass.

    Args:
        mass: Body mass

    Returns:
        Validated mass as float

    Raises:
        InvalidMassError: If mass is not a finite positive number
    """
    try:
        value = float(mass)
    except (TypeError, ValueError) as exc:
        raise InvalidMassError(f"mass must be a number, got {mass!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise InvalidMassError(f"mass must be positive and finite, got {value}")
    return value


def validate_theta(theta: float) -> float:
    """
    Validate the Barnes-Hut opening angle.

    Args:
        theta: Accuracy parameter (0 = exact)

    Returns:
        Validated theta

    Raises:
        InvalidThetaError: If theta is negative or not finite
    """
    value = float(theta)
    if not math.isfinite(value) or value < 0:
        raise InvalidThetaError(f"theta must be >= 0 and finite, got {value}")
    return value


def validate_positive(value: float, name: str) -> float:
    """
    Validate a strictly positive finite parameter (limits, distances).

    Raises:
        ValidationError: If value <= 0 or not finite
    """
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return value


# Insertion recurses two frames per level and must stay under the default
# recursion limit of 1000.
MAX_TREE_DEPTH = 256


def validate_max_depth(max_depth: int) -> int:
    """
    Validate the quadtree depth limit.

    Raises:
        ValidationError: If max_depth < 1 or max_depth > MAX_TREE_DEPTH
    """
    if max_depth < 1:
        raise ValidationError(f"max_depth must be >= 1, got {max_depth}")
    if max_depth > MAX_TREE_DEPTH:
        raise ValidationError(f"max_depth must be <= {MAX_TREE_DEPTH}, got {max_depth}")
    return int(max_depth)


def validate_body_ids(
    bodies: Sequence[Any],
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate that body ids are unique and not the pseudo-body id.

    Args:
        bodies: Sequence of objects with an ``id`` attribute
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (body_position, issue_description) tuples

    Raises:
        InvalidBodyError: If strict=True and invalid ids found
    """
    issues: list[tuple[int, str]] = []
    seen: dict[int, int] = {}

    for i, body in enumerate(bodies):
        body_id = getattr(body, "id", None)
        if body_id is None:
            issues.append((i, f"Body {i}: id is None"))
            continue
        if body_id < 0:
            issues.append((i, f"Body {i}: id {body_id} is negative (reserved)"))
        if body_id in seen:
            issues.append((i, f"Body {i}: id {body_id} duplicates body {seen[body_id]}"))
        else:
            seen[body_id] = i

    if strict and issues:
        msg = "Invalid body ids:\n" + "\n".join(issue[1] for issue in issues)
        raise InvalidBodyError(msg)

    return issues


__all__ = [
    "ValidationError",
    "InvalidDomainSizeError",
    "InvalidMassError",
    "InvalidThetaError",
    "InvalidBodyError",
    "SimulationWarning",
    "OutOfDomainWarning",
    "CoincidentBodiesWarning",
    "validate_domain_size",
    "validate_mass",
    "validate_theta",
    "validate_positive",
    "MAX_TREE_DEPTH",
    "validate_max_depth",
    "validate_body_ids",
]
