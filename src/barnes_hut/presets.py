"""
Ready-made body sets.

- reference_bodies: The four-body demo scene, one body following a pointer
- random_bodies: A reproducible random cloud for benchmarks and tests
"""

from __future__ import annotations

import random
from typing import Optional

from .body import Body
from .types import SizeType
from .validation import ValidationError, validate_domain_size, validate_mass
from .vector import Vector2

# Id of the pointer-driven body in reference_bodies()
POINTER_BODY_ID = 3


def reference_bodies(pointer: tuple[float, float] = (500.0, 400.0)) -> list[Body]:
    """
    The reference scene: three free bodies and one fixed pointer body.

    Move the pointer body each frame with
    ``sim.move_body(POINTER_BODY_ID, x, y)``.

    Args:
        pointer: Initial position of the pointer body

    Returns:
        Four bodies with ids 0..3, all at rest
    """
    return [
        Body(0, Vector2(200.0, 220.0), mass=50.0),
        Body(1, Vector2(100.0, 50.0), mass=20.0),
        Body(2, Vector2(900.0, 50.0), mass=20.0),
        Body(POINTER_BODY_ID, Vector2(float(pointer[0]), float(pointer[1])), mass=40.0, fixed=True),
    ]


def random_bodies(
    n: int,
    size: SizeType = (1000.0, 800.0),
    mass_range: tuple[float, float] = (1.0, 10.0),
    random_seed: Optional[int] = None,
) -> list[Body]:
    """
    Generate n bodies at rest, uniformly spread over the domain.

    Args:
        n: Number of bodies
        size: Domain (width, height)
        mass_range: (low, high) bounds for uniform masses, low > 0
        random_seed: Seed for reproducible output

    Returns:
        Bodies with ids 0..n-1

    Raises:
        ValidationError: If n is negative or the mass range is invalid
    """
    if n < 0:
        raise ValidationError(f"n must be >= 0, got {n}")
    width, height = validate_domain_size(size)
    low = validate_mass(mass_range[0])
    high = validate_mass(mass_range[1])
    if high < low:
        raise ValidationError(f"mass_range must be (low, high), got {mass_range}")

    rng = random.Random(random_seed)
    return [
        Body(
            i,
            Vector2(rng.uniform(0, width), rng.uniform(0, height)),
            mass=rng.uniform(low, high),
        )
        for i in range(n)
    ]


__all__ = ["POINTER_BODY_ID", "reference_bodies", "random_bodies"]
