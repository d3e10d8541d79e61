"""
Simulation diagnostics.

Provides quantitative measures for checking the approximation and the
state of the system:
- Exact accelerations: Direct O(n^2) summation as a reference
- Force error: How far the tree approximation drifts from the reference
- Mass, mass center, momentum and kinetic energy of the bodies
- Tree statistics: Shape of a built quadtree

All functions take the current bodies (or a built tree) and never mutate them.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np

from .body import DEFAULT_MIN_DISTANCE, Body
from .spatial.quadtree import QuadTree


def _arrays(bodies: Sequence[Body]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Positions (n, 2), velocities (n, 2) and masses (n,) of bodies."""
    pos = np.array([(b.pos.x, b.pos.y) for b in bodies], dtype=np.float64).reshape(-1, 2)
    vel = np.array([(b.vel.x, b.vel.y) for b in bodies], dtype=np.float64).reshape(-1, 2)
    mass = np.array([b.mass for b in bodies], dtype=np.float64)
    return pos, vel, mass


def exact_accelerations(
    bodies: Sequence[Body],
    min_distance: float = DEFAULT_MIN_DISTANCE,
) -> np.ndarray:
    """
    Compute the exact pairwise pull on every body.

    Uses the same law as the tree (m_a * m_b / d^2 toward the source, with
    the distance floored at min_distance and coincident pairs skipped).

    Args:
        bodies: Bodies to evaluate
        min_distance: Distance floor

    Returns:
        (n, 2) array of summed force vectors, in body order

    Time Complexity: O(n^2)
    """
    n = len(bodies)
    if n == 0:
        return np.zeros((0, 2), dtype=np.float64)

    pos, _, mass = _arrays(bodies)
    # delta[i, j] points from body i to body j
    delta = pos[np.newaxis, :, :] - pos[:, np.newaxis, :]
    dist = np.sqrt(np.sum(delta * delta, axis=2))

    coincident = dist == 0
    safe_dist = np.where(coincident, 1.0, dist)
    clamped = np.maximum(safe_dist, min_distance)
    magnitude = np.outer(mass, mass) / (clamped * clamped)
    magnitude[coincident] = 0.0

    forces = delta / safe_dist[:, :, np.newaxis] * magnitude[:, :, np.newaxis]
    return forces.sum(axis=1)


def tree_accelerations(
    tree: QuadTree,
    bodies: Sequence[Body],
    theta: Optional[float] = None,
) -> np.ndarray:
    """
    Compute the Barnes-Hut pull on every body from a built tree.

    Args:
        tree: Quadtree with the bodies already inserted
        bodies: Bodies to query
        theta: Override of the tree's theta

    Returns:
        (n, 2) array of summed force vectors, in body order
    """
    result = np.zeros((len(bodies), 2), dtype=np.float64)
    for i, body in enumerate(bodies):
        force = tree.calculate_force(body, theta)
        result[i, 0] = force.x
        result[i, 1] = force.y
    return result


def force_error(approx: np.ndarray, exact: np.ndarray) -> float:
    """
    Mean relative error of approximate forces against a reference.

    Rows whose reference magnitude is zero are measured in absolute terms.

    Returns:
        Mean of |approx - exact| / |exact| over bodies (0.0 for no bodies)
    """
    approx = np.asarray(approx, dtype=np.float64)
    exact = np.asarray(exact, dtype=np.float64)
    if exact.size == 0:
        return 0.0

    diff = np.linalg.norm(approx - exact, axis=1)
    ref = np.linalg.norm(exact, axis=1)
    rel = np.where(ref > 0, diff / np.where(ref > 0, ref, 1.0), diff)
    return float(np.mean(rel))


def total_mass(bodies: Sequence[Body]) -> float:
    """Sum of all body masses."""
    return float(sum(b.mass for b in bodies))


def center_of_mass(bodies: Sequence[Body]) -> tuple[float, float]:
    """
    Mass-weighted average position.

    Returns:
        (x, y), or (0.0, 0.0) for no bodies
    """
    if not bodies:
        return (0.0, 0.0)
    pos, _, mass = _arrays(bodies)
    com = (pos * mass[:, np.newaxis]).sum(axis=0) / mass.sum()
    return (float(com[0]), float(com[1]))


def momentum(bodies: Sequence[Body]) -> tuple[float, float]:
    """Total linear momentum (sum of m * v)."""
    if not bodies:
        return (0.0, 0.0)
    _, vel, mass = _arrays(bodies)
    p = (vel * mass[:, np.newaxis]).sum(axis=0)
    return (float(p[0]), float(p[1]))


def kinetic_energy(bodies: Sequence[Body]) -> float:
    """Total kinetic energy (sum of m * |v|^2 / 2)."""
    if not bodies:
        return 0.0
    _, vel, mass = _arrays(bodies)
    return float(0.5 * np.sum(mass * np.sum(vel * vel, axis=1)))


def tree_statistics(tree: QuadTree) -> dict[str, Any]:
    """
    Summarize the shape of a built quadtree.

    Returns:
        Dictionary with node_count, leaf_count, occupied_leaves, max_depth,
        body_count and mass
    """
    node_count = 0
    leaf_count = 0
    occupied = 0
    max_depth = 0
    for node in tree.iter_nodes():
        node_count += 1
        max_depth = max(max_depth, node.depth)
        if node.is_leaf():
            leaf_count += 1
            if node.body is not None:
                occupied += 1

    return {
        "node_count": node_count,
        "leaf_count": leaf_count,
        "occupied_leaves": occupied,
        "max_depth": max_depth,
        "body_count": tree.body_count,
        "mass": tree.root.mass,
    }


__all__ = [
    "exact_accelerations",
    "tree_accelerations",
    "force_error",
    "total_mass",
    "center_of_mass",
    "momentum",
    "kinetic_energy",
    "tree_statistics",
]
