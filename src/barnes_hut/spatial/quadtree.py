"""
Quadtree implementation for Barnes-Hut gravity approximation.

The quadtree recursively subdivides the simulation domain into quadrants,
aggregating mass and mass center per node as bodies are inserted, which
enables O(n log n) approximate n-body force calculations.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from ..body import DEFAULT_MIN_DISTANCE, Body, gravitational_pull
from ..types import NodeInfo
from ..validation import (
    CoincidentBodiesWarning,
    OutOfDomainWarning,
    validate_max_depth,
    validate_theta,
)
from ..vector import Vector2

TOP_LEFT = 0
TOP_RIGHT = 1
BOTTOM_RIGHT = 2
BOTTOM_LEFT = 3


@dataclass
class QuadTreeNode:
    """
    A node in the quadtree.

    Attributes:
        x, y: Geometric center of this region
        half_width, half_height: Half the extent of this region on each axis
        depth: Distance from the root (root = 0)
        mass_center: Mass-weighted average position of bodies in this subtree
        mass: Total mass of bodies in this subtree
        body: Single body if this is an occupied leaf
        children: Four child quadrants [top-left, top-right, bottom-right,
            bottom-left] if subdivided
        coincident: Extra bodies held by a leaf at the depth limit
    """

    x: float
    y: float
    half_width: float
    half_height: float
    depth: int = 0

    # Aggregated properties
    mass_center: Vector2 = field(default_factory=Vector2.zero)
    mass: float = 0.0

    # Content
    body: Optional[Body] = None
    children: Optional[List[QuadTreeNode]] = None
    coincident: List[Body] = field(default_factory=list)

    @property
    def center(self) -> Vector2:
        return Vector2(self.x, self.y)

    @property
    def width(self) -> float:
        """Half the horizontal extent; the size term of the theta test."""
        return self.half_width

    @property
    def top_left(self) -> Vector2:
        return Vector2(self.x - self.half_width, self.y - self.half_height)

    @property
    def top_right(self) -> Vector2:
        return Vector2(self.x + self.half_width, self.y - self.half_height)

    @property
    def bottom_right(self) -> Vector2:
        return Vector2(self.x + self.half_width, self.y + self.half_height)

    @property
    def bottom_left(self) -> Vector2:
        return Vector2(self.x - self.half_width, self.y + self.half_height)

    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return self.children is None

    def is_empty(self) -> bool:
        """True if this node contains no bodies."""
        return self.body is None and self.children is None

    def contains(self, x: float, y: float) -> bool:
        """Check if point (x, y) is within this node's region."""
        return abs(x - self.x) <= self.half_width and abs(y - self.y) <= self.half_height

    def get_quadrant(self, x: float, y: float) -> int:
        """
        Get quadrant index for a point.

        Points on a dividing line go east and south.

        Returns:
            0=top-left, 1=top-right, 2=bottom-right, 3=bottom-left
        """
        east = x >= self.x
        south = y >= self.y
        if south:
            return BOTTOM_RIGHT if east else BOTTOM_LEFT
        return TOP_RIGHT if east else TOP_LEFT

    def leaf_bodies(self) -> List[Body]:
        """Bodies stored directly in this node."""
        if self.body is None:
            return []
        return [self.body, *self.coincident]

    def add_mass(self, body: Body) -> None:
        """Fold one body into the running mass center and total mass."""
        total = self.mass + body.mass
        self.mass_center = (self.mass_center * self.mass + body.pos * body.mass) / total
        self.mass = total

    def subdivide(self) -> None:
        """Split into four equal quadrants one level deeper."""
        hw = self.half_width / 2
        hh = self.half_height / 2
        depth = self.depth + 1
        self.children = [
            QuadTreeNode(self.x - hw, self.y - hh, hw, hh, depth),  # top-left
            QuadTreeNode(self.x + hw, self.y - hh, hw, hh, depth),  # top-right
            QuadTreeNode(self.x + hw, self.y + hh, hw, hh, depth),  # bottom-right
            QuadTreeNode(self.x - hw, self.y + hh, hw, hh, depth),  # bottom-left
        ]

    def describe(self) -> NodeInfo:
        """Read-only display record of this node."""
        return {
            "top_left": self.top_left.as_tuple(),
            "bottom_right": self.bottom_right.as_tuple(),
            "depth": self.depth,
            "mass_center": self.mass_center.as_tuple(),
            "mass": self.mass,
        }


class QuadTree:
    """
    Barnes-Hut quadtree for approximate gravity calculations.

    The Barnes-Hut algorithm uses a quadtree to approximate long-range
    forces. For distant clusters, the algorithm treats the cluster as
    a single body at its mass center, reducing complexity from
    O(n^2) to O(n log n).

    Usage:
        tree = QuadTree(bounds=(0, 0, 1000, 800))
        for body in bodies:
            tree.insert(body)

        # Force on a body
        force = tree.calculate_force(body)

    Mass and mass center are maintained incrementally on insertion, so the
    tree is ready for force queries as soon as the last body is inserted.

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.5: Good balance (recommended)
    - theta = 1.0+: Fast but less accurate
    """

    def __init__(
        self,
        bounds: Tuple[float, float, float, float],
        theta: float = 0.5,
        max_depth: int = 64,
        min_distance: float = DEFAULT_MIN_DISTANCE,
    ):
        """
        Initialize quadtree.

        Args:
            bounds: (min_x, min_y, max_x, max_y) region covered by the root
            theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
            max_depth: Depth at which leaves stop subdividing
            min_distance: Distance floor passed to the force law
        """
        min_x, min_y, max_x, max_y = bounds
        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2

        self.root = QuadTreeNode(center_x, center_y, (max_x - min_x) / 2, (max_y - min_y) / 2)
        self.theta = validate_theta(theta)
        self.max_depth = validate_max_depth(max_depth)
        self.min_distance = min_distance
        self.body_count = 0
        self.last_visit_count = 0

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def insert(self, body: Body) -> None:
        """Insert a body into the quadtree."""
        if not self.root.contains(body.pos.x, body.pos.y):
            warnings.warn(
                f"Body {body.id} at ({body.pos.x:.2f}, {body.pos.y:.2f}) lies outside "
                "the tree bounds; it is placed by quadrant only",
                OutOfDomainWarning,
                stacklevel=2,
            )
        self._insert_into(self.root, body)
        self.body_count += 1

    def _insert_into(self, node: QuadTreeNode, body: Body) -> None:
        """Recursively insert body into subtree rooted at node."""
        node.add_mass(body)

        if node.is_empty():
            # Empty node becomes a leaf with this body
            node.body = body
            return

        if node.is_leaf():
            if node.depth >= self.max_depth:
                node.coincident.append(body)
                warnings.warn(
                    f"Body {body.id} shares a leaf with body {node.body.id} at depth "
                    f"{node.depth}; positions are (nearly) coincident",
                    CoincidentBodiesWarning,
                    stacklevel=2,
                )
                return

            # Leaf with existing body - must subdivide
            existing = node.body
            node.body = None
            node.subdivide()
            if existing is not None:
                self._insert_into_child(node, existing)

        self._insert_into_child(node, body)

    def _insert_into_child(self, node: QuadTreeNode, body: Body) -> None:
        """Insert body into the appropriate child of node."""
        assert node.children is not None
        quadrant = node.get_quadrant(body.pos.x, body.pos.y)
        self._insert_into(node.children[quadrant], body)

    # -------------------------------------------------------------------------
    # Force traversal
    # -------------------------------------------------------------------------

    def calculate_force(self, body: Body, theta: Optional[float] = None) -> Vector2:
        """
        Calculate the approximate gravitational pull on a body.

        Uses Barnes-Hut approximation: if a cluster is sufficiently
        far away (width/distance < theta), treat it as a single mass at
        its mass center. A node that encloses the query body is always
        opened, so a body never pulls on itself through an aggregate.

        Args:
            body: The body to calculate force on
            theta: Override of the tree's theta for this query

        Returns:
            Summed force vector (pointing toward the attracting mass)
        """
        theta = self.theta if theta is None else theta
        self.last_visit_count = 0
        fx, fy = self._calculate_force(self.root, body, theta)
        return Vector2(fx, fy)

    def _calculate_force(
        self,
        node: QuadTreeNode,
        body: Body,
        theta: float,
    ) -> Tuple[float, float]:
        """Recursively calculate force contribution from node."""
        self.last_visit_count += 1

        if node.is_leaf():
            fx, fy = 0.0, 0.0
            for other in node.leaf_bodies():
                # Skip self-interaction (same body)
                if other.id == body.id:
                    continue
                pull = gravitational_pull(
                    body.pos, body.mass, other.pos, other.mass, self.min_distance
                )
                fx += pull.x
                fy += pull.y
            return fx, fy

        dist = body.pos.dist(node.mass_center)

        # Barnes-Hut criterion: width/d < theta
        if (
            dist > 0
            and node.width / dist < theta
            and not node.contains(body.pos.x, body.pos.y)
        ):
            # Pseudo-body at the mass center; its id never matches a real body
            pull = gravitational_pull(
                body.pos, body.mass, node.mass_center, node.mass, self.min_distance
            )
            return pull.x, pull.y

        # Node is too close - recurse into children
        fx, fy = 0.0, 0.0
        assert node.children is not None
        for child in node.children:
            cfx, cfy = self._calculate_force(child, body, theta)
            fx += cfx
            fy += cfy
        return fx, fy

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def iter_nodes(self) -> Iterator[QuadTreeNode]:
        """Yield every node, parents before children."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))

    def describe(self) -> List[NodeInfo]:
        """Display records for every node in the tree."""
        return [node.describe() for node in self.iter_nodes()]

    @property
    def node_count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    @property
    def depth(self) -> int:
        """Deepest node depth (0 for an unsubdivided root)."""
        return max(node.depth for node in self.iter_nodes())

    @classmethod
    def from_bodies(
        cls,
        bodies: Sequence[Body],
        bounds: Optional[Tuple[float, float, float, float]] = None,
        padding: float = 10.0,
        theta: float = 0.5,
        max_depth: int = 64,
        min_distance: float = DEFAULT_MIN_DISTANCE,
    ) -> QuadTree:
        """
        Build a quadtree from a list of bodies.

        Args:
            bodies: Bodies to insert, in order
            bounds: Region for the root. If None, the bodies' bounding box
                grown by padding.
            padding: Padding around the bounding box when bounds is None
            theta: Barnes-Hut threshold
            max_depth: Depth limit for subdivision
            min_distance: Distance floor passed to the force law

        Returns:
            QuadTree with all bodies inserted
        """
        if bounds is None:
            if bodies:
                bounds = (
                    min(b.pos.x for b in bodies) - padding,
                    min(b.pos.y for b in bodies) - padding,
                    max(b.pos.x for b in bodies) + padding,
                    max(b.pos.y for b in bodies) + padding,
                )
            else:
                bounds = (0, 0, 100, 100)

        tree = cls(bounds, theta=theta, max_depth=max_depth, min_distance=min_distance)
        for body in bodies:
            tree.insert(body)
        return tree


__all__ = ["QuadTree", "QuadTreeNode"]
