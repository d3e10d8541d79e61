"""
barnes-hut: Barnes-Hut gravity simulation in Python.

This package approximates pairwise gravitational forces among moving point
masses with a quadtree, trading exact O(n^2) summation for O(n log n).

Components:
- vector: Immutable 2D vector
- body: Point masses, the pairwise force law and integration
- spatial: Quadtree with incremental mass-center aggregation
- simulation: Per-step orchestration (build, accumulate, integrate)
- metrics: Diagnostics against the exact pairwise sum
"""

__version__ = "0.1.0"

# Core types
from .body import PSEUDO_BODY_ID, Body, gravitational_pull, wrap_position

# Configuration
from .config import SimulationConfig

# Diagnostics
from .metrics import (
    center_of_mass,
    exact_accelerations,
    force_error,
    kinetic_energy,
    momentum,
    total_mass,
    tree_accelerations,
    tree_statistics,
)

# Ready-made scenes
from .presets import POINTER_BODY_ID, random_bodies, reference_bodies

# Simulation
from .simulation import Simulation, SimulationStateError

# Spatial data structures
from .spatial import QuadTree, QuadTreeNode
from .types import (
    BodyLike,
    BodyState,
    Event,
    EventType,
    NodeInfo,
    SimulationState,
    SizeType,
)

# Validation utilities
from .validation import (
    CoincidentBodiesWarning,
    InvalidBodyError,
    InvalidDomainSizeError,
    InvalidMassError,
    InvalidThetaError,
    OutOfDomainWarning,
    SimulationWarning,
    ValidationError,
)
from .vector import Vector2

__all__ = [
    # Version
    "__version__",
    # Core types
    "Vector2",
    "Body",
    "PSEUDO_BODY_ID",
    "gravitational_pull",
    "wrap_position",
    # Shared types
    "EventType",
    "Event",
    "SimulationState",
    "BodyState",
    "NodeInfo",
    "BodyLike",
    "SizeType",
    # Configuration
    "SimulationConfig",
    # Simulation
    "Simulation",
    "SimulationStateError",
    # Spatial data structures
    "QuadTree",
    "QuadTreeNode",
    # Diagnostics
    "exact_accelerations",
    "tree_accelerations",
    "force_error",
    "total_mass",
    "center_of_mass",
    "momentum",
    "kinetic_energy",
    "tree_statistics",
    # Presets
    "POINTER_BODY_ID",
    "reference_bodies",
    "random_bodies",
    # Validation
    "ValidationError",
    "InvalidDomainSizeError",
    "InvalidMassError",
    "InvalidThetaError",
    "InvalidBodyError",
    "SimulationWarning",
    "OutOfDomainWarning",
    "CoincidentBodiesWarning",
]
