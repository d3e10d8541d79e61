"""
Tests for the Simulation step state machine.
"""

import numpy as np
import pytest

from barnes_hut import (
    POINTER_BODY_ID,
    Body,
    CoincidentBodiesWarning,
    EventType,
    InvalidBodyError,
    InvalidDomainSizeError,
    InvalidThetaError,
    Simulation,
    SimulationConfig,
    SimulationState,
    SimulationStateError,
    Vector2,
    random_bodies,
    reference_bodies,
)
from barnes_hut.validation import MAX_TREE_DEPTH

# =============================================================================
# Test Fixtures
# =============================================================================


def create_symmetric_pair(mass=10.0, offset=100.0):
    """Two equal bodies placed symmetrically about the domain center."""
    return [
        Body(0, Vector2(500.0 - offset, 400.0), mass=mass),
        Body(1, Vector2(500.0 + offset, 400.0), mass=mass),
    ]


# =============================================================================
# End-to-end
# =============================================================================


class TestTwoBodyScenario:
    """Two equal masses attract each other with the exact pairwise law."""

    def test_accelerations_point_at_each_other(self):
        """After accumulation each acc is m^2/d^2 toward the other body."""
        sim = Simulation(bodies=create_symmetric_pair(), theta=0.0)
        sim.build_tree()
        sim.accumulate_forces()

        a, b = sim.bodies
        expected = 10.0 * 10.0 / 200.0**2
        assert a.acc.x == pytest.approx(expected)
        assert a.acc.y == pytest.approx(0.0)
        assert b.acc.x == pytest.approx(-expected)
        assert b.acc.y == pytest.approx(0.0)

    def test_one_step_moves_bodies_together(self):
        """A full step turns the pull into velocity and motion."""
        sim = Simulation(bodies=create_symmetric_pair(), theta=0.0)
        sim.step()

        a, b = sim.bodies
        expected = 10.0 * 10.0 / 200.0**2
        assert a.vel.x == pytest.approx(expected)
        assert b.vel.x == pytest.approx(-expected)
        assert a.pos.x == pytest.approx(400.0 + expected)
        assert b.pos.x == pytest.approx(600.0 - expected)
        assert a.acc == Vector2(0.0, 0.0)

    def test_pair_keeps_symmetry(self):
        """Momentum-symmetric start stays mirror-symmetric."""
        sim = Simulation(bodies=create_symmetric_pair(mass=30.0), theta=0.5)
        sim.run(steps=20)

        a, b = sim.bodies
        assert a.pos.x + b.pos.x == pytest.approx(1000.0)
        assert a.pos.y == pytest.approx(b.pos.y)


# =============================================================================
# State machine
# =============================================================================


class TestStateMachine:
    """Tests for phase ordering."""

    def test_phase_sequence(self):
        """Each phase moves to the next state."""
        sim = Simulation(bodies=create_symmetric_pair())
        assert sim.state is SimulationState.IDLE

        sim.build_tree()
        assert sim.state is SimulationState.TREE_BUILT
        assert sim.tree is not None

        sim.accumulate_forces()
        assert sim.state is SimulationState.FORCES_ACCUMULATED

        sim.integrate()
        assert sim.state is SimulationState.INTEGRATED

        sim.finish()
        assert sim.state is SimulationState.IDLE
        assert sim.tree is None
        assert sim.last_tree is not None

    def test_out_of_order_phases_raise(self):
        """Skipping a phase is an error."""
        sim = Simulation(bodies=create_symmetric_pair())
        with pytest.raises(SimulationStateError):
            sim.accumulate_forces()
        with pytest.raises(SimulationStateError):
            sim.integrate()
        with pytest.raises(SimulationStateError):
            sim.finish()

        sim.build_tree()
        with pytest.raises(SimulationStateError, match="build the tree"):
            sim.build_tree()

    def test_move_body_only_while_idle(self):
        """External input is rejected mid-step."""
        sim = Simulation(bodies=create_symmetric_pair())
        sim.build_tree()
        with pytest.raises(SimulationStateError):
            sim.move_body(0, 10.0, 10.0)

    def test_bodies_replaced_only_while_idle(self):
        """New bodies never meet a tree built from the old ones."""
        sim = Simulation(bodies=[Body(0, (100, 100)), Body(1, (900, 700))])
        replacement = [Body(0, (500, 400)), Body(1, (510, 400))]

        sim.build_tree()
        with pytest.raises(SimulationStateError, match="replace the bodies"):
            sim.bodies = replacement
        assert sim.bodies[0].pos == Vector2(100.0, 100.0)

        sim.accumulate_forces()
        sim.integrate()
        sim.finish()

        sim.bodies = replacement
        sim.build_tree()
        sim.accumulate_forces()
        a, b = sim.bodies
        assert a.acc.x == pytest.approx(0.01)
        assert b.acc.x == pytest.approx(-0.01)

    def test_tree_rebuilt_every_step(self):
        """A fresh tree is built each step, reflecting new positions."""
        sim = Simulation(bodies=create_symmetric_pair(mass=40.0))
        sim.step()
        first = sim.last_tree
        sim.step()
        second = sim.last_tree

        assert first is not second
        assert second.root.mass == pytest.approx(80.0)

    def test_build_tree_resets_acceleration(self):
        """Stale accelerations never leak into a new step."""
        sim = Simulation(bodies=create_symmetric_pair())
        sim.bodies[0].acc = Vector2(5.0, 5.0)
        sim.build_tree()
        assert sim.bodies[0].acc == Vector2(0.0, 0.0)


# =============================================================================
# Configuration and bodies
# =============================================================================


class TestSimulationConfiguration:
    """Tests for configuration handling."""

    def test_defaults(self):
        """Default configuration matches the reference scene."""
        sim = Simulation()
        assert sim.theta == 0.5
        assert sim.size == (1000.0, 800.0)
        assert sim.use_barnes_hut is True
        assert sim.config.acc_limit == 0.1
        assert sim.config.vel_limit == 3.0

    def test_keyword_overrides(self):
        """Keyword options override config fields."""
        config = SimulationConfig(theta=0.2, vel_limit=5.0)
        sim = Simulation(config=config, theta=0.8, size=(200, 100))
        assert sim.theta == 0.8
        assert sim.size == (200.0, 100.0)
        assert sim.config.vel_limit == 5.0

    def test_property_setters(self):
        """Properties replace the config with a validated copy."""
        sim = Simulation()
        sim.theta = 1.0
        sim.size = (300, 200)
        sim.use_barnes_hut = False
        assert sim.config == SimulationConfig(
            theta=1.0, width=300, height=200, use_barnes_hut=False
        )

    def test_invalid_theta(self):
        """Negative theta is rejected."""
        with pytest.raises(InvalidThetaError):
            Simulation(theta=-0.1)

    def test_invalid_size(self):
        """Zero-width domain is rejected."""
        with pytest.raises(InvalidDomainSizeError):
            Simulation(size=(0, 100))

    def test_bodies_from_dicts(self):
        """Dict input is normalized, ids default to position."""
        sim = Simulation(bodies=[{"x": 1, "y": 2, "mass": 3}, {"x": 4, "y": 5}])
        assert [b.id for b in sim.bodies] == [0, 1]
        assert sim.bodies[0].mass == 3.0
        assert sim.get_body(1).pos == Vector2(4.0, 5.0)

    def test_bodies_from_objects(self):
        """Generic objects are read attribute by attribute."""

        class Star:
            def __init__(self, ident, x, y):
                self.id = ident
                self.x = x
                self.y = y
                self.mass = 2.0

        sim = Simulation(bodies=[Star(7, 10.0, 20.0)])
        assert sim.get_body(7).pos == Vector2(10.0, 20.0)
        assert sim.get_body(7).mass == 2.0

    def test_duplicate_ids_rejected(self):
        """Ids must be unique within a simulation."""
        with pytest.raises(InvalidBodyError, match="duplicates"):
            Simulation(bodies=[Body(1, (0, 0)), Body(1, (5, 5))])

    def test_unknown_body(self):
        """Looking up a missing id raises."""
        sim = Simulation(bodies=create_symmetric_pair())
        with pytest.raises(InvalidBodyError, match="No body with id 9"):
            sim.get_body(9)


# =============================================================================
# Running
# =============================================================================


class TestSimulationRun:
    """Tests for run(), events and external input."""

    def test_run_fires_events(self):
        """start and end fire once, tick once per step."""
        events = []
        sim = Simulation(
            bodies=create_symmetric_pair(),
            on_start=lambda e: events.append(("start", e["step"])),
            on_tick=lambda e: events.append(("tick", e["step"])),
            on_end=lambda e: events.append(("end", e["step"])),
        )
        sim.run(steps=3)

        assert events == [("start", 0), ("tick", 1), ("tick", 2), ("tick", 3), ("end", 3)]
        assert sim.step_count == 3

    def test_on_registers_by_name(self):
        """Callbacks can be registered with a string event name."""
        ticks = []
        sim = Simulation(bodies=create_symmetric_pair())
        sim.on("tick", lambda e: ticks.append(e["state"]))
        sim.run(steps=2)
        assert ticks == [SimulationState.IDLE, SimulationState.IDLE]

    def test_stop_from_tick(self):
        """stop() ends a run after the current step."""
        sim = Simulation(bodies=create_symmetric_pair())

        def on_tick(event):
            if event["step"] == 2:
                sim.stop()

        sim.on(EventType.tick, on_tick)
        sim.run(steps=10)
        assert sim.step_count == 2

    def test_pointer_body_follows_input(self):
        """The fixed pointer body stays where it was put."""
        sim = Simulation(bodies=reference_bodies())
        for x in [100.0, 300.0, 700.0]:
            sim.move_body(POINTER_BODY_ID, x, 600.0)
            sim.step()
            assert sim.get_body(POINTER_BODY_ID).pos == Vector2(x, 600.0)

        assert sim.get_body(0).pos != Vector2(200.0, 220.0)

    def test_coincident_bodies_at_depth_limit(self):
        """The deepest allowed tree still completes a step."""
        sim = Simulation(
            bodies=[Body(0, (30, 30)), Body(1, (30, 30))],
            config=SimulationConfig(max_depth=MAX_TREE_DEPTH),
        )
        with pytest.warns(CoincidentBodiesWarning):
            sim.step()

        assert sim.last_tree.depth == MAX_TREE_DEPTH
        assert sim.state is SimulationState.IDLE
        assert sim.get_body(0).pos == Vector2(30.0, 30.0)

    def test_move_body_rejects_non_finite(self):
        """A NaN pointer position never reaches the tree."""
        sim = Simulation(bodies=reference_bodies())
        with pytest.raises(InvalidBodyError, match="non-finite"):
            sim.move_body(POINTER_BODY_ID, float("nan"), 100.0)
        assert sim.get_body(POINTER_BODY_ID).pos == Vector2(500.0, 400.0)

    def test_state_persists_across_steps(self):
        """Velocity accumulates over steps instead of resetting."""
        sim = Simulation(bodies=create_symmetric_pair(mass=10.0), theta=0.0)
        sim.run(steps=5)
        # five steps of (roughly) the same pull
        assert sim.bodies[0].vel.x > 4 * 10.0 * 10.0 / 200.0**2

    def test_exact_mode_matches_theta_zero(self):
        """Direct summation and theta=0 traversal agree."""
        tree_sim = Simulation(bodies=random_bodies(25, random_seed=1), theta=0.0)
        exact_sim = Simulation(bodies=random_bodies(25, random_seed=1), use_barnes_hut=False)

        tree_sim.run(steps=3)
        exact_sim.run(steps=3)

        np.testing.assert_allclose(tree_sim.positions(), exact_sim.positions(), atol=1e-9)

    def test_deterministic(self):
        """Same input, same output."""
        first = Simulation(bodies=random_bodies(40, random_seed=9)).run(steps=5)
        second = Simulation(bodies=random_bodies(40, random_seed=9)).run(steps=5)
        assert np.array_equal(first.positions(), second.positions())

    def test_bodies_stay_in_domain(self):
        """Wrap-around keeps every body inside the domain."""
        sim = Simulation(bodies=random_bodies(30, random_seed=2), vel_limit=50.0, acc_limit=10.0)
        sim.run(steps=20)
        pos = sim.positions()
        assert np.all(pos[:, 0] >= 0) and np.all(pos[:, 0] <= 1000)
        assert np.all(pos[:, 1] >= 0) and np.all(pos[:, 1] <= 800)


# =============================================================================
# Outbound
# =============================================================================


class TestSimulationOutput:
    """Tests for display-facing read-only output."""

    def test_snapshot(self):
        """Snapshot lists id, position and mass."""
        sim = Simulation(bodies=create_symmetric_pair())
        assert sim.snapshot() == [
            {"id": 0, "x": 400.0, "y": 400.0, "mass": 10.0},
            {"id": 1, "x": 600.0, "y": 400.0, "mass": 10.0},
        ]

    def test_positions_and_masses(self):
        """Array views follow body order."""
        sim = Simulation(bodies=create_symmetric_pair())
        assert sim.positions().shape == (2, 2)
        assert sim.masses().tolist() == [10.0, 10.0]
        assert Simulation().positions().shape == (0, 2)

    def test_tree_snapshot(self):
        """Tree records describe the most recently built tree."""
        sim = Simulation(bodies=reference_bodies())
        assert sim.tree_snapshot() == []

        sim.step()
        records = sim.tree_snapshot()
        root = records[0]
        assert root["top_left"] == (0.0, 0.0)
        assert root["bottom_right"] == (1000.0, 800.0)
        assert root["depth"] == 0
        assert root["mass"] == pytest.approx(130.0)
        assert len(records) == sim.last_tree.node_count
