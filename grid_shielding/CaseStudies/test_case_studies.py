"""Tests for the bundled case studies."""

import random

import numpy as np
import pytest

from grid_shielding.CaseStudies import (
    CASE_STUDIES,
    BOUNCING_BALL,
    OIL_PUMP,
    CRUISE_CONTROL,
    get_case_study,
    build_simulation_model,
    make_initialized_grid,
)
from grid_shielding.CaseStudies.BouncingBall import BBAction, BBMechanics
from grid_shielding.CaseStudies.OilPump import PumpStatus, OPMechanics
from grid_shielding.CaseStudies.CruiseControl import CCAction, CCMechanics
from grid_shielding.Reachability import get_barbaric_reachability_function
from grid_shielding.Synthesis import compute_transitions, shield_step, make_shield


def test_registry():
    assert set(CASE_STUDIES) == {"bouncing_ball", "oil_pump", "cruise_control"}
    assert get_case_study("oil_pump") is OIL_PUMP
    with pytest.raises(ValueError):
        get_case_study("pendulum")


class TestBouncingBall:
    def test_free_fall(self):
        m = BBMechanics()
        v, p = BOUNCING_BALL.simulate_point(m, [0.0, 10.0], BBAction.nohit, [0.9, 1.0])
        assert v == pytest.approx(-0.981)
        assert p == pytest.approx(10.0 - 0.04905)

    def test_hit_pushes_ball_down(self):
        m = BBMechanics()
        v, _ = BOUNCING_BALL.simulate_point(m, [5.0, 8.0], BBAction.hit, [0.9, 1.0])
        assert v == pytest.approx(-9.0 - 0.981)

    def test_hit_below_hit_height_does_nothing(self):
        m = BBMechanics()
        hit = BOUNCING_BALL.simulate_point(m, [5.0, 2.0], BBAction.hit, [0.9, 1.0])
        nohit = BOUNCING_BALL.simulate_point(m, [5.0, 2.0], BBAction.nohit, [0.9, 1.0])
        assert np.allclose(hit, nohit)

    def test_bounce_reflects_velocity(self):
        m = BBMechanics()
        v, p = BOUNCING_BALL.simulate_point(m, [-10.0, 0.5], BBAction.nohit, [0.9, 1.0])
        assert v > 0
        assert p >= 0

    def test_slow_ball_comes_to_rest(self):
        m = BBMechanics()
        state = BOUNCING_BALL.simulate_point(m, [-0.5, 0.01], BBAction.nohit, [0.9, 1.0])
        assert np.array_equal(state, [0.0, 0.0])
        assert not BOUNCING_BALL.is_safe(m, state)

    def test_coarse_shield_is_a_fixed_point(self):
        m = BBMechanics()
        grid = make_initialized_grid(BOUNCING_BALL, m, [1.0, 1.0], samples_per_axis=2)
        model = build_simulation_model(BOUNCING_BALL, m, grid, samples_per_axis=2)
        R = get_barbaric_reachability_function(model)
        result = make_shield(R, BBAction, grid)
        assert result.complete
        shield = result.shield()
        transitions = compute_transitions(R, BBAction, shield)
        assert shield_step(transitions, shield) == shield
        # The ball at rest on the ground can never be saved.
        assert shield.get_value(shield.cell_of([0.0, 0.0])).actions == 0


class TestOilPump:
    def test_switch_on_starts_latency(self):
        m = OPMechanics()
        t, v, p, l = OIL_PUMP.simulate_point(m, [0.0, 10.0, 0.0, 0.0], PumpStatus.on, [0.0])
        assert p == 1.0
        assert l == pytest.approx(m.latency - m.time_step)
        assert v == pytest.approx(10.0 + m.inflow * m.time_step)
        assert t == pytest.approx(m.time_step)

    def test_switch_ignored_during_latency(self):
        m = OPMechanics()
        _, _, p, _ = OIL_PUMP.simulate_point(m, [0.0, 10.0, 1.0, 1.0], PumpStatus.off, [0.0])
        assert p == 1.0

    def test_consumption_fluctuates(self):
        m = OPMechanics()
        _, v, _, _ = OIL_PUMP.simulate_point(m, [10.0, 10.0, 0.0, 0.0], PumpStatus.off, [0.1])
        assert v == pytest.approx(10.0 - 2.6 * m.time_step)

    def test_time_wraps(self):
        m = OPMechanics()
        t, _, _, _ = OIL_PUMP.simulate_point(m, [19.9, 10.0, 0.0, 0.0], PumpStatus.off, [0.0])
        assert t == pytest.approx(0.1)

    def test_grid_layout(self):
        m = OPMechanics()
        grid = OIL_PUMP.make_grid(m, (0.5, 0.5, 0.5))
        assert grid.dimensionality == 4
        assert grid.size[2] == 2
        assert grid.bounds.lower[3] == -0.5

    def test_latency_held_at_grid_edge(self):
        m = OPMechanics()
        grid = OIL_PUMP.make_grid(m, (1.0, 1.0, 1.0))
        state = OIL_PUMP.clamp_outcome(m, grid, [0.0, 10.0, 0.0, -5.0])
        assert state[3] == grid.bounds.lower[3]

    def test_coarse_shield_is_complete(self):
        m = OPMechanics()
        grid = make_initialized_grid(OIL_PUMP, m, (2.0, 2.0, 2.0), samples_per_axis=2)
        model = build_simulation_model(OIL_PUMP, m, grid, samples_per_axis=2)
        result = make_shield(get_barbaric_reachability_function(model), PumpStatus, grid)
        assert result.complete
        assert result.shield().classified.all()


class TestCruiseControl:
    def test_distance_update(self):
        m = CCMechanics()
        v_ego, v_front, distance = CRUISE_CONTROL.simulate_point(
            m, [2.0, 0.0, 20.0], CCAction.forwards, [0.0]
        )
        assert v_ego == 4.0
        assert v_front == 0.0
        assert distance == pytest.approx(20.0 - 2.0 - 1.0)

    def test_distance_capped_at_sensor_range(self):
        m = CCMechanics()
        _, _, distance = CRUISE_CONTROL.simulate_point(
            m, [0.0, 20.0, 199.0], CCAction.neutral, [2.0]
        )
        assert distance == m.distance_max

    def test_grid_contains_maximum(self):
        m = CCMechanics()
        grid = CRUISE_CONTROL.make_grid(m, 2.0)
        assert [m.v_ego_max, m.v_front_max, m.distance_max] in grid

    def test_random_agent_uses_every_action(self):
        agent = CRUISE_CONTROL.random_agent(CCMechanics(), random.Random(0))
        assert {agent(None) for _ in range(100)} == set(CCAction)

    def test_disturbance_samples_include_zero(self):
        m = CCMechanics()
        grid = CRUISE_CONTROL.make_grid(m, 5.0)
        model = build_simulation_model(CRUISE_CONTROL, m, grid, samples_per_axis=2)
        assert sorted(float(d[0]) for d in model.disturbance_samples()) == [-2.0, 0.0, 2.0]
