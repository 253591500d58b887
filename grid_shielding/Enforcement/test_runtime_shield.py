"""Tests for runtime enforcement of a shield."""

import random
from enum import IntEnum

import numpy as np
import pytest

from grid_shielding.Models import Grid, InvalidState, NoSafeActionKnown, actions_to_int
from grid_shielding.Enforcement import RuntimeGridShield, shielded, pass_through


class Action(IntEnum):
    action1 = 0
    action2 = 1
    action3 = 2


def two_cell_shield():
    """Cell A = [0, 1) allows action1 only, cell B = [1, 2) allows nothing."""
    grid = Grid(1.0, [0.0], [2.0])
    grid.set_value(grid.cell_of([0.5]), actions_to_int([Action.action1]))
    grid.set_value(grid.cell_of([1.5]), 0)
    return grid


class TestEnforce:
    def test_unsafe_proposal_replaced(self):
        shield = RuntimeGridShield(two_cell_shield(), Action)
        assert shield.enforce([0.5], Action.action2) == Action.action1

    def test_safe_proposal_kept(self):
        shield = RuntimeGridShield(two_cell_shield(), Action)
        assert shield.enforce([0.5], Action.action1) == Action.action1
        assert shield.interventions == 0

    def test_no_safe_action_known(self):
        shield = RuntimeGridShield(two_cell_shield(), Action)
        with pytest.raises(NoSafeActionKnown):
            shield.enforce([1.5], Action.action1)
        assert shield.no_safe_action_count == 1

    def test_fallback_used_when_nothing_allowed(self):
        shield = RuntimeGridShield(two_cell_shield(), Action, fallback=pass_through)
        assert shield.enforce([1.5], Action.action3) == Action.action3

    def test_out_of_bounds_state_is_clamped(self):
        shield = RuntimeGridShield(two_cell_shield(), Action)
        assert shield.allowed_actions([-3.0]) == (Action.action1,)
        with pytest.raises(NoSafeActionKnown):
            shield.enforce([7.0], Action.action1)

    def test_non_finite_state(self):
        shield = RuntimeGridShield(two_cell_shield(), Action)
        with pytest.raises(InvalidState):
            shield.enforce([np.nan], Action.action1)
        assert shield.get_metrics()["total_decisions"] == 0

    def test_unclassified_cell_allows_nothing(self):
        grid = Grid(1.0, [0.0], [2.0])
        grid.array[...] = 0b111
        grid.classified[1] = True
        shield = RuntimeGridShield(grid, Action)
        assert shield.allowed_actions([0.5]) == ()
        assert shield.allowed_actions([1.5]) == tuple(Action)


class TestSelection:
    def wide_shield(self):
        grid = Grid(1.0, [0.0], [1.0])
        grid.set_value(grid.cell_of([0.5]), actions_to_int([Action.action2, Action.action3]))
        return grid

    def test_first_takes_lowest_allowed(self):
        shield = RuntimeGridShield(self.wide_shield(), Action, selection="first")
        assert shield.enforce([0.5], Action.action1) == Action.action2

    def test_random_stays_within_allowed(self):
        shield = RuntimeGridShield(self.wide_shield(), Action, selection="random", rng=random.Random(3))
        picks = {shield.enforce([0.5], Action.action1) for _ in range(50)}
        assert picks == {Action.action2, Action.action3}

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            RuntimeGridShield(self.wide_shield(), Action, selection="best")


class TestMetrics:
    def test_counters_and_restart(self):
        shield = RuntimeGridShield(two_cell_shield(), Action, fallback=pass_through)
        shield.enforce([0.5], Action.action1)
        shield.enforce([0.5], Action.action2)
        shield.enforce([1.5], Action.action2)
        metrics = shield.get_metrics()
        assert metrics["total_decisions"] == 3
        assert metrics["interventions"] == 1
        assert metrics["no_safe_action_count"] == 1
        assert metrics["intervention_rate"] == pytest.approx(1 / 3)

        shield.restart()
        assert shield.get_metrics()["total_decisions"] == 0

    def test_shielded_policy(self):
        shield = RuntimeGridShield(two_cell_shield(), Action)
        policy = shielded(shield, lambda _state: Action.action3)
        assert policy([0.2]) == Action.action1
