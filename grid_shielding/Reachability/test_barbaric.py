"""Tests for supporting points and barbaric reachability."""

import numpy as np
import pytest

from grid_shielding.Models import Bounds, Grid, OUTSIDE, CollaboratorFailure
from grid_shielding.Reachability import (
    SupportingPoints,
    SimulationModel,
    possible_outcomes,
    get_barbaric_reachability_function,
)


NO_DISTURBANCE = Bounds([], [])


def shift(offset):
    """Dynamics moving every state by ``offset``, ignoring action and disturbance."""
    def simulation_function(state, _action, _disturbance):
        return state + offset
    return simulation_function


class TestSupportingPoints:
    def test_includes_both_corners(self):
        bounds = Bounds([0.0, 1.0], [1.0, 3.0])
        points = SupportingPoints(2, bounds).as_array()
        assert len(points) == 4
        assert any(np.array_equal(p, [0.0, 1.0]) for p in points)
        assert any(np.array_equal(p, [1.0, 3.0]) for p in points)

    def test_per_axis_counts(self):
        bounds = Bounds([0.0, 0.0, 0.0], [1.0, 1.0, 1.0])
        points = SupportingPoints([3, 1, 2], bounds)
        assert len(points) == 6
        assert len(list(points)) == 6
        # One sample sits on the lower corner
        assert all(p[1] == 0.0 for p in points)

    def test_invalid_counts(self):
        bounds = Bounds([0.0], [1.0])
        with pytest.raises(ValueError):
            SupportingPoints(0, bounds)
        with pytest.raises(ValueError):
            SupportingPoints([2, 2], bounds)

    def test_zero_dimensional_space_has_one_point(self):
        points = list(SupportingPoints(2, NO_DISTURBANCE))
        assert len(points) == 1
        assert points[0].shape == (0,)


class TestBarbaricReachability:
    def test_stationary_dynamics_reach_own_and_neighbouring_cell(self):
        grid = Grid(1.0, [0.0], [5.0])
        model = SimulationModel(shift(0.0), NO_DISTURBANCE, samples_per_axis=2)
        R = get_barbaric_reachability_function(model)
        cell = grid.cell_of([2.5])
        # The upper corner of a cell lies on the lower edge of the next one.
        assert R(cell, None) == {grid.cell_of([2.5]), grid.cell_of([3.5])}

    def test_leaving_grid_reaches_outside(self):
        grid = Grid(1.0, [0.0], [5.0])
        model = SimulationModel(shift(1.0), NO_DISTURBANCE, samples_per_axis=1)
        R = get_barbaric_reachability_function(model)
        assert R(grid.cell_of([4.5]), None) == {OUTSIDE}
        assert R(grid.cell_of([0.5]), None) == {grid.cell_of([1.5])}

    def test_disturbance_extremes_are_sampled(self):
        grid = Grid(1.0, [0.0], [10.0])

        def simulation_function(state, _action, disturbance):
            return state + disturbance

        model = SimulationModel(simulation_function, Bounds([-2.0], [2.0]), samples_per_axis=1)
        outcomes = possible_outcomes(model, grid.cell_of([5.0]), None)
        assert sorted(float(o[0]) for o in outcomes) == [3.0, 7.0]

    def test_action_is_passed_through(self):
        grid = Grid(1.0, [0.0], [5.0])

        def simulation_function(state, action, _disturbance):
            return state + action

        model = SimulationModel(simulation_function, NO_DISTURBANCE, samples_per_axis=1)
        R = get_barbaric_reachability_function(model)
        assert R(grid.cell_of([0.5]), 2) == {grid.cell_of([2.5])}

    def test_raising_dynamics_is_collaborator_failure(self):
        grid = Grid(1.0, [0.0], [5.0])

        def simulation_function(_state, _action, _disturbance):
            raise RuntimeError("boom")

        model = SimulationModel(simulation_function, NO_DISTURBANCE, samples_per_axis=1)
        with pytest.raises(CollaboratorFailure):
            get_barbaric_reachability_function(model)(grid.cell_of([0.5]), None)

    def test_non_finite_outcome_is_collaborator_failure(self):
        grid = Grid(1.0, [0.0], [5.0])
        model = SimulationModel(shift(np.nan), NO_DISTURBANCE, samples_per_axis=1)
        with pytest.raises(CollaboratorFailure):
            possible_outcomes(model, grid.cell_of([0.5]), None)

    def test_wrong_shape_is_collaborator_failure(self):
        grid = Grid(1.0, [0.0], [5.0])

        def simulation_function(state, _action, _disturbance):
            return np.append(state, 0.0)

        model = SimulationModel(simulation_function, NO_DISTURBANCE, samples_per_axis=1)
        with pytest.raises(CollaboratorFailure):
            possible_outcomes(model, grid.cell_of([0.5]), None)
