"""Tests for Grid, Bounds, cell lookup and action bitmasks."""

from enum import IntEnum

import numpy as np
import pytest

from grid_shielding.Models import (
    Bounds,
    Grid,
    Partition,
    OUTSIDE,
    UNDEFINED,
    UNCLASSIFIED,
    OUTSIDE_VALUE,
    CellValue,
    InvalidState,
    clamp_state,
    actions_to_int,
    int_to_actions,
    all_actions_mask,
    action_count,
)


class Pump(IntEnum):
    off = 0
    on = 1


class TestGridConstruction:
    """Size and bound snapping."""

    def test_size_from_granularity(self):
        grid = Grid(0.1, [0.0], [1.0])
        assert grid.size == (10,)
        assert len(grid) == 10

    def test_floating_point_width_does_not_add_a_cell(self):
        grid = Grid(0.1, [4.9], [25.1])
        assert grid.size == (202,)

    def test_upper_bound_snapped_to_whole_cells(self):
        grid = Grid(0.3, [0.0], [1.0])
        assert grid.size == (4,)
        assert grid.bounds.upper[0] == pytest.approx(1.2)

    def test_per_axis_granularity(self):
        grid = Grid([1.0, 0.5], [0.0, 0.0], [3.0, 2.0])
        assert grid.size == (3, 4)
        assert grid.dimensionality == 2

    def test_rejects_bad_arguments(self):
        with pytest.raises(ValueError):
            Grid(0.0, [0.0], [1.0])
        with pytest.raises(ValueError):
            Grid(0.1, [1.0], [0.0])
        with pytest.raises(ValueError):
            Grid(0.1, [0.0, 0.0], [1.0])
        with pytest.raises(ValueError):
            Grid(0.1, [0.0], [np.inf])

    def test_new_grid_is_unclassified(self):
        grid = Grid(1.0, [0.0, 0.0], [2.0, 2.0])
        assert all(cell.value == UNCLASSIFIED for cell in grid)


class TestCellLookup:
    """Coordinates to cells and back."""

    def test_in_bounds_point_is_inside_its_cell(self):
        grid = Grid([0.5, 0.25], [-1.0, 0.0], [1.0, 1.0])
        rng = np.random.default_rng(0)
        for _ in range(200):
            point = rng.uniform(grid.bounds.lower, grid.bounds.upper)
            cell = grid.cell_of(point)
            assert isinstance(cell, Partition)
            assert point in cell.bounds

    def test_lower_edge_belongs_to_upper_cell(self):
        grid = Grid(1.0, [0.0], [3.0])
        assert grid.cell_of([1.0]).indices == (1,)
        assert grid.cell_of([0.0]).indices == (0,)

    def test_cell_of_is_the_only_lookup(self):
        assert "box" not in vars(Grid)

    def test_out_of_bounds_is_outside(self):
        grid = Grid(1.0, [0.0, 0.0], [2.0, 2.0])
        assert grid.cell_of([2.0, 0.5]) is OUTSIDE
        assert grid.cell_of([-0.1, 0.5]) is OUTSIDE
        assert grid.get_value(OUTSIDE) == OUTSIDE_VALUE

    def test_non_finite_is_undefined(self):
        grid = Grid(1.0, [0.0], [2.0])
        assert grid.cell_of([np.nan]) is UNDEFINED
        assert grid.get_value(UNDEFINED) == UNCLASSIFIED

    def test_wrong_dimensionality(self):
        grid = Grid(1.0, [0.0, 0.0], [2.0, 2.0])
        with pytest.raises(ValueError):
            grid.cell_of([0.5])

    def test_row_major_flat_index(self):
        grid = Grid(1.0, [0.0, 0.0], [2.0, 3.0])
        flat = [cell.flat_index for cell in grid]
        assert flat == list(range(6))
        assert grid.partition_at(4).indices == (1, 1)

    def test_cell_bounds(self):
        grid = Grid(0.5, [1.0], [3.0])
        bounds = grid.cell_of([1.7]).bounds
        assert bounds.lower[0] == pytest.approx(1.5)
        assert bounds.upper[0] == pytest.approx(2.0)


class TestMetadata:
    def test_set_and_get_value(self):
        grid = Grid(1.0, [0.0], [3.0])
        cell = grid.cell_of([1.5])
        grid.set_value(cell, 0b10)
        assert grid.get_value(cell) == CellValue.classified(0b10)
        assert not grid.get_value(cell).is_unsafe
        grid.set_value(cell, 0)
        assert grid.get_value(cell).is_unsafe

    def test_mask_must_fit(self):
        grid = Grid(1.0, [0.0], [3.0])
        with pytest.raises(ValueError):
            grid.set_value(grid.cell_of([0.5]), 256)
        with pytest.raises(ValueError):
            grid.set_value(OUTSIDE, 1)

    def test_initialize_classifies_every_cell(self):
        grid = Grid(1.0, [0.0], [4.0])
        grid.initialize(lambda bounds: 3 if bounds.lower[0] >= 1 else 0)
        assert grid.classified.all()
        assert grid.array.tolist() == [0, 3, 3, 3]

    def test_copy_is_independent(self):
        grid = Grid(1.0, [0.0], [2.0])
        clone = grid.copy()
        assert clone == grid
        clone.set_value(clone.cell_of([0.5]), 1)
        assert clone != grid


class TestClampState:
    def test_clamps_each_axis(self):
        grid = Grid(1.0, [0.0, 0.0], [2.0, 2.0])
        clamped = clamp_state(grid, [-5.0, 7.0])
        assert clamped[0] == 0.0
        assert clamped[1] < 2.0
        assert isinstance(grid.cell_of(clamped), Partition)

    def test_non_finite_raises(self):
        grid = Grid(1.0, [0.0], [2.0])
        with pytest.raises(InvalidState):
            clamp_state(grid, [np.nan])


class TestActions:
    def test_encode_decode(self):
        assert actions_to_int([Pump.on]) == 0b10
        assert actions_to_int([]) == 0
        assert int_to_actions(Pump, 0b11) == [Pump.off, Pump.on]
        assert all_actions_mask(Pump) == 0b11
        assert action_count(Pump) == 2

    def test_negative_values_rejected(self):
        class Bad(IntEnum):
            a = -1

        with pytest.raises(ValueError):
            action_count(Bad)
