"""Sampling-based ("barbaric") reachability over a grid.

The successors of a cell under an action are found by simulating a lattice
of supporting points in the cell, combined with samples of the disturbance
space, for one step. The union of the cells the outcomes land in is an
over-approximation of what is actually reachable, as only finitely many
points are tried. More samples per axis tighten it at proportional cost.
"""

from dataclasses import dataclass
from typing import Callable, List, Set

import numpy as np

from ..Models.grid import Bounds, Cell, Partition
from ..Models.errors import CollaboratorFailure
from .supporting_points import SupportingPoints, SamplesPerAxis


@dataclass
class SimulationModel:
    """
    One-step dynamics together with the sampling parameters used to explore them.

    simulation_function: (state, action, disturbance) -> next state
    randomness_space: box the disturbance is drawn from (may be zero-dimensional)
    samples_per_axis: supporting points per state axis
    samples_per_random_axis: samples per disturbance axis; with the default of 2
        only the extremes of each disturbance axis are tried
    """
    simulation_function: Callable
    randomness_space: Bounds
    samples_per_axis: SamplesPerAxis
    samples_per_random_axis: SamplesPerAxis = 2

    def disturbance_samples(self) -> List[np.ndarray]:
        return list(SupportingPoints(self.samples_per_random_axis, self.randomness_space))


def _simulate(model: SimulationModel, state: np.ndarray, action, disturbance: np.ndarray) -> np.ndarray:
    try:
        outcome = np.asarray(
            model.simulation_function(state, action, disturbance), dtype=np.float64
        )
    except Exception as e:
        raise CollaboratorFailure(
            f"Simulation function failed for state {state.tolist()}, action {action!r}, "
            f"disturbance {disturbance.tolist()}"
        ) from e

    if outcome.shape != state.shape:
        raise CollaboratorFailure(
            f"Simulation function returned shape {outcome.shape}, expected {state.shape}"
        )
    if not np.all(np.isfinite(outcome)):
        raise CollaboratorFailure(
            f"Simulation function returned non-finite state {outcome.tolist()} "
            f"from {state.tolist()} under {action!r}"
        )
    return outcome


def possible_outcomes(model: SimulationModel, partition: Partition, action) -> List[np.ndarray]:
    """Every successor state of ``partition``'s supporting points under ``action``."""
    disturbances = model.disturbance_samples()
    outcomes = []
    for point in SupportingPoints(model.samples_per_axis, partition.bounds):
        for disturbance in disturbances:
            outcomes.append(_simulate(model, point, action, disturbance))
    return outcomes


def get_barbaric_reachability_function(model: SimulationModel) -> Callable[[Partition, object], Set[Cell]]:
    """
    Build ``R(partition, action) -> set of cells``.

    The set contains the ``OUTSIDE`` sentinel whenever an outcome leaves the grid.
    """
    def reachability_function(partition: Partition, action) -> Set[Cell]:
        grid = partition.grid
        return {grid.cell_of(state) for state in possible_outcomes(model, partition, action)}

    return reachability_function
