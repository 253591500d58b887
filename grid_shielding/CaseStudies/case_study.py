"""Case-study records: dynamics and safety collaborators selected by name."""

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, List, Optional, Type

import numpy as np

from ..Models.grid import Bounds, Grid
from ..Reachability.barbaric import SimulationModel
from ..Reachability.supporting_points import SamplesPerAxis
from ..Synthesis.shield_synthesis import initialize


@dataclass(frozen=True)
class CaseStudy:
    """
    Bundle of the functions describing one control problem.

    name: registry key
    action_type: IntEnum of controller actions
    make_mechanics: () -> mechanics parameters
    simulate_point: (mechanics, state, action, disturbance) -> next state
    is_safe: (mechanics, state) -> bool
    make_grid: (mechanics, granularity) -> Grid covering the state space
    randomness_space: (mechanics) -> Bounds of the disturbance
    samples_per_axis: (n) -> per-axis sample counts (discrete axes get 1)
    clamp_outcome: (mechanics, grid, state) -> state, applied to simulated
        successors before they are mapped onto the grid
    initial_state: (mechanics, rng) -> starting state for simulated traces
    random_agent: (mechanics, rng) -> policy(state) -> action
    samples_per_random_axis: default disturbance samples per axis
    """
    name: str
    action_type: Type[IntEnum]
    make_mechanics: Callable[[], Any]
    simulate_point: Callable
    is_safe: Callable
    make_grid: Callable[[Any, Any], Grid]
    randomness_space: Callable[[Any], Bounds]
    samples_per_axis: Callable[[int], SamplesPerAxis]
    clamp_outcome: Callable
    initial_state: Callable[[Any, random.Random], np.ndarray]
    random_agent: Callable[[Any, random.Random], Callable]
    samples_per_random_axis: int = 2

    def sample_disturbance(self, mechanics, rng: random.Random) -> np.ndarray:
        space = self.randomness_space(mechanics)
        return np.array([rng.uniform(lo, hi) for lo, hi in zip(space.lower, space.upper)])


def no_clamp(_mechanics, _grid, state):
    return state


def build_simulation_model(
    case_study: CaseStudy,
    mechanics,
    grid: Grid,
    samples_per_axis: int,
    samples_per_random_axis: Optional[int] = None,
) -> SimulationModel:
    """Simulation model for barbaric reachability over ``grid``."""
    if samples_per_random_axis is None:
        samples_per_random_axis = case_study.samples_per_random_axis

    def simulation_function(state, action, disturbance):
        outcome = case_study.simulate_point(mechanics, state, action, disturbance)
        return case_study.clamp_outcome(mechanics, grid, outcome)

    return SimulationModel(
        simulation_function=simulation_function,
        randomness_space=case_study.randomness_space(mechanics),
        samples_per_axis=case_study.samples_per_axis(samples_per_axis),
        samples_per_random_axis=samples_per_random_axis,
    )


def make_initialized_grid(case_study: CaseStudy, mechanics, granularity, samples_per_axis: int = 2) -> Grid:
    """Grid for ``case_study`` with every cell classified by its safety predicate."""
    grid = case_study.make_grid(mechanics, granularity)
    initialize(
        grid,
        lambda state: case_study.is_safe(mechanics, state),
        case_study.action_type,
        case_study.samples_per_axis(samples_per_axis),
    )
    return grid


def uniform_random_agent(action_type: Type[IntEnum]) -> Callable[[Any, random.Random], Callable]:
    """Agent factory picking uniformly among all actions."""
    actions: List[IntEnum] = list(action_type)

    def factory(_mechanics, rng: random.Random):
        return lambda _state: rng.choice(actions)

    return factory
