"""Adaptive cruise control.

The ego car follows a front car whose acceleration is chosen by the
environment. State is ``(v_ego, v_front, distance)``. Beyond
``distance_max`` the front car is out of sensor range and the distance is
held at the maximum. Safety: the distance stays above ``min_distance``.
"""

import random
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from ...Models.grid import Bounds, Grid


class CCAction(IntEnum):
    backwards = 0
    neutral = 1
    forwards = 2


@dataclass
class CCMechanics:
    time_step: float = 1.0
    v_ego_min: float = -10.0
    v_ego_max: float = 20.0
    v_front_min: float = -10.0
    v_front_max: float = 20.0
    distance_max: float = 200.0
    min_distance: float = 5.0
    acceleration: float = 2.0
    front_acceleration: float = 2.0


def ego_acceleration(m: CCMechanics, action) -> float:
    return {
        CCAction.backwards: -m.acceleration,
        CCAction.neutral: 0.0,
        CCAction.forwards: m.acceleration,
    }[CCAction(int(action))]


def simulate_point(m: CCMechanics, state, action, disturbance) -> np.ndarray:
    """Advance one time step. ``disturbance`` is the front car's acceleration."""
    v_ego, v_front, distance = (float(x) for x in state)
    a_ego = ego_acceleration(m, action)
    a_front = float(disturbance[0])
    t = m.time_step

    distance = distance + (v_front - v_ego) * t + 0.5 * (a_front - a_ego) * t * t
    v_ego = min(max(v_ego + a_ego * t, m.v_ego_min), m.v_ego_max)
    v_front = min(max(v_front + a_front * t, m.v_front_min), m.v_front_max)
    distance = min(distance, m.distance_max)
    return np.array([v_ego, v_front, distance])


def is_safe(m: CCMechanics, state) -> bool:
    return state[2] > m.min_distance


def make_grid(m: CCMechanics, granularity) -> Grid:
    # Velocities and distance are clamped to their maximum, which must lie inside the grid.
    g = np.broadcast_to(np.asarray(granularity, dtype=np.float64), (3,))
    return Grid(
        g,
        [m.v_ego_min, m.v_front_min, 0.0],
        np.array([m.v_ego_max, m.v_front_max, m.distance_max]) + g,
    )


def randomness_space(m: CCMechanics) -> Bounds:
    return Bounds([-m.front_acceleration], [m.front_acceleration])


def samples_per_axis(n: int):
    return [n, n, n]


def clamp_outcome(_m: CCMechanics, _grid: Grid, state):
    return state


def initial_state(_m: CCMechanics, _rng: random.Random) -> np.ndarray:
    return np.array([0.0, 0.0, 10.0])
