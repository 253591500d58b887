"""Bouncing ball that must be kept bouncing.

State is ``(v, p)``: vertical velocity and height. The ball loses energy on
every bounce (restitution drawn from ``[beta_min, beta_max]``) and comes to
rest once it bounces back slower than ``stop_velocity``. The controller can
hit the ball when it is above ``hit_height``, pushing it downwards.
Safety: the ball never comes to rest.
"""

import math
import random
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from ...Models.grid import Bounds, Grid


class BBAction(IntEnum):
    nohit = 0
    hit = 1


@dataclass
class BBMechanics:
    time_step: float = 0.1
    g: float = -9.81
    beta_min: float = 0.85
    beta_max: float = 0.97
    hit_factor_min: float = 0.9
    hit_factor_max: float = 1.0
    hit_height: float = 4.0
    hit_velocity: float = -4.0
    stop_velocity: float = 1.0
    v_min: float = -15.0
    v_max: float = 15.0
    p_min: float = 0.0
    p_max: float = 11.0


def _apply_hit(m: BBMechanics, v: float, p: float, hit_factor: float) -> float:
    if p < m.hit_height:
        return v
    if v >= 0:
        return -hit_factor * v + m.hit_velocity
    return min(v, m.hit_velocity)


def simulate_point(m: BBMechanics, state, action, disturbance) -> np.ndarray:
    """Advance ``(v, p)`` by one time step. ``disturbance`` is ``(beta, hit_factor)``."""
    v, p = float(state[0]), float(state[1])
    beta, hit_factor = float(disturbance[0]), float(disturbance[1])

    if action == BBAction.hit:
        v = _apply_hit(m, v, p, hit_factor)

    t = m.time_step
    new_p = p + v * t + 0.5 * m.g * t * t
    new_v = v + m.g * t
    if new_p > 0:
        return np.array([new_v, new_p])

    # Bounce within this step: find the impact time, reflect, continue.
    impact_time = (v + math.sqrt(v * v - 2 * m.g * max(p, 0.0))) / -m.g
    bounce_v = -beta * (v + m.g * impact_time)
    if bounce_v < m.stop_velocity:
        return np.array([0.0, 0.0])
    rest = t - impact_time
    new_p = max(bounce_v * rest + 0.5 * m.g * rest * rest, 0.0)
    new_v = bounce_v + m.g * rest
    return np.array([new_v, new_p])


def is_safe(m: BBMechanics, state) -> bool:
    v, p = state[0], state[1]
    return p > 0 or abs(v) > m.stop_velocity


def make_grid(m: BBMechanics, granularity) -> Grid:
    return Grid(granularity, [m.v_min, m.p_min], [m.v_max, m.p_max])


def randomness_space(m: BBMechanics) -> Bounds:
    return Bounds([m.beta_min, m.hit_factor_min], [m.beta_max, m.hit_factor_max])


def samples_per_axis(n: int):
    return [n, n]


def clamp_outcome(_m: BBMechanics, _grid: Grid, state):
    return state


def initial_state(_m: BBMechanics, rng: random.Random) -> np.ndarray:
    return np.array([0.0, rng.uniform(7.0, 10.0)])


def random_agent(_m: BBMechanics, rng: random.Random, hit_chance: float = 0.2):
    return lambda _state: BBAction.hit if rng.random() < hit_chance else BBAction.nohit
