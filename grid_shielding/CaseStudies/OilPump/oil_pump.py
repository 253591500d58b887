"""Oil pump control problem (HYDAC industrial case).

A machine draws oil from an accumulator following a periodic 20 s
consumption profile; a pump adds oil at a fixed rate while it is on. The
pump may only switch state after a latency. Consumption fluctuates by up to
``fluctuation`` whenever it is non-zero.

State is ``(t, v, p, l)``: time in the consumption cycle, oil volume, pump
status (0 or 1) and the latency timer. Safety: ``v_min <= v <= v_max``.
"""

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple

import numpy as np

from ...Models.grid import Bounds, Grid


class PumpStatus(IntEnum):
    off = 0
    on = 1


@dataclass
class OPMechanics:
    period: float = 20.0
    time_step: float = 0.2
    v_min: float = 4.9
    v_max: float = 25.1
    inflow: float = 2.2
    fluctuation: float = 0.1
    latency: float = 2.0
    # (start, end, rate in l/s) over one cycle; zero elsewhere
    consumption_profile: Tuple[Tuple[float, float, float], ...] = (
        (2.0, 4.0, 1.2),
        (8.0, 10.0, 1.2),
        (10.0, 12.0, 2.5),
        (14.0, 16.0, 1.7),
        (16.0, 18.0, 0.5),
    )


def consumption_rate(m: OPMechanics, t: float) -> float:
    for start, end, rate in m.consumption_profile:
        if start <= t < end:
            return rate
    return 0.0


def simulate_point(m: OPMechanics, state, action, disturbance) -> np.ndarray:
    """Advance ``(t, v, p, l)`` by one time step. ``disturbance`` is the consumption fluctuation."""
    t, v, p, l = (float(x) for x in state)
    fluctuation = float(disturbance[0])

    if int(action) != int(round(p)) and l <= 0:
        p = float(int(action))
        l = m.latency

    rate = consumption_rate(m, t)
    if rate > 0:
        rate += fluctuation

    v = v + (p * m.inflow - rate) * m.time_step
    t = (t + m.time_step) % m.period
    l = l - m.time_step
    return np.array([t, v, p, l])


def is_safe(m: OPMechanics, state) -> bool:
    return m.v_min <= state[1] <= m.v_max


def make_grid(m: OPMechanics, granularity) -> Grid:
    """``granularity`` is ``(t, v, l)``; the pump axis always has granularity 1."""
    g_t, g_v, g_l = granularity
    return Grid(
        [g_t, g_v, 1.0, g_l],
        [0.0, np.floor(m.v_min - g_v), 0.0, -g_l],
        [m.period, np.ceil(m.v_max + g_v), 2.0, m.latency + g_l],
    )


def randomness_space(m: OPMechanics) -> Bounds:
    return Bounds([-m.fluctuation], [m.fluctuation])


def samples_per_axis(n: int):
    # p only takes the values 0 and 1
    return [n, n, 1, n]


def clamp_outcome(_m: OPMechanics, grid: Grid, state):
    """The latency timer keeps counting down below zero; hold it at the grid's lower edge."""
    state = np.array(state, dtype=np.float64)
    state[3] = max(state[3], grid.bounds.lower[3])
    return state


def initial_state(_m: OPMechanics, _rng: random.Random) -> np.ndarray:
    return np.array([0.0, 10.0, float(PumpStatus.on), 0.0])


def random_agent(_m: OPMechanics, rng: random.Random, off_chance: float = 0.3):
    return lambda _state: PumpStatus.off if rng.random() < off_chance else PumpStatus.on
