"""Case studies: dynamics and safety predicates plugged into the shielding engine.

Modules:
- BouncingBall: keep a ball bouncing by hitting it
- OilPump: keep an accumulator's oil volume within bounds
- CruiseControl: keep a safe distance to a front car
"""

from .case_study import (
    CaseStudy,
    build_simulation_model,
    make_initialized_grid,
    uniform_random_agent,
)
from .BouncingBall import BOUNCING_BALL
from .OilPump import OIL_PUMP
from .CruiseControl import CRUISE_CONTROL

CASE_STUDIES = {
    case_study.name: case_study
    for case_study in (BOUNCING_BALL, OIL_PUMP, CRUISE_CONTROL)
}


def get_case_study(name: str) -> CaseStudy:
    try:
        return CASE_STUDIES[name]
    except KeyError:
        raise ValueError(f"Unknown case study {name!r}, expected one of {sorted(CASE_STUDIES)}") from None


__all__ = [
    'CaseStudy', 'build_simulation_model', 'make_initialized_grid', 'uniform_random_agent',
    'BOUNCING_BALL', 'OIL_PUMP', 'CRUISE_CONTROL', 'CASE_STUDIES', 'get_case_study',
]
