"""Cruise control case study."""

from . import cruise_control
from .cruise_control import CCAction, CCMechanics
from ..case_study import CaseStudy, uniform_random_agent

CRUISE_CONTROL = CaseStudy(
    name="cruise_control",
    action_type=CCAction,
    make_mechanics=CCMechanics,
    simulate_point=cruise_control.simulate_point,
    is_safe=cruise_control.is_safe,
    make_grid=cruise_control.make_grid,
    randomness_space=cruise_control.randomness_space,
    samples_per_axis=cruise_control.samples_per_axis,
    clamp_outcome=cruise_control.clamp_outcome,
    initial_state=cruise_control.initial_state,
    random_agent=uniform_random_agent(CCAction),
    # front car accelerates by -2, 0 or +2
    samples_per_random_axis=3,
)

__all__ = ['CCAction', 'CCMechanics', 'CRUISE_CONTROL']
