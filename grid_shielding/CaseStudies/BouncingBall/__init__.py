"""Bouncing ball case study."""

from . import bouncing_ball
from .bouncing_ball import BBAction, BBMechanics
from ..case_study import CaseStudy

BOUNCING_BALL = CaseStudy(
    name="bouncing_ball",
    action_type=BBAction,
    make_mechanics=BBMechanics,
    simulate_point=bouncing_ball.simulate_point,
    is_safe=bouncing_ball.is_safe,
    make_grid=bouncing_ball.make_grid,
    randomness_space=bouncing_ball.randomness_space,
    samples_per_axis=bouncing_ball.samples_per_axis,
    clamp_outcome=bouncing_ball.clamp_outcome,
    initial_state=bouncing_ball.initial_state,
    random_agent=bouncing_ball.random_agent,
)

__all__ = ['BBAction', 'BBMechanics', 'BOUNCING_BALL']
