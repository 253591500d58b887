"""Oil pump case study."""

from . import oil_pump
from .oil_pump import PumpStatus, OPMechanics, consumption_rate
from ..case_study import CaseStudy

OIL_PUMP = CaseStudy(
    name="oil_pump",
    action_type=PumpStatus,
    make_mechanics=OPMechanics,
    simulate_point=oil_pump.simulate_point,
    is_safe=oil_pump.is_safe,
    make_grid=oil_pump.make_grid,
    randomness_space=oil_pump.randomness_space,
    samples_per_axis=oil_pump.samples_per_axis,
    clamp_outcome=oil_pump.clamp_outcome,
    initial_state=oil_pump.initial_state,
    random_agent=oil_pump.random_agent,
)

__all__ = ['PumpStatus', 'OPMechanics', 'consumption_rate', 'OIL_PUMP']
