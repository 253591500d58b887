"""Sampling-based reachability analysis over grids."""

from .supporting_points import SupportingPoints
from .barbaric import SimulationModel, possible_outcomes, get_barbaric_reachability_function

__all__ = [
    'SupportingPoints',
    'SimulationModel', 'possible_outcomes', 'get_barbaric_reachability_function',
]
