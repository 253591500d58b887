"""Monte Carlo safety checks for shielded and unshielded agents.

Modules
-------
simulation
    simulate_trace, count_unsafe_traces and the shielded_agent factory
data_structures
    Trace and SafetyCheckResult dataclasses
"""

from .data_structures import Trace, SafetyCheckResult
from .simulation import simulate_trace, count_unsafe_traces, shielded_agent

__all__ = ['Trace', 'SafetyCheckResult', 'simulate_trace', 'count_unsafe_traces', 'shielded_agent']
