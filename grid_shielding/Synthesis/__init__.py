"""Fixed-point synthesis of grid shields."""

from .shield_synthesis import (
    standard_initialization_function,
    initialize,
    Transitions,
    compute_transitions,
    shield_step,
    SynthesisResult,
    make_shield,
)

__all__ = [
    'standard_initialization_function', 'initialize',
    'Transitions', 'compute_transitions', 'shield_step',
    'SynthesisResult', 'make_shield',
]
