"""
Grid Shielding Library

A library for synthesising safety shields for controllers of continuous
systems by partitioning the state space into a grid and pruning unsafe
actions until a fixed point is reached.

Modules:
- Models: Core data structures (Grid, Bounds, action bitmasks, errors)
- Reachability: Sampling-based (barbaric) reachability over grid cells
- Synthesis: Fixed-point shield synthesis
- Serialization: Binary shield files and C library export
- Enforcement: Runtime correction of proposed actions
- CaseStudies: Example systems (BouncingBall, OilPump, CruiseControl)
- MonteCarlo: Simulated safety checks
- Evaluation: Shield statistics and plots
"""

from . import Models
from . import Reachability
from . import Synthesis
from . import Serialization
from . import Enforcement
from . import CaseStudies
from . import MonteCarlo
from . import Evaluation

__all__ = [
    'Models', 'Reachability', 'Synthesis', 'Serialization', 'Enforcement',
    'CaseStudies', 'MonteCarlo', 'Evaluation',
]
__version__ = '0.1.0'
