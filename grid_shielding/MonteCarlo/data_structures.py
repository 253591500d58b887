"""Data structures for Monte Carlo safety checks."""

from dataclasses import dataclass, field
from typing import Any, List, Optional

import numpy as np


@dataclass
class Trace:
    """One simulated run.

    Attributes
    ----------
    states : list of np.ndarray
        Visited states, starting with the initial state
    actions : list
        Action taken before each successor state
    safe : bool
        False if some visited state violated the safety predicate;
        the trace stops at the first such state
    """
    states: List[np.ndarray] = field(default_factory=list)
    actions: List[Any] = field(default_factory=list)
    safe: bool = True

    def __len__(self) -> int:
        return len(self.actions)


@dataclass
class SafetyCheckResult:
    """Outcome of ``count_unsafe_traces``.

    Attributes
    ----------
    unsafe : int
        Number of traces that reached an unsafe state
    total : int
        Number of simulated traces
    ci_low, ci_high : float
        Clopper-Pearson bounds on the unsafe rate
    unsafe_trace : Trace, optional
        First unsafe trace encountered, kept for inspection
    """
    unsafe: int
    total: int
    ci_low: float = 0.0
    ci_high: float = 1.0
    unsafe_trace: Optional[Trace] = None

    @property
    def unsafe_rate(self) -> float:
        return self.unsafe / self.total if self.total > 0 else 0.0

    def to_dict(self) -> dict:
        return {
            "unsafe": self.unsafe,
            "total": self.total,
            "unsafe_rate": self.unsafe_rate,
            "unsafe_rate_ci_low": self.ci_low,
            "unsafe_rate_ci_high": self.ci_high,
        }

    def __str__(self) -> str:
        return (
            f"Safety check: {self.unsafe}/{self.total} unsafe traces "
            f"(rate {self.unsafe_rate:.4f}, 95% CI [{self.ci_low:.4f}, {self.ci_high:.4f}])"
        )
