"""Base configuration classes for experiments."""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from ...CaseStudies import get_case_study


@dataclass
class SynthesisExperimentConfig:
    """Configuration for shield synthesis experiments."""

    # Case study
    case_study_name: str
    granularity: Any

    # Synthesis parameters
    samples_per_axis: int
    seed: int

    # Safety check
    safety_check_runs: int
    safety_check_steps: int

    # Output
    shield_path: str
    c_library_path: str
    results_path: str
    figure_path: Optional[str] = None

    # None uses the case study's default
    samples_per_random_axis: Optional[int] = None
    # None runs to the fixed point
    max_steps: Optional[int] = None
    accept_incomplete: bool = False

    # Load this shield instead of synthesising one, if the file exists
    existing_shield_path: Optional[str] = None

    # Optional mechanics kwargs
    mechanics_kwargs: dict = field(default_factory=dict)

    def __post_init__(self):
        get_case_study(self.case_study_name)
        if self.samples_per_axis < 1:
            raise ValueError(f"samples_per_axis must be >= 1, got {self.samples_per_axis}")
        if self.samples_per_random_axis is not None and self.samples_per_random_axis < 1:
            raise ValueError(f"samples_per_random_axis must be >= 1, got {self.samples_per_random_axis}")
        if self.max_steps is not None and self.max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {self.max_steps}")
        if self.safety_check_runs < 0 or self.safety_check_steps < 0:
            raise ValueError("safety check runs and steps must be non-negative")

    def for_testing(self) -> "SynthesisExperimentConfig":
        """Copy with a tiny safety check, used by ``--test``."""
        return replace(
            self,
            safety_check_runs=min(self.safety_check_runs, 10),
            safety_check_steps=min(self.safety_check_steps, 50),
        )
