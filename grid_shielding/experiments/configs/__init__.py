"""Experiment configurations. Each module exposes a module-level ``config``."""

from .base_config import SynthesisExperimentConfig

__all__ = ['SynthesisExperimentConfig']
