"""Experiment runners, configurations and result I/O."""

from .experiment_io import build_metadata, save_experiment_results

__all__ = ['build_metadata', 'save_experiment_results']
