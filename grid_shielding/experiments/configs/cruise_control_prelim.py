"""Preliminary shield synthesis configuration for cruise control."""

from .base_config import SynthesisExperimentConfig


config = SynthesisExperimentConfig(
    case_study_name="cruise_control",
    granularity=2.0,  # Reduced for prelim
    samples_per_axis=2,
    seed=42,
    safety_check_runs=500,
    safety_check_steps=100,
    shield_path="./data/prelim/cruise_control.shield",
    c_library_path="./data/prelim/cruise_control_shield_dump.c",
    results_path="./data/prelim/cruise_control_results.json",
)
