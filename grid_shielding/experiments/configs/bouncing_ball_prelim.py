"""Preliminary shield synthesis configuration for the bouncing ball."""

from .base_config import SynthesisExperimentConfig


config = SynthesisExperimentConfig(
    case_study_name="bouncing_ball",
    granularity=[0.1, 0.1],  # Coarser than the published 0.02
    samples_per_axis=3,
    seed=42,
    safety_check_runs=1000,
    safety_check_steps=1200,  # 120 s at dt=0.1
    shield_path="./data/prelim/bouncing_ball.shield",
    c_library_path="./data/prelim/bouncing_ball_shield_dump.c",
    results_path="./data/prelim/bouncing_ball_results.json",
    figure_path="./data/prelim/bouncing_ball_shield.png",
)
