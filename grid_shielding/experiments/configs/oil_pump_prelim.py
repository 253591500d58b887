"""Preliminary shield synthesis configuration for the oil pump."""

from .base_config import SynthesisExperimentConfig


config = SynthesisExperimentConfig(
    case_study_name="oil_pump",
    granularity=[0.5, 0.5, 1.0],  # (t, v, l); the pump axis is always 1
    samples_per_axis=3,
    seed=42,
    safety_check_runs=1000,
    safety_check_steps=1000,  # 200 s at dt=0.2
    shield_path="./data/prelim/oil_pump.shield",
    c_library_path="./data/prelim/oil_pump_shield_dump.c",
    results_path="./data/prelim/oil_pump_results.json",
    figure_path="./data/prelim/oil_pump_shield.png",
)
