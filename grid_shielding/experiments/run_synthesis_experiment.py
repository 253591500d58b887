"""Shield synthesis experiment runner.

Synthesises (or loads) a shield for a case study, stores it as a binary
shield file and a C library, and checks it by simulating a shielded random
agent.

Usage:
    python -m grid_shielding.experiments.run_synthesis_experiment <config_module> [--test]

Example:
    python -m grid_shielding.experiments.run_synthesis_experiment configs.bouncing_ball_prelim
"""

import os
import sys
import time
import importlib

import numpy as np
import matplotlib.pyplot as plt

from .experiment_io import build_metadata, save_experiment_results

from ..CaseStudies import get_case_study, build_simulation_model, make_initialized_grid
from ..Evaluation import shield_statistics, draw_shield
from ..MonteCarlo import count_unsafe_traces, shielded_agent
from ..Reachability import get_barbaric_reachability_function
from ..Serialization import robust_grid_serialization, robust_grid_deserialization, write_c_library
from ..Synthesis import make_shield


# ============================================================
# Shield
# ============================================================

def synthesize_shield(case_study, mechanics, config):
    """Initialise a grid and run synthesis to a fixed point (or max_steps).

    Returns (grid, complete, steps).
    """
    grid = make_initialized_grid(case_study, mechanics, config.granularity, config.samples_per_axis)
    print(f"  Grid: {grid.size} = {len(grid)} cells")

    model = build_simulation_model(
        case_study, mechanics, grid, config.samples_per_axis, config.samples_per_random_axis
    )
    reachability_function = get_barbaric_reachability_function(model)
    result = make_shield(
        reachability_function, case_study.action_type, grid, max_steps=config.max_steps, verbose=True
    )
    shield = result.shield(accept_incomplete=config.accept_incomplete)
    return shield, result.complete, result.steps


def check_shield_matches(shield, expected, path):
    """Raise ValueError unless ``shield`` partitions the same grid as ``expected``."""
    if shield.dimensionality != expected.dimensionality:
        raise ValueError(
            f"Shield in {path} has {shield.dimensionality} dimensions, expected {expected.dimensionality}"
        )
    if (
        shield.size != expected.size
        or not np.allclose(shield.granularity, expected.granularity)
        or not np.allclose(shield.bounds.lower, expected.bounds.lower)
        or not np.allclose(shield.bounds.upper, expected.bounds.upper)
    ):
        raise ValueError(
            f"Shield in {path} does not match the configured grid: "
            f"size {list(shield.size)} vs {list(expected.size)}, "
            f"granularity {shield.granularity.tolist()} vs {expected.granularity.tolist()}"
        )


def get_shield(case_study, mechanics, config):
    """Load ``config.existing_shield_path`` if it exists, otherwise synthesise.

    Returns (grid, complete, steps, loaded); steps is None for a loaded shield.
    """
    path = config.existing_shield_path
    if path and os.path.exists(path):
        print(f"Loading shield from {path}")
        shield_file = robust_grid_deserialization(path)
        check_shield_matches(shield_file.grid, case_study.make_grid(mechanics, config.granularity), path)
        shield = shield_file.shield(accept_incomplete=config.accept_incomplete)
        return shield, shield_file.complete, None, True

    print("Synthesising shield...")
    shield, complete, steps = synthesize_shield(case_study, mechanics, config)
    return shield, complete, steps, False


def describe(case_study, config, complete):
    return (
        f"Shield for {case_study.name}, granularity {config.granularity}, "
        f"{config.samples_per_axis} samples per axis"
        + ("" if complete else " (incomplete: finite horizon only)")
    )


# ============================================================
# Printing
# ============================================================

def print_report(stats, safety, case_study_name):
    """Print a formatted summary of the shield and its safety check."""
    print("\n" + "=" * 70)
    print("SHIELD SYNTHESIS RESULTS")
    print("=" * 70)
    print(f"Case study: {case_study_name}")
    print(f"Cells: {stats['total_cells']}, safe: {stats['safe_cells']} "
          f"({stats['safe_fraction']:.1%}), unclassified: {stats['unclassified_cells']}")

    print("\n--- Cells per allowed action set ---")
    for label, count in sorted(stats["cells_per_action_set"].items()):
        print(f"  {label:30s} {count}")

    print("\n--- Safety check (shielded random agent) ---")
    print(f"  {safety}")


def try_plot(shield, case_study, config):
    """Save a plot of the first two axes, other axes fixed at their lowest cell."""
    if not config.figure_path:
        return
    grid_slice = [slice(None), slice(None)] + [0] * (shield.dimensionality - 2)
    os.makedirs(os.path.dirname(config.figure_path) or ".", exist_ok=True)
    ax = draw_shield(shield, case_study.action_type, grid_slice,
                     save_path=config.figure_path, show=False)
    plt.close(ax.figure)
    print(f"\nPlot saved to {config.figure_path}")


# ============================================================
# Main
# ============================================================

def main():
    args = [arg for arg in sys.argv[1:] if arg != "--test"]
    test_mode = "--test" in sys.argv[1:]
    if len(args) < 1:
        print("Usage: python -m grid_shielding.experiments.run_synthesis_experiment <config_module> [--test]")
        print("Example: python -m grid_shielding.experiments.run_synthesis_experiment configs.bouncing_ball_prelim")
        sys.exit(1)

    # Import config
    config_module_name = args[0]
    try:
        config_module = importlib.import_module(f".{config_module_name}", package="grid_shielding.experiments")
        config = config_module.config
    except (ImportError, AttributeError, ValueError) as e:
        print(f"Error loading config: {e}")
        sys.exit(1)
    if test_mode:
        config = config.for_testing()

    case_study = get_case_study(config.case_study_name)
    mechanics = case_study.make_mechanics(**config.mechanics_kwargs)

    print("=" * 70)
    print(f"SHIELD SYNTHESIS EXPERIMENT: {config.case_study_name.upper()}")
    print(f"Granularity: {config.granularity}, Samples per axis: {config.samples_per_axis}, Seed: {config.seed}")
    print(f"Safety check: {config.safety_check_runs} runs x {config.safety_check_steps} steps"
          + (" (test mode)" if test_mode else ""))
    print("=" * 70)

    # 1. Shield
    t0 = time.time()
    shield, complete, steps, loaded = get_shield(case_study, mechanics, config)
    synthesis_time = time.time() - t0
    print(f"  {'Loaded' if loaded else 'Synthesised'} in {synthesis_time:.1f}s")

    # 2. Store
    os.makedirs(os.path.dirname(config.shield_path) or ".", exist_ok=True)
    robust_grid_serialization(config.shield_path, shield, complete=complete)
    print(f"\nShield saved to {config.shield_path}")
    os.makedirs(os.path.dirname(config.c_library_path) or ".", exist_ok=True)
    write_c_library(config.c_library_path, shield, describe(case_study, config, complete))
    print(f"C library saved to {config.c_library_path}")

    # 3. Safety check
    print(f"\nChecking safety over {config.safety_check_runs} runs...")
    t0 = time.time()
    safety = count_unsafe_traces(
        case_study,
        shielded_agent(case_study, shield),
        runs=config.safety_check_runs,
        steps=config.safety_check_steps,
        seed=config.seed,
        mechanics=mechanics,
        verbose=True,
    )
    check_time = time.time() - t0

    # 4. Report and save
    stats = shield_statistics(shield, case_study.action_type)
    print_report(stats, safety, config.case_study_name)

    results = {
        "shield": stats,
        "complete": complete,
        "synthesis_steps": steps,
        "loaded_existing_shield": loaded,
        "safety_check": safety.to_dict(),
    }
    metadata = build_metadata(config, extra={
        "test_mode": test_mode,
        "synthesis_time_s": synthesis_time,
        "safety_check_time_s": check_time,
    })
    save_experiment_results(config.results_path, results, metadata)
    print(f"\nResults saved to {config.results_path}")

    try_plot(shield, case_study, config)

    print("\n" + "=" * 70)
    print("EXPERIMENT COMPLETE")
    print("=" * 70)


if __name__ == "__main__":
    main()
