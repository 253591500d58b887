"""Summary statistics for shields and simulated safety checks."""

from enum import IntEnum
from typing import Any, Dict, Tuple, Type

import numpy as np
from scipy import stats

from ..Models.grid import Grid
from ..Models.actions import int_to_actions, action_count


def action_set_label(action_type: Type[IntEnum], mask: int) -> str:
    """Readable label such as ``{on, off}`` for a mask."""
    return "{" + ", ".join(a.name for a in int_to_actions(action_type, mask)) + "}"


def shield_statistics(grid: Grid, action_type: Type[IntEnum]) -> Dict[str, Any]:
    """
    Count cells per allowed-action subset.

    Returns
    -------
    dict
        total_cells, unclassified_cells, safe_cells (some action allowed),
        safe_fraction, and cells_per_action_set mapping labels to counts
    """
    classified = grid.classified
    masks = grid.array[classified]
    counts = np.bincount(masks.astype(np.int64), minlength=1 << action_count(action_type))

    cells_per_action_set = {
        action_set_label(action_type, mask): int(count)
        for mask, count in enumerate(counts)
        if count > 0
    }
    total = len(grid)
    safe = int(np.count_nonzero(masks))
    return {
        "total_cells": total,
        "unclassified_cells": int(total - np.count_nonzero(classified)),
        "safe_cells": safe,
        "safe_fraction": safe / total if total > 0 else 0.0,
        "cells_per_action_set": cells_per_action_set,
    }


def clopper_pearson_ci(
    successes: int, trials: int, alpha: float = 0.05
) -> Tuple[float, float]:
    """Compute Clopper-Pearson exact binomial confidence interval.

    Parameters
    ----------
    successes : number of successes
    trials : total number of trials
    alpha : significance level (default 0.05 for 95% CI)

    Returns
    -------
    (lower, upper) : bounds of the CI
    """
    if trials == 0:
        return (0.0, 1.0)
    if successes == 0:
        lower = 0.0
    else:
        lower = stats.beta.ppf(alpha / 2, successes, trials - successes + 1)
    if successes == trials:
        upper = 1.0
    else:
        upper = stats.beta.ppf(1 - alpha / 2, successes + 1, trials - successes)
    return (float(lower), float(upper))
