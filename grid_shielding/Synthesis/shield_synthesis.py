"""Shield synthesis by fixed-point iteration over a grid.

Every classified cell starts out either with no allowed actions (it touches
an unsafe state) or with all actions allowed. Each pass removes an action
from a cell if any cell reachable under that action is fully unsafe or lies
outside the grid. Passes are synchronous: pass k+1 reads the masks produced
by pass k and writes only each cell's own mask, so the result does not
depend on the order cells are visited in. Removal is monotonic, hence the
iteration terminates after at most cells * actions passes.
"""

import warnings
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, List, Optional, Type

import numpy as np
from tqdm import tqdm

from ..Models.grid import Bounds, Grid, Partition, SentinelCell
from ..Models.actions import all_actions_mask, action_count
from ..Models.errors import CollaboratorFailure, IncompleteShieldError
from ..Reachability.supporting_points import SupportingPoints, SamplesPerAxis


# ============================================================
# Initialization
# ============================================================

def _check_safe(is_safe: Callable, point: np.ndarray) -> bool:
    try:
        result = is_safe(point)
    except Exception as e:
        raise CollaboratorFailure(f"Safety predicate failed at {point.tolist()}") from e
    if isinstance(result, (float, np.floating)) and not np.isfinite(result):
        raise CollaboratorFailure(f"Safety predicate returned {result} at {point.tolist()}")
    return bool(result)


def standard_initialization_function(
    is_safe: Callable,
    action_type: Type[IntEnum],
    samples_per_axis: SamplesPerAxis = 2,
) -> Callable[[Bounds], int]:
    """
    Initialization function for ``Grid.initialize``.

    A cell gets the empty mask if ``is_safe`` fails on any of its supporting
    points (corners included), and the mask of all actions otherwise.
    """
    allowed = all_actions_mask(action_type)

    def initialization_function(bounds: Bounds) -> int:
        for point in SupportingPoints(samples_per_axis, bounds):
            if not _check_safe(is_safe, point):
                return 0
        return allowed

    return initialization_function


def initialize(grid: Grid, is_safe: Callable, action_type: Type[IntEnum], samples_per_axis: SamplesPerAxis = 2) -> None:
    """Classify every cell of ``grid`` as definitely unsafe or tentatively fully allowed."""
    grid.initialize(standard_initialization_function(is_safe, action_type, samples_per_axis))


# ============================================================
# Transition table
# ============================================================

@dataclass
class Transitions:
    """
    Successor relation of a grid, evaluated once per (cell, action).

    For each action, ``sources[a][k] -> targets[a][k]`` is one edge between
    flat cell indices. Target ``cell_count`` stands for every cell outside
    the grid. Cells that are unsafe from the start, and actions already
    removed from a cell, have no edges.
    """
    actions: List[IntEnum]
    cell_count: int
    sources: Dict[IntEnum, np.ndarray]
    targets: Dict[IntEnum, np.ndarray]

    @property
    def outside_index(self) -> int:
        return self.cell_count

    def edge_count(self) -> int:
        return sum(len(t) for t in self.targets.values())


def _target_index(grid: Grid, cell) -> int:
    if isinstance(cell, SentinelCell):
        return len(grid)
    if isinstance(cell, Partition):
        return cell.flat_index
    return grid.flat_index(cell)


def compute_transitions(
    reachability_function: Callable,
    action_type: Type[IntEnum],
    grid: Grid,
    verbose: bool = False,
) -> Transitions:
    """Evaluate ``reachability_function`` for every cell and still-allowed action."""
    actions = list(action_type)
    n = len(grid)
    sources: Dict[IntEnum, List[int]] = {a: [] for a in actions}
    targets: Dict[IntEnum, List[int]] = {a: [] for a in actions}

    masks = grid.array.reshape(-1)
    classified = grid.classified.reshape(-1)

    for flat, partition in enumerate(tqdm(grid.cells(), total=n, disable=not verbose, desc="Reachability")):
        if not classified[flat]:
            continue
        mask = int(masks[flat])
        for action in actions:
            if not mask & (1 << int(action)):
                continue
            for cell in reachability_function(partition, action):
                sources[action].append(flat)
                targets[action].append(_target_index(grid, cell))

    return Transitions(
        actions=actions,
        cell_count=n,
        sources={a: np.asarray(sources[a], dtype=np.int64) for a in actions},
        targets={a: np.asarray(targets[a], dtype=np.int64) for a in actions},
    )


# ============================================================
# Fixed-point iteration
# ============================================================

def shield_step(transitions: Transitions, grid: Grid) -> Grid:
    """
    One synchronous pass. Returns a new grid; ``grid`` is not modified.

    An allowed action is removed from a cell when some successor under that
    action has no allowed actions, is unclassified, or is outside the grid.
    """
    current = grid.array.reshape(-1)
    classified = grid.classified.reshape(-1)
    bad = np.append((current == 0) | ~classified, True)

    updated = current.copy()
    all_bits = np.iinfo(updated.dtype).max
    for action in transitions.actions:
        sources = transitions.sources[action]
        if len(sources) == 0:
            continue
        unsafe_sources = np.unique(sources[bad[transitions.targets[action]]])
        updated[unsafe_sources] &= updated.dtype.type(all_bits ^ (1 << int(action)))

    result = grid.copy()
    result.array[...] = updated.reshape(grid.size)
    return result


class SynthesisResult:
    """
    Outcome of ``make_shield``.

    The shield is only handed out by ``shield()``, which refuses an
    incomplete result unless the caller accepts it explicitly.
    """

    def __init__(self, grid: Grid, steps: int, complete: bool):
        self._grid = grid
        self.steps = steps
        self.complete = complete

    @property
    def max_steps_reached(self) -> bool:
        return not self.complete

    def shield(self, accept_incomplete: bool = False) -> Grid:
        if not self.complete and not accept_incomplete:
            raise IncompleteShieldError(
                f"Synthesis stopped after {self.steps} steps without reaching a fixed point. "
                "Increase max_steps, or pass accept_incomplete=True to use a finite-horizon shield."
            )
        return self._grid

    def __repr__(self) -> str:
        return f"SynthesisResult(steps={self.steps}, complete={self.complete})"


def make_shield(
    reachability_function: Callable,
    action_type: Type[IntEnum],
    grid: Grid,
    max_steps: Optional[int] = None,
    verbose: bool = False,
    step_callback: Optional[Callable[[int, Grid], None]] = None,
    transitions: Optional[Transitions] = None,
) -> SynthesisResult:
    """
    Iterate ``shield_step`` until a pass changes nothing, or ``max_steps`` passes ran.

    Parameters
    ----------
    reachability_function : callable
        ``R(partition, action) -> iterable of cells``
    action_type : IntEnum type
        The action set the masks range over
    grid : Grid
        Initialized grid. Not modified.
    max_steps : int, optional
        Pass budget. Defaults to cells * actions + 1, which always suffices.
    verbose : bool
        Print progress
    step_callback : callable, optional
        Invoked as ``step_callback(step, grid)`` after each pass
    transitions : Transitions, optional
        Precomputed transition table, e.g. shared between runs on the same grid

    Returns
    -------
    SynthesisResult
    """
    if max_steps is None:
        max_steps = len(grid) * action_count(action_type) + 1
    if max_steps < 0:
        raise ValueError(f"max_steps must be non-negative, got {max_steps}")

    if transitions is None:
        transitions = compute_transitions(reachability_function, action_type, grid, verbose=verbose)
    if verbose:
        print(f"Transition table: {transitions.edge_count()} edges over {len(grid)} cells")

    current = grid.copy()
    steps = 0
    complete = False
    while steps < max_steps:
        next_grid = shield_step(transitions, current)
        steps += 1
        if step_callback is not None:
            step_callback(steps, next_grid)

        changed = int(np.count_nonzero(next_grid.array != current.array))
        current = next_grid
        if verbose:
            print(f"Step {steps}: {changed} cells changed")
        if changed == 0:
            complete = True
            break

    if not complete:
        warnings.warn(
            f"Shield synthesis reached max_steps={max_steps} without a fixed point; "
            "the result is only safe for a finite horizon.",
            RuntimeWarning,
        )
    elif verbose:
        safe = int(np.count_nonzero(current.array))
        print(f"Fixed point reached after {steps} steps ({safe}/{len(current)} cells allow some action)")

    return SynthesisResult(current, steps, complete)
