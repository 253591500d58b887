"""Plotting of 2-D slices through a shield."""

from enum import IntEnum
from typing import List, Optional, Sequence, Type, Union

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.patches import Patch

from ..Models.grid import Grid
from ..Models.actions import action_count
from .metrics import action_set_label

SliceIndex = Union[int, slice]


def _free_axes(grid_slice: Sequence[SliceIndex]) -> List[int]:
    return [axis for axis, index in enumerate(grid_slice) if isinstance(index, slice)]


def draw_shield(
    grid: Grid,
    action_type: Type[IntEnum],
    grid_slice: Sequence[SliceIndex],
    colors: Optional[Sequence] = None,
    xlabel: Optional[str] = None,
    ylabel: Optional[str] = None,
    ax=None,
    save_path: Optional[str] = None,
    show: bool = True,
):
    """Draw the allowed-action sets over a 2-D slice of ``grid``.

    Parameters
    ----------
    grid : Grid
        Shield to draw
    action_type : IntEnum type
        Actions the masks range over
    grid_slice : sequence
        One entry per axis: a cell index to fix that axis, or ``slice(None)``
        for the two axes to plot, e.g. ``[slice(None), slice(None), 1, 1]``
    colors : sequence, optional
        One color per mask value (``2 ** action_count`` entries)
    ax : matplotlib Axes, optional
        Axes to draw into; a new figure is created otherwise
    save_path : str, optional
        Path to save figure
    show : bool
        Whether to display the figure
    """
    if len(grid_slice) != grid.dimensionality:
        raise ValueError(f"Slice must have {grid.dimensionality} entries, got {len(grid_slice)}")
    free = _free_axes(grid_slice)
    if len(free) != 2:
        raise ValueError(f"Exactly two axes must be left free, got {free}")
    x_axis, y_axis = free

    index = tuple(grid_slice)
    values = np.where(grid.classified[index], grid.array[index], 0).astype(np.int64)

    n_masks = 1 << action_count(action_type)
    if colors is None:
        colors = plt.cm.viridis(np.linspace(0, 1, n_masks))
    cmap = ListedColormap(colors[:n_masks])

    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))

    extent = [
        grid.bounds.lower[x_axis], grid.bounds.upper[x_axis],
        grid.bounds.lower[y_axis], grid.bounds.upper[y_axis],
    ]
    ax.imshow(values.T, origin="lower", extent=extent, aspect="auto",
              cmap=cmap, vmin=-0.5, vmax=n_masks - 0.5, interpolation="nearest")

    present = sorted(set(np.unique(values).tolist()))
    handles = [Patch(color=cmap(mask), label=action_set_label(action_type, mask)) for mask in present]
    ax.legend(handles=handles, loc="center left", bbox_to_anchor=(1.0, 0.5))
    ax.set_xlabel(xlabel or f"axis {x_axis}")
    ax.set_ylabel(ylabel or f"axis {y_axis}")

    if save_path:
        plt.savefig(save_path, bbox_inches="tight")
    if show:
        plt.show()
    return ax
