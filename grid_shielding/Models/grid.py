"""Axis-aligned grid partitioning of a bounded continuous state space.

A ``Grid`` splits the box ``[lower, upper)`` into hyper-rectangular cells of
fixed per-axis width (the granularity). Every cell carries a tagged value:
either unclassified, or classified with a bitmask of allowed actions.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import product
from typing import Callable, Iterator, Sequence, Tuple, Union

import numpy as np

from .errors import InvalidState

# Slack when deciding how many cells fit between the bounds,
# so that e.g. (25.1 - 4.9) / 0.1 does not produce an extra cell.
_SIZE_TOLERANCE = 1e-9


class Bounds:
    """Axis-aligned box. Membership is half-open: ``lower <= x < upper``."""

    def __init__(self, lower: Sequence[float], upper: Sequence[float]):
        self.lower = np.asarray(lower, dtype=np.float64).reshape(-1)
        self.upper = np.asarray(upper, dtype=np.float64).reshape(-1)
        if self.lower.shape != self.upper.shape:
            raise ValueError(
                f"Bounds must have equal dimensionality, got {self.lower.shape} and {self.upper.shape}"
            )

    @property
    def dimensionality(self) -> int:
        return self.lower.shape[0]

    def magnitude(self) -> np.ndarray:
        """Width of the box along each axis."""
        return self.upper - self.lower

    def __contains__(self, point) -> bool:
        x = np.asarray(point, dtype=np.float64)
        return bool(np.all(self.lower <= x) and np.all(x < self.upper))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return np.array_equal(self.lower, other.lower) and np.array_equal(self.upper, other.upper)

    def __repr__(self) -> str:
        return f"Bounds({self.lower.tolist()}, {self.upper.tolist()})"


class CellStatus(Enum):
    UNCLASSIFIED = "unclassified"
    OUTSIDE = "outside"
    CLASSIFIED = "classified"


@dataclass(frozen=True)
class CellValue:
    """Tagged cell metadata: Unclassified, Outside or Classified(bitmask)."""
    status: CellStatus
    actions: int = 0

    @classmethod
    def classified(cls, mask: int) -> "CellValue":
        return cls(CellStatus.CLASSIFIED, int(mask))

    @property
    def is_classified(self) -> bool:
        return self.status is CellStatus.CLASSIFIED

    @property
    def is_unsafe(self) -> bool:
        """True unless the cell is classified with at least one allowed action."""
        return self.status is not CellStatus.CLASSIFIED or self.actions == 0


UNCLASSIFIED = CellValue(CellStatus.UNCLASSIFIED)
OUTSIDE_VALUE = CellValue(CellStatus.OUTSIDE)


class SentinelCell:
    """Reserved cell standing for "outside the grid" or "undefined"."""
    __slots__ = ("name", "value")

    def __init__(self, name: str, value: CellValue):
        self.name = name
        self.value = value

    def __repr__(self) -> str:
        return self.name


OUTSIDE = SentinelCell("OUTSIDE", OUTSIDE_VALUE)
# Points that cannot be placed anywhere, e.g. NaN coordinates.
UNDEFINED = SentinelCell("UNDEFINED", UNCLASSIFIED)


class Partition:
    """A cell of a ``Grid``, identified by its integer multi-index."""
    __slots__ = ("grid", "indices")

    def __init__(self, grid: "Grid", indices: Sequence[int]):
        self.grid = grid
        self.indices = tuple(int(i) for i in indices)

    @property
    def flat_index(self) -> int:
        return self.grid.flat_index(self.indices)

    @property
    def bounds(self) -> Bounds:
        return self.grid.bounds_of(self)

    @property
    def value(self) -> CellValue:
        return self.grid.get_value(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Partition):
            return NotImplemented
        return self.grid is other.grid and self.indices == other.indices

    def __hash__(self) -> int:
        return hash((id(self.grid), self.indices))

    def __repr__(self) -> str:
        return f"Partition{self.indices}"


Cell = Union[Partition, SentinelCell]


class Grid:
    """
    Partition of ``[lower_bounds, upper_bounds)`` into cells of width ``granularity``.

    The upper bounds are snapped to ``lower + size * granularity`` so that
    every in-bounds point belongs to exactly one cell. Cell metadata is kept
    in two dense arrays in row-major order: ``array`` holds the action
    bitmask and ``classified`` marks cells that have been assigned one.
    """

    def __init__(
        self,
        granularity: Union[float, Sequence[float]],
        lower_bounds: Sequence[float],
        upper_bounds: Sequence[float],
        dtype=np.uint8,
    ):
        lower = np.asarray(lower_bounds, dtype=np.float64).reshape(-1)
        upper = np.asarray(upper_bounds, dtype=np.float64).reshape(-1)
        if lower.shape != upper.shape or lower.size == 0:
            raise ValueError(
                f"lower_bounds and upper_bounds must be non-empty and of equal length, "
                f"got {lower.size} and {upper.size}"
            )
        granularity = np.broadcast_to(
            np.asarray(granularity, dtype=np.float64), lower.shape
        ).copy()
        if not np.all(np.isfinite(granularity)) or np.any(granularity <= 0):
            raise ValueError(f"Granularity must be positive, got {granularity.tolist()}")
        if not (np.all(np.isfinite(lower)) and np.all(np.isfinite(upper))):
            raise ValueError("Grid bounds must be finite")
        if np.any(upper <= lower):
            raise ValueError(f"Upper bounds must exceed lower bounds, got {lower.tolist()} and {upper.tolist()}")

        size = np.ceil((upper - lower) / granularity - _SIZE_TOLERANCE).astype(np.int64)
        size = np.maximum(size, 1)

        self.granularity = granularity
        self.size: Tuple[int, ...] = tuple(int(n) for n in size)
        self.bounds = Bounds(lower, lower + size * granularity)
        self.array = np.zeros(self.size, dtype=dtype)
        self.classified = np.zeros(self.size, dtype=bool)

        strides = np.ones(len(self.size), dtype=np.int64)
        for axis in range(len(self.size) - 2, -1, -1):
            strides[axis] = strides[axis + 1] * self.size[axis + 1]
        self.strides = strides
        self._max_index = size - 1

    @property
    def dimensionality(self) -> int:
        return len(self.size)

    def __len__(self) -> int:
        return int(self.array.size)

    def __contains__(self, point) -> bool:
        return point in self.bounds

    def __repr__(self) -> str:
        return (
            f"Grid(granularity={self.granularity.tolist()}, "
            f"lower={self.bounds.lower.tolist()}, upper={self.bounds.upper.tolist()}, "
            f"size={list(self.size)})"
        )

    # ------------------------------------------------------------------
    # Coordinates <-> cells
    # ------------------------------------------------------------------

    def cell_of(self, point) -> Cell:
        """Cell containing ``point``; ``OUTSIDE`` if out of bounds, ``UNDEFINED`` if not finite."""
        x = np.asarray(point, dtype=np.float64)
        if x.shape != (self.dimensionality,):
            raise ValueError(f"Expected a point of dimensionality {self.dimensionality}, got shape {x.shape}")
        if not np.all(np.isfinite(x)):
            return UNDEFINED
        if x not in self.bounds:
            return OUTSIDE
        indices = np.floor((x - self.bounds.lower) / self.granularity).astype(np.int64)
        # Rounding can push a point just below the upper bound into index == size.
        np.minimum(indices, self._max_index, out=indices)
        return Partition(self, indices)

    def bounds_of(self, cell: Cell) -> Bounds:
        if not isinstance(cell, Partition):
            raise ValueError(f"{cell!r} has no bounds")
        indices = np.asarray(cell.indices, dtype=np.float64)
        lower = self.bounds.lower + indices * self.granularity
        return Bounds(lower, lower + self.granularity)

    def flat_index(self, indices: Sequence[int]) -> int:
        return int(np.dot(self.strides, indices))

    def partition_at(self, flat_index: int) -> Partition:
        return Partition(self, np.unravel_index(flat_index, self.size))

    def cells(self) -> Iterator[Partition]:
        """All cells in row-major order (last axis varies fastest)."""
        for indices in product(*(range(n) for n in self.size)):
            yield Partition(self, indices)

    def __iter__(self) -> Iterator[Partition]:
        return self.cells()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def get_value(self, cell: Cell) -> CellValue:
        if isinstance(cell, SentinelCell):
            return cell.value
        if not self.classified[cell.indices]:
            return UNCLASSIFIED
        return CellValue.classified(self.array[cell.indices])

    def set_value(self, cell: Partition, mask: int) -> None:
        if not isinstance(cell, Partition):
            raise ValueError(f"Cannot assign a value to {cell!r}")
        if mask < 0 or mask > np.iinfo(self.array.dtype).max:
            raise ValueError(f"Mask {mask} does not fit in {self.array.dtype}")
        self.array[cell.indices] = mask
        self.classified[cell.indices] = True

    def initialize(self, initialization_function: Callable[[Bounds], int]) -> None:
        """Classify every cell with ``initialization_function(cell_bounds)``."""
        for partition in self:
            self.set_value(partition, initialization_function(partition.bounds))

    def copy(self) -> "Grid":
        clone = Grid(self.granularity, self.bounds.lower, self.bounds.upper, dtype=self.array.dtype)
        clone.array[...] = self.array
        clone.classified[...] = self.classified
        return clone

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            np.array_equal(self.granularity, other.granularity)
            and self.bounds == other.bounds
            and self.size == other.size
            and self.array.dtype == other.array.dtype
            and np.array_equal(self.array, other.array)
            and np.array_equal(self.classified, other.classified)
        )


def clamp_state(grid: Grid, state) -> np.ndarray:
    """
    Pull ``state`` into the grid, each axis independently.

    Coordinates at or above the (exclusive) upper bound are moved to the
    largest representable value below it.
    """
    x = np.asarray(state, dtype=np.float64)
    if not np.all(np.isfinite(x)):
        raise InvalidState(f"Cannot clamp non-finite state {x.tolist()}")
    upper = np.nextafter(grid.bounds.upper, grid.bounds.lower)
    return np.clip(x, grid.bounds.lower, upper)
