"""Deterministic sample lattices spanning a box."""

from itertools import product
from typing import Iterator, List, Sequence, Union

import numpy as np

from ..Models.grid import Bounds

SamplesPerAxis = Union[int, Sequence[int]]


def _parse_samples_per_axis(samples_per_axis: SamplesPerAxis, dimensionality: int) -> List[int]:
    """Broadcast an int to every axis, or validate a per-axis list."""
    if isinstance(samples_per_axis, (int, np.integer)):
        per_axis = [int(samples_per_axis)] * dimensionality
    else:
        per_axis = [int(n) for n in samples_per_axis]
        if len(per_axis) != dimensionality:
            raise ValueError(
                f"samples_per_axis must have {dimensionality} elements, got {len(per_axis)}"
            )
    if any(n < 1 for n in per_axis):
        raise ValueError(f"samples_per_axis must be at least 1, got {per_axis}")
    return per_axis


def _axis_samples(lower: float, upper: float, n: int) -> np.ndarray:
    if n == 1 or upper == lower:
        return np.array([lower])
    return np.linspace(lower, upper, n)


class SupportingPoints:
    """
    Evenly spaced sample points covering ``bounds``.

    With two or more samples on an axis both the lower and the upper corner
    are included, so the lattice spans the whole box. A single sample sits
    on the lower corner, which is the natural choice for axes that encode
    discrete locations with granularity 1.
    """

    def __init__(self, samples_per_axis: SamplesPerAxis, bounds: Bounds):
        self.bounds = bounds
        self.samples_per_axis = _parse_samples_per_axis(samples_per_axis, bounds.dimensionality)
        self.axes = [
            _axis_samples(lo, hi, n)
            for lo, hi, n in zip(bounds.lower, bounds.upper, self.samples_per_axis)
        ]

    def __iter__(self) -> Iterator[np.ndarray]:
        for point in product(*self.axes):
            yield np.array(point, dtype=np.float64)

    def __len__(self) -> int:
        return int(np.prod([len(axis) for axis in self.axes]))

    def as_array(self) -> np.ndarray:
        """All points as an array of shape (len(self), dimensionality)."""
        return np.array(list(product(*self.axes)), dtype=np.float64).reshape(
            len(self), self.bounds.dimensionality
        )
