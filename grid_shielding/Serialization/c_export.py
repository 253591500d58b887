"""Compile a shield into C source with a static lookup table.

The generated file has no dependencies beyond ``<math.h>``: the grid
parameters become constant arrays, the cell masks a ``const`` table, and
cell lookup is plain arithmetic with no allocation.
"""

import io
import os
from typing import TextIO, Union

import numpy as np

from ..Models.grid import Grid

_C_TYPES = {1: "unsigned char", 2: "unsigned short", 4: "unsigned int", 8: "unsigned long long"}
_VALUES_PER_LINE = 16


def _c_doubles(values) -> str:
    return ", ".join(repr(float(v)) for v in values)


def _c_longs(values) -> str:
    return ", ".join(f"{int(v)}L" for v in values)


def write_c_library(destination: Union[str, os.PathLike, TextIO], grid: Grid, description: str = "") -> None:
    """Write the C source for ``grid`` to a path or text stream."""
    if isinstance(destination, (str, os.PathLike)):
        with open(destination, "w") as f:
            _write_c_library(f, grid, description)
    else:
        _write_c_library(destination, grid, description)


def get_c_library_header(grid: Grid, description: str = "") -> str:
    """C source for ``grid`` as a string."""
    buffer = io.StringIO()
    _write_c_library(buffer, grid, description)
    return buffer.getvalue()


def _write_c_library(out: TextIO, grid: Grid, description: str) -> None:
    d = grid.dimensionality
    n = len(grid)
    c_type = _C_TYPES[grid.array.dtype.itemsize]
    # Unclassified cells allow nothing.
    masks = np.where(grid.classified, grid.array, 0).reshape(-1)

    comment = description.replace("*/", "* /")
    out.write(f"/* {comment} */\n" if comment else "")
    out.write(
        f"/* Grid shield: {n} cells over {d} dimensions. "
        f"Bit i of a cell value is set when action i is allowed. */\n"
    )
    out.write("#include <math.h>\n\n")
    out.write(f"#define GRID_DIMENSIONS {d}\n")
    out.write(f"#define GRID_CELLS {n}L\n\n")
    out.write(f"const double granularity[GRID_DIMENSIONS] = {{{_c_doubles(grid.granularity)}}};\n")
    out.write(f"const double lower_bounds[GRID_DIMENSIONS] = {{{_c_doubles(grid.bounds.lower)}}};\n")
    out.write(f"const double upper_bounds[GRID_DIMENSIONS] = {{{_c_doubles(grid.bounds.upper)}}};\n")
    out.write(f"const long grid_size[GRID_DIMENSIONS] = {{{_c_longs(grid.size)}}};\n")
    out.write(f"const long grid_strides[GRID_DIMENSIONS] = {{{_c_longs(grid.strides)}}};\n\n")

    out.write(f"const {c_type} shield[GRID_CELLS] = {{\n")
    for start in range(0, n, _VALUES_PER_LINE):
        row = masks[start:start + _VALUES_PER_LINE]
        out.write("    " + ", ".join(str(int(v)) for v in row) + ",\n")
    out.write("};\n\n")

    out.write(
        "/* Row-major index of the cell containing state, or -1 if it lies outside the grid. */\n"
        "long get_index(const double *state)\n"
        "{\n"
        "    long index = 0;\n"
        "    for (int axis = 0; axis < GRID_DIMENSIONS; axis++) {\n"
        "        double x = state[axis];\n"
        "        if (!(x >= lower_bounds[axis] && x < upper_bounds[axis]))\n"
        "            return -1;\n"
        "        long i = (long)floor((x - lower_bounds[axis]) / granularity[axis]);\n"
        "        if (i >= grid_size[axis])\n"
        "            i = grid_size[axis] - 1;\n"
        "        index += i * grid_strides[axis];\n"
        "    }\n"
        "    return index;\n"
        "}\n\n"
        "/* Allowed-action mask for state, or -1 if it lies outside the grid. */\n"
        "long long get_value(const double *state)\n"
        "{\n"
        "    long index = get_index(state);\n"
        "    if (index < 0)\n"
        "        return -1;\n"
        "    return (long long)shield[index];\n"
        "}\n"
    )
