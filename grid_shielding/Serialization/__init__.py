"""Persistence of shields and compilation to C lookup tables."""

from .binary import (
    ShieldFile,
    robust_grid_serialization,
    robust_grid_deserialization,
    FORMAT_VERSION,
)
from .c_export import get_c_library_header, write_c_library

__all__ = [
    'ShieldFile', 'robust_grid_serialization', 'robust_grid_deserialization', 'FORMAT_VERSION',
    'get_c_library_header', 'write_c_library',
]
