"""Core data structures: grids, cells, action bitmasks and error types."""

from .grid import (
    Bounds,
    Grid,
    Partition,
    SentinelCell,
    CellStatus,
    CellValue,
    UNCLASSIFIED,
    OUTSIDE_VALUE,
    OUTSIDE,
    UNDEFINED,
    clamp_state,
)
from .actions import actions_to_int, int_to_actions, all_actions_mask, action_count
from .errors import (
    ShieldingError,
    CorruptData,
    UnsupportedFormat,
    InvalidState,
    CollaboratorFailure,
    NoSafeActionKnown,
    IncompleteShieldError,
)

__all__ = [
    'Bounds', 'Grid', 'Partition', 'SentinelCell', 'CellStatus', 'CellValue',
    'UNCLASSIFIED', 'OUTSIDE_VALUE', 'OUTSIDE', 'UNDEFINED', 'clamp_state',
    'actions_to_int', 'int_to_actions', 'all_actions_mask', 'action_count',
    'ShieldingError', 'CorruptData', 'UnsupportedFormat', 'InvalidState',
    'CollaboratorFailure', 'NoSafeActionKnown', 'IncompleteShieldError',
]
