"""Encoding of action sets as bitmasks.

Action sets are ``enum.IntEnum`` types. Bit ``int(a)`` of a mask is set
when action ``a`` is allowed. Decoding always yields actions in ascending
enum order.
"""

from typing import Iterable, List, Type
from enum import IntEnum


def actions_to_int(actions: Iterable[IntEnum]) -> int:
    """Encode a collection of actions as a bitmask."""
    mask = 0
    for action in actions:
        mask |= 1 << int(action)
    return mask


def int_to_actions(action_type: Type[IntEnum], mask: int) -> List[IntEnum]:
    """Decode a bitmask into the list of actions it contains."""
    return [a for a in action_type if mask & (1 << int(a))]


def all_actions_mask(action_type: Type[IntEnum]) -> int:
    """Bitmask allowing every action of ``action_type``."""
    return actions_to_int(action_type)


def action_count(action_type: Type[IntEnum]) -> int:
    """Number of bits needed to store a mask over ``action_type``."""
    values = [int(a) for a in action_type]
    if min(values) < 0:
        raise ValueError(f"Action values must be non-negative, got {values}")
    return max(values) + 1
