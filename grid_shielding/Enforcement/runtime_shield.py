"""Runtime enforcement of a synthesized grid shield."""

import random
from enum import IntEnum
from typing import Callable, Dict, Optional, Tuple, Type

import numpy as np

from ..Models.grid import Grid, clamp_state
from ..Models.actions import int_to_actions
from ..Models.errors import NoSafeActionKnown

SELECTION_POLICIES = ("first", "random")


class RuntimeGridShield:
    """
    Corrects proposed actions using a shield grid.

    The shield is only read. Several runtime shields (e.g. one per worker)
    may share one grid; each keeps its own counters.

    Parameters
    ----------
    shield : Grid
        Synthesized shield
    action_type : IntEnum type
        Action set the cell masks range over
    selection : str
        How to pick a replacement for an unsafe proposal:
        "first" takes the allowed action with the lowest enum value,
        "random" draws uniformly among the allowed actions using ``rng``
    rng : random.Random, optional
        Source of randomness for "random" selection
    fallback : callable, optional
        ``fallback(state, proposed) -> action`` used when no action is
        known to be safe. Without one, ``NoSafeActionKnown`` is raised.
    """

    def __init__(
        self,
        shield: Grid,
        action_type: Type[IntEnum],
        selection: str = "first",
        rng: Optional[random.Random] = None,
        fallback: Optional[Callable] = None,
    ):
        if selection not in SELECTION_POLICIES:
            raise ValueError(f"Unknown selection policy {selection!r}, expected one of {SELECTION_POLICIES}")
        self.shield = shield
        self.action_type = action_type
        self.selection = selection
        self.rng = rng if rng is not None else random.Random()
        self.fallback = fallback

        # Flattened lookup: unclassified cells allow nothing.
        self._masks = np.where(shield.classified, shield.array, 0).reshape(-1)
        self._lower = shield.bounds.lower
        self._granularity = shield.granularity
        self._strides = shield.strides
        self._max_index = np.asarray(shield.size, dtype=np.int64) - 1
        # Decoded action tuple for every mask that occurs in the shield.
        self._decoded: Dict[int, Tuple[IntEnum, ...]] = {
            int(mask): tuple(int_to_actions(action_type, int(mask)))
            for mask in np.unique(self._masks)
        }

        self.total_decisions = 0
        self.interventions = 0
        self.no_safe_action_count = 0

    def allowed_mask(self, state) -> int:
        """Mask of the cell containing ``state`` after clamping it into the grid."""
        x = clamp_state(self.shield, state)
        indices = np.floor((x - self._lower) / self._granularity).astype(np.int64)
        np.minimum(indices, self._max_index, out=indices)
        return int(self._masks[int(np.dot(indices, self._strides))])

    def allowed_actions(self, state) -> Tuple[IntEnum, ...]:
        return self._decoded[self.allowed_mask(state)]

    def enforce(self, state, proposed):
        """
        Return ``proposed`` if the shield allows it in ``state``, otherwise a safe replacement.

        Raises
        ------
        InvalidState
            ``state`` has non-finite components
        NoSafeActionKnown
            No action is allowed and no fallback was configured
        """
        allowed = self.allowed_actions(state)
        self.total_decisions += 1

        if not allowed:
            self.no_safe_action_count += 1
            if self.fallback is None:
                raise NoSafeActionKnown(state, proposed)
            return self.fallback(state, proposed)

        if proposed in allowed:
            return proposed

        self.interventions += 1
        if self.selection == "first":
            return allowed[0]
        return self.rng.choice(allowed)

    def get_metrics(self) -> Dict[str, object]:
        return {
            "total_decisions": self.total_decisions,
            "interventions": self.interventions,
            "no_safe_action_count": self.no_safe_action_count,
            "intervention_rate": (
                self.interventions / self.total_decisions if self.total_decisions > 0 else 0.0
            ),
        }

    def restart(self) -> None:
        """Reset counters."""
        self.total_decisions = 0
        self.interventions = 0
        self.no_safe_action_count = 0


def shielded(runtime_shield: RuntimeGridShield, policy: Callable) -> Callable:
    """Wrap ``policy(state) -> action`` so every decision passes through the shield."""
    def shielded_policy(state):
        return runtime_shield.enforce(state, policy(state))
    return shielded_policy


def pass_through(_state, proposed):
    """Fallback that keeps the proposed action when the shield knows no safe one."""
    return proposed
