"""Exception types raised by the shielding engine."""


class ShieldingError(Exception):
    """Base class for all grid shielding errors."""


class CorruptData(ShieldingError):
    """A persisted shield is malformed, truncated or fails its checksum."""


class UnsupportedFormat(ShieldingError):
    """A persisted shield uses a format version this library cannot read."""


class InvalidState(ShieldingError):
    """A state cannot be mapped onto the grid (e.g. it has non-finite components)."""


class CollaboratorFailure(ShieldingError):
    """The dynamics function or safety predicate raised or returned non-finite values."""


class NoSafeActionKnown(ShieldingError):
    """The shield allows no action in the current state."""

    def __init__(self, state, proposed=None):
        self.state = state
        self.proposed = proposed
        super().__init__(f"No safe action known for state {tuple(state)}")


class IncompleteShieldError(ShieldingError):
    """Synthesis stopped at its step budget before reaching a fixed point."""
