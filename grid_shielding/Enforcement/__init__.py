"""Runtime enforcement of grid shields."""

from .runtime_shield import RuntimeGridShield, shielded, pass_through, SELECTION_POLICIES

__all__ = ['RuntimeGridShield', 'shielded', 'pass_through', 'SELECTION_POLICIES']
