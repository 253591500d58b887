"""Shield statistics and plotting."""

from .metrics import action_set_label, shield_statistics, clopper_pearson_ci
from .visualization import draw_shield

__all__ = ['action_set_label', 'shield_statistics', 'clopper_pearson_ci', 'draw_shield']
