"""
Core Progress Components

Contains the progress bar, the rate meter and the multi-bar coordinator.
"""

from termbars.progress.core.meter import RateMeter
from termbars.progress.core.bar import ProgressBar, BarState, BarEvent
from termbars.progress.core.multi import MultiProgressBar

__all__ = [
    'RateMeter',
    'ProgressBar',
    'BarState',
    'BarEvent',
    'MultiProgressBar',
]
