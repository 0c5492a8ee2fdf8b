"""
Progress Bar Module

Thread-safe terminal progress bars with tokenized formatting, throughput
measurement and a coordinator for several bars sharing one screen region.
"""

from termbars.progress.config import (
    BarConfig,
    ProgressConfig,
    get_config,
    set_config,
    update_config,
)
from termbars.progress.core.meter import RateMeter
from termbars.progress.core.bar import ProgressBar, BarState, BarEvent
from termbars.progress.core.multi import MultiProgressBar
from termbars.progress.display.formatter import TokenFormatter
from termbars.progress.display.terminal import Cursor, TerminalProbe

__all__ = [
    'BarConfig',
    'ProgressConfig',
    'get_config',
    'set_config',
    'update_config',
    'RateMeter',
    'ProgressBar',
    'BarState',
    'BarEvent',
    'MultiProgressBar',
    'TokenFormatter',
    'Cursor',
    'TerminalProbe',
]
