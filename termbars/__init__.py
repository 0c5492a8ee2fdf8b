"""
Terminal Progress Bars

Live-updating progress indicators for terminal streams, safe to drive
from several threads at once.
"""

__version__ = "0.1.0"

from termbars.exceptions import (
    ProgressBarError,
    BarFormatError,
    ConfigurationError,
    CoordinatorError,
)
from termbars.progress import (
    BarConfig,
    BarEvent,
    BarState,
    MultiProgressBar,
    ProgressBar,
    RateMeter,
    TokenFormatter,
)
