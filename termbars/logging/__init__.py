"""
Logging Module - Progress-Aware Logging System

Keeps console logging from tearing progress bars. While a single bar is
active, records are printed above it through the bar's log(); while a
multi-bar block is drawn, console output is held back and warnings are
shown once the block completes. File logging is never suppressed.

Usage:
    from termbars.logging import LoggingManager

    manager = LoggingManager.get_instance()
    manager.setup(log_file, console_level)

    with manager.progress_mode(bar):
        logger.info("printed above the bar")
"""

from termbars.logging.manager import LoggingManager, setup_logging
from termbars.logging.handlers import ProgressAwareConsoleHandler

__all__ = [
    'LoggingManager',
    'ProgressAwareConsoleHandler',
    'setup_logging',
]
