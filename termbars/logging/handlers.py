"""
Progress-Aware Console Handler

Custom logging handler that integrates with progress bars to avoid
console output corrupting the bar display.
"""

import logging
import sys
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from termbars.logging.manager import LoggingManager
    from termbars.progress.core.bar import ProgressBar


class ProgressAwareConsoleHandler(logging.StreamHandler):
    """
    Console handler that respects progress mode.

    When a bar is attached:
    - Records are written through the bar's log(), above the bar

    When progress mode is active without a bar (multi-bar display):
    - WARNING and above are buffered for later display
    - INFO/DEBUG messages are suppressed

    When progress mode is inactive:
    - Normal console logging behavior
    """

    def __init__(self, stream=None, logging_manager: Optional['LoggingManager'] = None) -> None:
        """
        Initialize progress-aware console handler.

        Args:
            stream: Output stream (default: sys.stderr)
            logging_manager: LoggingManager instance for coordination
        """
        super().__init__(stream or sys.stderr)
        self._logging_manager = logging_manager
        self._progress_mode = False
        self._bar: Optional['ProgressBar'] = None

    def set_progress_mode(self, enabled: bool, bar: Optional['ProgressBar'] = None) -> None:
        """Enable or disable progress mode, optionally routing through a bar."""
        self._progress_mode = enabled
        self._bar = bar if enabled else None

    def handle(self, record: logging.LogRecord):
        # Records routed through a bar are serialized by the bar's own lock,
        # the handler lock must not be held while waiting for it.
        bar = self._bar
        if self._progress_mode and bar is not None and not bar.is_done():
            rv = self.filter(record)
            if rv:
                self.emit(record)
            return rv
        return super().handle(record)

    def emit(self, record: logging.LogRecord) -> None:
        """
        Emit a log record with progress-aware handling.

        Args:
            record: LogRecord to emit
        """
        try:
            if not self._progress_mode:
                super().emit(record)
                return

            bar = self._bar
            if bar is not None and not bar.is_done():
                bar.log(self.format(record))
                return

            if record.levelno >= logging.WARNING and self._logging_manager:
                self._logging_manager.buffer_warning(record)

        except Exception:
            self.handleError(record)
