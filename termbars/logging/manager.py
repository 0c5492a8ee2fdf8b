"""
Logging Manager - Core Handler Management

Main LoggingManager class that provides dynamic console handler control,
message buffering, and progress mode coordination.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional, TYPE_CHECKING, Tuple

from termbars.logging.handlers import ProgressAwareConsoleHandler

if TYPE_CHECKING:
    from termbars.progress.core.bar import ProgressBar

logger = logging.getLogger(__name__)


class LoggingManager:
    """
    Thread-safe logging manager with dynamic console handler control.

    While a progress display is active, console records either go through
    the attached bar's log() or are held back, so they never tear the bar.
    File logging is never affected.

    Features:
    - Dynamic console routing through an attached bar
    - Message buffering for warnings during multi-bar display
    - Reference-counted progress mode for nested use
    - Context manager support with guaranteed cleanup
    """

    _global_lock = RLock()
    _instance: Optional['LoggingManager'] = None

    def __init__(self, max_buffered_messages: int = 50) -> None:
        """Initialize logging manager with thread-safe state."""
        self._lock = RLock()
        self._console_handler: Optional[ProgressAwareConsoleHandler] = None
        self._file_handler: Optional[logging.FileHandler] = None
        self._original_handlers: List[logging.Handler] = []

        # Progress mode state
        self._progress_mode_active = False
        self._progress_mode_count = 0  # Track nested calls
        self._bar: Optional['ProgressBar'] = None

        # Message buffering
        self._buffered_warnings: List[Tuple[float, str, Dict[str, Any]]] = []
        self._max_buffered_messages = max_buffered_messages

    @classmethod
    def get_instance(cls) -> 'LoggingManager':
        """Get or create singleton instance (thread-safe)."""
        if cls._instance is None:
            with cls._global_lock:
                if cls._instance is None:
                    cls._instance = LoggingManager()
        return cls._instance

    @property
    def console_handler(self) -> Optional[ProgressAwareConsoleHandler]:
        return self._console_handler

    def setup(self, log_file: Optional[Path] = None, console_level: int = logging.WARNING, stream=None) -> None:
        """
        Configure logging to file and console with different log levels.

        Args:
            log_file: Path to the log file, no file logging when None
            console_level: Logging level for console output (default: WARNING)
            stream: Console stream (default: sys.stderr)
        """
        with self._lock:
            console_formatter = logging.Formatter(
                '%(levelname)s - %(message)s' if console_level >= logging.INFO
                else '%(message)s'
            )

            if log_file is not None:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                self._file_handler = logging.FileHandler(log_file)
                self._file_handler.setLevel(logging.DEBUG)
                self._file_handler.setFormatter(logging.Formatter(
                    '%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s'
                ))

            self._console_handler = ProgressAwareConsoleHandler(
                stream=stream or sys.stderr,
                logging_manager=self
            )
            self._console_handler.setLevel(console_level)
            self._console_handler.setFormatter(console_formatter)

            root_logger = logging.getLogger()
            root_logger.setLevel(logging.DEBUG)

            self._original_handlers = root_logger.handlers.copy()

            root_logger.handlers.clear()
            if self._file_handler:
                root_logger.addHandler(self._file_handler)
            root_logger.addHandler(self._console_handler)

            logger.debug("Logging manager setup complete")

    def enable_progress_mode(self, bar: Optional['ProgressBar'] = None) -> None:
        """
        Enable progress mode.

        Thread-safe with reference counting for nested calls.

        Args:
            bar: Bar whose log() receives console records, None to buffer instead
        """
        with self._lock:
            self._progress_mode_count += 1

            if not self._progress_mode_active:
                self._progress_mode_active = True
                self._bar = bar
                self._buffered_warnings.clear()

                if self._console_handler:
                    self._console_handler.set_progress_mode(True, bar)
                else:
                    logger.warning("No console handler found when enabling progress mode")

                logger.debug("Progress mode enabled")

    def disable_progress_mode(self) -> None:
        """
        Disable progress mode - restore console logging.

        Only disables when all nested calls have completed. Displays any
        buffered warning messages.
        """
        with self._lock:
            if self._progress_mode_count > 0:
                self._progress_mode_count -= 1

            if self._progress_mode_count == 0 and self._progress_mode_active:
                self._progress_mode_active = False
                self._bar = None

                if self._console_handler:
                    self._console_handler.set_progress_mode(False)

                self._display_buffered_warnings()
                logger.debug("Progress mode disabled - console logging restored")

    def attach_bar(self, bar: 'ProgressBar') -> None:
        """Route console records through bar until detach_bar()."""
        self.enable_progress_mode(bar)

    def detach_bar(self) -> None:
        self.disable_progress_mode()

    @contextmanager
    def progress_mode(self, bar: Optional['ProgressBar'] = None) -> Iterator[None]:
        """
        Context manager for progress mode with guaranteed cleanup.

        Usage:
            with logging_manager.progress_mode(bar):
                logger.info("shown above the bar")
        """
        self.enable_progress_mode(bar)
        try:
            yield
        finally:
            self.disable_progress_mode()

    def is_progress_mode_active(self) -> bool:
        """Check if progress mode is currently active."""
        with self._lock:
            return self._progress_mode_active

    def buffer_warning(self, record: logging.LogRecord) -> None:
        """
        Buffer a warning message for later display.

        Args:
            record: LogRecord to buffer
        """
        with self._lock:
            if len(self._buffered_warnings) >= self._max_buffered_messages:
                self._buffered_warnings.pop(0)

            formatted_message = self._console_handler.format(record) if self._console_handler else record.getMessage()

            self._buffered_warnings.append((
                time.time(),
                formatted_message,
                {
                    'level': record.levelno,
                    'name': record.name,
                    'funcName': record.funcName,
                    'lineno': record.lineno
                }
            ))

    @property
    def buffered_warnings(self) -> List[str]:
        with self._lock:
            return [message for _, message, _ in self._buffered_warnings]

    def _display_buffered_warnings(self) -> None:
        """Display all buffered warning messages when progress mode ends."""
        if not self._buffered_warnings:
            return

        stream = self._console_handler.stream if self._console_handler else sys.stderr
        try:
            stream.write(f"\n{len(self._buffered_warnings)} warning(s) occurred during progress:\n")
            stream.write("-" * 60 + "\n")
            for timestamp, message, details in self._buffered_warnings:
                elapsed = time.time() - timestamp
                stream.write(f"[{elapsed:.1f}s ago] {message}\n")
            stream.write("-" * 60 + "\n")
            stream.flush()
        except Exception as e:
            logger.error(f"Failed to display buffered warnings: {e}")
        finally:
            self._buffered_warnings.clear()

    def cleanup(self) -> None:
        """
        Clean up logging manager resources.

        Restores original handlers and closes the file handler.
        """
        with self._lock:
            try:
                self._progress_mode_active = False
                self._progress_mode_count = 0
                self._bar = None
                if self._console_handler:
                    self._console_handler.set_progress_mode(False)

                self._display_buffered_warnings()

                root_logger = logging.getLogger()
                root_logger.handlers.clear()
                root_logger.handlers.extend(self._original_handlers)

                if self._file_handler:
                    self._file_handler.close()
                    self._file_handler = None

                logger.debug("Logging manager cleanup complete")

            except Exception as e:
                sys.stderr.write(f"Warning: Logging manager cleanup error: {e}\n")


def setup_logging(log_file: Optional[Path] = None, console_level: int = logging.WARNING) -> LoggingManager:
    """
    Setup logging with progress-aware management.

    Args:
        log_file: Path to the log file
        console_level: Console logging level

    Returns:
        LoggingManager instance for advanced control
    """
    manager = LoggingManager.get_instance()
    manager.setup(log_file, console_level)
    return manager
