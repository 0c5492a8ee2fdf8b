"""
Terminal Control Primitives

ECMA-48 escape sequences for cursor movement and a terminal width probe
backed by Rich's console size detection.
"""

import logging
from typing import Optional, TextIO

from rich.console import Console

logger = logging.getLogger(__name__)

ESC = "\x1b"
CSI = ESC + "["

DEFAULT_COLUMNS = 80


class Cursor:
    """Escape sequences for cursor control on ANSI-compatible terminals."""

    @staticmethod
    def column(n: int = 1) -> str:
        """Move to column n of the current line."""
        return f"{CSI}{n}G"

    @staticmethod
    def save() -> str:
        return ESC + "7"

    @staticmethod
    def restore() -> str:
        return ESC + "8"

    @staticmethod
    def up(n: int = 1) -> str:
        """Move the cursor up n lines, nothing for n <= 0."""
        if n <= 0:
            return ""
        return f"{CSI}{n}A"

    @staticmethod
    def hide() -> str:
        return CSI + "?25l"

    @staticmethod
    def show() -> str:
        return CSI + "?25h"

    @staticmethod
    def clear_line() -> str:
        """Reset attributes, jump to the line start and erase to its end."""
        return CSI + "0m" + CSI + "1000D" + CSI + "K"


class TerminalProbe:
    """
    Reports the column width of the terminal behind an output stream.

    The width is re-read on every call so that terminal resizes are
    picked up.
    """

    def __init__(self, output: Optional[TextIO] = None) -> None:
        self.output = output
        self._console = Console(file=output, stderr=output is None)

    def width(self) -> int:
        """
        Get current terminal width in columns.

        Returns:
            Number of columns, DEFAULT_COLUMNS when detection fails
        """
        try:
            return self._console.width or DEFAULT_COLUMNS
        except Exception as e:
            logger.debug(f"Terminal width detection failed: {e}")
            return DEFAULT_COLUMNS
