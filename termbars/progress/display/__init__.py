"""
Progress Display Components

Contains the token formatter and the terminal control primitives.
"""

from termbars.progress.display.formatter import TokenFormatter, BAR_TOKEN
from termbars.progress.display.terminal import Cursor, TerminalProbe

__all__ = [
    'TokenFormatter',
    'BAR_TOKEN',
    'Cursor',
    'TerminalProbe',
]
