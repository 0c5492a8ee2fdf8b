"""
CLI Components

Argument and environment parsing for the demo entry point.
"""

from termbars.cli.config import parse_arguments

__all__ = ['parse_arguments']
