"""
CLI Configuration Module

Handles command-line argument parsing and environment configuration for the demo.
"""

import os
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _env_number(name: str, default: float, cast=float) -> float:
    """Read a non-negative number from the environment, falling back to default."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}', using default {default}")
        return default
    if value < 0:
        logger.warning(f"{name} must not be negative, got {value}. Using default {default}.")
        return default
    return value


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments and load environment configuration.

    Returns:
        argparse.Namespace: Parsed arguments with additional attributes:
            - log_file: Optional[Path]
            - console_log_level: int
    """
    load_dotenv()

    env_frequency = _env_number('PROGRESS_FREQUENCY', 10.0)
    env_width = int(_env_number('PROGRESS_WIDTH', 0, int))
    env_hide_cursor = os.getenv('PROGRESS_HIDE_CURSOR', '').strip().lower() in ('1', 'true', 'yes')
    env_log_file = os.getenv('LOG_FILE')

    parser = argparse.ArgumentParser(
        description='Render terminal progress bars driven by worker threads'
    )
    parser.add_argument(
        'mode',
        choices=['single', 'multi'],
        nargs='?',
        default='multi',
        help='Demo to run: one bar, or several bars under an aggregate bar (default: multi)'
    )
    parser.add_argument(
        '--total',
        type=int,
        default=30,
        help='Steps per bar (default: 30)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=3,
        help='Number of bars/threads in multi mode (default: 3)'
    )
    parser.add_argument(
        '--delay',
        type=float,
        default=0.1,
        help='Seconds each worker sleeps between steps (default: 0.1)'
    )
    parser.add_argument(
        '--frequency',
        type=float,
        default=env_frequency,
        help=f'Maximum renders per second, 0 for unthrottled (default: {env_frequency})'
    )
    parser.add_argument(
        '--width',
        type=int,
        default=env_width,
        help=f'Bar width in columns, 0 to fit the terminal (default: {env_width})'
    )
    parser.add_argument(
        '--hide-cursor',
        action='store_true',
        default=env_hide_cursor,
        help='Hide the cursor while bars are drawn'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show INFO log messages on the console'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Show DEBUG log messages on the console'
    )

    args = parser.parse_args(argv)

    if args.workers < 1:
        parser.error('--workers must be at least 1')
    if args.total < 1:
        parser.error('--total must be at least 1')

    args.log_file = Path(env_log_file) if env_log_file and env_log_file.strip() else None
    if args.debug:
        args.console_log_level = logging.DEBUG
    elif args.verbose:
        args.console_log_level = logging.INFO
    else:
        args.console_log_level = logging.WARNING

    return args
