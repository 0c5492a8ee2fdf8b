"""
Progress Configuration Module

Per-bar configuration dataclass and process-wide tuning defaults with thread safety.
"""

import logging
import sys
from dataclasses import dataclass, field, fields, replace
from threading import RLock
from typing import Any, Optional, TextIO

from termbars.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ProgressConfig:
    """Process-wide tuning settings shared by all bars."""

    # Rate meter
    max_samples: int = 1000  # Bound of the meter's sample history
    max_rates: int = 60  # Per-interval rates kept for display

    # Error handling
    max_callback_errors: int = 5  # Consecutive listener errors before disabling
    log_callback_errors: bool = True  # Whether to log listener errors


# Global configuration instance
_config = ProgressConfig()
_config_lock = RLock()


def get_config() -> ProgressConfig:
    """Get the current global progress configuration."""
    with _config_lock:
        return _config


def set_config(config: ProgressConfig) -> None:
    """Set the global progress configuration."""
    global _config
    with _config_lock:
        _config = config


def update_config(**kwargs) -> None:
    """Update specific configuration values."""
    with _config_lock:
        for key, value in kwargs.items():
            if hasattr(_config, key):
                setattr(_config, key, value)
            else:
                raise ConfigurationError(f"Unknown configuration option: {key}")


@dataclass
class BarConfig:
    """
    Configuration settings for a single progress bar.

    Every field may be changed while the bar is running through update().
    """

    total: Optional[float] = 100  # None when progression is unknown
    width: int = 0  # 0 derives the bar width from the terminal
    no_width: bool = False  # Unknown-total mode
    complete: str = "="
    incomplete: str = " "
    head: Optional[str] = None  # Leading-edge glyph, none when unset
    hide_cursor: bool = False
    clear: bool = False  # Clear the line instead of leaving it on finish
    output: TextIO = field(default_factory=lambda: sys.stderr)
    frequency: float = 0  # Renders per second, 0 is unthrottled
    interval: float = 1.0  # Rate sampling window in seconds

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        for name in ("width", "frequency", "interval"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative, got {getattr(self, name)}")
        if self.total is None:
            self.no_width = True

    @property
    def render_period(self) -> float:
        """Minimum number of seconds between two renders."""
        return 0 if self.frequency == 0 else 1.0 / self.frequency

    def update(self, **options: Any) -> None:
        """
        Update configuration values in place.

        Args:
            **options: Field names and their new values

        Raises:
            ConfigurationError: If an option name is unknown or a value is invalid
        """
        known = {f.name for f in fields(self)}
        for name, value in options.items():
            if name not in known:
                raise ConfigurationError(f"Unknown bar option: {name}")
            setattr(self, name, value)
        if "total" in options and options["total"] is not None and "no_width" not in options:
            self.no_width = False
        self._validate()
        logger.debug(f"Bar configuration updated: {sorted(options)}")

    def merged(self, **options: Any) -> "BarConfig":
        """Return a copy of this configuration with the given overrides."""
        known = {f.name for f in fields(self)}
        unknown = set(options) - known
        if unknown:
            raise ConfigurationError(f"Unknown bar option(s): {', '.join(sorted(unknown))}")
        if options.get("total") is not None and "no_width" not in options:
            options["no_width"] = False
        return replace(self, **options)
