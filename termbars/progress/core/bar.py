"""
Core Progress Bar Module

Defines the ProgressBar class, its lifecycle states and the events it emits.
"""

import logging
import math
import re
import time
from collections.abc import Mapping
from enum import Enum
from threading import RLock
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, Iterator, List, Optional, TypeVar

from termbars.exceptions import BarFormatError
from termbars.progress.config import BarConfig, get_config
from termbars.progress.core.meter import RateMeter
from termbars.progress.display.formatter import TokenFormatter, TokenRenderer
from termbars.progress.display.terminal import Cursor, TerminalProbe

if TYPE_CHECKING:
    from termbars.progress.core.multi import MultiProgressBar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BarState(Enum):
    """Lifecycle states of a progress bar."""
    CREATED = "created"
    RUNNING = "running"
    DONE = "done"
    STOPPED = "stopped"


class BarEvent(Enum):
    """Events a progress bar notifies listeners about."""
    PROGRESS = "progress"
    DONE = "done"
    STOPPED = "stopped"


class ProgressBar:
    """
    Terminal progress bar driven by a tokenized format string.

    Thread-safe: every counter mutation and render happens under the bar's
    own lock. When attached to a MultiProgressBar, the terminal write
    itself additionally goes through the coordinator's shared cursor lock.

    Once done or stopped the bar is inert, further advance/render/resize
    calls are silently ignored.
    """

    def __init__(self, format: str, config: Optional[BarConfig] = None, **options: Any) -> None:
        """
        Initialize a progress bar.

        Args:
            format: Template with tokens such as ``:bar`` and ``:percent``
            config: Base configuration (a fresh BarConfig when omitted)
            **options: Overrides applied on top of the configuration

        Raises:
            BarFormatError: If format is not a string
        """
        if not isinstance(format, str):
            raise BarFormatError(f"Expected bar formatting string, got `{format!r}` instead.")

        self._format = format
        self._lock = RLock()
        base = config or BarConfig()
        self._config = base.merged(**options)

        self._formatter = TokenFormatter()
        self._formatter.load()
        self._meter = RateMeter(self._config.interval)
        self._probe = TerminalProbe(self._config.output)

        self._callbacks: Dict[BarEvent, List[Callable[..., Any]]] = {event: [] for event in BarEvent}
        self._callback_errors: Dict[Callable[..., Any], int] = {}

        self._multibar: Optional["MultiProgressBar"] = None
        self._row: Optional[int] = None
        self._first_render = True
        self.reset()

    def reset(self) -> None:
        """Reset progress to the initial state."""
        with self._lock:
            self._render_period = self._config.render_period
            self._current: float = 0
            self._last_render_time = 0.0
            self._last_render_width = 0
            self._state = BarState.CREATED
            self._start_at = time.time()
            self._tokens: Dict[str, Any] = {}
            self._meter.clear()

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def format(self) -> str:
        return self._format

    @property
    def config(self) -> BarConfig:
        return self._config

    @property
    def current(self) -> float:
        return self._current

    @current.setter
    def current(self, value: float) -> None:
        """Move the counter to value, clamped to [0, total]."""
        with self._lock:
            upper = math.inf if self.no_width else self.total
            value = max(0, min(value, upper))
            self.advance(value - self._current)

    @property
    def ratio(self) -> float:
        """Completed proportion clamped to [0, 1]."""
        total = self.total
        if self.no_width or not total or total <= 0:
            return 0.0
        return min(max(self._current / total, 0.0), 1.0)

    @ratio.setter
    def ratio(self, value: float) -> None:
        """Move the counter to the closest value not above value * total."""
        with self._lock:
            if self.no_width:
                return
            target = math.floor(value * self.total)
            target = max(0, min(target, self.total))
            self.advance(target - self._current)

    @property
    def state(self) -> BarState:
        return self._state

    @property
    def start_at(self) -> float:
        return self._start_at

    @property
    def row(self) -> Optional[int]:
        return self._row

    @property
    def rate(self) -> float:
        return self._meter.rate

    @property
    def mean_rate(self) -> float:
        return self._meter.mean_rate

    @property
    def last_render_width(self) -> int:
        return self._last_render_width

    @property
    def total(self) -> Optional[float]:
        return self._config.total

    @property
    def width(self) -> int:
        return self._config.width

    @width.setter
    def width(self, value: int) -> None:
        self.update(width=value)

    @property
    def no_width(self) -> bool:
        return self._config.no_width or self._config.total is None

    @property
    def complete(self) -> str:
        return self._config.complete

    @property
    def incomplete(self) -> str:
        return self._config.incomplete

    @property
    def head(self) -> Optional[str]:
        return self._config.head

    @property
    def hide_cursor(self) -> bool:
        return self._config.hide_cursor

    @property
    def clear(self) -> bool:
        return self._config.clear

    @property
    def output(self):
        return self._config.output

    @property
    def frequency(self) -> float:
        return self._config.frequency

    @property
    def interval(self) -> float:
        return self._config.interval

    def is_complete(self) -> bool:
        """Check if the bar finished."""
        return self._state == BarState.DONE

    def is_stopped(self) -> bool:
        """Check if the bar was stopped before finishing."""
        return self._state == BarState.STOPPED

    def is_done(self) -> bool:
        """Check if the bar is finished or stopped."""
        return self._state in (BarState.DONE, BarState.STOPPED)

    def max_columns(self) -> int:
        """Current terminal width of the output stream."""
        return self._probe.width()

    def line_inset(self) -> str:
        """Prefix drawn before the bar on its row, empty outside a coordinator."""
        multibar = self._multibar
        return multibar.line_inset(self) if multibar is not None else ""

    def use(self, name: str, renderer: TokenRenderer) -> None:
        """Register a custom token renderer for this bar."""
        self._formatter.use(name, renderer)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def attach_to(self, multibar: "MultiProgressBar", row: int) -> None:
        """Attach this bar to a coordinator at a fixed row."""
        with self._lock:
            self._multibar = multibar
            self._row = row

    def update(self, **options: Any) -> None:
        """
        Update configuration options for this bar.

        Args:
            **options: BarConfig field names and their new values
        """
        with self._lock:
            self._config.update(**options)
            if "frequency" in options:
                self._render_period = self._config.render_period
            if "interval" in options:
                self._meter.interval = self._config.interval
            if "output" in options:
                self._probe = TerminalProbe(self._config.output)

    def start(self) -> None:
        """Start progression by drawing the bar and stamping the start time."""
        with self._lock:
            self._state = BarState.RUNNING
            self._start_at = time.time()
            self._last_render_time = 0.0
            self._meter.start()

        logger.debug(f"Started bar '{self._format}' (total={self.total})")
        self.advance(0)

    def advance(self, amount: Any = 1, tokens: Optional[Mapping] = None) -> None:
        """
        Advance the counter.

        A mapping passed as the first argument is treated as tokens with an
        implicit amount of 1. Reaching the total finishes the bar. Renders
        are skipped while inside the throttle window, the counter still moves.

        Args:
            amount: Progress to add
            tokens: Custom token values used by the next render only
        """
        if isinstance(amount, Mapping):
            self.advance_with_tokens(amount)
            return
        if self.is_done():
            return

        with self._lock:
            if self.is_done():
                return
            if self._state == BarState.CREATED:
                if self._current == 0:
                    self._start_at = time.time()
                self._state = BarState.RUNNING

            now = time.time()
            self._current += amount
            self._tokens = dict(tokens or {})
            self._meter.sample(now, amount)

            if not self.no_width and self._current >= self.total:
                self.finish()
                return

            if time.time() - self._last_render_time < self._render_period:
                return
            self.render()
            self._emit(BarEvent.PROGRESS)

    def advance_with_tokens(self, tokens: Mapping) -> None:
        """Advance by one with custom token values."""
        self.advance(1, tokens)

    def iterate(self, iterable: Iterable[T], amount: float = 1) -> Iterator[T]:
        """
        Wrap an iterable so every element advances the bar before it is yielded.

        The total is set from len(iterable) when the iterable is sized,
        otherwise the bar switches to unknown-total mode. Restarting the
        returned iterator does not reset the counter.

        Args:
            iterable: Elements to iterate over
            amount: Progress made per element
        """
        try:
            self.update(total=len(iterable))
        except TypeError:
            self.update(no_width=True)

        def generate() -> Iterator[T]:
            for element in iterable:
                self.advance(amount)
                yield element

        return generate()

    def render(self) -> None:
        """Render the current state to the output."""
        if self.is_done():
            return

        with self._lock:
            prefix = ""
            if self.hide_cursor and self._last_render_width == 0 and not self._reached_total():
                prefix = Cursor.hide()

            formatted = self._formatter.decorate(self, self._format, self._tokens)

            self._write(formatted, clear_first=True, prefix=prefix)

            self._last_render_time = time.time()
            self._last_render_width = len(formatted)

    def resize(self, new_width: Optional[int] = None) -> None:
        """Clear the line and optionally change the bar width."""
        if self.is_done():
            return

        with self._lock:
            self.clear_line()
            if new_width is not None:
                self.update(width=new_width)

    def finish(self) -> None:
        """
        Complete the progress.

        Forces the counter to the total, renders once more and leaves or
        clears the line. The meter is released and the bar marked done even
        when writing fails.
        """
        with self._lock:
            if self.is_done():
                return
            try:
                if not self.no_width:
                    self._current = self.total
                self.render()
                self._close_line()
            finally:
                self._meter.clear()
                self._state = BarState.DONE
                logger.debug(f"Finished bar '{self._format}' at {self._current}")
                self._emit(BarEvent.DONE)

    def stop(self) -> None:
        """Stop and cancel the progress at the current position."""
        with self._lock:
            if self.is_done():
                return
            try:
                self.render()
                self._close_line()
            finally:
                self._meter.clear()
                self._state = BarState.STOPPED
                logger.debug(f"Stopped bar '{self._format}' at {self._current}")
                self._emit(BarEvent.STOPPED)

    def _close_line(self) -> None:
        """Show the cursor again and clear or terminate the bar's line."""
        if self.hide_cursor and self._last_render_width != 0:
            self._write(Cursor.show())
        if self.clear:
            self.clear_line()
        elif self._multibar is None:
            self._write("\n")

    def clear_line(self) -> None:
        """Clear the bar's line."""
        self._write(Cursor.clear_line())

    def log(self, message: str) -> None:
        """
        Log a message above the bar.

        While running, the message is padded to the width of the last render
        so no bar characters are left behind, and the bar is drawn again
        below it.

        Args:
            message: Text to print, line breaks are replaced with spaces
        """
        sanitized = re.sub(r"[\r\n]", " ", str(message))
        if self.is_done():
            self._write(sanitized + "\n")
            return

        with self._lock:
            self._write(self._padout(sanitized) + "\n", clear_first=True)
            self.render()

    def on(self, event: Any, listener: Callable[..., Any]) -> "ProgressBar":
        """
        Register a listener for an event.

        Args:
            event: BarEvent or its name ("progress", "done", "stopped")
            listener: Called without arguments when the event fires

        Returns:
            The bar itself for chaining
        """
        event = BarEvent(event) if not isinstance(event, BarEvent) else event
        with self._lock:
            self._callbacks[event].append(listener)
        return self

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reached_total(self) -> bool:
        return not self.no_width and self._current >= self.total

    def _padout(self, message: str) -> str:
        if self._last_render_width > len(message):
            message += " " * (self._last_render_width - len(message))
        return message

    def _write(self, data: str, clear_first: bool = False, prefix: str = "") -> None:
        """Write to the output, on the bar's own row when under a coordinator."""
        output = self.output
        line = prefix + (Cursor.column(1) if clear_first else "")

        if self._multibar is None:
            output.write(line + data)
            output.flush()
            return

        inset = self.line_inset()
        with self._multibar.cursor_lock:
            if self._first_render:
                self._multibar.claim_row(self, line + inset + data)
                self._first_render = False
            else:
                lines_up = self._multibar.rows() - self._row
                output.write(Cursor.save() + Cursor.up(lines_up) + line + inset + data + Cursor.restore())
            output.flush()

    def _emit(self, event: BarEvent) -> None:
        """Notify listeners in registration order, isolating their failures."""
        config = get_config()
        for listener in list(self._callbacks[event]):
            try:
                listener()
                self._callback_errors[listener] = 0
            except Exception as e:
                count = self._callback_errors.get(listener, 0) + 1
                self._callback_errors[listener] = count
                if config.log_callback_errors:
                    logger.warning(
                        f"Listener error on '{event.value}' for bar '{self._format}': {e}. "
                        f"Error count: {count}"
                    )
                if count >= config.max_callback_errors:
                    logger.error(f"Disabling listener on '{event.value}' after {count} errors")
                    self._callbacks[event].remove(listener)

    def __str__(self) -> str:
        return self._format

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} "
            f"format={self._format!r}, current={self._current}, total={self.total}, "
            f"width={self.width}, complete={self.complete!r}, head={self.head!r}, "
            f"incomplete={self.incomplete!r}, interval={self.interval}, state={self._state.value}>"
        )
