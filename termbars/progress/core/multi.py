"""
Multi Progress Bar Module

Coordinator that lets several bars share one terminal region, each on its
own fixed row, with an optional aggregate bar on top.
"""

import logging
from threading import RLock
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from termbars.exceptions import CoordinatorError
from termbars.progress.config import BarConfig
from termbars.progress.core.bar import BarEvent, ProgressBar
from termbars.progress.display.terminal import Cursor

if TYPE_CHECKING:
    from termbars.logging import LoggingManager

logger = logging.getLogger(__name__)

DEFAULT_INSET = {
    "top": "┌ ",
    "middle": "├ ",
    "bottom": "└ ",
}


class MultiProgressBar:
    """
    Coordinates a block of progress bars on consecutive terminal rows.

    Rows are handed out in registration order starting at 0 and never
    reassigned. The cursor rests one line below the block; a bar reaches
    its row by moving up ``rows() - row`` lines. All writes, from any bar
    of the block, go through one shared cursor lock.

    Usage:
        bars = MultiProgressBar("main [:bar] :percent")
        bar = bars.register("foo [:bar] :percent", total=20)
        bars.start()
    """

    def __init__(
        self,
        format: Optional[str] = None,
        config: Optional[BarConfig] = None,
        style: Optional[Dict[str, str]] = None,
        logging_manager: Optional["LoggingManager"] = None,
        **options: Any,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            format: Template of the aggregate bar, no aggregate bar when None
            config: Configuration shared by every registered bar
            style: Line insets keyed by "top", "middle" and "bottom"
            logging_manager: Switched to progress mode while bars are running
            **options: Overrides applied on top of the shared configuration
        """
        self._config = (config or BarConfig()).merged(**options)
        self._inset = dict(DEFAULT_INSET, **(style or {}))
        self._logging_manager = logging_manager
        self._logging_mode_active = False

        self._lock = RLock()
        self.cursor_lock = RLock()
        self._aggregate_lock = RLock()
        self._bars: List[ProgressBar] = []
        self._next_index = 0
        self._rows = 0
        self._finished = False
        self._callbacks: Dict[BarEvent, List[Callable[..., Any]]] = {event: [] for event in BarEvent}

        self._top_bar: Optional[ProgressBar] = None
        if format is not None:
            self._top_bar = self.register(format, observable=False)

    @property
    def top_bar(self) -> Optional[ProgressBar]:
        return self._top_bar

    @property
    def bars(self) -> List[ProgressBar]:
        """Registered bars excluding the aggregate bar."""
        with self._lock:
            return [bar for bar in self._bars if bar is not self._top_bar]

    def register(self, format: str, observable: bool = True, **options: Any) -> ProgressBar:
        """
        Create a bar on the next free row.

        Args:
            format: Template of the new bar
            observable: Whether the aggregate bar follows this bar
            **options: Per-bar configuration overrides

        Returns:
            The new bar, ready to be advanced by the caller
        """
        bar = ProgressBar(format, self._config.merged(**options))
        with self._lock:
            row = self._next_index
            self._next_index += 1
            bar.attach_to(self, row)
            self._bars.append(bar)
        logger.debug(f"Registered bar '{format}' on row {row}")

        if observable:
            self._observe(bar)
            if self._top_bar is not None:
                self._top_bar.update(total=self.total())
        return bar

    def _observe(self, bar: ProgressBar) -> None:
        bar.on(BarEvent.PROGRESS, self._on_progress)
        bar.on(BarEvent.DONE, self._on_finished)
        bar.on(BarEvent.STOPPED, self._on_finished)

    def start(self) -> None:
        """Start every registered bar, drawing the aggregate row first."""
        with self._lock:
            bars = list(self._bars)
        if not bars:
            raise CoordinatorError("No progress bars registered")

        if self._logging_manager and not self._logging_mode_active:
            try:
                self._logging_manager.enable_progress_mode()
                self._logging_mode_active = True
                logger.debug("Enabled progress mode in logging manager")
            except Exception as e:
                logger.warning(f"Failed to enable logging progress mode: {e}")

        for bar in sorted(bars, key=lambda b: b.row):
            bar.start()

    def next_row(self) -> int:
        """Return the next row to become visible and advance the counter."""
        with self.cursor_lock:
            row = self._rows
            self._rows += 1
            return row

    def rows(self) -> int:
        """Number of rows claimed on the terminal so far."""
        return self._rows

    def claim_row(self, bar: ProgressBar, data: str) -> None:
        """
        Draw a bar for the first time.

        A bar on the next free row writes its line and a newline, growing
        the block by one. Rows registered before it but not drawn yet are
        claimed as blank lines first. A row already claimed (as a blank
        line by a later bar) is drawn in place.

        Must be called while holding cursor_lock.
        """
        output = bar.output
        if bar.row < self._rows:
            lines_up = self._rows - bar.row
            output.write(Cursor.save() + Cursor.up(lines_up) + data + Cursor.restore())
            return

        while self._rows < bar.row:
            self.next_row()
            output.write("\n")
        self.next_row()
        output.write(data + "\n")

    def line_inset(self, bar: ProgressBar) -> str:
        """Prefix drawn before a bar's line, tree glyphs under an aggregate bar."""
        if self._top_bar is None:
            return ""
        if bar is self._top_bar:
            return self._inset["top"]
        if bar.row == self._next_index - 1:
            return self._inset["bottom"]
        return self._inset["middle"]

    def total(self) -> Optional[float]:
        """Sum of the totals of observed bars, None when any is unknown."""
        bars = self.bars
        if any(bar.no_width for bar in bars):
            return None
        return sum(bar.total for bar in bars)

    def current(self) -> float:
        """Sum of the counters of observed bars."""
        return sum(bar.current for bar in self.bars)

    def is_complete(self) -> bool:
        """Check if every bar finished."""
        bars = self.bars
        return bool(bars) and all(bar.is_complete() for bar in bars)

    def is_stopped(self) -> bool:
        """Check if every bar is done and at least one was stopped."""
        bars = self.bars
        return self.is_done() and any(bar.is_stopped() for bar in bars)

    def is_done(self) -> bool:
        """Check if every bar is finished or stopped."""
        bars = self.bars
        return bool(bars) and all(bar.is_done() for bar in bars)

    def stop(self) -> None:
        """Stop all bars."""
        for bar in self._all_bars():
            bar.stop()

    def finish(self) -> None:
        """Finish all bars."""
        for bar in self._all_bars():
            bar.finish()

    def on(self, event: Any, listener: Callable[..., Any]) -> "MultiProgressBar":
        """Register a listener for block-wide progress, done or stopped events."""
        event = BarEvent(event) if not isinstance(event, BarEvent) else event
        with self._lock:
            self._callbacks[event].append(listener)
        return self

    def _all_bars(self) -> List[ProgressBar]:
        bars = self.bars
        if self._top_bar is not None:
            bars.insert(0, self._top_bar)
        return bars

    def _sync_top_bar(self) -> None:
        """Move the aggregate bar to the children's sum, reading and writing under one lock."""
        if self._top_bar is None:
            return
        with self._aggregate_lock:
            if not self._top_bar.is_done():
                self._top_bar.current = self.current()

    def _on_progress(self) -> None:
        self._sync_top_bar()
        self._emit(BarEvent.PROGRESS)

    def _on_finished(self) -> None:
        self._sync_top_bar()
        with self._lock:
            if self._finished or not self.is_done():
                return
            self._finished = True

        if self._top_bar is not None:
            if self.is_stopped():
                self._top_bar.stop()
            else:
                self._top_bar.finish()

        if self._logging_manager and self._logging_mode_active:
            try:
                self._logging_manager.disable_progress_mode()
                self._logging_mode_active = False
                logger.debug("Disabled progress mode in logging manager")
            except Exception as e:
                logger.warning(f"Failed to disable logging progress mode: {e}")

        self._emit(BarEvent.STOPPED if self.is_stopped() else BarEvent.DONE)

    def _emit(self, event: BarEvent) -> None:
        with self._lock:
            listeners = list(self._callbacks[event])
        for listener in listeners:
            try:
                listener()
            except Exception as e:
                logger.warning(f"Coordinator listener error on '{event.value}': {e}")
