"""
Token Formatter

Expands a bar's format template by replacing ``:token`` markers with the
output of registered renderers. Durations and byte sizes are formatted
with tqdm's helpers so they read like a tqdm bar.
"""

import logging
import math
import re
import time
from threading import RLock
from typing import TYPE_CHECKING, Callable, Dict, List, Mapping, Optional

from tqdm import tqdm

if TYPE_CHECKING:
    from termbars.progress.core.bar import ProgressBar

logger = logging.getLogger(__name__)

TokenRenderer = Callable[["ProgressBar"], str]

TOKEN_PATTERN = re.compile(r":([a-zA-Z_]\w*)")

BAR_TOKEN = "bar"


def _format_number(value: float) -> str:
    """Render integral floats without a trailing .0"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _format_bytes(value: float) -> str:
    return tqdm.format_sizeof(value, "B", 1024)


def render_current(bar: "ProgressBar") -> str:
    return _format_number(bar.current)


def render_total(bar: "ProgressBar") -> str:
    if bar.no_width:
        return "-"
    return _format_number(bar.total)


def render_percent(bar: "ProgressBar") -> str:
    return f"{int(bar.ratio * 100)}%"


def render_elapsed(bar: "ProgressBar") -> str:
    return tqdm.format_interval(max(0.0, time.time() - bar.start_at))


def render_eta(bar: "ProgressBar") -> str:
    """Remaining time extrapolated from elapsed time and ratio."""
    ratio = bar.ratio
    if ratio <= 0 or bar.no_width:
        return "--:--"
    elapsed = max(0.0, time.time() - bar.start_at)
    return tqdm.format_interval(elapsed / ratio * (1 - ratio))


def render_rate(bar: "ProgressBar") -> str:
    return f"{bar.rate:.2f}"


def render_mean_rate(bar: "ProgressBar") -> str:
    return f"{bar.mean_rate:.2f}"


def render_byte_rate(bar: "ProgressBar") -> str:
    return _format_bytes(bar.rate)


def render_mean_byte(bar: "ProgressBar") -> str:
    return _format_bytes(bar.mean_rate)


def render_current_byte(bar: "ProgressBar") -> str:
    return _format_bytes(bar.current)


def render_total_byte(bar: "ProgressBar") -> str:
    if bar.no_width:
        return "-"
    return _format_bytes(bar.total)


class TokenFormatter:
    """
    Registry of token renderers plus the decoration pass.

    Renderers are evaluated against the bar's live state on every call to
    decorate(); nothing is memoized. The ``:bar`` token is expanded last
    because its width depends on how much room the rest of the line,
    including the coordinator inset, takes.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._renderers: Dict[str, Callable] = {}

    def load(self) -> None:
        """Register the built-in token renderers."""
        with self._lock:
            self._renderers.update({
                BAR_TOKEN: self.render_bar,
                "current": render_current,
                "total": render_total,
                "percent": render_percent,
                "elapsed": render_elapsed,
                "eta": render_eta,
                "rate": render_rate,
                "mean_rate": render_mean_rate,
                "byte_rate": render_byte_rate,
                "mean_byte": render_mean_byte,
                "current_byte": render_current_byte,
                "total_byte": render_total_byte,
            })

    def use(self, name: str, renderer: TokenRenderer) -> None:
        """
        Register or override a token renderer.

        Args:
            name: Token name without the leading colon
            renderer: Function taking the bar and returning the replacement text
        """
        if not callable(renderer):
            raise TypeError(f"Renderer for token '{name}' must be callable")
        with self._lock:
            self._renderers[name.lstrip(":")] = renderer

    def decorate(self, bar: "ProgressBar", template: str, tokens: Optional[Mapping] = None) -> str:
        """
        Expand a template against the bar's current state.

        Custom token values are inserted literally and never re-parsed.
        A marker matches a whole token name, so ``:t`` never eats into
        ``:title``. Registered renderers take precedence over custom values.

        Args:
            bar: Bar whose state feeds the renderers
            template: Format string containing ``:token`` markers
            tokens: Custom token values for this render

        Returns:
            The rendered line; unknown markers are left verbatim
        """
        with self._lock:
            renderers = dict(self._renderers)
        tokens = tokens or {}
        bar_renderer = renderers.get(BAR_TOKEN)

        # None marks where the bar glyph goes
        parts: List[Optional[str]] = []
        position = 0
        for match in TOKEN_PATTERN.finditer(template):
            parts.append(template[position:match.start()])
            name = match.group(1)
            if name == BAR_TOKEN and bar_renderer is not None:
                parts.append(None)
            elif name != BAR_TOKEN and name in renderers:
                parts.append(str(renderers[name](bar)))
            elif name in tokens:
                parts.append(str(tokens[name]))
            else:
                parts.append(match.group(0))
            position = match.end()
        parts.append(template[position:])

        occurrences = parts.count(None)
        if occurrences == 0:
            return "".join(parts)

        if bar_renderer == self.render_bar:
            used = sum(len(part) for part in parts if part is not None) + len(bar.line_inset())
            available = (bar.max_columns() - used) // occurrences
            glyph = self.render_bar(bar, available=max(0, available))
        else:
            glyph = str(bar_renderer(bar))
        return "".join(glyph if part is None else part for part in parts)

    def render_bar(self, bar: "ProgressBar", available: Optional[int] = None) -> str:
        """
        Draw the bar glyph.

        The complete part is ratio * width truncated, followed by one head
        glyph while unfinished, padded with incomplete glyphs to the width.

        Args:
            bar: Bar to draw
            available: Columns left on the line, used when the bar has no width set
        """
        width = bar.width
        if not width:
            width = available if available is not None else bar.max_columns()
        if width <= 0 or bar.no_width:
            return ""

        ratio = bar.ratio
        complete_length = min(width, int(math.floor(ratio * width)))
        glyphs = [bar.complete] * complete_length
        remaining = width - complete_length
        if bar.head and ratio < 1 and remaining > 0:
            glyphs.append(bar.head)
            remaining -= 1
        glyphs.extend([bar.incomplete] * remaining)
        return "".join(glyphs)
