"""TokenFormatter tests

Covers the built-in tokens, custom renderers and the bar glyph budget.
"""

import re
from unittest.mock import patch

from termbars.progress import TokenFormatter


class TestBarGlyph:
    """Bar glyph rendering"""

    def test_half_ratio_with_head(self, make_bar):
        bar = make_bar(":bar", total=10, width=10, head="›")
        bar.current = 5

        glyph = bar._formatter.render_bar(bar)

        assert glyph == "=====›    "
        assert len(glyph) == 10

    def test_half_ratio_without_head(self, make_bar):
        bar = make_bar(":bar", total=10, width=10)
        bar.current = 5

        assert bar._formatter.render_bar(bar) == "=====     "

    def test_fraction_is_truncated(self, make_bar):
        bar = make_bar(":bar", total=3, width=10, complete="#", incomplete="-")
        bar.current = 2

        # 2/3 of 10 is 6.67, never rounded up
        assert bar._formatter.render_bar(bar) == "######----"

    def test_full_bar_has_no_head(self, make_bar):
        bar = make_bar(":bar", total=10, width=10, head=">")
        bar.finish()

        assert bar._formatter.render_bar(bar) == "=" * 10

    def test_unknown_total_renders_empty_glyph(self, make_bar):
        bar = make_bar(":bar", total=None, width=10)

        assert bar._formatter.render_bar(bar) == ""

    def test_zero_width_fills_remaining_terminal_columns(self, make_bar):
        bar = make_bar("[:bar]", total=10, width=0)
        bar.current = 5

        with patch.object(bar, "max_columns", return_value=30):
            line = bar._formatter.decorate(bar, "[:bar]")

        assert len(line) == 30
        assert line == "[" + "=" * 14 + " " * 14 + "]"


class TestTokenFormatter:
    """Token decoration"""

    def test_counts_and_percent(self, make_bar):
        bar = make_bar(total=10)
        bar.current = 5

        assert bar._formatter.decorate(bar, ":current/:total :percent") == "5/10 50%"

    def test_decorate_reflects_live_state(self, make_bar):
        bar = make_bar(total=10)
        formatter = bar._formatter

        bar.current = 3
        first = formatter.decorate(bar, ":current")
        bar.current = 7
        second = formatter.decorate(bar, ":current")

        assert (first, second) == ("3", "7")

    def test_unknown_markers_are_left_verbatim(self, make_bar):
        bar = make_bar(total=10)

        assert bar._formatter.decorate(bar, ":title :percent") == ":title 0%"

    def test_use_registers_custom_token(self, make_bar):
        bar = make_bar(total=10)
        bar.use("title", lambda b: f"job-{int(b.current)}")
        bar.current = 4

        assert bar._formatter.decorate(bar, ":title :current") == "job-4 4"

    def test_use_overrides_builtin_token(self, make_bar):
        bar = make_bar(total=10)
        bar.use("percent", lambda b: "n/a")

        assert bar._formatter.decorate(bar, ":percent") == "n/a"

    def test_eta_unknown_before_progress(self, make_bar):
        bar = make_bar(total=10)

        assert bar._formatter.decorate(bar, ":eta") == "--:--"

    def test_elapsed_uses_clock_format(self, make_bar):
        bar = make_bar(total=10)
        bar.start()

        assert re.fullmatch(r"\d\d:\d\d", bar._formatter.decorate(bar, ":elapsed"))

    def test_byte_tokens(self, make_bar):
        bar = make_bar(total=4096)
        bar.current = 2048

        assert bar._formatter.decorate(bar, ":current_byte/:total_byte") == "2.00kB/4.00kB"

    def test_unknown_total_token(self, make_bar):
        bar = make_bar(total=None)

        assert bar._formatter.decorate(bar, ":current/:total") == "0/-"

    def test_custom_token_value_counts_against_bar_budget(self, make_bar):
        bar = make_bar(":title [:bar]", total=10, width=0)
        bar.current = 5

        with patch.object(bar, "max_columns", return_value=30):
            line = bar._formatter.decorate(bar, ":title [:bar]", {"title": "downloading"})

        assert len(line) == 30
        assert line.startswith("downloading [")

    def test_short_token_does_not_clobber_longer_name(self, make_bar, output):
        bar = make_bar(":t :title", total=10)

        bar.advance(1, {"t": "x", "title": "y"})

        assert output.getvalue().endswith("x y")

    def test_custom_token_value_is_not_reparsed(self, make_bar):
        bar = make_bar(total=10)

        assert bar._formatter.decorate(bar, ":title", {"title": ":percent"}) == ":percent"

    def test_empty_formatter_leaves_template_untouched(self, make_bar):
        bar = make_bar(total=10)
        formatter = TokenFormatter()

        assert formatter.decorate(bar, "[:bar] :percent") == "[:bar] :percent"
