"""Configuration tests

Covers BarConfig validation and merging, the global tuning settings and
the demo's argument parsing.
"""

import logging
from unittest.mock import patch

import pytest

from termbars import ConfigurationError
from termbars.cli import parse_arguments
from termbars.progress import BarConfig, get_config, update_config


class TestBarConfig:
    """BarConfig tests"""

    def test_defaults(self):
        config = BarConfig()

        assert config.total == 100
        assert config.width == 0
        assert not config.no_width
        assert (config.complete, config.incomplete, config.head) == ("=", " ", None)
        assert config.render_period == 0

    def test_unknown_total_switches_to_no_width(self):
        assert BarConfig(total=None).no_width

    def test_render_period_from_frequency(self):
        assert BarConfig(frequency=4).render_period == 0.25

    @pytest.mark.parametrize("field", ["width", "frequency", "interval"])
    def test_negative_values_are_rejected(self, field):
        with pytest.raises(ConfigurationError):
            BarConfig(**{field: -1})

    def test_merged_returns_independent_copy(self):
        base = BarConfig(width=20)

        merged = base.merged(total=5)
        merged.update(width=30)

        assert (base.total, base.width) == (100, 20)
        assert (merged.total, merged.width) == (5, 30)

    def test_merged_total_leaves_unknown_mode(self):
        config = BarConfig(total=None).merged(total=10)

        assert not config.no_width

    def test_merged_rejects_unknown_option(self):
        with pytest.raises(ConfigurationError):
            BarConfig().merged(colour="red")

    def test_update_total_to_none(self):
        config = BarConfig()

        config.update(total=None)

        assert config.no_width


class TestProgressConfig:
    """Global tuning settings"""

    def test_update_config(self):
        update_config(max_callback_errors=1)

        assert get_config().max_callback_errors == 1

    def test_update_config_rejects_unknown_key(self):
        with pytest.raises(ConfigurationError):
            update_config(max_threads=4)


class TestParseArguments:
    """Demo argument parsing"""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("PROGRESS_FREQUENCY", "PROGRESS_WIDTH", "PROGRESS_HIDE_CURSOR", "LOG_FILE"):
            monkeypatch.delenv(name, raising=False)
        with patch("termbars.cli.config.load_dotenv"):
            yield

    def test_defaults(self):
        args = parse_arguments([])

        assert args.mode == "multi"
        assert (args.total, args.workers) == (30, 3)
        assert args.frequency == 10.0
        assert args.width == 0
        assert not args.hide_cursor
        assert args.log_file is None
        assert args.console_log_level == logging.WARNING

    def test_environment_defaults(self, monkeypatch):
        monkeypatch.setenv("PROGRESS_FREQUENCY", "2.5")
        monkeypatch.setenv("PROGRESS_WIDTH", "40")
        monkeypatch.setenv("PROGRESS_HIDE_CURSOR", "true")
        monkeypatch.setenv("LOG_FILE", "logs/demo.log")

        args = parse_arguments(["single"])

        assert args.mode == "single"
        assert args.frequency == 2.5
        assert args.width == 40
        assert args.hide_cursor
        assert str(args.log_file) == "logs/demo.log"

    def test_invalid_environment_value_falls_back(self, monkeypatch):
        monkeypatch.setenv("PROGRESS_WIDTH", "wide")

        assert parse_arguments([]).width == 0

    def test_debug_flag_wins(self):
        args = parse_arguments(["--verbose", "--debug"])

        assert args.console_log_level == logging.DEBUG

    def test_workers_must_be_positive(self):
        with pytest.raises(SystemExit):
            parse_arguments(["--workers", "0"])
