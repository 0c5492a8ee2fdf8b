"""LoggingManager and ProgressAwareConsoleHandler tests"""

import io
import logging
from pathlib import Path

import pytest

from termbars.logging import LoggingManager
from termbars.progress import ProgressBar

logger = logging.getLogger("termbars.tests")


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def manager(stream):
    manager = LoggingManager()
    manager.setup(console_level=logging.WARNING, stream=stream)
    yield manager
    manager.cleanup()


class TestConsoleRouting:
    """Console output with and without progress mode"""

    def test_normal_mode_writes_to_stream(self, manager, stream):
        logger.warning("plain")

        assert stream.getvalue() == "WARNING - plain\n"

    def test_attached_bar_receives_records(self, manager, stream):
        output = io.StringIO()
        bar = ProgressBar(":current/:total", output=output, total=10)
        bar.advance()

        with manager.progress_mode(bar):
            logger.warning("hello")

        assert "WARNING - hello" in output.getvalue()
        assert output.getvalue().endswith("1/10")
        assert stream.getvalue() == ""

    def test_attach_and_detach_bar(self, manager, stream):
        output = io.StringIO()
        bar = ProgressBar(":current/:total", output=output, total=10)
        bar.advance()

        manager.attach_bar(bar)
        assert manager.is_progress_mode_active()
        logger.error("routed")

        manager.detach_bar()
        assert not manager.is_progress_mode_active()
        logger.error("direct")

        assert "ERROR - routed" in output.getvalue()
        assert "routed" not in stream.getvalue()
        assert stream.getvalue() == "ERROR - direct\n"

    def test_records_after_bar_is_done_go_to_buffer(self, manager, stream):
        output = io.StringIO()
        bar = ProgressBar(":current", output=output, total=1)

        with manager.progress_mode(bar):
            bar.advance()
            logger.warning("late")
            assert manager.buffered_warnings == ["WARNING - late"]

        assert "WARNING - late" in stream.getvalue()


class TestBuffering:
    """Progress mode without an attached bar"""

    def test_warnings_are_buffered_and_flushed_on_disable(self, manager, stream):
        manager.enable_progress_mode()
        logger.warning("disk almost full")
        logger.info("suppressed")

        assert stream.getvalue() == ""
        assert manager.buffered_warnings == ["WARNING - disk almost full"]

        manager.disable_progress_mode()

        written = stream.getvalue()
        assert "1 warning(s) occurred during progress:" in written
        assert "WARNING - disk almost full" in written
        assert "suppressed" not in written
        assert manager.buffered_warnings == []

    def test_info_is_suppressed_while_buffering(self, stream):
        manager = LoggingManager()
        manager.setup(console_level=logging.INFO, stream=stream)
        try:
            with manager.progress_mode():
                logger.info("step done")
            assert stream.getvalue() == ""
        finally:
            manager.cleanup()

    def test_buffer_is_bounded(self, stream):
        manager = LoggingManager(max_buffered_messages=2)
        manager.setup(stream=stream)
        try:
            manager.enable_progress_mode()
            for n in range(5):
                logger.warning(f"warning {n}")

            assert manager.buffered_warnings == ["WARNING - warning 3", "WARNING - warning 4"]
        finally:
            manager.cleanup()

    def test_nested_progress_mode_is_reference_counted(self, manager):
        manager.enable_progress_mode()
        manager.enable_progress_mode()

        manager.disable_progress_mode()
        assert manager.is_progress_mode_active()

        manager.disable_progress_mode()
        assert not manager.is_progress_mode_active()

    def test_cleanup_flushes_pending_warnings(self, stream):
        manager = LoggingManager()
        manager.setup(stream=stream)
        manager.enable_progress_mode()
        logger.error("aborted")

        manager.cleanup()

        assert "ERROR - aborted" in stream.getvalue()
        assert not manager.is_progress_mode_active()


class TestFileLogging:
    """File handler"""

    def test_file_receives_debug_records(self, stream, tmp_path: Path):
        log_file = tmp_path / "logs" / "run.log"
        manager = LoggingManager()
        manager.setup(log_file=log_file, stream=stream)
        try:
            manager.enable_progress_mode()
            logger.debug("detail")
            manager.disable_progress_mode()
        finally:
            manager.cleanup()

        content = log_file.read_text()
        assert "DEBUG - detail" in content
        assert "MainThread" in content
        assert "detail" not in stream.getvalue()
