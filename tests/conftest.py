import io

import pytest

from termbars.progress import ProgressBar, ProgressConfig, set_config


@pytest.fixture(autouse=True)
def default_progress_config():
    """Every test starts from the default global tuning settings."""
    set_config(ProgressConfig())
    yield
    set_config(ProgressConfig())


@pytest.fixture
def output():
    """In-memory output sink standing in for the terminal."""
    return io.StringIO()


@pytest.fixture
def make_bar(output):
    """Factory building bars that write to the shared in-memory sink."""
    def _make(format=":current/:total", **options):
        options.setdefault("output", output)
        return ProgressBar(format, **options)
    return _make
