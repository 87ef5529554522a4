"""
Shared fixtures for integration tests.

Provides:
- Registered built-in formats
- Format instances
- A directory of sample logs, one of them gzip-compressed
"""

import gzip
from pathlib import Path

import pytest

from irc_log_pipeline.ingestion import Context, get_format

from sample_logs import ENERGYMECH_LOG, WEECHAT_DAY_A, WEECHAT_DAY_B


@pytest.fixture(autouse=True)
def register_formats():
    """Re-register built-in formats in case a unit test cleared the registry."""
    from irc_log_pipeline.ingestion.formats import register_builtin_formats
    from irc_log_pipeline.ingestion.registry import FormatRegistry

    if not FormatRegistry.is_format_registered("weechat"):
        register_builtin_formats()


@pytest.fixture
def context() -> Context:
    return Context()


@pytest.fixture
def energymech():
    return get_format("energymech")


@pytest.fixture
def weechat():
    return get_format("weechat")


@pytest.fixture
def ndjson():
    return get_format("ndjson")


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Directory holding 2016-02-26.log (energymech), a.weechat and b.weechat.gz."""
    (tmp_path / "2016-02-26.log").write_text(ENERGYMECH_LOG, encoding="utf-8")
    (tmp_path / "a.weechat").write_text(WEECHAT_DAY_A, encoding="utf-8")
    with gzip.open(tmp_path / "b.weechat.gz", "wb") as f:
        f.write(WEECHAT_DAY_B.encode("utf-8"))
    return tmp_path
