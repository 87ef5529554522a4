"""
Pytest configuration and shared fixtures for unit tests.
"""

import io
from datetime import date, timezone

import pytest

from irc_log_pipeline.ingestion import Context


@pytest.fixture
def register_formats():
    """
    Fixture to ensure formats are registered before tests that need them.

    Since FormatRegistry.clear() may have been called by other tests, the
    built-in formats are explicitly re-registered.
    """
    from irc_log_pipeline.ingestion.formats import register_builtin_formats
    from irc_log_pipeline.ingestion.registry import FormatRegistry

    if not FormatRegistry.is_format_registered("weechat"):
        register_builtin_formats()


@pytest.fixture
def context() -> Context:
    """Plain UTC context without channel or date override."""
    return Context()


@pytest.fixture
def dated_context() -> Context:
    """UTC context with a fixed override date and channel."""
    return Context(
        timezone_in=timezone.utc,
        timezone_out=timezone.utc,
        override_date=date(2016, 2, 26),
        channel="#example",
    )


def as_reader(text: str) -> io.BytesIO:
    """Wrap log text in a binary stream."""
    return io.BytesIO(text.encode("utf-8"))


@pytest.fixture
def reader():
    """Factory turning log text into a binary stream."""
    return as_reader
