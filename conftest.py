"""Global test configuration and shared fixtures."""

from __future__ import annotations

import logging
import typing as t

import pytest

pytest_plugins = ("obj_mox.pytest_plugin", "pytester")


@pytest.fixture(autouse=True)
def obj_mox_debug_logging(
    caplog: pytest.LogCaptureFixture,
) -> t.Generator[None, None, None]:
    """Capture obj_mox debug records so failing tests show mock activity."""
    caplog.set_level(logging.DEBUG, logger="obj_mox")
    yield
