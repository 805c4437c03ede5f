"""Shared test fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture
def fast_timing() -> dict:
    """Connector timings short enough for tests"""
    return {"read_timeout": 0.05, "reconnect_delay": 0.01}
