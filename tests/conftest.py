"""Shared fixtures for the SIR simulation tests."""

from __future__ import annotations

import pytest

from sir_abm.config import SimulationConfig
from tests.helpers import make_config


@pytest.fixture
def small_config() -> SimulationConfig:
    return make_config()
