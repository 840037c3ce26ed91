"""
Pytest configuration and fixtures for edge-telemetry-sim.

Provides cross-platform event loop configuration and shared test utilities.
"""

import asyncio
import itertools
import sys

import pytest

# Set policy *before* pytest-asyncio creates any loops
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


@pytest.fixture
def cache_path(tmp_path):
    """Cache file location inside the per-test temp dir."""
    return tmp_path / "cached_data.json"


@pytest.fixture
def seq_generator():
    """Generator producing {"seq": 0}, {"seq": 1}, ... in order."""
    counter = itertools.count()

    def _gen():
        return {"seq": next(counter)}

    return _gen
