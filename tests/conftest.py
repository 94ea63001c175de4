"""
Pytest fixtures and configuration for the adaptive UI test suite.
"""

import random
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Ensure adaptive_ui package is importable
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from adaptive_ui import (
    AdaptiveConfig,
    AdaptiveEngine,
    InMemoryStore,
    ManualClock,
    reset_adaptive_config,
)


class ScriptedRandom(random.Random):
    """
    Random source whose random() values are scripted.

    random() returns the queued values in order and then repeats the last
    one, so a test can force the explore or exploit path of the bandit.
    randrange() keeps the seeded behavior.
    """

    # Keeps randrange() on the seeded bit generator instead of random()
    getrandbits = random.Random.getrandbits

    def __init__(self, values, seed: int = 0):
        super().__init__(seed)
        self._values = list(values)
        self._last = self._values[-1] if self._values else 0.99

    def random(self) -> float:
        if self._values:
            self._last = self._values.pop(0)
        return self._last


@pytest.fixture(autouse=True)
def _isolate_global_config(monkeypatch):
    """Keep ADAPTIVE_UI_* variables from the host out of the tests."""
    import os
    for key in list(os.environ):
        if key.startswith("ADAPTIVE_UI_"):
            monkeypatch.delenv(key, raising=False)
    reset_adaptive_config()
    yield
    reset_adaptive_config()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="adaptive_ui_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def config() -> AdaptiveConfig:
    """Default two-arm configuration."""
    return AdaptiveConfig()


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def exploit_rng() -> ScriptedRandom:
    """Random source that never explores (random() is always 0.99)."""
    return ScriptedRandom([0.99])


@pytest.fixture
def make_engine(memory_store, config, manual_clock):
    """
    Factory for engines sharing the same store and clock.

    Each call is a fresh page load. Exploration is off unless an rng is
    passed in.
    """
    def _make(store=None, cfg=None, clock=None, rng=None) -> AdaptiveEngine:
        return AdaptiveEngine(
            store=memory_store if store is None else store,
            config=cfg or config,
            clock=clock or manual_clock,
            rng=rng or ScriptedRandom([0.99]),
        )
    return _make
