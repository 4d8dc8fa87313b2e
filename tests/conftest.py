"""Shared pytest fixtures for the letter collector test suite.

Fixtures:
    dataset_root: Empty dataset directory under pytest's tmp_path
    sample_store: SampleStore rooted at dataset_root
    blank_raster: 224x224 white uint8 raster
    populate: Factory writing N samples for a letter
    letter_drawing: An 'L'-shaped two-stroke drawing
    seeded_rng: numpy RandomState with a fixed seed

Helpers:
    StaticProgress: Stand-in tracker with fixed counts, for selection tests

Markers:
    slow: Mark test as slow-running (skip with -m "not slow")
    integration: Mark test as integration test
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from letter_lib.config import ALPHABET, OUTPUT_SIZE
from letter_lib.domain.drawing import Drawing, Stroke
from letter_lib.storage.sample_store import SampleStore


# -----------------------------------------------------------------------------
# Pytest Markers
# -----------------------------------------------------------------------------

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


# -----------------------------------------------------------------------------
# Progress stand-in
# -----------------------------------------------------------------------------

class StaticProgress:
    """Tracker stand-in exposing fixed counts to the selection engine."""

    def __init__(self, counts=None, target_count=100, alphabet=ALPHABET):
        self.alphabet = alphabet
        self.target_count = target_count
        self._counts = {letter: 0 for letter in alphabet}
        self._counts.update(counts or {})

    def set_count(self, letter, count):
        self._counts[letter] = count

    def deficits(self):
        return {
            letter: self.target_count - count
            for letter, count in self._counts.items()
            if count < self.target_count
        }


def make_progress(counts=None, default=0, target_count=100):
    """StaticProgress where every letter not in ``counts`` has ``default``."""
    base = {letter: default for letter in ALPHABET}
    base.update(counts or {})
    return StaticProgress(base, target_count=target_count)


# -----------------------------------------------------------------------------
# Storage Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def dataset_root(tmp_path):
    """Return a not-yet-created dataset root inside tmp_path."""
    return tmp_path / "dataset"


@pytest.fixture
def sample_store(dataset_root):
    """Return a SampleStore rooted at dataset_root."""
    return SampleStore(dataset_root)


@pytest.fixture
def blank_raster():
    """Return a white 224x224 uint8 raster."""
    return np.full((OUTPUT_SIZE, OUTPUT_SIZE), 255, dtype=np.uint8)


@pytest.fixture
def populate(sample_store, blank_raster):
    """Return a function writing ``n`` samples for ``letter``.

    Example:
        def test_counts(populate, sample_store):
            populate('A', 3)
            assert sample_store.count('A') == 3
    """
    def _populate(letter, n):
        return [sample_store.save(letter, blank_raster) for _ in range(n)]
    return _populate


# -----------------------------------------------------------------------------
# Drawing Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def letter_drawing():
    """Return a drawing shaped like the letter 'L'.

    A vertical stroke from (100, 100) to (100, 300) and a horizontal stroke
    from (100, 300) to (220, 300), both 20 units wide.
    """
    return Drawing([
        Stroke.from_tuples([(100, 100), (100, 200), (100, 300)], width=20),
        Stroke.from_tuples([(100, 300), (160, 300), (220, 300)], width=20),
    ])


@pytest.fixture
def seeded_rng():
    """Return a numpy RandomState with a fixed seed."""
    return np.random.RandomState(1234)
