"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Ensure src is on the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mscr.types import enable_x64  # noqa: E402

enable_x64()


@pytest.fixture
def small_histories():
    """Capture and test matrices for four individuals over five occasions."""
    capture = np.array([
        [1, 1, 0, 1, 0],
        [0, 1, 1, 0, 0],
        [0, 0, 0, 0, 1],
        [1, 0, 0, 0, 0],
    ], dtype=float)
    test = np.array([
        [0, 1, 0, 1, 0],
        [0, 0, 1, 0, 0],
        [0, 0, 0, 0, 1],
        [1, 0, 0, 0, 0],
    ], dtype=float)
    return capture, test
