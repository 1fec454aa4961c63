"""Tests for first detection occasions."""

import numpy as np
import pytest

from mscr.data.encoding import encode_observations
from mscr.data.first_capture import first_occasions
from mscr.errors import NeverDetected


class TestFirstOccasions:
    def test_worked_example(self):
        """[3,1,2,3] is first seen at the second occasion (index 1)."""
        first = first_occasions(np.array([[3, 1, 2, 3]]))
        np.testing.assert_array_equal(first, [1])

    def test_small_histories(self, small_histories):
        y = encode_observations(*small_histories)
        np.testing.assert_array_equal(first_occasions(y), [0, 1, 4, 0])

    def test_never_detected_raises(self):
        """An all not-seen row is rejected with its index."""
        y = np.array([[1, 3, 3, 3], [3, 3, 3, 3], [3, 2, 3, 3]])
        with pytest.raises(NeverDetected) as exc:
            first_occasions(y)
        assert exc.value.rows == [1]

    def test_reports_every_offending_row(self):
        y = np.full((4, 3), 3)
        y[2, 0] = 1
        with pytest.raises(NeverDetected) as exc:
            first_occasions(y)
        assert exc.value.rows == [0, 1, 3]

    def test_first_is_valid_detection(self):
        """first[i] is in range and y[i, first[i]] is not 3."""
        rng = np.random.default_rng(3)
        y = rng.choice([1, 2, 3], size=(100, 8), p=[0.2, 0.1, 0.7])
        y[:, -1] = np.where((y == 3).all(axis=1), 1, y[:, -1])
        first = first_occasions(y)
        assert np.all((first >= 0) & (first < 8))
        assert np.all(y[np.arange(100), first] != 3)
        for i in range(100):
            assert np.all(y[i, :first[i]] == 3)
