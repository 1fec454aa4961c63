"""Merge detection and test matrices into multi-state observation codes.

    detect = binarize(capture)              # {0, 1}
    test   = binarize(test) * detect        # positive only where detected
    y      = detect + test                  # {0, 1, 2}
    y[y == 0] = 3                           # not seen takes the highest code
"""

import logging

import numpy as np

from mscr.config import OBS_NOT_SEEN
from mscr.errors import InvalidValue, ShapeMismatch

log = logging.getLogger(__name__)


def binarize(matrix: np.ndarray, name: str = "matrix") -> np.ndarray:
    """Reduce a raw 0/1/missing matrix to int {0, 1}.

    Values >= 1 become 1 and missing values (NaN) become 0.

    Args:
        matrix: (N, T) numeric matrix.
        name: Label used in error messages.

    Returns:
        (N, T) int8 matrix.

    Raises:
        InvalidValue: For negative, fractional or infinite entries.
    """
    arr = np.asarray(matrix, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"{name} must be 2-D (individuals x occasions), got {arr.ndim}-D")

    missing = np.isnan(arr)
    filled = np.where(missing, 0.0, arr)

    bad = ~np.isfinite(filled) | (filled < 0) | ((filled > 0) & (filled < 1))
    if bad.any():
        row, col = np.argwhere(bad)[0]
        raise InvalidValue(row, col, float(arr[row, col]), name=name)

    return (filled >= 1).astype(np.int8)


def encode_observations(capture: np.ndarray, test: np.ndarray) -> np.ndarray:
    """Combine capture and test matrices into observation codes.

    Codes: 1 = detected & test-negative, 2 = detected & test-positive,
    3 = not detected.

    Args:
        capture: (N, T) detections, values in {0, 1, missing}.
        test: (N, T) test results, values in {0, 1, missing}.

    Returns:
        (N, T) int observation matrix (read-only).
    """
    capture = np.asarray(capture, dtype=np.float64)
    test = np.asarray(test, dtype=np.float64)
    if capture.shape != test.shape:
        raise ShapeMismatch(capture.shape, test.shape)

    detect = binarize(capture, name="capture matrix")
    positive = binarize(test, name="test matrix")

    orphaned = int(np.sum((positive == 1) & (detect == 0)))
    if orphaned:
        log.warning(
            f"Ignoring {orphaned} positive test result(s) at occasions without a detection"
        )
    positive = positive * detect

    y = detect.astype(np.int64) + positive
    y[y == 0] = OBS_NOT_SEEN
    y.setflags(write=False)
    return y


def drop_never_detected(
    capture: np.ndarray,
    test: np.ndarray,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Remove individuals without any detection.

    Args:
        capture: (N, T) detections.
        test: (N, T) test results.

    Returns:
        Tuple of (capture, test, kept_rows) with kept_rows the original
        row indices of retained individuals.
    """
    capture = np.asarray(capture, dtype=np.float64)
    test = np.asarray(test, dtype=np.float64)
    if capture.shape != test.shape:
        raise ShapeMismatch(capture.shape, test.shape)

    seen = binarize(capture, name="capture matrix").any(axis=1)
    kept_rows = np.flatnonzero(seen)
    n_dropped = capture.shape[0] - kept_rows.size
    if n_dropped:
        log.warning(f"Dropping {n_dropped} individual(s) never detected")
    return capture[kept_rows], test[kept_rows], kept_rows
