"""First detection occasion per individual."""

import numpy as np

from mscr.config import OBS_NOT_SEEN
from mscr.errors import NeverDetected


def first_occasions(y: np.ndarray) -> np.ndarray:
    """Locate each individual's first detection.

    Args:
        y: (N, T) observation codes.

    Returns:
        (N,) int64 0-based occasion index of the first code other than
        not-seen (read-only).

    Raises:
        NeverDetected: If any row is not-seen at every occasion.
    """
    y = np.asarray(y)
    seen = y != OBS_NOT_SEEN

    never = np.flatnonzero(~seen.any(axis=1))
    if never.size:
        raise NeverDetected(never)

    # argmax returns the first True along the row
    first = seen.argmax(axis=1).astype(np.int64)
    first.setflags(write=False)
    return first
