"""Latent true-state inputs: fixed-by-observation states and sampler seeds.

For individual i with first detection f = first[i], each occasion t is one of:

    t <  f              not applicable (not yet in the study)
    t == f              fixed by the model to the observed state
    t >  f, y != 3      known: the observed live state
    t >  f, y == 3      unknown: seeded with a random live state

known_states covers the third case and initial_latent_values the fourth,
so the two never overlap.
"""

import numpy as np

from mscr.config import LIVE_STATES, OBS_NEGATIVE, OBS_NOT_SEEN, OBS_POSITIVE, STATE_A, STATE_B
from mscr.errors import MSCRError
from mscr.types import LatentStates

# Live state implied by each detected observation code
OBS_TO_STATE = {OBS_NEGATIVE: STATE_A, OBS_POSITIVE: STATE_B}


def _after_first_mask(first: np.ndarray, n_occasions: int) -> np.ndarray:
    """(N, T) bool, True strictly after each individual's first occasion."""
    occasions = np.arange(n_occasions)
    return occasions[None, :] > np.asarray(first)[:, None]


def _check_inputs(y: np.ndarray, first: np.ndarray) -> None:
    if y.ndim != 2:
        raise ValueError(f"Observation matrix must be 2-D, got {y.ndim}-D")
    if first.shape != (y.shape[0],):
        raise ValueError(
            f"first has shape {first.shape}, expected ({y.shape[0]},)"
        )
    if first.size and (first.min() < 0 or first.max() >= y.shape[1]):
        raise IndexError(f"first occasions must lie in 0..{y.shape[1] - 1}")
    at_first = y[np.arange(y.shape[0]), first]
    if np.any(at_first == OBS_NOT_SEEN):
        rows = np.flatnonzero(at_first == OBS_NOT_SEEN)
        raise MSCRError(f"Rows {rows.tolist()} are not detected at their first occasion")


def known_states(y: np.ndarray, first: np.ndarray) -> np.ndarray:
    """Latent states fixed by direct observation after first capture.

    Args:
        y: (N, T) observation codes.
        first: (N,) 0-based first detection occasions.

    Returns:
        (N, T) float64 matrix of live-state codes, NaN where not known
        (read-only).
    """
    y = np.asarray(y)
    first = np.asarray(first)
    _check_inputs(y, first)

    known = np.full(y.shape, np.nan)
    after = _after_first_mask(first, y.shape[1])
    for obs_code, state in OBS_TO_STATE.items():
        known[after & (y == obs_code)] = state

    known.setflags(write=False)
    return known


def initial_latent_values(
    y: np.ndarray,
    first: np.ndarray,
    rng: np.random.Generator | int | None = None,
) -> np.ndarray:
    """Random live states for latent cells the sampler has to update.

    Only not-seen occasions after first capture are seeded, drawn uniformly
    from the live states. A fresh draw per call; y and first are not
    recomputed.

    Args:
        y: (N, T) observation codes.
        first: (N,) 0-based first detection occasions.
        rng: Generator or seed.

    Returns:
        (N, T) float64 matrix, NaN where no initial value is needed.
    """
    y = np.asarray(y)
    first = np.asarray(first)
    _check_inputs(y, first)
    rng = np.random.default_rng(rng)

    init = np.full(y.shape, np.nan)
    unknown = _after_first_mask(first, y.shape[1]) & (y == OBS_NOT_SEEN)
    init[unknown] = rng.choice(LIVE_STATES, size=int(unknown.sum()))
    return init


def resolve_latent_states(
    y: np.ndarray,
    first: np.ndarray,
    rng: np.random.Generator | int | None = None,
) -> LatentStates:
    """Known states plus one set of initial values."""
    latent = LatentStates(
        known=known_states(y, first),
        initial=initial_latent_values(y, first, rng),
    )
    check_latent_partition(y, first, latent)
    return latent


def check_latent_partition(
    y: np.ndarray,
    first: np.ndarray,
    latent: LatentStates,
) -> None:
    """Verify every cell is exactly one of fixed / known / seeded / not applicable.

    Raises:
        MSCRError: On overlap, gaps, or seeds outside the live states.
    """
    y = np.asarray(y)
    n_individuals, n_occasions = y.shape
    has_known = ~np.isnan(latent.known)
    has_init = ~np.isnan(latent.initial)

    overlap = has_known & has_init
    if overlap.any():
        row, col = np.argwhere(overlap)[0]
        raise MSCRError(f"Latent cell ({row}, {col}) is both known and seeded")

    at_first = np.zeros(y.shape, dtype=bool)
    at_first[np.arange(n_individuals), np.asarray(first)] = True
    after = _after_first_mask(first, n_occasions)

    covered = has_known.astype(int) + has_init.astype(int) + at_first.astype(int)
    expected = (after | at_first).astype(int)
    mismatch = covered != expected
    if mismatch.any():
        row, col = np.argwhere(mismatch)[0]
        raise MSCRError(
            f"Latent cell ({row}, {col}) is covered {covered[row, col]} times, "
            f"expected {expected[row, col]}"
        )

    seeds = latent.initial[has_init]
    if not np.isin(seeds, LIVE_STATES).all():
        raise MSCRError("Initial latent values must be live states")
