"""Simulate capture histories with test results under the two-state model.

Individuals are marked at a release occasion, where they are detected with
certainty and tested. Afterwards the true state follows the transition matrix
and each occasion's observation is drawn from the observation matrix row of
the current state.

Typical usage example:

    params = ModelParams(**DEFAULT_SIM_PARAMS)
    sim = simulate_histories(params, n_released=[50] * 5 + [0], rng=42)
    y = encode_observations(sim.capture, sim.test)
"""

import logging

import numpy as np

from mscr.config import (
    DEFAULT_SIM_INIT_PROBS, LIVE_STATES, OBS_NOT_SEEN, OBS_POSITIVE, N_OBS, N_STATES,
    state_index,
)
from mscr.model.matrices import observation_matrix, transition_matrix
from mscr.types import ModelParams, SimulationResult

log = logging.getLogger(__name__)


def simulate_histories(
    params: ModelParams,
    n_released,
    initial_state_probs=None,
    rng: np.random.Generator | int | None = None,
) -> SimulationResult:
    """Draw true states, detections and test results.

    Args:
        params: Model parameters.
        n_released: Number of individuals marked at each occasion; its
            length sets the number of occasions.
        initial_state_probs: Probability of each live state at marking.
        rng: Generator or seed.

    Returns:
        SimulationResult with capture, test and true state matrices.
    """
    n_released = np.asarray(n_released, dtype=np.int64)
    if n_released.ndim != 1 or n_released.size < 2:
        raise ValueError("n_released must list releases for at least 2 occasions")
    if np.any(n_released < 0):
        raise ValueError("n_released must be non-negative")

    if initial_state_probs is None:
        initial_state_probs = DEFAULT_SIM_INIT_PROBS
    init_probs = np.asarray(initial_state_probs, dtype=np.float64)
    if init_probs.shape != (len(LIVE_STATES),) or not np.isclose(init_probs.sum(), 1.0):
        raise ValueError(
            f"initial_state_probs must be {len(LIVE_STATES)} probabilities summing to 1"
        )

    rng = np.random.default_rng(rng)
    trans = np.asarray(transition_matrix(params))
    obs_probs = np.asarray(observation_matrix(params))

    n_occasions = n_released.size
    n_individuals = int(n_released.sum())
    release = np.repeat(np.arange(n_occasions), n_released)

    states = np.zeros((n_individuals, n_occasions), dtype=np.int64)
    obs = np.full((n_individuals, n_occasions), OBS_NOT_SEEN, dtype=np.int64)

    for i in range(n_individuals):
        f = release[i]
        state = rng.choice(LIVE_STATES, p=init_probs)
        states[i, f] = state
        # Marking is a detection with a test
        obs[i, f] = state

        for t in range(f + 1, n_occasions):
            state = rng.choice(N_STATES, p=trans[state_index(state)]) + 1
            states[i, t] = state
            obs[i, t] = rng.choice(N_OBS, p=obs_probs[state_index(state)]) + 1

    capture = (obs != OBS_NOT_SEEN).astype(np.float64)
    test = (obs == OBS_POSITIVE).astype(np.float64)

    log.info(
        f"Simulated {n_individuals} individuals over {n_occasions} occasions, "
        f"{int(capture.sum())} detections"
    )
    return SimulationResult(capture=capture, test=test, states=states)
