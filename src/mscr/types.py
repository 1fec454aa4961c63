"""Type aliases and named tuples for MSCR."""

from typing import NamedTuple

import jax
import jax.numpy as jnp
import numpy as np

# Array type alias (JAX arrays)
Array = jnp.ndarray


def enable_x64() -> None:
    """Switch JAX to double precision.

    Model matrix rows only sum to 1 within 1e-9 in float64. The CLI, the
    pipeline and the test suite call this; importing mscr does not.
    """
    jax.config.update("jax_enable_x64", True)


class ModelParams(NamedTuple):
    """Per-state survival, transition and detection probabilities.

    phi_a, phi_b: survival of live states A and B between occasions
    psi_ab, psi_ba: transition A -> B and B -> A, conditional on survival
    p_a, p_b: detection given alive in A or B
    """
    phi_a: float
    phi_b: float
    psi_ab: float
    psi_ba: float
    p_a: float
    p_b: float


class ModelMatrices(NamedTuple):
    """State-transition and observation tensors.

    transition: (S, N, T-1, S) indexed [from, individual, interval, to]
    observation: (S, N, T, O) indexed [state, individual, occasion, obs]
    """
    transition: Array
    observation: Array


class LatentStates(NamedTuple):
    """Latent true-state inputs for the sampler.

    known: (N, T) states fixed by direct observation after first capture,
        NaN elsewhere
    initial: (N, T) seed values for not-seen occasions after first
        capture, NaN elsewhere
    """
    known: np.ndarray
    initial: np.ndarray


class DataBundle(NamedTuple):
    """Data handed to the external sampler.

    y: (N, T) int observation codes in {1, 2, 3}
    first: (N,) int 0-based first detection occasion
    z_known: (N, T) float known latent states (NaN where not fixed)
    """
    y: np.ndarray
    first: np.ndarray
    n_occasions: int
    n_individuals: int
    z_known: np.ndarray


class InitialValues(NamedTuple):
    """Starting point for one sampler chain."""
    params: ModelParams
    z: np.ndarray


class SimulationResult(NamedTuple):
    """Synthetic capture histories.

    capture: (N, T) float 0/1 detections
    test: (N, T) float 0/1 test results (0 where not detected)
    states: (N, T) int true states, 0 before release
    """
    capture: np.ndarray
    test: np.ndarray
    states: np.ndarray
