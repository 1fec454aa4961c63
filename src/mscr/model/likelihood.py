"""Log-space forward algorithm for multi-state capture histories.

Each history is conditioned on the first detection: the true state at the
first occasion is the observed live state with probability 1. Subsequent
occasions follow the transition tensor, and each observation is emitted
from the observation tensor of the current true state. Latent states are
summed out with jax.lax.scan and the sum is vmapped over individuals.
"""

import jax
import jax.numpy as jnp
from jax import lax
from jax.scipy.special import logsumexp

from mscr.config import PriorConfig
from mscr.model.matrices import build_model_matrices
from mscr.types import Array, DataBundle, ModelMatrices, ModelParams


def _forward_single(
    log_trans_seq: Array,
    log_emission: Array,
    y: Array,
    first: Array,
) -> Array:
    """Forward pass for one individual.

    Args:
        log_trans_seq: (T-1, S, S) log transition matrices per interval.
        log_emission: (T, S) log probability of the observed code per state.
        y: (T,) observation codes.
        first: scalar 0-based first occasion.

    Returns:
        Scalar log-likelihood of occasions after first.
    """
    T, S = log_emission.shape

    # State at first capture is known; code k maps to state index k-1.
    log_alpha_first = jnp.where(jnp.arange(S) == y[first] - 1, 0.0, -jnp.inf)

    def scan_fn(log_alpha_prev, inputs):
        lt, emit, t = inputs
        log_alpha_t = logsumexp(log_alpha_prev[:, None] + lt, axis=0) + emit
        # Occasions up to first capture leave the initial condition untouched
        log_alpha_t = jnp.where(t > first, log_alpha_t, log_alpha_prev)
        return log_alpha_t, None

    log_alpha_last, _ = lax.scan(
        scan_fn,
        log_alpha_first,
        (log_trans_seq, log_emission[1:], jnp.arange(1, T)),
    )
    return logsumexp(log_alpha_last)


@jax.jit
def log_likelihood_from_matrices(
    matrices: ModelMatrices,
    y: Array,
    first: Array,
) -> Array:
    """Per-individual log-likelihood given materialised model tensors.

    Args:
        matrices: transition (S, N, T-1, S) and observation (S, N, T, O).
        y: (N, T) observation codes in {1, 2, 3}.
        first: (N,) 0-based first detection occasions.

    Returns:
        (N,) log-likelihood per individual.
    """
    y = jnp.asarray(y)
    first = jnp.asarray(first)

    # (N, T-1, S, S)
    log_trans = jnp.log(jnp.transpose(matrices.transition, (1, 2, 0, 3)))
    # (N, T, S, O) -> pick the observed code -> (N, T, S)
    log_obs = jnp.log(jnp.transpose(matrices.observation, (1, 2, 0, 3)))
    N, T, S, _ = log_obs.shape
    obs_idx = jnp.broadcast_to((y - 1)[:, :, None, None], (N, T, S, 1))
    log_emission = jnp.take_along_axis(log_obs, obs_idx, axis=3)[..., 0]

    return jax.vmap(_forward_single)(log_trans, log_emission, y, first)


def log_likelihood(params: ModelParams, data: DataBundle) -> Array:
    """Per-individual log-likelihood of the bundled data."""
    matrices = build_model_matrices(params, data.n_individuals, data.n_occasions)
    return log_likelihood_from_matrices(matrices, data.y, data.first)


def log_prior(params: ModelParams, priors: PriorConfig | None = None) -> Array:
    """Uniform prior: 0 inside every bound, -inf outside any."""
    if priors is None:
        priors = PriorConfig()
    inside = jnp.array(True)
    for name, (lower, upper) in priors.bounds().items():
        value = getattr(params, name)
        inside = inside & (value >= lower) & (value <= upper)
    return jnp.where(inside, 0.0, -jnp.inf)


def log_density(
    params: ModelParams,
    data: DataBundle,
    priors: PriorConfig | None = None,
) -> Array:
    """Unnormalised log posterior: log prior + total log-likelihood."""
    lp = log_prior(params, priors)
    return jnp.where(
        jnp.isfinite(lp), lp + jnp.sum(log_likelihood(params, data)), -jnp.inf
    )
