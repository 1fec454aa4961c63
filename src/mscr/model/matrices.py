"""State-transition and observation matrices for the two-state model.

Rows are true states (A, B, dead). Transition columns are next states;
observation columns are codes (negative, positive, not seen):

    transition                                   observation
    A    [phi_a (1-psi_ab), phi_a psi_ab, 1-phi_a]   [p_a, 0,   1-p_a]
    B    [phi_b psi_ba, phi_b (1-psi_ba), 1-phi_b]   [0,   p_b, 1-p_b]
    dead [0,            0,                1      ]   [0,   0,   1    ]

Parameters are constant, but the tensors are materialised per individual and
occasion so per-occasion parameters can be dropped in without changing the
shape seen by consumers.

Entries use the default JAX float; call mscr.types.enable_x64 first for
double precision.
"""

import jax.numpy as jnp

from mscr.types import Array, ModelMatrices, ModelParams


def transition_matrix(params: ModelParams) -> Array:
    """(S, S) transition probabilities between consecutive occasions."""
    phi_a, phi_b = params.phi_a, params.phi_b
    psi_ab, psi_ba = params.psi_ab, params.psi_ba
    return jnp.array([
        [phi_a * (1.0 - psi_ab), phi_a * psi_ab, 1.0 - phi_a],
        [phi_b * psi_ba, phi_b * (1.0 - psi_ba), 1.0 - phi_b],
        [0.0, 0.0, 1.0],
    ], dtype=float)


def observation_matrix(params: ModelParams) -> Array:
    """(S, O) probability of each observation code given the true state."""
    p_a, p_b = params.p_a, params.p_b
    return jnp.array([
        [p_a, 0.0, 1.0 - p_a],
        [0.0, p_b, 1.0 - p_b],
        [0.0, 0.0, 1.0],
    ], dtype=float)


def build_transition_tensor(
    params: ModelParams,
    n_individuals: int,
    n_occasions: int,
) -> Array:
    """Transition tensor for every individual and interval.

    Returns:
        (S, N, T-1, S) indexed [from, individual, interval, to], where
        interval t covers occasion t -> t+1.
    """
    if n_occasions < 2:
        raise ValueError(f"Need at least 2 occasions, got {n_occasions}")
    trans = transition_matrix(params)
    S = trans.shape[0]
    return jnp.broadcast_to(
        trans[:, None, None, :], (S, n_individuals, n_occasions - 1, S)
    )


def build_observation_tensor(
    params: ModelParams,
    n_individuals: int,
    n_occasions: int,
) -> Array:
    """Observation tensor for every individual and occasion.

    Returns:
        (S, N, T, O) indexed [state, individual, occasion, obs].
    """
    obs = observation_matrix(params)
    S, O = obs.shape
    return jnp.broadcast_to(
        obs[:, None, None, :], (S, n_individuals, n_occasions, O)
    )


def build_model_matrices(
    params: ModelParams,
    n_individuals: int,
    n_occasions: int,
) -> ModelMatrices:
    """Both tensors for a data set of the given size."""
    return ModelMatrices(
        transition=build_transition_tensor(params, n_individuals, n_occasions),
        observation=build_observation_tensor(params, n_individuals, n_occasions),
    )
