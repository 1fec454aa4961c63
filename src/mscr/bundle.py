"""Assemble the model specification, data and initial values for a sampler.

The sampler is external. It receives a ModelSpec (what the model is), a
DataBundle (what was observed), and one InitialValues per chain. Everything
derived from the data is computed once; each chain only draws new parameter
values and new seeds for the unknown latent states.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from mscr.config import (
    LIVE_STATES, N_OBS, N_STATES, OBS_NEGATIVE, OBS_NOT_SEEN, OBS_POSITIVE,
    PARAM_NAMES, STATE_A, STATE_B, STATE_DEAD, PriorConfig,
)
from mscr.data.encoding import encode_observations
from mscr.data.first_capture import first_occasions
from mscr.data.latent import initial_latent_values, known_states
from mscr.model.likelihood import log_density
from mscr.model.matrices import build_model_matrices
from mscr.types import DataBundle, InitialValues, ModelParams

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelSpec:
    """Parameterised description of the multi-state model."""
    priors: PriorConfig = field(default_factory=PriorConfig)
    param_names: tuple[str, ...] = PARAM_NAMES
    monitored: tuple[str, ...] = PARAM_NAMES
    matrices: Callable = build_model_matrices
    log_density: Callable = log_density

    @property
    def states(self) -> dict[str, int]:
        return {"A": STATE_A, "B": STATE_B, "dead": STATE_DEAD}

    @property
    def observations(self) -> dict[str, int]:
        return {
            "negative": OBS_NEGATIVE,
            "positive": OBS_POSITIVE,
            "not_seen": OBS_NOT_SEEN,
        }

    def draw_params(self, rng: np.random.Generator) -> ModelParams:
        """Draw each parameter uniformly within its prior bounds."""
        bounds = self.priors.bounds()
        return ModelParams(**{
            name: float(rng.uniform(*bounds[name])) for name in self.param_names
        })

    def to_dict(self) -> dict:
        return {
            "n_states": N_STATES,
            "n_observations": N_OBS,
            "states": self.states,
            "live_states": list(LIVE_STATES),
            "observations": self.observations,
            "priors": {
                name: {"distribution": "uniform", "lower": lo, "upper": hi}
                for name, (lo, hi) in self.priors.bounds().items()
            },
            "monitored": list(self.monitored),
            "transition_index": ["from", "individual", "interval", "to"],
            "observation_index": ["state", "individual", "occasion", "observation"],
        }


@dataclass(frozen=True, eq=False)
class ModelBundle:
    """Everything the external sampler needs, minus per-chain initial values."""
    spec: ModelSpec
    data: DataBundle

    def initial_values(self, rng: np.random.Generator | int | None = None) -> InitialValues:
        """Fresh initial values for one chain.

        Known states, observations and first occasions are reused as-is.
        """
        rng = np.random.default_rng(rng)
        return InitialValues(
            params=self.spec.draw_params(rng),
            z=initial_latent_values(self.data.y, self.data.first, rng),
        )

    def chain_initial_values(self, n_chains: int, seed: int | None = None) -> list[InitialValues]:
        """Independent initial values for n_chains parallel chains."""
        if n_chains < 1:
            raise ValueError(f"n_chains must be >= 1, got {n_chains}")
        children = np.random.SeedSequence(seed).spawn(n_chains)
        return [self.initial_values(np.random.default_rng(s)) for s in children]

    def log_density(self, params: ModelParams):
        return self.spec.log_density(params, self.data, self.spec.priors)


def assemble_bundle(
    capture: np.ndarray,
    test: np.ndarray,
    priors: PriorConfig | None = None,
) -> ModelBundle:
    """Encode raw matrices and package them with the model specification.

    Args:
        capture: (N, T) detections, values in {0, 1, missing}.
        test: (N, T) test results, values in {0, 1, missing}.
        priors: Prior bounds (default uniform(0, 1) for every parameter).

    Returns:
        ModelBundle ready to hand to a sampler.
    """
    y = encode_observations(capture, test)
    first = first_occasions(y)
    z_known = known_states(y, first)

    n_individuals, n_occasions = y.shape
    if n_occasions < 2:
        raise ValueError(f"Need at least 2 occasions, got {n_occasions}")

    data = DataBundle(
        y=y,
        first=first,
        n_occasions=n_occasions,
        n_individuals=n_individuals,
        z_known=z_known,
    )
    spec = ModelSpec(priors=priors if priors is not None else PriorConfig())

    n_known = int(np.sum(~np.isnan(z_known)))
    n_unknown = int(np.sum((y == OBS_NOT_SEEN) & (np.arange(n_occasions)[None, :] > first[:, None])))
    log.info(
        f"Assembled bundle: {n_individuals} individuals, {n_occasions} occasions, "
        f"{n_known} known and {n_unknown} unknown latent states"
    )
    return ModelBundle(spec=spec, data=data)
