"""Write the sampler bundle and simulated tables.

Output structure
----------------
  output_dir/
    data.npz              # y, first, z_known, n_occasions, n_individuals
    model.json            # codes, priors, monitored parameters, sampler settings
    inits_chain1.npz ...  # per-chain parameter draws and latent seeds
"""

import json
import logging
from dataclasses import asdict
from pathlib import Path

import numpy as np

from mscr.bundle import ModelBundle
from mscr.config import SamplerConfig
from mscr.types import InitialValues

log = logging.getLogger(__name__)


def write_bundle(
    bundle: ModelBundle,
    output_dir: Path,
    sampler: SamplerConfig | None = None,
) -> dict[str, Path]:
    """Write data, model description and per-chain initial values.

    Args:
        bundle: Assembled model bundle.
        output_dir: Directory to write into (created if needed).
        sampler: Sampler settings; also sets chain count and seed.

    Returns:
        Dict mapping "data", "model" and "inits_chain{k}" to paths.
    """
    if sampler is None:
        sampler = SamplerConfig()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {}

    data = bundle.data
    paths["data"] = output_dir / "data.npz"
    np.savez(
        paths["data"],
        y=data.y,
        first=data.first,
        z_known=data.z_known,
        n_occasions=data.n_occasions,
        n_individuals=data.n_individuals,
    )

    model = bundle.spec.to_dict()
    model["sampler"] = asdict(sampler)
    paths["model"] = output_dir / "model.json"
    with open(paths["model"], "w") as f:
        json.dump(model, f, indent=2)

    inits = bundle.chain_initial_values(sampler.n_chains, seed=sampler.seed)
    for k, init in enumerate(inits, 1):
        key = f"inits_chain{k}"
        paths[key] = output_dir / f"{key}.npz"
        _save_inits(init, paths[key])

    log.info(f"Wrote bundle with {len(inits)} chain(s) of initial values to {output_dir}")
    return paths


def _save_inits(init: InitialValues, path: Path) -> None:
    """Save one chain's initial values to npz."""
    np.savez(path, z=init.z, **init.params._asdict())


def write_matrix(path: Path, matrix: np.ndarray, delimiter: str = ",") -> None:
    """Write a matrix as a delimited table, NA for missing."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = [
        delimiter.join("NA" if np.isnan(v) else f"{v:g}" for v in row)
        for row in np.asarray(matrix, dtype=np.float64)
    ]
    path.write_text("\n".join(rows) + "\n")
