"""CLI entry point for MSCR."""

import click
from pathlib import Path

from mscr.config import PARAM_NAMES


@click.group()
def main():
    """MSCR: multi-state capture-recapture data preparation."""
    from mscr.types import enable_x64

    enable_x64()


@main.command()
@click.option("--capture", "capture_path", type=click.Path(exists=True), required=True,
              help="Detection table (individuals x occasions, 0/1/NA).")
@click.option("--test", "test_path", type=click.Path(exists=True), required=True,
              help="Test result table, same shape as the detection table.")
@click.option("--output-dir", type=click.Path(), default="output", help="Output directory.")
@click.option("--delimiter", default=",", help="Field separator.")
@click.option("--header", is_flag=True, help="Input tables have a header line.")
@click.option("--drop-never-detected", is_flag=True,
              help="Drop individuals without any detection instead of failing.")
@click.option("--chains", type=int, default=3, help="Number of sampler chains.")
@click.option("--n-iter", type=int, default=5000, help="Sampler iterations per chain.")
@click.option("--n-burnin", type=int, default=2000, help="Burn-in iterations.")
@click.option("--n-thin", type=int, default=3, help="Thinning interval.")
@click.option("--seed", type=int, default=None, help="Seed for initial values.")
@click.option("--prior", "priors", multiple=True,
              type=(click.Choice(PARAM_NAMES), float, float),
              help="Uniform prior bounds NAME LOWER UPPER; repeatable. Default uniform(0, 1).")
def prepare(capture_path, test_path, output_dir, delimiter, header, drop_never_detected,
            chains, n_iter, n_burnin, n_thin, seed, priors):
    """Encode input tables and write the sampler bundle."""
    from mscr.config import PipelineConfig, PriorConfig, SamplerConfig
    from mscr.pipeline import run_preparation

    try:
        prior_config = PriorConfig(**{name: (lower, upper) for name, lower, upper in priors})
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--prior") from e

    config = PipelineConfig(
        capture_path=Path(capture_path),
        test_path=Path(test_path),
        output_dir=Path(output_dir),
        delimiter=delimiter,
        header=header,
        drop_never_detected=drop_never_detected,
        priors=prior_config,
        sampler=SamplerConfig(
            n_chains=chains, n_iter=n_iter, n_burnin=n_burnin, n_thin=n_thin, seed=seed,
        ),
    )
    bundle, _ = run_preparation(config)
    click.echo(
        f"Prepared {bundle.data.n_individuals} individuals x "
        f"{bundle.data.n_occasions} occasions -> {config.output_dir}"
    )


@main.command()
@click.option("--output-dir", type=click.Path(), default="simulated", help="Output directory.")
@click.option("--occasions", type=int, default=6, help="Number of occasions.")
@click.option("--released", type=int, default=50, help="Individuals marked per occasion.")
@click.option("--seed", type=int, default=None, help="Random seed.")
def simulate(output_dir, occasions, released, seed):
    """Write synthetic capture and test tables."""
    import logging

    from mscr.config import DEFAULT_SIM_PARAMS
    from mscr.io.writer import write_matrix
    from mscr.model.simulate import simulate_histories
    from mscr.types import ModelParams

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # Last occasion has no releases
    n_released = [released] * (occasions - 1) + [0]
    sim = simulate_histories(ModelParams(**DEFAULT_SIM_PARAMS), n_released, rng=seed)

    out = Path(output_dir)
    write_matrix(out / "capture.csv", sim.capture)
    write_matrix(out / "test.csv", sim.test)
    click.echo(f"Wrote {sim.capture.shape[0]} histories to {out}")


@main.command()
@click.option("--output-dir", type=click.Path(exists=True), required=True,
              help="Directory written by `mscr prepare`.")
def inspect_bundle(output_dir):
    """Summarise a prepared bundle."""
    import json

    import numpy as np

    from mscr.config import OBS_NEGATIVE, OBS_NOT_SEEN, OBS_POSITIVE

    out = Path(output_dir)
    data = np.load(out / "data.npz")
    with open(out / "model.json") as f:
        model = json.load(f)

    y = data["y"]
    click.echo("=== MSCR Bundle ===\n")
    click.echo(f"Individuals: {int(data['n_individuals'])}")
    click.echo(f"Occasions:   {int(data['n_occasions'])}")
    click.echo("\nObservations:")
    for label, code in [("negative", OBS_NEGATIVE), ("positive", OBS_POSITIVE),
                        ("not seen", OBS_NOT_SEEN)]:
        click.echo(f"  {label:<9} {int(np.sum(y == code))}")
    click.echo(f"\nKnown latent states: {int(np.sum(~np.isnan(data['z_known'])))}")
    click.echo("\nPriors:")
    for name, prior in model["priors"].items():
        click.echo(f"  {name:<7} uniform({prior['lower']}, {prior['upper']})")
    click.echo(f"\nMonitored: {', '.join(model['monitored'])}")


if __name__ == "__main__":
    main()
