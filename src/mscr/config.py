"""Configuration dataclasses and state codes for the MSCR pipeline."""

from dataclasses import dataclass, field
from pathlib import Path

# True states: two live states and an absorbing dead state.
STATE_A = 1  # e.g. uninfected
STATE_B = 2  # e.g. infected
STATE_DEAD = 3
LIVE_STATES = (STATE_A, STATE_B)
N_STATES = 3

# Observation codes. The highest code is "not seen".
OBS_NEGATIVE = 1
OBS_POSITIVE = 2
OBS_NOT_SEEN = 3
N_OBS = 3

PARAM_NAMES = ("phi_a", "phi_b", "psi_ab", "psi_ba", "p_a", "p_b")


def state_index(code: int) -> int:
    """Tensor axis index of a 1-based state or observation code."""
    if not 1 <= code <= N_STATES:
        raise IndexError(f"Code {code} outside 1..{N_STATES}")
    return code - 1


@dataclass(frozen=True)
class PriorConfig:
    """Uniform prior bounds per model parameter."""
    phi_a: tuple[float, float] = (0.0, 1.0)
    phi_b: tuple[float, float] = (0.0, 1.0)
    psi_ab: tuple[float, float] = (0.0, 1.0)
    psi_ba: tuple[float, float] = (0.0, 1.0)
    p_a: tuple[float, float] = (0.0, 1.0)
    p_b: tuple[float, float] = (0.0, 1.0)

    def __post_init__(self):
        for name in PARAM_NAMES:
            lower, upper = getattr(self, name)
            if not 0.0 <= lower < upper <= 1.0:
                raise ValueError(
                    f"Prior bounds for {name} must satisfy 0 <= lower < upper <= 1, "
                    f"got ({lower}, {upper})"
                )

    def bounds(self) -> dict[str, tuple[float, float]]:
        return {name: tuple(getattr(self, name)) for name in PARAM_NAMES}


@dataclass(frozen=True)
class SamplerConfig:
    """Settings handed through to the external sampler."""
    n_chains: int = 3
    n_iter: int = 5000
    n_burnin: int = 2000
    n_thin: int = 3
    seed: int | None = None

    def __post_init__(self):
        if self.n_chains < 1:
            raise ValueError(f"n_chains must be >= 1, got {self.n_chains}")
        if self.n_burnin >= self.n_iter:
            raise ValueError(
                f"n_burnin ({self.n_burnin}) must be smaller than n_iter ({self.n_iter})"
            )


@dataclass(frozen=True)
class PipelineConfig:
    """Top-level data preparation configuration."""
    capture_path: Path = Path("data") / "capture.csv"
    test_path: Path = Path("data") / "test.csv"
    output_dir: Path = Path("output")
    delimiter: str = ","
    header: bool = False
    drop_never_detected: bool = False

    priors: PriorConfig = field(default_factory=PriorConfig)
    sampler: SamplerConfig = field(default_factory=SamplerConfig)

    @property
    def input_paths(self) -> list[Path]:
        return [self.capture_path, self.test_path]


# Default values for synthetic data (infected individuals survive and are
# detected less often).
DEFAULT_SIM_PARAMS = {
    "phi_a": 0.85,
    "phi_b": 0.70,
    "psi_ab": 0.20,
    "psi_ba": 0.10,
    "p_a": 0.60,
    "p_b": 0.45,
}
DEFAULT_SIM_INIT_PROBS = [0.7, 0.3]
