"""Read delimited individuals x occasions tables."""

import logging
from pathlib import Path

import numpy as np

from mscr.errors import InvalidValue

log = logging.getLogger(__name__)

MISSING_TOKENS = ("NA", "na", "NaN", "nan", ".", "")


def _parse_tokens(tokens: np.ndarray, name: str) -> np.ndarray:
    """Convert string cells to float, NaN for missing tokens.

    Raises:
        InvalidValue: For any other token that is not a number.
    """
    matrix = np.empty(tokens.shape, dtype=np.float64)
    for (row, col), token in np.ndenumerate(tokens):
        token = token.strip()
        if token in MISSING_TOKENS:
            matrix[row, col] = np.nan
            continue
        try:
            matrix[row, col] = float(token)
        except ValueError:
            raise InvalidValue(row, col, token, name=name) from None
    return matrix


def read_matrix(path: Path, delimiter: str = ",", header: bool = False) -> np.ndarray:
    """Read a numeric table with one row per individual.

    Args:
        path: Delimited text file.
        delimiter: Field separator (None splits on whitespace).
        header: Skip the first line.

    Returns:
        (N, T) float64 matrix, NaN for missing entries. A single column
        reads as (N, 1).

    Raises:
        InvalidValue: For a cell that is neither a number nor a missing token.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input table not found: {path}")

    tokens = np.loadtxt(
        path,
        dtype=str,
        delimiter=delimiter,
        skiprows=1 if header else 0,
        ndmin=2,
    )
    matrix = _parse_tokens(tokens, name=path.name)
    log.info(f"Read {path.name}: {matrix.shape[0]} rows x {matrix.shape[1]} columns")
    return matrix
