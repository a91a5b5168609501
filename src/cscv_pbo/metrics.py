import warnings

import numpy as np
from numba import njit

from cscv_pbo import config
from cscv_pbo.errors import DegenerateVarianceWarning, UnknownEvaluationMethod

METHODS = ("average", "sharpe")

_ALIASES = {
    "average": "average",
    "ave": "average",
    "mean": "average",
    "sharpe": "sharpe",
    "sr": "sharpe",
}


def resolve_method(method: str) -> str:
    """Canonical evaluation method name ('average' or 'sharpe')."""
    key = method.strip().lower() if isinstance(method, str) else method
    if key not in _ALIASES:
        raise UnknownEvaluationMethod(
            f"unknown evaluation method {method!r}, expected one of {METHODS}"
        )
    return _ALIASES[key]


@njit(cache=True, nogil=True)
def _column_moments(matrix):
    n, m = matrix.shape
    means = np.empty(m)
    stds = np.empty(m)
    for j in range(m):
        total = 0.0
        for i in range(n):
            total += matrix[i, j]
        mu = total / n
        sq = 0.0
        for i in range(n):
            d = matrix[i, j] - mu
            sq += d * d
        means[j] = mu
        # sample standard deviation, undefined for a single row
        if n > 1:
            stds[j] = np.sqrt(sq / (n - 1))
        else:
            stds[j] = np.nan
    return means, stds


def column_means(matrix: np.ndarray) -> np.ndarray:
    means, _ = _column_moments(_checked(matrix))
    return means


def column_sharpe(matrix: np.ndarray, risk_free_rate: float = config.RISK_FREE_RATE) -> np.ndarray:
    """(mean - risk_free_rate) / std per column, 0 where std is degenerate.

    Returns are per period, so risk_free_rate must be in the same units.
    No annualization is applied.
    """
    means, stds = _column_moments(_checked(matrix))
    # NaN or inf data must stay undefined, not be scored as zero variance
    degenerate = ~(stds > config.DEGENERATE_STD_TOL) & np.isfinite(means)
    scores = np.zeros_like(means)
    ok = ~degenerate
    scores[ok] = (means[ok] - risk_free_rate) / stds[ok]
    if np.any(degenerate):
        cols = np.flatnonzero(degenerate).tolist()
        warnings.warn(
            f"zero variance in columns {cols}; Sharpe score set to 0",
            DegenerateVarianceWarning,
            stacklevel=3,
        )
    return scores


def evaluate(matrix: np.ndarray, method: str = config.EVAL_METHOD,
             risk_free_rate: float = config.RISK_FREE_RATE) -> np.ndarray:
    """Score every strategy (column) of ``matrix`` with ``method``."""
    method = resolve_method(method)
    if method == "average":
        return column_means(matrix)
    return column_sharpe(matrix, risk_free_rate)


def _checked(matrix) -> np.ndarray:
    arr = np.asarray(matrix, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"expected a 2D matrix, got {arr.ndim}D")
    if arr.shape[0] == 0:
        raise ValueError("cannot score a matrix with no rows")
    return arr
