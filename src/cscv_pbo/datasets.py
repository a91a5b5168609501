"""Synthetic return matrices for exercising the CSCV pipeline.

Each generator returns an (n_periods, n_strategies) array of per-period
returns. They mirror the textbook scenarios: no skill, flat returns, mostly
zero returns, and one genuinely skilled strategy among noise.
"""

import numpy as np


def no_skill(n_periods: int = 1560, n_strategies: int = 20, seed: int = 42) -> np.ndarray:
    """Every strategy is N(0, 1) noise, so PBO should hover around 0.5."""
    rng = np.random.default_rng(seed)
    return rng.normal(0.0, 1.0, size=(n_periods, n_strategies))


def flat(n_periods: int = 1560, n_strategies: int = 20, value: float = 0.1) -> np.ndarray:
    """Identical constant returns; every score ties."""
    return np.full((n_periods, n_strategies), value, dtype=np.float64)


def sparse(n_periods: int = 1560, n_strategies: int = 20, mean: float = 0.1,
           sd: float = 0.5, seed: int = 42) -> np.ndarray:
    """Noisy returns where most periods are zero (no position taken)."""
    rng = np.random.default_rng(seed)
    x = rng.normal(mean, sd, size=(n_periods, n_strategies))
    # a Poisson(1) draw above 0 happens ~63% of the time
    x[rng.poisson(1.0, size=x.shape) > 0] = 0.0
    return x


def skilled(n_periods: int = 1000, n_strategies: int = 10, edge: float = 0.5,
            seed: int = 42) -> np.ndarray:
    """Column 0 carries a persistent positive drift, the rest are noise."""
    rng = np.random.default_rng(seed)
    x = rng.normal(0.0, 1.0, size=(n_periods, n_strategies))
    x[:, 0] += edge
    return x


SCENARIOS = {
    "no_skill": no_skill,
    "flat": flat,
    "sparse": sparse,
    "skilled": skilled,
}
