"""Overfitting detection: PBO via combinatorially symmetric cross-validation."""

import itertools
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from cscv_pbo import config
from cscv_pbo.errors import EmptyInputError, MissingValueError, RunCancelled
from cscv_pbo.lambdas import (
    LambdaRecord,
    check_policies,
    combination_rng,
    compute_lambdas,
    record_or_skip,
)
from cscv_pbo.metrics import resolve_method
from cscv_pbo.partition import as_matrix, partition
from cscv_pbo.splits import (
    build_pair,
    build_pairs,
    check_partition_count,
    enumerate_combinations,
    n_combinations,
)

logger = logging.getLogger(__name__)


def _rounded(value, digits: int = 4) -> float | None:
    value = float(value)
    return round(value, digits) if np.isfinite(value) else None


def compute_pbo(lambdas: Iterable) -> float:
    """Probability of Backtest Overfitting.

    The share of splits whose lambda is <= 0, i.e. where the in-sample
    winner lands at or below the out-of-sample median. Accepts floats or
    LambdaRecords.
    """
    values = np.array(
        [v.lambda_ if isinstance(v, LambdaRecord) else v for v in lambdas],
        dtype=np.float64,
    )
    if values.size == 0:
        raise EmptyInputError("cannot compute PBO from an empty lambda sequence")
    if np.isnan(values).any():
        raise MissingValueError("lambda sequence contains NaN")
    return float(np.sum(values <= 0) / values.size)


@dataclass(frozen=True)
class PBOResult:
    pbo: float
    records: tuple[LambdaRecord, ...]
    n_partitions: int
    n_combinations: int
    method: str
    risk_free_rate: float
    n_skipped: int = 0

    def _field(self, name: str, dtype=np.float64) -> np.ndarray:
        return np.array([getattr(r, name) for r in self.records], dtype=dtype)

    @property
    def lambdas(self) -> np.ndarray:
        return self._field("lambda_")

    @property
    def w_bars(self) -> np.ndarray:
        return self._field("w_bar")

    @property
    def n_stars(self) -> np.ndarray:
        return self._field("n_star", dtype=np.int64)

    @property
    def is_best(self) -> np.ndarray:
        return self._field("is_best")

    @property
    def oos(self) -> np.ndarray:
        return self._field("oos")

    @property
    def kendall(self) -> np.ndarray:
        return self._field("kendall")

    @property
    def spearman(self) -> np.ndarray:
        return self._field("spearman")

    def performance_degradation(self) -> dict:
        """Regress OOS on IS performance of the selected strategies.

        A negative slope means in-sample winners tend to fade out of sample.
        ``prob_loss`` is the share of splits where the winner's OOS score is
        negative.
        """
        is_best, oos = self.is_best, self.oos
        if len(is_best) < 2 or np.ptp(is_best) == 0:
            slope, intercept = float("nan"), float("nan")
        else:
            slope, intercept = np.polyfit(is_best, oos, 1)
        return {
            "slope": float(slope),
            "intercept": float(intercept),
            "prob_loss": float(np.mean(oos < 0)) if len(oos) else float("nan"),
        }

    def stochastic_dominance(self) -> tuple[np.ndarray, np.ndarray]:
        """Sorted w_bar values and their empirical CDF."""
        w = np.sort(self.w_bars)
        return w, np.arange(1, len(w) + 1) / len(w)

    def summary(self) -> dict:
        """Rounded headline numbers; undefined or infinite values become None."""
        degradation = self.performance_degradation()
        finite = self.lambdas[np.isfinite(self.lambdas)]
        kendall = self.kendall[np.isfinite(self.kendall)]
        spearman = self.spearman[np.isfinite(self.spearman)]
        return {
            "pbo": round(self.pbo, 4),
            "n_partitions": self.n_partitions,
            "n_combinations": self.n_combinations,
            "n_evaluated": len(self.records),
            "n_skipped": self.n_skipped,
            "method": self.method,
            "median_lambda": _rounded(np.median(self.lambdas)),
            "mean_finite_lambda": _rounded(np.mean(finite)) if len(finite) else None,
            "mean_kendall": _rounded(np.mean(kendall)) if len(kendall) else None,
            "mean_spearman": _rounded(np.mean(spearman)) if len(spearman) else None,
            "degradation_slope": _rounded(degradation["slope"]),
            "prob_loss": _rounded(degradation["prob_loss"]),
        }

    def to_frame(self):
        """One row per split, indexed by combination number."""
        import pandas as pd

        rows = [
            {
                "combination": " ".join(str(i) for i in r.combination),
                "lambda": r.lambda_,
                "n_star": r.n_star,
                "w_bar": r.w_bar,
                "is_best": r.is_best,
                "oos": r.oos,
                "kendall": r.kendall,
                "spearman": r.spearman,
            }
            for r in self.records
        ]
        df = pd.DataFrame(rows, index=pd.Index([r.index for r in self.records], name="index"))
        return df


def pbo(
    returns_matrix,
    n_partitions: int,
    method: str = config.EVAL_METHOD,
    risk_free_rate: float = config.RISK_FREE_RATE,
    seed: int | None = None,
    tie_break: str = config.TIE_BREAK,
    rank_ties: str = config.RANK_TIES,
    strict: bool = False,
    on_missing: str = "raise",
    n_jobs: int = config.N_JOBS,
    cancel=None,
) -> PBOResult:
    """Probability of Backtest Overfitting via CSCV.

    returns_matrix: (n_periods, n_strategies) array of per-period performance.
    Each column is a different strategy or parameter set. Every one of the
    C(S, S/2) balanced splits of the S time blocks is evaluated.
    """
    # configuration errors surface before any matrix work
    check_partition_count(n_partitions)
    method = resolve_method(method)
    check_policies(tie_break, rank_ties, on_missing)

    blocks = partition(as_matrix(returns_matrix), n_partitions, strict=strict)
    n_strats = blocks[0].shape[1]
    total = n_combinations(n_partitions)
    logger.info("CSCV: %d strategies, S=%d, %d combinations, method=%s",
                n_strats, n_partitions, total, method)

    if n_jobs is None or n_jobs <= 1:
        records = tuple(compute_lambdas(
            build_pairs(blocks), method, risk_free_rate, tie_break, rank_ties,
            seed=seed, on_missing=on_missing, cancel=cancel,
        ))
    else:
        records = _threaded_records(blocks, n_partitions, method, risk_free_rate, seed,
                                    tie_break, rank_ties, on_missing, n_jobs, cancel)

    n_skipped = total - len(records)
    if not records:
        raise EmptyInputError(f"all {total} combinations were skipped")

    value = compute_pbo(records)
    logger.info("PBO=%.4f over %d combinations (%d skipped)", value, len(records), n_skipped)
    return PBOResult(
        pbo=value,
        records=records,
        n_partitions=n_partitions,
        n_combinations=total,
        method=method,
        risk_free_rate=risk_free_rate,
        n_skipped=n_skipped,
    )


_CANCELLED = object()


def _threaded_records(blocks, n_partitions, method, risk_free_rate, seed,
                      tie_break, rank_ties, on_missing, n_jobs, cancel) -> tuple[LambdaRecord, ...]:
    """Distribute combinations over a thread pool, keeping combination order."""
    seed_seq = np.random.SeedSequence(seed)

    def _one(item):
        index, combo = item
        # checked per pair so a cancel mid-batch skips the pairs not yet started
        if cancel is not None and cancel.is_set():
            return _CANCELLED
        pair = build_pair(blocks, combo, index=index)
        return record_or_skip(pair, method, risk_free_rate, tie_break, rank_ties,
                              combination_rng(seed_seq, index), on_missing)

    combos = enumerate(enumerate_combinations(n_partitions))
    results = []
    # bounded batches keep at most batch_size pairs alive at once
    batch_size = max(config.BATCH_SIZE, n_jobs)
    with ThreadPoolExecutor(max_workers=n_jobs) as pool:
        while True:
            batch = list(itertools.islice(combos, batch_size))
            if not batch:
                break
            out = list(pool.map(_one, batch))
            if any(r is _CANCELLED for r in out):
                done = len(results) + sum(1 for r in out if r is not _CANCELLED)
                raise RunCancelled(done)
            results.extend(out)

    return tuple(r for r in results if r is not None)
