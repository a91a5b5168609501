"""Relative-rank logits (lambda) of the in-sample winner, per split.

For each train/validation pair the in-sample best strategy n* is picked on
the training matrix, then its rank among all strategies on the validation
matrix gives the relative rank w_bar = rank / N and the logit
lambda = ln(w_bar / (1 - w_bar)).

Ref: Bailey, D. H., Borwein, J., Lopez de Prado, M., & Zhu, Q. J. (2016).
     The probability of backtest overfitting.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Iterable

import numpy as np
from scipy import stats

from cscv_pbo import config
from cscv_pbo.errors import MissingValueError, RunCancelled, TiedMaximumWarning
from cscv_pbo.metrics import evaluate, resolve_method
from cscv_pbo.splits import TrainValPair

logger = logging.getLogger(__name__)

TIE_BREAKS = ("random", "first")
RANK_TIES = ("random", "average", "min", "max", "first", "last")
ON_MISSING = ("raise", "skip")


@dataclass(frozen=True)
class LambdaRecord:
    index: int
    combination: tuple[int, ...]
    lambda_: float
    n_star: int
    w_bar: float
    is_best: float
    oos: float
    kendall: float
    spearman: float


def check_policies(tie_break: str, rank_ties: str, on_missing: str = "raise") -> None:
    if tie_break not in TIE_BREAKS:
        raise ValueError(f"tie_break must be one of {TIE_BREAKS}, got {tie_break!r}")
    if rank_ties not in RANK_TIES:
        raise ValueError(f"rank_ties must be one of {RANK_TIES}, got {rank_ties!r}")
    if on_missing not in ON_MISSING:
        raise ValueError(f"on_missing must be one of {ON_MISSING}, got {on_missing!r}")


def combination_rng(seed_seq: np.random.SeedSequence, index: int) -> np.random.Generator:
    """Random source for one combination, independent of scheduling order."""
    child = np.random.SeedSequence(entropy=seed_seq.entropy, spawn_key=(index,))
    return np.random.default_rng(child)


def rank_values(values: np.ndarray, ties: str = "random",
                rng: np.random.Generator | None = None) -> np.ndarray:
    """Ranks 1..N (1 = lowest), ties resolved like R's ``rank()``."""
    values = np.asarray(values, dtype=np.float64)
    n = len(values)
    if ties in ("average", "min", "max"):
        return stats.rankdata(values, method=ties).astype(np.float64)

    if ties == "first":
        order = np.lexsort((np.arange(n), values))
    elif ties == "last":
        order = np.lexsort((-np.arange(n), values))
    elif ties == "random":
        if rng is None:
            rng = np.random.default_rng()
        order = np.lexsort((rng.permutation(n), values))
    else:
        raise ValueError(f"rank_ties must be one of {RANK_TIES}, got {ties!r}")

    ranks = np.empty(n, dtype=np.float64)
    ranks[order] = np.arange(1, n + 1)
    return ranks


def logit(w: float) -> float:
    """ln(w / (1 - w)); +inf at w == 1."""
    w = np.float64(w)
    with np.errstate(divide="ignore"):
        return float(np.log(w / (1.0 - w)))


def rank_correlations(r: np.ndarray, r_bar: np.ndarray) -> tuple[float, float]:
    """Kendall tau-b and Spearman rho; NaN when either side is constant."""
    # correlation is undefined for constant vectors; scipy would warn per call
    if len(r) < 2 or np.ptp(r) == 0 or np.ptp(r_bar) == 0:
        return float("nan"), float("nan")
    tau = stats.kendalltau(r, r_bar)[0]
    rho = stats.spearmanr(r, r_bar)[0]
    return float(tau), float(rho)


def _check_missing(scores: np.ndarray, index: int, side: str) -> None:
    bad = np.flatnonzero(~np.isfinite(scores))
    if len(bad):
        cols = tuple(int(c) for c in bad)
        raise MissingValueError(
            f"undefined score for strategies {list(cols)} in {side} matrix "
            f"of combination {index}",
            combination_index=index, side=side, columns=cols,
        )


def lambda_record(
    pair: TrainValPair,
    method: str = config.EVAL_METHOD,
    risk_free_rate: float = config.RISK_FREE_RATE,
    tie_break: str = config.TIE_BREAK,
    rank_ties: str = config.RANK_TIES,
    rng: np.random.Generator | None = None,
) -> LambdaRecord:
    """Compute the LambdaRecord for a single train/validation pair."""
    check_policies(tie_break, rank_ties)
    if rng is None:
        rng = np.random.default_rng()

    r = evaluate(pair.train, method, risk_free_rate)
    r_bar = evaluate(pair.val, method, risk_free_rate)
    _check_missing(r, pair.index, "train")
    _check_missing(r_bar, pair.index, "val")

    n = len(r)
    r_max = r.max()
    tied = np.flatnonzero(r == r_max)
    if len(tied) > 1:
        warnings.warn("several strategies tie for the in-sample maximum",
                      TiedMaximumWarning, stacklevel=2)
        logger.debug("combination %d: %d strategies tie for the in-sample maximum",
                     pair.index, len(tied))
    if tie_break == "random":
        n_star = int(rng.choice(tied))
    else:
        n_star = int(tied[0])

    rank = rank_values(r_bar, rank_ties, rng)[n_star]
    w_bar = rank / n
    kendall, spearman = rank_correlations(r, r_bar)

    record = LambdaRecord(
        index=pair.index,
        combination=pair.combination,
        lambda_=logit(w_bar),
        n_star=n_star,
        w_bar=float(w_bar),
        is_best=float(r_max),
        oos=float(r_bar[n_star]),
        kendall=kendall,
        spearman=spearman,
    )
    logger.debug("combination %d: n*=%d rank=%s w_bar=%.4f lambda=%.4f",
                 pair.index, n_star, rank, record.w_bar, record.lambda_)
    return record


def record_or_skip(
    pair: TrainValPair,
    method: str,
    risk_free_rate: float,
    tie_break: str,
    rank_ties: str,
    rng: np.random.Generator,
    on_missing: str = "raise",
) -> LambdaRecord | None:
    """lambda_record, or None when the pair has undefined scores and on_missing is 'skip'."""
    try:
        return lambda_record(pair, method, risk_free_rate, tie_break, rank_ties, rng)
    except MissingValueError as exc:
        if on_missing == "raise":
            raise
        logger.warning("skipping combination %d: %s", pair.index, exc)
        return None


def compute_lambdas(
    pairs: Iterable[TrainValPair],
    method: str = config.EVAL_METHOD,
    risk_free_rate: float = config.RISK_FREE_RATE,
    tie_break: str = config.TIE_BREAK,
    rank_ties: str = config.RANK_TIES,
    seed: int | None = None,
    on_missing: str = "raise",
    cancel=None,
) -> list[LambdaRecord]:
    """LambdaRecords for a stream of pairs, in input order.

    Each pair gets its own generator derived from ``seed`` and the pair
    index. With ``on_missing="skip"`` pairs with undefined scores are dropped
    instead of aborting the run. ``cancel`` is any object with ``is_set()``,
    checked before each pair.
    """
    method = resolve_method(method)
    check_policies(tie_break, rank_ties, on_missing)
    seed_seq = np.random.SeedSequence(seed)

    records = []
    done = 0
    for pair in pairs:
        if cancel is not None and cancel.is_set():
            raise RunCancelled(done)
        record = record_or_skip(pair, method, risk_free_rate, tie_break, rank_ties,
                                combination_rng(seed_seq, pair.index), on_missing)
        if record is not None:
            records.append(record)
        done += 1

    if len(records) < done:
        logger.info("skipped %d of %d combinations with missing values",
                    done - len(records), done)
    return records
