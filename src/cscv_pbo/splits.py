"""Enumerate balanced block combinations and build train/validation pairs."""

import itertools
import logging
import math
import numbers
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

import numpy as np

from cscv_pbo import config
from cscv_pbo.errors import InvalidPartitionCount, OddPartitionCountError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainValPair:
    index: int
    combination: tuple[int, ...]
    complement: tuple[int, ...]
    train: np.ndarray
    val: np.ndarray


def check_partition_count(n_partitions: int) -> None:
    if isinstance(n_partitions, bool) or not isinstance(n_partitions, numbers.Integral):
        raise InvalidPartitionCount(f"partition count must be an integer, got {n_partitions!r}")
    if n_partitions < 1:
        raise InvalidPartitionCount(f"partition count must be positive, got {n_partitions}")
    if n_partitions % 2:
        raise OddPartitionCountError(
            f"partition count must be even for a balanced split, got {n_partitions}"
        )
    if n_partitions > config.MAX_PRACTICAL_PARTITIONS:
        logger.warning(
            "S=%d gives %d train/validation pairs; expect long run times",
            n_partitions, n_combinations(n_partitions),
        )


def n_combinations(n_partitions: int) -> int:
    """Number of balanced splits, C(S, S/2)."""
    return math.comb(n_partitions, n_partitions // 2)


def enumerate_combinations(n_partitions: int) -> Iterator[tuple[int, ...]]:
    """All ways to pick S/2 of S block indices, in lexicographic order.

    Validation happens on call; the combinations themselves are produced
    lazily.
    """
    check_partition_count(n_partitions)
    return itertools.combinations(range(n_partitions), n_partitions // 2)


def complement(combination: Sequence[int], n_partitions: int) -> tuple[int, ...]:
    chosen = set(combination)
    return tuple(i for i in range(n_partitions) if i not in chosen)


def stack_blocks(blocks: Sequence[np.ndarray], indices: Iterable[int]) -> np.ndarray:
    # chronological order: by block index, not selection order
    return np.vstack([blocks[i] for i in sorted(indices)])


def build_pair(blocks: Sequence[np.ndarray], combination: Sequence[int],
               index: int = 0) -> TrainValPair:
    combo = tuple(sorted(combination))
    rest = complement(combo, len(blocks))
    return TrainValPair(
        index=index,
        combination=combo,
        complement=rest,
        train=stack_blocks(blocks, combo),
        val=stack_blocks(blocks, rest),
    )


def build_pairs(blocks: Sequence[np.ndarray],
                combinations: Iterable[Sequence[int]] | None = None) -> Iterator[TrainValPair]:
    """Yield one TrainValPair per combination without holding earlier ones.

    With ``combinations=None`` every balanced combination of the blocks is
    used.
    """
    if combinations is None:
        combinations = enumerate_combinations(len(blocks))
    return (build_pair(blocks, combo, index=i) for i, combo in enumerate(combinations))
