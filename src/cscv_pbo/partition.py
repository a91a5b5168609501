"""Split an observation matrix into contiguous time blocks."""

import numbers

import numpy as np

from cscv_pbo.errors import InvalidPartitionCount, NonDivisibleRowCount


def as_matrix(matrix) -> np.ndarray:
    """Coerce input to a 2D float64 array of (n_periods, n_strategies)."""
    arr = np.asarray(matrix, dtype=np.float64)
    if arr.ndim != 2:
        raise ValueError(f"observation matrix must be 2D, got {arr.ndim}D")
    if arr.shape[1] == 0:
        raise ValueError("observation matrix has no strategy columns")
    return arr


def block_bounds(n_rows: int, n_partitions: int, strict: bool = False) -> list[tuple[int, int]]:
    """(start, end) row bounds of each block.

    Every block gets floor(n_rows / n_partitions) rows; the last block also
    takes the remainder.
    """
    if isinstance(n_partitions, bool) or not isinstance(n_partitions, numbers.Integral):
        raise InvalidPartitionCount(f"partition count must be an integer, got {n_partitions!r}")
    if n_partitions <= 0:
        raise InvalidPartitionCount(f"partition count must be positive, got {n_partitions}")
    if n_partitions > n_rows:
        raise InvalidPartitionCount(
            f"cannot split {n_rows} rows into {n_partitions} non-empty blocks"
        )
    if strict and n_rows % n_partitions:
        raise NonDivisibleRowCount(
            f"{n_rows} rows are not divisible by {n_partitions} partitions"
        )

    size = n_rows // n_partitions
    bounds = [(i * size, (i + 1) * size) for i in range(n_partitions)]
    bounds[-1] = (bounds[-1][0], n_rows)
    return bounds


def partition(matrix, n_partitions: int, strict: bool = False) -> list[np.ndarray]:
    """Divide the rows of ``matrix`` into ``n_partitions`` read-only blocks.

    Blocks are views in chronological order. With ``strict=True`` the row
    count must be an exact multiple of ``n_partitions``.
    """
    arr = as_matrix(matrix)

    blocks = []
    for start, end in block_bounds(arr.shape[0], n_partitions, strict=strict):
        block = arr[start:end]
        block.flags.writeable = False
        blocks.append(block)
    return blocks
