import math
import types

import numpy as np
import pytest
from cscv_pbo.errors import InvalidPartitionCount, OddPartitionCountError
from cscv_pbo.partition import partition
from cscv_pbo.splits import (
    build_pair,
    build_pairs,
    complement,
    enumerate_combinations,
    n_combinations,
)


def _make_matrix(n_rows=24, n_strats=3):
    # first column is the row number, which makes chronology checkable
    rng = np.random.default_rng(7)
    matrix = rng.normal(0, 1, (n_rows, n_strats))
    matrix[:, 0] = np.arange(n_rows)
    return matrix


@pytest.mark.parametrize("n_partitions", [2, 4, 6, 8, 10])
def test_enumerates_every_balanced_combination(n_partitions):
    combos = list(enumerate_combinations(n_partitions))
    half = n_partitions // 2
    full = set(range(n_partitions))

    assert len(combos) == math.comb(n_partitions, half) == n_combinations(n_partitions)
    assert len(set(combos)) == len(combos)
    for combo in combos:
        assert len(combo) == half
        assert list(combo) == sorted(combo)
        rest = complement(combo, n_partitions)
        assert len(rest) == half
        assert set(combo) | set(rest) == full
        assert not set(combo) & set(rest)


def test_enumeration_order_is_stable():
    assert list(enumerate_combinations(6)) == list(enumerate_combinations(6))
    assert next(enumerate_combinations(4)) == (0, 1)


@pytest.mark.parametrize("n_partitions", [1, 3, 7])
def test_odd_partition_count_raises(n_partitions):
    with pytest.raises(OddPartitionCountError):
        enumerate_combinations(n_partitions)


def test_zero_partitions_raises():
    with pytest.raises(InvalidPartitionCount):
        enumerate_combinations(0)


def test_pairs_are_produced_lazily():
    blocks = partition(_make_matrix(), 4)
    pairs = build_pairs(blocks)
    assert isinstance(pairs, types.GeneratorType)
    first = next(pairs)
    assert first.index == 0
    assert first.combination == (0, 1)
    assert first.complement == (2, 3)
    assert len(list(pairs)) == 5


def test_pair_rows_round_trip_to_original():
    matrix = _make_matrix(24)
    blocks = partition(matrix, 6)
    original = sorted(map(tuple, matrix))

    for pair in build_pairs(blocks):
        assert pair.train.shape == pair.val.shape == (12, 3)
        rows = sorted(map(tuple, np.vstack([pair.train, pair.val])))
        assert rows == original


def test_train_and_val_keep_chronological_order():
    blocks = partition(_make_matrix(24), 6)
    for pair in build_pairs(blocks):
        assert np.all(np.diff(pair.train[:, 0]) > 0)
        assert np.all(np.diff(pair.val[:, 0]) > 0)


def test_selection_order_does_not_change_stacking():
    blocks = partition(_make_matrix(12), 4)
    pair = build_pair(blocks, (2, 0), index=3)

    assert pair.index == 3
    assert pair.combination == (0, 2)
    np.testing.assert_array_equal(pair.train, np.vstack([blocks[0], blocks[2]]))
    np.testing.assert_array_equal(pair.val, np.vstack([blocks[1], blocks[3]]))


def test_build_pairs_with_explicit_combinations():
    blocks = partition(_make_matrix(12), 4)
    pairs = list(build_pairs(blocks, [(1, 3), (0, 2)]))
    assert [p.combination for p in pairs] == [(1, 3), (0, 2)]
    assert [p.index for p in pairs] == [0, 1]
