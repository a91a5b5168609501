import numpy as np
import pytest
from cscv_pbo.errors import InvalidPartitionCount, NonDivisibleRowCount
from cscv_pbo.partition import block_bounds, partition


def _make_matrix(n_rows=24, n_strats=3):
    # row r holds r * n_strats .. r * n_strats + n_strats - 1, so rows are unique
    return np.arange(n_rows * n_strats, dtype=float).reshape(n_rows, n_strats)


@pytest.mark.parametrize("n_partitions", [2, 4, 6, 8, 12])
def test_blocks_cover_every_row_once_in_order(n_partitions):
    matrix = _make_matrix(24)
    blocks = partition(matrix, n_partitions)

    assert len(blocks) == n_partitions
    assert all(len(b) == 24 // n_partitions for b in blocks)
    np.testing.assert_array_equal(np.vstack(blocks), matrix)


def test_last_block_absorbs_remainder():
    blocks = partition(_make_matrix(13), 4)
    assert [len(b) for b in blocks] == [3, 3, 3, 4]
    np.testing.assert_array_equal(np.vstack(blocks), _make_matrix(13))


def test_block_bounds_are_contiguous():
    bounds = block_bounds(103, 10)
    assert bounds[0][0] == 0
    assert bounds[-1][1] == 103
    for (_, end), (start, _) in zip(bounds[:-1], bounds[1:]):
        assert end == start


def test_strict_mode_requires_exact_division():
    with pytest.raises(NonDivisibleRowCount):
        partition(_make_matrix(13), 4, strict=True)
    # still an InvalidPartitionCount for callers catching the broad error
    with pytest.raises(InvalidPartitionCount):
        partition(_make_matrix(13), 4, strict=True)
    assert len(partition(_make_matrix(12), 4, strict=True)) == 4


@pytest.mark.parametrize("n_partitions", [0, -2])
def test_non_positive_partition_count_raises(n_partitions):
    with pytest.raises(InvalidPartitionCount):
        partition(_make_matrix(), n_partitions)


def test_more_partitions_than_rows_raises():
    with pytest.raises(InvalidPartitionCount):
        partition(_make_matrix(4), 6)


def test_non_integer_partition_count_raises():
    with pytest.raises(InvalidPartitionCount):
        partition(_make_matrix(), 4.0)


def test_blocks_are_read_only():
    blocks = partition(_make_matrix(), 4)
    with pytest.raises(ValueError):
        blocks[0][0, 0] = -1.0


def test_one_dimensional_input_raises():
    with pytest.raises(ValueError):
        partition(np.arange(10.0), 2)
