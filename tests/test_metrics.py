import warnings

import numpy as np
import pytest
from cscv_pbo.errors import DegenerateVarianceWarning, UnknownEvaluationMethod
from cscv_pbo.metrics import evaluate, resolve_method


def test_average_is_column_mean():
    rng = np.random.default_rng(0)
    matrix = rng.normal(0.1, 1.0, (200, 5))
    np.testing.assert_allclose(evaluate(matrix, "average"), matrix.mean(axis=0))


def test_sharpe_uses_sample_std_and_risk_free_rate():
    rng = np.random.default_rng(1)
    matrix = rng.normal(0.05, 0.5, (300, 4))
    expected = (matrix.mean(axis=0) - 0.01) / matrix.std(axis=0, ddof=1)
    np.testing.assert_allclose(evaluate(matrix, "sharpe", risk_free_rate=0.01), expected)


def test_sharpe_default_risk_free_rate():
    matrix = np.array([[0.0, 1.0], [0.1, -1.0], [0.2, 0.5]])
    expected = (matrix.mean(axis=0) - 0.02) / matrix.std(axis=0, ddof=1)
    np.testing.assert_allclose(evaluate(matrix, "sharpe"), expected)


def test_zero_variance_column_scores_exactly_zero():
    rng = np.random.default_rng(2)
    matrix = rng.normal(0, 1, (10, 3))
    matrix[:, 1] = 0.1

    with pytest.warns(DegenerateVarianceWarning):
        scores = evaluate(matrix, "sharpe")

    assert scores[1] == 0.0
    assert np.all(np.isfinite(scores))


def test_single_row_sharpe_is_degenerate():
    with pytest.warns(DegenerateVarianceWarning):
        scores = evaluate(np.array([[0.5, -0.5, 1.0]]), "sharpe")
    np.testing.assert_array_equal(scores, np.zeros(3))


def test_nan_propagates_to_score():
    matrix = np.array([[1.0, 2.0], [np.nan, 4.0], [3.0, 6.0]])
    for method in ("average", "sharpe"):
        scores = evaluate(matrix, method)
        assert np.isnan(scores[0])
        assert np.isfinite(scores[1])


@pytest.mark.parametrize("alias,canonical", [
    ("average", "average"), ("ave", "average"), ("Mean", "average"),
    ("sharpe", "sharpe"), ("SR", "sharpe"),
])
def test_method_aliases(alias, canonical):
    assert resolve_method(alias) == canonical


def test_unknown_method_raises():
    with pytest.raises(UnknownEvaluationMethod):
        evaluate(np.ones((4, 2)), "sortino")


def test_empty_matrix_raises():
    with pytest.raises(ValueError):
        evaluate(np.empty((0, 3)), "average")


def test_infinite_value_is_not_scored_as_zero_variance():
    matrix = np.array([[1.0, 2.0], [np.inf, 4.0], [3.0, 6.0]])
    with warnings.catch_warnings():
        warnings.simplefilter("error", DegenerateVarianceWarning)
        scores = evaluate(matrix, "sharpe")
    assert np.isnan(scores[0])
    assert np.isfinite(scores[1])
