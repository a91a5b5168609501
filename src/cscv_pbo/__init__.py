"""Probability of Backtest Overfitting via combinatorially symmetric cross-validation."""

from cscv_pbo.errors import (
    DegenerateVarianceWarning,
    EmptyInputError,
    InvalidPartitionCount,
    MissingValueError,
    NonDivisibleRowCount,
    OddPartitionCountError,
    PBOError,
    RunCancelled,
    TiedMaximumWarning,
    UnknownEvaluationMethod,
)
from cscv_pbo.lambdas import LambdaRecord, compute_lambdas
from cscv_pbo.metrics import evaluate
from cscv_pbo.partition import partition
from cscv_pbo.robustness import PBOResult, compute_pbo, pbo
from cscv_pbo.splits import TrainValPair, build_pairs, enumerate_combinations

__version__ = "0.1.0"

__all__ = [
    "pbo",
    "compute_pbo",
    "compute_lambdas",
    "partition",
    "enumerate_combinations",
    "build_pairs",
    "evaluate",
    "PBOResult",
    "LambdaRecord",
    "TrainValPair",
    "PBOError",
    "InvalidPartitionCount",
    "NonDivisibleRowCount",
    "OddPartitionCountError",
    "UnknownEvaluationMethod",
    "MissingValueError",
    "EmptyInputError",
    "RunCancelled",
    "DegenerateVarianceWarning",
    "TiedMaximumWarning",
]
