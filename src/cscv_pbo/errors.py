"""Exceptions and warnings raised by the CSCV pipeline."""


class PBOError(Exception):
    """Base class for every error raised by cscv_pbo."""


class InvalidPartitionCount(PBOError, ValueError):
    """Partition count cannot split the matrix into non-empty blocks."""


class NonDivisibleRowCount(InvalidPartitionCount):
    """Row count is not a multiple of the partition count (strict mode)."""


class OddPartitionCountError(InvalidPartitionCount):
    """Partition count is odd, so no balanced train/validation split exists."""


class UnknownEvaluationMethod(PBOError, ValueError):
    """Evaluation method is neither 'average' nor 'sharpe'."""


class MissingValueError(PBOError, ValueError):
    """A performance score is undefined (NaN) for some strategy."""

    def __init__(self, message: str, combination_index: int | None = None,
                 side: str | None = None, columns: tuple[int, ...] = ()):
        super().__init__(message)
        self.combination_index = combination_index
        self.side = side
        self.columns = tuple(columns)


class EmptyInputError(PBOError, ValueError):
    """Nothing to aggregate."""


class RunCancelled(PBOError):
    """A run was stopped between combinations by its cancel event."""

    def __init__(self, completed: int):
        super().__init__(f"run cancelled after {completed} combinations")
        self.completed = completed


class PBOWarning(UserWarning):
    """Base class for non-fatal diagnostics."""


class DegenerateVarianceWarning(PBOWarning):
    """A strategy has zero variance; its Sharpe score was set to 0."""


class TiedMaximumWarning(PBOWarning):
    """More than one strategy shares the best in-sample score."""
