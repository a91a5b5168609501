from pathlib import Path

import numpy as np
import pandas as pd

_DATE_ALIASES = ["date", "timestamp", "time", "datetime", "dt", "ts"]


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    df = df.rename(columns={c: str(c).strip() for c in df.columns})

    # use the first date-like column as a chronological index
    for col in df.columns:
        if col.lower() in _DATE_ALIASES:
            df[col] = pd.to_datetime(df[col])
            df = df.set_index(col).sort_index()
            break

    return df


def load(source: str) -> pd.DataFrame:
    """Load a returns table (rows = periods, columns = strategies) from CSV or Parquet."""
    path = Path(source.strip())
    if not path.exists():
        raise FileNotFoundError(f"data file not found: {source}")

    suffix = path.suffix.lower()
    if suffix == ".parquet":
        df = pd.read_parquet(path)
    elif suffix == ".csv":
        df = pd.read_csv(path)
    elif suffix == ".tsv":
        df = pd.read_csv(path, sep="\t")
    else:
        raise ValueError(f"unsupported file format: {suffix}")

    return _normalize_columns(df)


def to_matrix(df: pd.DataFrame, columns: list[str] | None = None) -> tuple[np.ndarray, list[str]]:
    """Numeric strategy columns as a float64 matrix plus their names.

    Missing values are kept as NaN so the pipeline can reject them.
    """
    if columns is not None:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise KeyError(f"columns not found: {missing}")
        df = df[columns]
    numeric = df.select_dtypes(include="number")
    if numeric.shape[1] == 0:
        raise ValueError("no numeric strategy columns found in data")
    return numeric.to_numpy(dtype=np.float64), [str(c) for c in numeric.columns]
