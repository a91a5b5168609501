"""Run defaults from the environment with typed fallbacks.

All values are read from CSCV_PBO_* environment variables. They only seed
default arguments; every public function accepts the value explicitly.
"""

from __future__ import annotations

import os

# ---- Evaluation ----
RISK_FREE_RATE: float = float(os.environ.get("CSCV_PBO_RISK_FREE_RATE", "0.02"))
EVAL_METHOD: str = os.environ.get("CSCV_PBO_EVAL_METHOD", "average")
# Sharpe denominators at or below this are treated as zero variance
DEGENERATE_STD_TOL: float = float(os.environ.get("CSCV_PBO_DEGENERATE_STD_TOL", "1e-12"))

# ---- Tie handling ----
TIE_BREAK: str = os.environ.get("CSCV_PBO_TIE_BREAK", "random")
RANK_TIES: str = os.environ.get("CSCV_PBO_RANK_TIES", "random")

# ---- Execution ----
N_JOBS: int = int(os.environ.get("CSCV_PBO_N_JOBS", "1"))
BATCH_SIZE: int = int(os.environ.get("CSCV_PBO_BATCH_SIZE", "256"))
# C(20, 10) = 184,756 train/validation pairs
MAX_PRACTICAL_PARTITIONS: int = int(os.environ.get("CSCV_PBO_MAX_PARTITIONS", "20"))

# ---- Logging ----
LOG_LEVEL: str = os.environ.get("CSCV_PBO_LOG_LEVEL", os.environ.get("LOG_LEVEL", "INFO"))
LOG_FILE: str | None = os.environ.get("CSCV_PBO_LOG_FILE")
