"""
advisor/config.py
-----------------
Tunable parameters for the allocation core.

Keeping these separate from advisor/constants.py (which holds the template
tables) gives one place for numeric knobs and deployment settings.  The two
environment variables below are read once at import time.
"""

import os
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Accepted profile ranges (inclusive)
# ---------------------------------------------------------------------------

HORIZON_MIN_YEARS: int = 1
HORIZON_MAX_YEARS: int = 30

AGE_MIN: int = 18
AGE_MAX: int = 100

TARGET_AMOUNT_MIN: Decimal = Decimal("10000")
TARGET_AMOUNT_MAX: Decimal = Decimal("100000000")

# Age at which any plan is considered to have run out.  A profile whose
# age + horizon exceeds this is rejected as an inconsistent combination.
MAX_PLANNING_AGE: int = 120

# ---------------------------------------------------------------------------
# Composite risk score
# ---------------------------------------------------------------------------
# score = w_risk·risk_part + w_horizon·horizon_part + w_age·age_part
# Each part is scaled to [0, 1]; the weights must sum to 1.0.

RISK_SCORE_WEIGHTS: dict = {
    "risk_tolerance": 0.50,
    "horizon":        0.30,
    "age":            0.20,
}

# Band thresholds on the composite score:
#   score <  BALANCED_THRESHOLD    → conservative
#   score <  AGGRESSIVE_THRESHOLD  → balanced
#   otherwise                      → aggressive

BALANCED_THRESHOLD: float = 0.40
AGGRESSIVE_THRESHOLD: float = 0.70

# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------

TOTAL_PERCENT: float = 100.0

# Absolute tolerance used by every sum check (top-level and sub-asset).
SUM_TOLERANCE: float = 1e-6

# Decimal places kept on published percentages.
PERCENT_DECIMALS: int = 6

# Targets below this shift a small slice of equities into cash.
SMALL_TARGET_AMOUNT: Decimal = Decimal("25000")

# Horizons at or below this are treated as short-dated.
SHORT_HORIZON_YEARS: int = 3

# ---------------------------------------------------------------------------
# Deployment settings
# ---------------------------------------------------------------------------

_DEFAULT_STORE_PATH = Path(__file__).parent.parent / "data" / "last_allocation.json"

STORE_PATH: Path = Path(os.environ.get("ADVISOR_STORE_PATH", _DEFAULT_STORE_PATH))

ALLOCATION_METHOD: str = os.environ.get("ADVISOR_ALLOCATION_METHOD", "banded")

# Bump when the persisted payload layout changes; older files are rejected.
STORE_SCHEMA_VERSION: int = 1
