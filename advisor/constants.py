"""
advisor/constants.py
--------------------
Allocation tables shared by the normaliser and the engine.

These are configuration, not algorithm: ``AllocationEngine`` accepts a
replacement for any of the tables at construction time, and validates
whatever it is given.

Percentages are points of the whole portfolio (0-100).  Sub-asset weights
are fractions of their parent class and are rescaled by the engine so that
the published sub-asset values sum to the parent's percentage.
"""

from __future__ import annotations

from advisor.enums import GoalCategory, RiskBand


# ---------------------------------------------------------------------------
# Base templates per risk band
# ---------------------------------------------------------------------------
# Every band must list the same asset classes.  Equities must rise
# monotonically from conservative → aggressive.

EQUITY_CLASS: str = "equities"

ALLOCATION_TEMPLATES: dict[RiskBand, dict[str, float]] = {
    RiskBand.CONSERVATIVE: {
        "equities":     20.0,
        "bonds":        55.0,
        "cash":         20.0,
        "alternatives":  5.0,
    },
    RiskBand.BALANCED: {
        "equities":     50.0,
        "bonds":        35.0,
        "cash":          5.0,
        "alternatives": 10.0,
    },
    RiskBand.AGGRESSIVE: {
        "equities":     80.0,
        "bonds":        10.0,
        "cash":          2.0,
        "alternatives":  8.0,
    },
}

# Composite-score anchors used by the "blended" method (score → band template).
BLEND_ANCHORS: dict[RiskBand, float] = {
    RiskBand.CONSERVATIVE: 0.0,
    RiskBand.BALANCED:     0.5,
    RiskBand.AGGRESSIVE:   1.0,
}


# ---------------------------------------------------------------------------
# Sub-asset split (fractions of the parent class)
# ---------------------------------------------------------------------------

SUB_ASSET_WEIGHTS: dict[str, dict[str, float]] = {
    "equities": {
        "domestic-large-cap":      0.45,
        "domestic-small-mid-cap":  0.20,
        "international-developed": 0.25,
        "emerging-markets":        0.10,
    },
    "bonds": {
        "government":                 0.50,
        "investment-grade-corporate": 0.35,
        "inflation-linked":           0.15,
    },
    "cash": {
        "money-market":   0.60,
        "treasury-bills": 0.40,
    },
    "alternatives": {
        "gold":              0.50,
        "real-estate-reits": 0.50,
    },
}

# Goal-specific replacements for a class's sub-asset split.
GOAL_SUB_ASSET_OVERRIDES: dict[GoalCategory, dict[str, dict[str, float]]] = {
    GoalCategory.RETIREMENT: {
        "bonds": {
            "government":                 0.40,
            "investment-grade-corporate": 0.30,
            "inflation-linked":           0.30,
        },
    },
    GoalCategory.WEALTH_GROWTH: {
        "equities": {
            "domestic-large-cap":      0.35,
            "domestic-small-mid-cap":  0.25,
            "international-developed": 0.25,
            "emerging-markets":        0.15,
        },
    },
    GoalCategory.CAPITAL_PRESERVATION: {
        "equities": {
            "domestic-large-cap":      0.70,
            "domestic-small-mid-cap":  0.05,
            "international-developed": 0.20,
            "emerging-markets":        0.05,
        },
        "alternatives": {
            "gold":              0.80,
            "real-estate-reits": 0.20,
        },
    },
    GoalCategory.EDUCATION: {
        "bonds": {
            "government":                 0.60,
            "investment-grade-corporate": 0.30,
            "inflation-linked":           0.10,
        },
    },
    GoalCategory.HOME_PURCHASE: {
        "cash": {
            "money-market":   0.40,
            "treasury-bills": 0.60,
        },
    },
    GoalCategory.EMERGENCY_FUND: {
        "cash": {
            "money-market":   0.80,
            "treasury-bills": 0.20,
        },
    },
}


# ---------------------------------------------------------------------------
# Top-level shifts: (source class, destination class, percentage points)
# ---------------------------------------------------------------------------
# A shift moves min(points, source) so it can never go negative and never
# changes the total.  Shifts only ever move weight OUT of equities, which
# keeps the equity share monotonic in risk tolerance.

GOAL_ADJUSTMENTS: dict[GoalCategory, list[tuple[str, str, float]]] = {
    GoalCategory.CAPITAL_PRESERVATION: [("equities", "cash", 15.0)],
    GoalCategory.EMERGENCY_FUND:       [("equities", "cash", 25.0)],
    GoalCategory.HOME_PURCHASE:        [("equities", "bonds", 10.0)],
}

SHORT_HORIZON_ADJUSTMENT: list[tuple[str, str, float]] = [("equities", "bonds", 10.0)]

SMALL_TARGET_ADJUSTMENT: list[tuple[str, str, float]] = [("equities", "cash", 5.0)]


# ---------------------------------------------------------------------------
# Goal labels
# ---------------------------------------------------------------------------
# Keys are already in canonical form: lower-case, words joined by "-".

GOAL_ALIASES: dict[str, GoalCategory] = {
    "retirement":           GoalCategory.RETIREMENT,
    "retire":               GoalCategory.RETIREMENT,
    "pension":              GoalCategory.RETIREMENT,
    "education":            GoalCategory.EDUCATION,
    "college":              GoalCategory.EDUCATION,
    "university":           GoalCategory.EDUCATION,
    "wealth-growth":        GoalCategory.WEALTH_GROWTH,
    "wealth-creation":      GoalCategory.WEALTH_GROWTH,
    "growth":               GoalCategory.WEALTH_GROWTH,
    "wealth":               GoalCategory.WEALTH_GROWTH,
    "capital-preservation": GoalCategory.CAPITAL_PRESERVATION,
    "preservation":         GoalCategory.CAPITAL_PRESERVATION,
    "preserve-capital":     GoalCategory.CAPITAL_PRESERVATION,
    "home-purchase":        GoalCategory.HOME_PURCHASE,
    "home":                 GoalCategory.HOME_PURCHASE,
    "house":                GoalCategory.HOME_PURCHASE,
    "buy-a-house":          GoalCategory.HOME_PURCHASE,
    "emergency-fund":       GoalCategory.EMERGENCY_FUND,
    "emergency":            GoalCategory.EMERGENCY_FUND,
}

# Inclusive (min, max) horizon in years that makes sense for a goal.
# Goals not listed accept the full horizon range.
GOAL_HORIZON_WINDOWS: dict[GoalCategory, tuple[int, int]] = {
    GoalCategory.WEALTH_GROWTH:  (3, 30),
    GoalCategory.RETIREMENT:     (2, 30),
    GoalCategory.EDUCATION:      (1, 25),
    GoalCategory.HOME_PURCHASE:  (1, 15),
    GoalCategory.EMERGENCY_FUND: (1, 5),
}
