"""
advisor/allocation_engine.py
----------------------------
Pure transformation engine: CanonicalProfile → AllocationResult.

Design contract:
  - No I/O, no persistence
  - Fully deterministic (identical profile → bit-identical percentages)
  - Template tables are injected configuration, validated once in __init__
  - Output always passes AllocationResult.validate()

Pipeline::

    composite risk score ─► risk band ─► base template (banded | blended)
        ─► goal / horizon / target shifts ─► rescale to 100
        ─► split each class into sub-assets ─► rescale to parent percentage
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from advisor.config import (
    AGE_MAX,
    AGE_MIN,
    AGGRESSIVE_THRESHOLD,
    ALLOCATION_METHOD,
    BALANCED_THRESHOLD,
    HORIZON_MAX_YEARS,
    HORIZON_MIN_YEARS,
    PERCENT_DECIMALS,
    RISK_SCORE_WEIGHTS,
    SHORT_HORIZON_YEARS,
    SMALL_TARGET_AMOUNT,
    SUM_TOLERANCE,
    TARGET_AMOUNT_MAX,
    TARGET_AMOUNT_MIN,
    TOTAL_PERCENT,
)
from advisor.constants import (
    ALLOCATION_TEMPLATES,
    BLEND_ANCHORS,
    EQUITY_CLASS,
    GOAL_ADJUSTMENTS,
    GOAL_SUB_ASSET_OVERRIDES,
    SHORT_HORIZON_ADJUSTMENT,
    SMALL_TARGET_ADJUSTMENT,
    SUB_ASSET_WEIGHTS,
)
from advisor.enums import GoalCategory, ProfileErrorKind, RiskBand, RiskTolerance
from advisor.exceptions import InvalidProfileError
from advisor.models import AllocationResult, AssetAllocation, CanonicalProfile

Shift = Tuple[str, str, float]

_CENT = Decimal("0.01")

# Band order, lowest risk first.
_BAND_ORDER = (RiskBand.CONSERVATIVE, RiskBand.BALANCED, RiskBand.AGGRESSIVE)


class AllocationEngine:
    """
    Convert a canonical investor profile into a hierarchical allocation.

    Supports two template methods:
        ``"banded"``  – use the template of the profile's risk band as-is
                        (default, easiest to explain)
        ``"blended"`` – interpolate each class linearly between the band
                        templates along the composite score

    Usage::

        engine = AllocationEngine()
        result = engine.compute(canonical_profile)
        result["equities"].percentage        # → 80.0
        result["equities"].sub_assets        # → {"domestic-large-cap": 28.0, …}
    """

    METHODS: Tuple[str, ...] = ("banded", "blended")

    def __init__(
        self,
        templates: Optional[Mapping[RiskBand, Mapping[str, float]]] = None,
        sub_asset_weights: Optional[Mapping[str, Mapping[str, float]]] = None,
        goal_sub_asset_overrides: Optional[
            Mapping[GoalCategory, Mapping[str, Mapping[str, float]]]
        ] = None,
        goal_adjustments: Optional[Mapping[GoalCategory, Sequence[Shift]]] = None,
        method: str = ALLOCATION_METHOD,
    ):
        if method not in self.METHODS:
            raise ValueError(
                f"Unknown allocation method: {method!r}. "
                "Choose from 'banded', 'blended'."
            )
        self.method = method
        self._templates = templates if templates is not None else ALLOCATION_TEMPLATES
        self._sub_weights = (
            sub_asset_weights if sub_asset_weights is not None else SUB_ASSET_WEIGHTS
        )
        self._goal_sub_overrides = (
            goal_sub_asset_overrides
            if goal_sub_asset_overrides is not None
            else GOAL_SUB_ASSET_OVERRIDES
        )
        self._goal_adjustments = (
            goal_adjustments if goal_adjustments is not None else GOAL_ADJUSTMENTS
        )
        self._asset_classes = self._validate_tables()

    # ------------------------------------------------------------------ #
    #  Public entry point
    # ------------------------------------------------------------------ #

    def compute(self, profile: CanonicalProfile) -> AllocationResult:
        """
        Build the allocation for *profile*.

        Raises
        ------
        InvalidProfileError
            If *profile* does not satisfy the canonical-profile invariants.
        """
        self._check_profile(profile)

        score = self.risk_score(profile)
        base  = self._base_template(score)
        shifted = self._apply_shifts(base, self._shifts_for(profile))

        percentages = self._rescale(
            [shifted[name] for name in self._asset_classes], TOTAL_PERCENT
        )

        assets: Dict[str, AssetAllocation] = {}
        for name, pct in zip(self._asset_classes, percentages):
            weights = self._sub_weights_for(name, profile.goal)
            sub_names = list(weights)
            sub_values = self._rescale([weights[s] for s in sub_names], pct)
            assets[name] = AssetAllocation(
                percentage=pct,
                sub_assets=dict(zip(sub_names, sub_values)),
            )

        result = AllocationResult(assets)
        result.validate(SUM_TOLERANCE)
        return result

    @staticmethod
    def risk_score(profile: CanonicalProfile) -> float:
        """
        Composite risk score in [0, 1].

        Risk tolerance, horizon and youth each contribute a part scaled to
        [0, 1], combined with ``RISK_SCORE_WEIGHTS``.  Longer horizons and
        younger investors push the score up.
        """
        risk_part    = (profile.risk_score - 1) / 2.0
        horizon_part = (
            (profile.investment_horizon_years - HORIZON_MIN_YEARS)
            / (HORIZON_MAX_YEARS - HORIZON_MIN_YEARS)
        )
        age_part     = (AGE_MAX - profile.age) / (AGE_MAX - AGE_MIN)

        score = (
            RISK_SCORE_WEIGHTS["risk_tolerance"] * risk_part
            + RISK_SCORE_WEIGHTS["horizon"] * horizon_part
            + RISK_SCORE_WEIGHTS["age"] * age_part
        )
        return float(np.clip(score, 0.0, 1.0))

    @staticmethod
    def risk_band(score: float) -> RiskBand:
        """Map a composite score onto its template band."""
        if score < BALANCED_THRESHOLD:
            return RiskBand.CONSERVATIVE
        if score < AGGRESSIVE_THRESHOLD:
            return RiskBand.BALANCED
        return RiskBand.AGGRESSIVE

    @staticmethod
    def allocate_capital(
        result: AllocationResult,
        target_amount: Decimal,
    ) -> Dict[str, Dict]:
        """
        Split *target_amount* across the allocation in currency units.

        Returns ``{asset_class: {"amount": Decimal, "sub_assets":
        {name: Decimal}}}`` rounded to cents.

        Uses **remainder absorption**: every entry is rounded to 2 dp and
        the largest entry at each level receives ``total - sum_of_rest``, so
        class amounts always sum exactly to *target_amount* and sub-asset
        amounts to their class amount.
        """
        total = Decimal(str(target_amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
        names = list(result)
        if not names:
            return {}

        class_amounts = AllocationEngine._distribute(
            total, [result[n].percentage for n in names]
        )

        capital: Dict[str, Dict] = {}
        for name, amount in zip(names, class_amounts):
            node = result[name]
            sub_names = list(node.sub_assets)
            sub_amounts = (
                AllocationEngine._distribute(
                    amount, [node.sub_assets[s] for s in sub_names]
                )
                if sub_names else []
            )
            capital[name] = {
                "amount":     amount,
                "sub_assets": dict(zip(sub_names, sub_amounts)),
            }
        return capital

    # ------------------------------------------------------------------ #
    #  Template stage
    # ------------------------------------------------------------------ #

    def _base_template(self, score: float) -> Dict[str, float]:
        if self.method == "banded":
            template = self._templates[self.risk_band(score)]
            return {name: float(template[name]) for name in self._asset_classes}

        # blended: piecewise-linear in score between band anchors
        anchors = [BLEND_ANCHORS[band] for band in _BAND_ORDER]
        return {
            name: float(np.interp(
                score,
                anchors,
                [self._templates[band][name] for band in _BAND_ORDER],
            ))
            for name in self._asset_classes
        }

    def _shifts_for(self, profile: CanonicalProfile) -> List[Shift]:
        shifts: List[Shift] = list(self._goal_adjustments.get(profile.goal, ()))
        if profile.investment_horizon_years <= SHORT_HORIZON_YEARS:
            shifts.extend(SHORT_HORIZON_ADJUSTMENT)
        if profile.target_amount < SMALL_TARGET_AMOUNT:
            shifts.extend(SMALL_TARGET_ADJUSTMENT)
        return shifts

    @staticmethod
    def _apply_shifts(
        percentages: Dict[str, float],
        shifts: Sequence[Shift],
    ) -> Dict[str, float]:
        """
        Move points between classes.  Each move is capped at what the source
        holds, so no value goes negative and the total is unchanged.
        """
        out = dict(percentages)
        for source, destination, points in shifts:
            moved = min(points, out[source])
            out[source]      -= moved
            out[destination] += moved
        return out

    def _sub_weights_for(self, asset_class: str, goal: GoalCategory) -> Mapping[str, float]:
        override = self._goal_sub_overrides.get(goal, {}).get(asset_class)
        if override is not None:
            return override
        return self._sub_weights[asset_class]

    # ------------------------------------------------------------------ #
    #  Normalisation
    # ------------------------------------------------------------------ #

    @staticmethod
    def _rescale(values: Sequence[float], total: float) -> List[float]:
        """
        Scale *values* to sum to *total*, round to ``PERCENT_DECIMALS`` and
        let the largest entry absorb the rounding residual.

        Falls back to equal weight when every value is zero.
        """
        if not values:
            return []

        arr = np.asarray(values, dtype=float)
        current = arr.sum()
        if current <= 0.0:
            arr = np.full(len(arr), total / len(arr))
        else:
            arr = arr * (total / current)

        arr = np.round(arr, PERCENT_DECIMALS)

        largest = int(np.argmax(arr))
        rest = math.fsum(float(v) for i, v in enumerate(arr) if i != largest)
        arr[largest] = max(total - rest, 0.0)

        return [float(v) for v in arr]

    @staticmethod
    def _distribute(total: Decimal, weights: Sequence[float]) -> List[Decimal]:
        """Split a currency amount by *weights* with cent rounding."""
        weight_sum = math.fsum(weights)
        if weight_sum <= 0.0:
            weights = [1.0] * len(weights)
            weight_sum = float(len(weights))

        denominator = Decimal(repr(weight_sum))
        amounts = [
            (total * Decimal(repr(w)) / denominator).quantize(_CENT, rounding=ROUND_HALF_UP)
            for w in weights
        ]

        largest = max(range(len(weights)), key=lambda i: weights[i])
        amounts[largest] = total - sum(
            (a for i, a in enumerate(amounts) if i != largest), Decimal("0")
        )
        return amounts

    # ------------------------------------------------------------------ #
    #  Guards
    # ------------------------------------------------------------------ #

    @staticmethod
    def _check_profile(profile: CanonicalProfile) -> None:
        """Fail fast on a canonical profile whose invariants do not hold."""
        if not isinstance(profile, CanonicalProfile):
            raise InvalidProfileError(
                f"Engine expects a CanonicalProfile, got {type(profile).__name__}.",
                kind=ProfileErrorKind.MISSING_FIELD,
            )

        problems = []
        if not isinstance(profile.risk_tolerance, RiskTolerance):
            problems.append(("risk_tolerance", profile.risk_tolerance))
        elif profile.risk_score != profile.risk_tolerance.ordinal:
            problems.append(("risk_score", profile.risk_score))
        if not isinstance(profile.goal, GoalCategory):
            problems.append(("goal", profile.goal))
        if not _int_between(profile.investment_horizon_years, HORIZON_MIN_YEARS, HORIZON_MAX_YEARS):
            problems.append(("investment_horizon_years", profile.investment_horizon_years))
        if not _int_between(profile.age, AGE_MIN, AGE_MAX):
            problems.append(("age", profile.age))
        if (
            not isinstance(profile.target_amount, Decimal)
            or not profile.target_amount.is_finite()
            or not TARGET_AMOUNT_MIN <= profile.target_amount <= TARGET_AMOUNT_MAX
        ):
            problems.append(("target_amount", profile.target_amount))

        if problems:
            field, value = problems[0]
            raise InvalidProfileError(
                f"Canonical profile field {field!r} is invalid: {value!r}.",
                kind=ProfileErrorKind.OUT_OF_RANGE,
                field=field,
            )

    def _validate_tables(self) -> List[str]:
        """
        Check the injected tables and return the asset-class order.

        Raises
        ------
        ValueError
            On a missing band, mismatched class sets, a template that does
            not sum to 100, negative values, equities that fall as risk
            rises, or shifts/sub-weights naming unknown classes.
        """
        missing = [band for band in _BAND_ORDER if band not in self._templates]
        if missing:
            raise ValueError(f"Templates missing for bands: {missing}")

        classes = list(self._templates[_BAND_ORDER[0]])
        if not classes:
            raise ValueError("Templates must contain at least one asset class.")

        for band in _BAND_ORDER:
            template = self._templates[band]
            if set(template) != set(classes):
                raise ValueError(
                    f"Template {band.value!r} lists {sorted(template)}, "
                    f"expected {sorted(classes)}."
                )
            if any(v < 0 for v in template.values()):
                raise ValueError(f"Template {band.value!r} has a negative percentage.")
            total = math.fsum(template.values())
            if abs(total - TOTAL_PERCENT) > SUM_TOLERANCE:
                raise ValueError(
                    f"Template {band.value!r} sums to {total}, expected {TOTAL_PERCENT}."
                )

        if EQUITY_CLASS in classes:
            equity = [self._templates[band][EQUITY_CLASS] for band in _BAND_ORDER]
            if any(later < earlier for earlier, later in zip(equity, equity[1:])):
                raise ValueError(
                    f"{EQUITY_CLASS!r} must not decrease from conservative to aggressive."
                )

        tables = [self._sub_weights] + [
            overrides for overrides in self._goal_sub_overrides.values()
        ]
        for name in classes:
            if name not in self._sub_weights:
                raise ValueError(f"No sub-asset weights for asset class {name!r}.")
        for table in tables:
            for name, weights in table.items():
                if name not in classes:
                    raise ValueError(f"Sub-asset weights for unknown class {name!r}.")
                if not weights or any(w < 0 for w in weights.values()):
                    raise ValueError(
                        f"Sub-asset weights for {name!r} must be non-empty and non-negative."
                    )

        shift_lists = list(self._goal_adjustments.values()) + [
            SHORT_HORIZON_ADJUSTMENT, SMALL_TARGET_ADJUSTMENT,
        ]
        for shifts in shift_lists:
            for source, destination, points in shifts:
                if source not in classes or destination not in classes:
                    raise ValueError(
                        f"Shift {source!r} → {destination!r} names an unknown class."
                    )
                if points < 0:
                    raise ValueError("Shift points must be non-negative.")
                if destination == EQUITY_CLASS:
                    raise ValueError(
                        f"Shifts may not move weight into {EQUITY_CLASS!r}."
                    )

        return classes


def _int_between(value, low: int, high: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high
