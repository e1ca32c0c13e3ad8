"""
advisor/profile_normalizer.py
-----------------------------
Raw investor profile → CanonicalProfile.

Design contract:
  - Re-validates every field even though the transport layer already did
  - Never coerces silently: anything doubtful raises InvalidProfileError
  - No side effects
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from advisor.config import (
    AGE_MAX,
    AGE_MIN,
    HORIZON_MAX_YEARS,
    HORIZON_MIN_YEARS,
    MAX_PLANNING_AGE,
    TARGET_AMOUNT_MAX,
    TARGET_AMOUNT_MIN,
)
from advisor.constants import GOAL_ALIASES, GOAL_HORIZON_WINDOWS
from advisor.enums import GoalCategory, ProfileErrorKind, RiskTolerance
from advisor.exceptions import InvalidProfileError
from advisor.models import CanonicalProfile, InvestorProfile


# Transport (camelCase) key → internal field name.  snake_case keys are
# accepted as-is.
FIELD_ALIASES: dict[str, str] = {
    "riskTolerance":          "risk_tolerance",
    "investmentHorizonYears": "investment_horizon_years",
    "investmentHorizon":      "investment_horizon_years",
    "age":                    "age",
    "goal":                   "goal",
    "targetAmount":           "target_amount",
}

REQUIRED_FIELDS = (
    "risk_tolerance",
    "investment_horizon_years",
    "age",
    "goal",
    "target_amount",
)


class ProfileNormalizer:
    """
    Validate and canonicalise investor profiles.

    Usage::

        canonical = ProfileNormalizer().normalize({
            "riskTolerance": "High",
            "investmentHorizonYears": 30,
            "age": 18,
            "goal": "wealth-growth",
            "targetAmount": 100_000_000,
        })
    """

    def normalize(
        self, raw: Union[InvestorProfile, Mapping[str, Any]]
    ) -> CanonicalProfile:
        """
        Return a :class:`CanonicalProfile` for *raw*.

        Raises
        ------
        InvalidProfileError
            ``kind`` is ``MISSING_FIELD``, ``OUT_OF_RANGE`` or
            ``INCONSISTENT_COMBINATION``; ``field`` names the culprit.
        """
        fields = self._extract_fields(raw)

        risk    = self._parse_risk(fields["risk_tolerance"])
        horizon = self._parse_int(
            fields["investment_horizon_years"], "investment_horizon_years",
            HORIZON_MIN_YEARS, HORIZON_MAX_YEARS,
        )
        age     = self._parse_int(fields["age"], "age", AGE_MIN, AGE_MAX)
        goal_label, goal = self._parse_goal(fields["goal"])
        target  = self._parse_amount(fields["target_amount"])

        self._check_combination(goal, goal_label, horizon, age)

        return CanonicalProfile(
            risk_tolerance=risk,
            risk_score=risk.ordinal,
            investment_horizon_years=horizon,
            age=age,
            goal=goal,
            goal_label=goal_label,
            target_amount=target,
        )

    # ------------------------------------------------------------------ #
    #  Field extraction
    # ------------------------------------------------------------------ #

    @staticmethod
    def _extract_fields(raw) -> dict[str, Any]:
        if isinstance(raw, InvestorProfile):
            source = {name: getattr(raw, name) for name in REQUIRED_FIELDS}
        elif isinstance(raw, Mapping):
            source = {}
            for key, value in raw.items():
                source[FIELD_ALIASES.get(key, key)] = value
        else:
            raise InvalidProfileError(
                f"Profile must be an InvestorProfile or a mapping, "
                f"got {type(raw).__name__}.",
                kind=ProfileErrorKind.MISSING_FIELD,
            )

        for name in REQUIRED_FIELDS:
            value = source.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise InvalidProfileError(
                    f"Missing required field {name!r}.",
                    kind=ProfileErrorKind.MISSING_FIELD,
                    field=name,
                )
        return source

    # ------------------------------------------------------------------ #
    #  Per-field parsers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _parse_risk(value) -> RiskTolerance:
        if isinstance(value, RiskTolerance):
            return value
        if isinstance(value, str):
            try:
                return RiskTolerance(value.strip().lower())
            except ValueError:
                pass
        raise InvalidProfileError(
            f"Unknown risk tolerance {value!r}; expected Low, Medium or High.",
            kind=ProfileErrorKind.OUT_OF_RANGE,
            field="risk_tolerance",
        )

    @staticmethod
    def _parse_int(value, name: str, low: int, high: int) -> int:
        """Accept ints (and integral floats/Decimals); bools are rejected."""
        if isinstance(value, bool):
            number = None
        elif isinstance(value, int):
            number = value
        elif isinstance(value, (float, Decimal)):
            try:
                number = int(value) if value == int(value) else None
            except (ValueError, OverflowError, InvalidOperation):
                number = None   # NaN / infinity
        else:
            number = None

        if number is None:
            raise InvalidProfileError(
                f"{name} must be a whole number, got {value!r}.",
                kind=ProfileErrorKind.OUT_OF_RANGE,
                field=name,
            )
        if not low <= number <= high:
            raise InvalidProfileError(
                f"{name} must be between {low} and {high}, got {number}.",
                kind=ProfileErrorKind.OUT_OF_RANGE,
                field=name,
            )
        return number

    @staticmethod
    def _parse_goal(value) -> tuple[str, GoalCategory]:
        if isinstance(value, GoalCategory):
            return value.value, value
        if not isinstance(value, str):
            raise InvalidProfileError(
                f"goal must be a text label, got {value!r}.",
                kind=ProfileErrorKind.OUT_OF_RANGE,
                field="goal",
            )
        label = value.strip()
        key = re.sub(r"[\s_]+", "-", label.lower())
        return label, GOAL_ALIASES.get(key, GoalCategory.GENERAL)

    @staticmethod
    def _parse_amount(value) -> Decimal:
        if isinstance(value, bool):
            amount: Optional[Decimal] = None
        else:
            try:
                # str() first so floats keep their printed value (0.1 → "0.1")
                amount = Decimal(str(value).strip().replace(",", ""))
            except (InvalidOperation, ValueError):
                amount = None

        if amount is None or not amount.is_finite():
            raise InvalidProfileError(
                f"target_amount must be a currency amount, got {value!r}.",
                kind=ProfileErrorKind.OUT_OF_RANGE,
                field="target_amount",
            )
        if not TARGET_AMOUNT_MIN <= amount <= TARGET_AMOUNT_MAX:
            raise InvalidProfileError(
                f"target_amount must be between {TARGET_AMOUNT_MIN:,} and "
                f"{TARGET_AMOUNT_MAX:,}, got {amount}.",
                kind=ProfileErrorKind.OUT_OF_RANGE,
                field="target_amount",
            )
        return amount

    # ------------------------------------------------------------------ #
    #  Cross-field checks
    # ------------------------------------------------------------------ #

    @staticmethod
    def _check_combination(
        goal: GoalCategory, goal_label: str, horizon: int, age: int
    ) -> None:
        window = GOAL_HORIZON_WINDOWS.get(goal)
        if window is not None:
            low, high = window
            if not low <= horizon <= high:
                raise InvalidProfileError(
                    f"A {horizon}-year horizon does not fit goal {goal_label!r} "
                    f"(expected {low}-{high} years).",
                    kind=ProfileErrorKind.INCONSISTENT_COMBINATION,
                    field="investment_horizon_years",
                )

        if age + horizon > MAX_PLANNING_AGE:
            raise InvalidProfileError(
                f"Horizon of {horizon} years at age {age} runs past age "
                f"{MAX_PLANNING_AGE}.",
                kind=ProfileErrorKind.INCONSISTENT_COMBINATION,
                field="investment_horizon_years",
            )
