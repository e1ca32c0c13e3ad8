"""
tests/test_profile_normalizer.py
--------------------------------
Unit tests for ProfileNormalizer.

Coverage:
  - Accepted input shapes (camelCase mapping, snake_case mapping, InvestorProfile)
  - Risk tolerance → ordinal score
  - Goal canonicalisation (aliases, free-form labels)
  - MISSING_FIELD / OUT_OF_RANGE / INCONSISTENT_COMBINATION rejections
"""

import unittest
from decimal import Decimal

from advisor.enums import GoalCategory, ProfileErrorKind, RiskTolerance
from advisor.exceptions import InvalidProfileError
from advisor.models import InvestorProfile
from advisor.profile_normalizer import ProfileNormalizer


def _raw(**overrides) -> dict:
    raw = {
        "riskTolerance":          "Medium",
        "investmentHorizonYears": 10,
        "age":                    40,
        "goal":                   "retirement",
        "targetAmount":           500_000,
    }
    raw.update(overrides)
    return raw


class _NormalizerCase(unittest.TestCase):

    def setUp(self):
        self.normalizer = ProfileNormalizer()

    def assertRejected(self, raw, kind, field=None):
        with self.assertRaises(InvalidProfileError) as ctx:
            self.normalizer.normalize(raw)
        self.assertEqual(ctx.exception.kind, kind)
        if field is not None:
            self.assertEqual(ctx.exception.field, field)
        return ctx.exception


# ---------------------------------------------------------------------------
# Accepted shapes
# ---------------------------------------------------------------------------

class TestAcceptedInput(_NormalizerCase):

    def test_camel_case_mapping(self):
        profile = self.normalizer.normalize(_raw())
        self.assertEqual(profile.risk_tolerance, RiskTolerance.MEDIUM)
        self.assertEqual(profile.investment_horizon_years, 10)
        self.assertEqual(profile.age, 40)
        self.assertEqual(profile.goal, GoalCategory.RETIREMENT)
        self.assertEqual(profile.target_amount, Decimal("500000"))

    def test_snake_case_mapping(self):
        profile = self.normalizer.normalize({
            "risk_tolerance":           "low",
            "investment_horizon_years": 5,
            "age":                      60,
            "goal":                     "education",
            "target_amount":            "25000.50",
        })
        self.assertEqual(profile.risk_tolerance, RiskTolerance.LOW)
        self.assertEqual(profile.target_amount, Decimal("25000.50"))

    def test_investor_profile_instance(self):
        raw = InvestorProfile(
            risk_tolerance=RiskTolerance.HIGH,
            investment_horizon_years=30,
            age=18,
            goal="wealth-growth",
            target_amount=Decimal("100000000"),
        )
        profile = self.normalizer.normalize(raw)
        self.assertEqual(profile.risk_score, 3)
        self.assertEqual(profile.goal, GoalCategory.WEALTH_GROWTH)

    def test_risk_ordinals(self):
        for label, ordinal in (("Low", 1), ("Medium", 2), ("High", 3)):
            profile = self.normalizer.normalize(_raw(riskTolerance=label))
            self.assertEqual(profile.risk_score, ordinal, label)

    def test_risk_label_is_case_insensitive(self):
        profile = self.normalizer.normalize(_raw(riskTolerance="  HIGH "))
        self.assertEqual(profile.risk_tolerance, RiskTolerance.HIGH)

    def test_integral_float_horizon_accepted(self):
        profile = self.normalizer.normalize(_raw(investmentHorizonYears=5.0))
        self.assertEqual(profile.investment_horizon_years, 5)
        self.assertIsInstance(profile.investment_horizon_years, int)

    def test_target_with_thousands_separators(self):
        profile = self.normalizer.normalize(_raw(targetAmount="1,000,000"))
        self.assertEqual(profile.target_amount, Decimal("1000000"))

    def test_float_target_keeps_printed_value(self):
        profile = self.normalizer.normalize(_raw(targetAmount=10000.1))
        self.assertEqual(profile.target_amount, Decimal("10000.1"))

    def test_range_edges_accepted(self):
        profile = self.normalizer.normalize(_raw(
            riskTolerance="Low", investmentHorizonYears=1, age=100,
            goal="capital-preservation", targetAmount=10_000,
        ))
        self.assertEqual(profile.age, 100)
        self.assertEqual(profile.goal, GoalCategory.CAPITAL_PRESERVATION)

    def test_does_not_mutate_input(self):
        raw = _raw()
        snapshot = dict(raw)
        self.normalizer.normalize(raw)
        self.assertEqual(raw, snapshot)


# ---------------------------------------------------------------------------
# Goal handling
# ---------------------------------------------------------------------------

class TestGoal(_NormalizerCase):

    def test_aliases_and_spacing(self):
        cases = {
            "Wealth Growth":        GoalCategory.WEALTH_GROWTH,
            "wealth_growth":        GoalCategory.WEALTH_GROWTH,
            "College":              GoalCategory.EDUCATION,
            "Emergency Fund":       GoalCategory.EMERGENCY_FUND,
            "buy a house":          GoalCategory.HOME_PURCHASE,
            "CAPITAL-PRESERVATION": GoalCategory.CAPITAL_PRESERVATION,
        }
        for label, expected in cases.items():
            profile = self.normalizer.normalize(_raw(goal=label, investmentHorizonYears=5))
            self.assertEqual(profile.goal, expected, label)

    def test_unknown_goal_is_general_and_keeps_label(self):
        profile = self.normalizer.normalize(_raw(goal="  Sabbatical year "))
        self.assertEqual(profile.goal, GoalCategory.GENERAL)
        self.assertEqual(profile.goal_label, "Sabbatical year")

    def test_non_text_goal_rejected(self):
        self.assertRejected(_raw(goal=42), ProfileErrorKind.OUT_OF_RANGE, "goal")


# ---------------------------------------------------------------------------
# MISSING_FIELD
# ---------------------------------------------------------------------------

class TestMissingField(_NormalizerCase):

    def test_each_missing_field(self):
        for key, field in (
            ("riskTolerance", "risk_tolerance"),
            ("investmentHorizonYears", "investment_horizon_years"),
            ("age", "age"),
            ("goal", "goal"),
            ("targetAmount", "target_amount"),
        ):
            raw = _raw()
            del raw[key]
            self.assertRejected(raw, ProfileErrorKind.MISSING_FIELD, field)

    def test_none_value_is_missing(self):
        self.assertRejected(_raw(age=None), ProfileErrorKind.MISSING_FIELD, "age")

    def test_blank_goal_is_missing(self):
        self.assertRejected(_raw(goal="   "), ProfileErrorKind.MISSING_FIELD, "goal")

    def test_non_mapping_input(self):
        self.assertRejected(["Medium", 10, 40], ProfileErrorKind.MISSING_FIELD)


# ---------------------------------------------------------------------------
# OUT_OF_RANGE
# ---------------------------------------------------------------------------

class TestOutOfRange(_NormalizerCase):

    def test_age_bounds(self):
        self.assertRejected(_raw(age=17), ProfileErrorKind.OUT_OF_RANGE, "age")
        self.assertRejected(_raw(age=101), ProfileErrorKind.OUT_OF_RANGE, "age")

    def test_horizon_bounds(self):
        field = "investment_horizon_years"
        self.assertRejected(_raw(investmentHorizonYears=0), ProfileErrorKind.OUT_OF_RANGE, field)
        self.assertRejected(_raw(investmentHorizonYears=31), ProfileErrorKind.OUT_OF_RANGE, field)

    def test_target_bounds(self):
        self.assertRejected(_raw(targetAmount="9999.99"), ProfileErrorKind.OUT_OF_RANGE, "target_amount")
        self.assertRejected(_raw(targetAmount=100_000_001), ProfileErrorKind.OUT_OF_RANGE, "target_amount")

    def test_unknown_risk_label(self):
        self.assertRejected(_raw(riskTolerance="Extreme"), ProfileErrorKind.OUT_OF_RANGE, "risk_tolerance")

    def test_non_numeric_values(self):
        self.assertRejected(_raw(age="forty"), ProfileErrorKind.OUT_OF_RANGE, "age")
        self.assertRejected(_raw(targetAmount="lots"), ProfileErrorKind.OUT_OF_RANGE, "target_amount")
        self.assertRejected(_raw(targetAmount="Infinity"), ProfileErrorKind.OUT_OF_RANGE, "target_amount")

    def test_fractional_horizon_rejected(self):
        self.assertRejected(
            _raw(investmentHorizonYears=5.5), ProfileErrorKind.OUT_OF_RANGE,
            "investment_horizon_years",
        )

    def test_nan_age_rejected(self):
        self.assertRejected(_raw(age=float("nan")), ProfileErrorKind.OUT_OF_RANGE, "age")

    def test_bool_is_not_a_number(self):
        self.assertRejected(_raw(age=True), ProfileErrorKind.OUT_OF_RANGE, "age")
        self.assertRejected(_raw(targetAmount=True), ProfileErrorKind.OUT_OF_RANGE, "target_amount")

    def test_error_message_carries_kind(self):
        exc = self.assertRejected(_raw(age=17), ProfileErrorKind.OUT_OF_RANGE)
        self.assertTrue(str(exc).startswith("[OutOfRange]"))
        self.assertIsInstance(exc, ValueError)


# ---------------------------------------------------------------------------
# INCONSISTENT_COMBINATION
# ---------------------------------------------------------------------------

class TestInconsistentCombination(_NormalizerCase):

    def test_wealth_growth_needs_three_years(self):
        self.assertRejected(
            _raw(goal="wealth-growth", investmentHorizonYears=2),
            ProfileErrorKind.INCONSISTENT_COMBINATION,
            "investment_horizon_years",
        )
        profile = self.normalizer.normalize(
            _raw(goal="wealth-growth", investmentHorizonYears=3)
        )
        self.assertEqual(profile.goal, GoalCategory.WEALTH_GROWTH)

    def test_emergency_fund_is_short_dated(self):
        self.assertRejected(
            _raw(goal="emergency fund", investmentHorizonYears=6),
            ProfileErrorKind.INCONSISTENT_COMBINATION,
        )

    def test_horizon_past_planning_age(self):
        self.assertRejected(
            _raw(goal="travel", age=95, investmentHorizonYears=30),
            ProfileErrorKind.INCONSISTENT_COMBINATION,
        )

    def test_range_errors_win_over_combination_errors(self):
        self.assertRejected(
            _raw(goal="wealth-growth", investmentHorizonYears=0),
            ProfileErrorKind.OUT_OF_RANGE,
        )


if __name__ == "__main__":
    unittest.main()
