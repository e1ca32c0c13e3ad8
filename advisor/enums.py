from enum import Enum


class RiskTolerance(Enum):
    """Investor risk tolerance levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def ordinal(self) -> int:
        """Ordinal score consumed by the engine (Low=1, Medium=2, High=3)."""
        return _RISK_ORDINALS[self]


_RISK_ORDINALS = {
    RiskTolerance.LOW:    1,
    RiskTolerance.MEDIUM: 2,
    RiskTolerance.HIGH:   3,
}


class RiskBand(Enum):
    """Template family selected from the composite risk score."""
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


class GoalCategory(Enum):
    """Canonical investment goal. Unrecognised labels fall into GENERAL."""
    RETIREMENT = "retirement"
    EDUCATION = "education"
    WEALTH_GROWTH = "wealth-growth"
    CAPITAL_PRESERVATION = "capital-preservation"
    HOME_PURCHASE = "home-purchase"
    EMERGENCY_FUND = "emergency-fund"
    GENERAL = "general"


class ProfileErrorKind(Enum):
    """Why a profile was rejected."""
    MISSING_FIELD = "MissingField"
    OUT_OF_RANGE = "OutOfRange"
    INCONSISTENT_COMBINATION = "InconsistentCombination"
