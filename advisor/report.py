"""
advisor/report.py
-----------------
Human-readable rendering of an AllocationResult.

Design contract:
  - Does NOT compute allocations
  - Does NOT mutate the result
  - Fully stateless (all methods are @staticmethod)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Optional

from advisor.allocation_engine import AllocationEngine
from advisor.models import AllocationResult, CanonicalProfile


class AllocationReport:
    """
    Build text sections for an allocation.

    Entry point::

        sections = AllocationReport.sections(result, profile=canonical)
        print(AllocationReport.render(result, profile=canonical))

    ``sections`` returns a dict with string values:
        ``summary``              – one-line overview
        ``risk_profile``         – score and band (only with a profile)
        ``allocation_table``     – class / sub-asset breakdown
        ``capital_distribution`` – currency amounts (only with a target)
    """

    @staticmethod
    def sections(
        result: AllocationResult,
        profile: Optional[CanonicalProfile] = None,
        target_amount: Optional[Decimal] = None,
    ) -> Dict[str, str]:
        if not result:
            return {"summary": "No allocation available."}

        if target_amount is None and profile is not None:
            target_amount = profile.target_amount

        out = {"summary": AllocationReport._summary(result)}
        if profile is not None:
            out["risk_profile"] = AllocationReport._risk_profile(profile)
        out["allocation_table"] = AllocationReport._allocation_table(result)
        if target_amount is not None:
            out["capital_distribution"] = AllocationReport._capital_distribution(
                result, target_amount
            )
        return out

    @staticmethod
    def render(
        result: AllocationResult,
        profile: Optional[CanonicalProfile] = None,
        target_amount: Optional[Decimal] = None,
    ) -> str:
        """All sections joined by blank lines."""
        return "\n\n".join(
            AllocationReport.sections(result, profile, target_amount).values()
        )

    # ------------------------------------------------------------------ #
    #  Section builders
    # ------------------------------------------------------------------ #

    @staticmethod
    def _summary(result: AllocationResult) -> str:
        percentages = result.percentages()
        top = max(percentages, key=percentages.get)
        count = len(percentages)
        return (
            f"Portfolio split across {count} asset class{'es' if count != 1 else ''}. "
            f"Largest allocation: {top} ({percentages[top]:.2f}%)."
        )

    @staticmethod
    def _risk_profile(profile: CanonicalProfile) -> str:
        score = AllocationEngine.risk_score(profile)
        band  = AllocationEngine.risk_band(score)
        return (
            f"Risk tolerance {profile.risk_tolerance.value}, "
            f"{profile.investment_horizon_years}y horizon, age {profile.age}, "
            f"goal {profile.goal_label!r} → composite score {score:.2f} "
            f"({band.value})."
        )

    @staticmethod
    def _allocation_table(result: AllocationResult) -> str:
        """Fixed-width table: class rows followed by their sub-asset rows."""
        frame = result.to_frame()
        lines = [f"{'Asset class':<28} {'Allocation':>10}"]
        for asset_class, node in result.items():
            lines.append(f"{asset_class:<28} {node.percentage:>9.2f}%")
            rows = frame[frame["asset_class"] == asset_class]
            for row in rows.itertuples(index=False):
                lines.append(f"  {row.sub_asset:<26} {row.percentage:>9.2f}%")
        return "\n".join(lines)

    @staticmethod
    def _capital_distribution(result: AllocationResult, target_amount: Decimal) -> str:
        capital = AllocationEngine.allocate_capital(result, target_amount)
        lines = [f"Capital distribution of {Decimal(str(target_amount)):,.2f}:"]
        for asset_class, entry in capital.items():
            lines.append(f"{asset_class:<28} {entry['amount']:>16,.2f}")
            for sub_asset, amount in entry["sub_assets"].items():
                lines.append(f"  {sub_asset:<26} {amount:>16,.2f}")
        return "\n".join(lines)
