"""
advisor/models.py
-----------------
Typed data model for the allocation core.

  InvestorProfile   – raw, request-scoped input (never persisted)
  CanonicalProfile  – validated profile the engine consumes
  AssetAllocation   – one asset class: percentage + sub-asset split
  AllocationResult  – read-only mapping  asset class → AssetAllocation

Sub-asset convention
--------------------
Sub-asset values are points of the *whole* portfolio and sum to their
parent's ``percentage``.  ``AllocationResult.validate()`` checks this
together with the top-level sum-to-100 rule.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterator, Optional

import pandas as pd

from advisor.config import SUM_TOLERANCE, TOTAL_PERCENT
from advisor.enums import GoalCategory, RiskTolerance


@dataclass(frozen=True)
class InvestorProfile:
    """The five-field investor description handed over by the transport layer."""
    risk_tolerance: RiskTolerance
    investment_horizon_years: int
    age: int
    goal: str
    target_amount: Decimal


@dataclass(frozen=True)
class CanonicalProfile:
    """
    Validated investor profile.

    ``risk_score`` is the ordinal of ``risk_tolerance`` (Low=1 … High=3);
    ``goal_label`` keeps the caller's original free-form label.
    """
    risk_tolerance: RiskTolerance
    risk_score: int
    investment_horizon_years: int
    age: int
    goal: GoalCategory
    goal_label: str
    target_amount: Decimal


@dataclass(frozen=True)
class AssetAllocation:
    """A single asset class and its sub-asset split."""
    percentage: float
    sub_assets: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        # Own a private copy so the caller's dict cannot alter a frozen node.
        object.__setattr__(self, "sub_assets", dict(self.sub_assets))

    def sub_asset_total(self) -> float:
        return math.fsum(self.sub_assets.values())

    def to_dict(self) -> dict:
        return {
            "percentage": self.percentage,
            "sub_assets": dict(self.sub_assets),
        }


class AllocationResult(Mapping):
    """
    Hierarchical allocation: ``{asset_class: AssetAllocation}``.

    Immutable once built.  Equality is structural (including nested
    sub-asset maps), so a result loaded from disk compares equal to the one
    that was saved.
    """

    def __init__(self, assets: Mapping[str, AssetAllocation]):
        self._assets: Dict[str, AssetAllocation] = dict(assets)

    # ------------------------------------------------------------------ #
    #  Mapping protocol
    # ------------------------------------------------------------------ #

    def __getitem__(self, asset_class: str) -> AssetAllocation:
        return self._assets[asset_class]

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __len__(self) -> int:
        return len(self._assets)

    def __repr__(self) -> str:
        return f"AllocationResult({self._assets!r})"

    # ------------------------------------------------------------------ #
    #  Views
    # ------------------------------------------------------------------ #

    def percentages(self) -> Dict[str, float]:
        """Top-level ``{asset_class: percentage}``."""
        return {name: node.percentage for name, node in self._assets.items()}

    def total_percentage(self) -> float:
        return math.fsum(node.percentage for node in self._assets.values())

    def to_frame(self) -> pd.DataFrame:
        """
        Flatten to one row per sub-asset.

        Columns: ``asset_class``, ``sub_asset``, ``percentage`` (of the whole
        portfolio) and ``share_of_class`` (fraction of the parent class).
        """
        rows = []
        for asset_class, node in self._assets.items():
            for sub_asset, pct in node.sub_assets.items():
                share = pct / node.percentage if node.percentage > 0 else 0.0
                rows.append({
                    "asset_class":    asset_class,
                    "sub_asset":      sub_asset,
                    "percentage":     pct,
                    "share_of_class": share,
                })
        return pd.DataFrame(
            rows, columns=["asset_class", "sub_asset", "percentage", "share_of_class"]
        )

    # ------------------------------------------------------------------ #
    #  Invariants
    # ------------------------------------------------------------------ #

    def validate(self, tolerance: float = SUM_TOLERANCE) -> None:
        """
        Assert the hierarchy is internally consistent.

        Raises
        ------
        AssertionError
            * a percentage is outside [0, 100] or not finite
            * top-level percentages do not sum to 100 within *tolerance*
            * a class's sub-assets do not sum to its percentage
        """
        for asset_class, node in self._assets.items():
            values = [node.percentage, *node.sub_assets.values()]
            for v in values:
                if not math.isfinite(v) or v < 0.0 or v > TOTAL_PERCENT:
                    raise AssertionError(
                        f"Percentage out of range in {asset_class!r}: {v}"
                    )
            sub_total = node.sub_asset_total()
            if node.sub_assets and abs(sub_total - node.percentage) > tolerance:
                raise AssertionError(
                    f"Sub-assets of {asset_class!r} sum to {sub_total}, "
                    f"expected {node.percentage}."
                )

        total = self.total_percentage()
        if abs(total - TOTAL_PERCENT) > tolerance:
            raise AssertionError(
                f"Top-level percentages must sum to {TOTAL_PERCENT} (got {total})."
            )

    # ------------------------------------------------------------------ #
    #  Serialisation
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict:
        """Plain JSON-compatible structure."""
        return {name: node.to_dict() for name, node in self._assets.items()}

    @classmethod
    def from_dict(cls, payload: Optional[Mapping]) -> "AllocationResult":
        """
        Rebuild a result from :meth:`to_dict` output.

        Raises
        ------
        TypeError / ValueError
            If *payload* does not have the expected shape.
        """
        if not isinstance(payload, Mapping):
            raise TypeError(
                f"Allocation payload must be a mapping, got {type(payload).__name__}."
            )

        assets: Dict[str, AssetAllocation] = {}
        for asset_class, node in payload.items():
            if not isinstance(asset_class, str) or not asset_class:
                raise ValueError(f"Invalid asset class name: {asset_class!r}")
            if not isinstance(node, Mapping):
                raise TypeError(f"Entry for {asset_class!r} must be a mapping.")
            if "percentage" not in node or "sub_assets" not in node:
                raise ValueError(
                    f"Entry for {asset_class!r} needs 'percentage' and 'sub_assets'."
                )

            sub_assets = node["sub_assets"]
            if not isinstance(sub_assets, Mapping):
                raise TypeError(f"'sub_assets' of {asset_class!r} must be a mapping.")

            assets[asset_class] = AssetAllocation(
                percentage=_as_number(node["percentage"], asset_class),
                sub_assets={
                    str(name): _as_number(value, f"{asset_class}/{name}")
                    for name, value in sub_assets.items()
                },
            )
        return cls(assets)


def _as_number(value, where: str) -> float:
    """Accept int/float (not bool); reject NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Percentage at {where!r} must be a number, got {value!r}.")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Percentage at {where!r} is not finite: {value!r}.")
    return number
