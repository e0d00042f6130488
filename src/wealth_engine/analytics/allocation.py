"""
Allocation Engine
=================
Percentage breakdowns along any Dimension and actual-vs-target drift per
asset class.

Drift is measured over investible assets only: lifestyle assets (primary
residence, vehicles) are not part of the portfolio being rebalanced.
"""

from typing import Dict, List, Sequence

import pandas as pd

from wealth_engine.analytics.valuation import group_assets, investible_assets, total_value
from wealth_engine.models.portfolio import (
    AllocationSlice,
    Asset,
    ClassDrift,
    Dimension,
    DriftReport,
    Settings,
    Thresholds,
    Urgency,
)
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


def allocation(assets: Sequence[Asset], settings: Settings, dimension) -> List[AllocationSlice]:
    """
    Share of total value per group, sorted by value descending then name.

    Percentages sum to 100 when the total is positive; every percentage is 0
    when the total is 0.
    """
    groups = group_assets(assets, settings, dimension)
    total = total_value(assets, settings)

    slices = [
        AllocationSlice(
            name=g.name,
            value=g.value,
            percentage=(g.value / total * 100) if total > 0 else 0.0,
            count=g.count,
        )
        for g in groups
    ]
    slices.sort(key=lambda s: (-s.value, s.name))
    return slices


def allocation_frame(slices: Sequence[AllocationSlice]) -> pd.DataFrame:
    """Allocation table as a DataFrame indexed by group name."""
    frame = pd.DataFrame(
        [s.to_dict() for s in slices],
        columns=['name', 'value', 'percentage', 'count'],
    )
    return frame.set_index('name')


def all_allocations(assets: Sequence[Asset], settings: Settings) -> Dict[str, List[AllocationSlice]]:
    """Allocation tables for every Dimension, keyed by dimension value."""
    return {d.value: allocation(assets, settings, d) for d in Dimension}


# =========================
# DRIFT
# =========================

def classify_urgency(abs_drift: float, thresholds: Thresholds) -> Urgency:
    """high above urgency_high, medium above urgency_medium, else low (strict)."""
    if abs_drift > thresholds.urgency_high:
        return Urgency.HIGH
    if abs_drift > thresholds.urgency_medium:
        return Urgency.MEDIUM
    return Urgency.LOW


def _drift_classes(present: Sequence[str], targets: Dict[str, float]) -> List[str]:
    # Targets in declared order, then untargeted classes actually held (sorted)
    extra = sorted({c for c in present if c not in targets})
    return list(targets) + extra


def calculate_drift(assets: Sequence[Asset], settings: Settings) -> DriftReport:
    """
    Actual vs target allocation by asset class over investible assets.

    drift = actual% - target%; positive means overweight. A class held but
    absent from the targets has a 0% target. With no investible value every
    actual% is 0, so drift equals -target%.
    """
    thresholds = settings.thresholds
    portfolio = investible_assets(assets)
    total = total_value(portfolio, settings)
    values = {g.name: g.value for g in group_assets(portfolio, settings, Dimension.ASSET_CLASS)}
    targets = settings.target_allocation

    drifts: List[ClassDrift] = []
    for asset_class in _drift_classes(list(values), targets):
        current_value = values.get(asset_class, 0.0)
        current_pct = (current_value / total * 100) if total > 0 else 0.0
        target_pct = targets.get(asset_class, 0.0)
        drift = current_pct - target_pct
        drifts.append(ClassDrift(
            asset_class=asset_class,
            current_value=current_value,
            current_pct=current_pct,
            target_pct=target_pct,
            target_value=total * target_pct / 100,
            drift=drift,
            urgency=classify_urgency(abs(drift), thresholds),
            needs_attention=abs(drift) > thresholds.display_drift,
            needs_rebalancing=abs(drift) > thresholds.rebalancing_drift,
        ))

    total_drift = 0.0
    max_drift = 0.0
    for item in drifts:
        total_drift += abs(item.drift)
        max_drift = max(max_drift, abs(item.drift))

    report = DriftReport(
        total_value=total,
        drifts=drifts,
        total_drift=total_drift,
        max_drift=max_drift,
        urgency=classify_urgency(max_drift, thresholds),
    )
    logger.debug(f"Drift: total={total_drift:.2f} max={max_drift:.2f} urgency={report.urgency.value}")
    return report


def drift_frame(report: DriftReport) -> pd.DataFrame:
    """Drift table indexed by asset class, for the console and CSV export."""
    columns = ['asset_class', 'current_value', 'current_pct', 'target_pct', 'target_value',
               'drift', 'urgency', 'needs_attention', 'needs_rebalancing']
    frame = pd.DataFrame([d.to_dict() for d in report.drifts], columns=columns)
    return frame.set_index('asset_class')
