"""
Balance Sub-Score
=================
Continuous penalty on total absolute drift from the target allocation:

    score = 100 - 10 * (total_drift / 50) ** 1.5

100 at zero drift, ~92.8 at 40 points of total drift, 0 at ~232 points. No
steps, so crossing a drift threshold never makes the score jump.
"""

from typing import Optional, Sequence

import numpy as np

from wealth_engine.analytics.allocation import calculate_drift
from wealth_engine.config.thresholds import BALANCE_CURVE
from wealth_engine.models.portfolio import Asset, BalanceReport, DriftReport, Settings, Urgency


def drift_to_score(total_drift: float) -> float:
    penalty = BALANCE_CURVE['scale'] * (total_drift / BALANCE_CURVE['normalizer']) ** BALANCE_CURVE['exponent']
    return float(np.clip(100 - penalty, 0, 100))


def _details(report: DriftReport) -> str:
    if report.urgency is Urgency.HIGH:
        return f"Rebalancing needed ({report.max_drift:.1f}% max drift)"
    if report.urgency is Urgency.MEDIUM:
        return f"Rebalancing recommended ({report.max_drift:.1f}% max drift)"
    if any(d.needs_attention for d in report.drifts):
        return "Minor drift from targets"
    return "Portfolio is well balanced"


def balance_score(assets: Sequence[Asset], settings: Settings,
                  drift: Optional[DriftReport] = None) -> BalanceReport:
    """
    Balance sub-score; pass a precomputed DriftReport to avoid recomputing it.

    No investible value scores 0: there is no portfolio to be in balance.
    """
    report = drift if drift is not None else calculate_drift(assets, settings)

    if report.total_value <= 0:
        return BalanceReport(
            score=0.0,
            total_drift=report.total_drift,
            max_drift=report.max_drift,
            urgency=report.urgency,
            drifts=report.drifts,
            details="No investible assets",
        )

    return BalanceReport(
        score=drift_to_score(report.total_drift),
        total_drift=report.total_drift,
        max_drift=report.max_drift,
        urgency=report.urgency,
        drifts=report.drifts,
        details=_details(report),
    )
