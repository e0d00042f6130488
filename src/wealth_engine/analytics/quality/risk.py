"""
Risk Sub-Score
==============
Inverse of concentration risk over investible assets. Each flagged risk
costs a base penalty plus a per-point charge on the excess over its
threshold; critical risks cost more.
"""

from typing import Optional, Sequence

from wealth_engine.analytics.valuation import asset_value, group_assets, investible_assets, total_value
from wealth_engine.config.thresholds import RISK_PENALTIES
from wealth_engine.decision.concentration import detect_concentration_risks
from wealth_engine.models.portfolio import (
    Asset,
    ConcentrationReport,
    ConcentrationRisk,
    Dimension,
    RiskReport,
    Settings,
    Severity,
)


def risk_penalty(risk: ConcentrationRisk) -> float:
    over = risk.excess
    if risk.severity is Severity.CRITICAL:
        return RISK_PENALTIES['critical_base'] + RISK_PENALTIES['critical_per_point'] * over
    return RISK_PENALTIES['warning_base'] + RISK_PENALTIES['warning_per_point'] * over


def _details(report: ConcentrationReport) -> str:
    if not report.risks:
        return "No concentration risks detected"
    critical = [r for r in report.risks if r.severity is Severity.CRITICAL]
    if critical:
        return f"{len(critical)} critical concentration risk(s) detected"
    return f"{len(report.risks)} moderate concentration risk(s)"


def risk_score(assets: Sequence[Asset], settings: Settings,
               concentration: Optional[ConcentrationReport] = None) -> RiskReport:
    """
    Risk sub-score. `concentration` must have been computed over the
    investible assets when supplied.
    """
    portfolio = investible_assets(assets)
    total = total_value(portfolio, settings)

    if total <= 0:
        return RiskReport(score=0.0, risks=[], risk_count=0, max_single_asset_pct=0.0,
                          max_currency_pct=0.0, details="No investible assets")

    report = concentration if concentration is not None else detect_concentration_risks(portfolio, settings)

    penalty = 0.0
    for risk in report.risks:
        penalty += risk_penalty(risk)

    max_single = max(asset_value(a, settings) / total * 100 for a in portfolio)
    max_currency = max(g.value / total * 100 for g in group_assets(portfolio, settings, Dimension.CURRENCY))

    return RiskReport(
        score=max(0.0, min(100.0, 100 - penalty)),
        risks=list(report.risks),
        risk_count=len(report.risks),
        max_single_asset_pct=max_single,
        max_currency_pct=max_currency,
        details=_details(report),
    )
