"""
Concentration Risk Detector
===========================
Flags holdings, asset classes, currencies and (optionally) platforms whose
share of total asset value exceeds the configured threshold.

RULES:
- Flagged when share > threshold (strict); exactly at the threshold is fine
- critical when share > CRITICAL_MULTIPLIER * threshold, else warning
- The platform axis is only evaluated when thresholds.platform is set
- Zero total value -> nothing evaluated (evaluated=False), not an error
"""

from typing import List, Optional, Sequence, Tuple

from wealth_engine.analytics.valuation import asset_value, group_assets, total_value
from wealth_engine.config.thresholds import CRITICAL_MULTIPLIER
from wealth_engine.models.portfolio import (
    Asset,
    ConcentrationReport,
    ConcentrationRisk,
    Dimension,
    RiskType,
    Settings,
    Severity,
)
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


def classify_severity(percentage: float, threshold: float) -> Optional[Severity]:
    """None when not flagged."""
    if percentage <= threshold:
        return None
    if percentage > threshold * CRITICAL_MULTIPLIER:
        return Severity.CRITICAL
    return Severity.WARNING


def _check(risk_type: RiskType, name: str, value: float, total: float,
           threshold: float, out: List[ConcentrationRisk]) -> None:
    percentage = value / total * 100
    severity = classify_severity(percentage, threshold)
    if severity is None:
        return
    out.append(ConcentrationRisk(
        type=risk_type,
        name=name,
        percentage=percentage,
        threshold=threshold,
        severity=severity,
    ))


def evaluated_axes(settings: Settings) -> Tuple[RiskType, ...]:
    axes = (RiskType.SINGLE_ASSET, RiskType.ASSET_CLASS, RiskType.CURRENCY)
    if settings.thresholds.platform is not None:
        axes += (RiskType.PLATFORM,)
    return axes


def detect_concentration_risks(assets: Sequence[Asset], settings: Settings) -> ConcentrationReport:
    """
    Evaluate every axis over the given assets.

    Risks are listed axis by axis (single asset, asset class, currency,
    platform); single-asset risks keep input order, group risks follow value
    order descending.
    """
    thresholds = settings.thresholds
    axes = evaluated_axes(settings)
    total = total_value(assets, settings)

    if total <= 0:
        logger.debug("Concentration: zero total value, nothing evaluated")
        return ConcentrationReport(risks=[], axes=axes, total_value=0.0, evaluated=False)

    risks: List[ConcentrationRisk] = []

    for asset in assets:
        _check(RiskType.SINGLE_ASSET, asset.name, asset_value(asset, settings),
               total, thresholds.single_asset, risks)

    group_axes = [
        (RiskType.ASSET_CLASS, Dimension.ASSET_CLASS, thresholds.asset_class),
        (RiskType.CURRENCY, Dimension.CURRENCY, thresholds.currency),
    ]
    if thresholds.platform is not None:
        group_axes.append((RiskType.PLATFORM, Dimension.PLATFORM, thresholds.platform))

    for risk_type, dimension, threshold in group_axes:
        groups = sorted(group_assets(assets, settings, dimension), key=lambda g: (-g.value, g.name))
        for group in groups:
            _check(risk_type, group.name, group.value, total, threshold, risks)

    for risk in risks:
        if risk.severity is Severity.CRITICAL:
            logger.warning(
                f"Critical {risk.type.value} concentration: {risk.name} "
                f"{risk.percentage:.1f}% (limit {risk.threshold:.1f}%)"
            )

    return ConcentrationReport(risks=risks, axes=axes, total_value=total, evaluated=True)
