"""
Resilience Sub-Score
====================
How well the portfolio absorbs a shock: liquid holdings, defensive
allocation and months of expenses covered by liquid assets.

Components (each 0-100):
- liquidity: full marks at 10% liquid
- defensive: full marks at 25% bonds + cash
- emergency: 0 -> 70 points over 0-3 months, 70 -> 100 over 3-6, flat above
"""

from typing import List, Sequence

from wealth_engine.analytics.valuation import investible_assets, total_value
from wealth_engine.config.defaults import DEFENSIVE_ASSET_CLASSES, LIQUID_ASSET_CLASSES
from wealth_engine.config.thresholds import RESILIENCE_TARGETS, RESILIENCE_WEIGHTS
from wealth_engine.models.portfolio import Asset, ResilienceReport, Settings


def is_liquid(asset: Asset) -> bool:
    """Explicit is_liquid flag wins; otherwise cash-like classes are liquid."""
    if asset.is_liquid is not None:
        return asset.is_liquid
    return asset.asset_class in LIQUID_ASSET_CLASSES


def is_defensive(asset: Asset) -> bool:
    return asset.asset_class in DEFENSIVE_ASSET_CLASSES


def _ratio_score(ratio: float, target: float) -> float:
    return min(100.0, ratio / target * 100)


def emergency_score(months: float) -> float:
    low = RESILIENCE_TARGETS['emergency_min_months']
    full = RESILIENCE_TARGETS['emergency_full_months']
    floor = RESILIENCE_TARGETS['emergency_min_points']
    if months <= 0:
        return 0.0
    if months < low:
        return months / low * floor
    if months < full:
        return floor + (months - low) / (full - low) * (100 - floor)
    return 100.0


def _details(liquidity_ratio: float, defensive_ratio: float, months: float, expenses: float) -> str:
    issues: List[str] = []
    if liquidity_ratio < RESILIENCE_TARGETS['liquidity_ratio']:
        issues.append("low liquidity")
    if defensive_ratio < RESILIENCE_TARGETS['defensive_ratio']:
        issues.append("minimal defensive allocation")
    if expenses <= 0:
        issues.append("annual expenses not set, emergency fund not measured")
    elif months < RESILIENCE_TARGETS['emergency_min_months']:
        issues.append("insufficient emergency fund")
    if not issues:
        return "Good resilience profile"
    return "Consider improving: " + ", ".join(issues)


def resilience_score(assets: Sequence[Asset], settings: Settings) -> ResilienceReport:
    """
    Resilience sub-score over investible assets.

    Zero annual expenses give 0 emergency months (no division by zero).
    """
    portfolio = investible_assets(assets)
    total = total_value(portfolio, settings)

    if total <= 0:
        return ResilienceReport(
            score=0.0,
            liquidity_ratio=0.0,
            defensive_ratio=0.0,
            emergency_fund_months=0.0,
            liquidity_score=0.0,
            defensive_score=0.0,
            emergency_score=0.0,
            details="No investible assets",
        )

    liquid_value = total_value([a for a in portfolio if is_liquid(a)], settings)
    defensive_value = total_value([a for a in portfolio if is_defensive(a)], settings)
    liquidity_ratio = liquid_value / total
    defensive_ratio = defensive_value / total

    expenses = settings.profile.annual_expenses
    months = liquid_value / (expenses / 12) if expenses > 0 else 0.0

    components = {
        'liquidity': _ratio_score(liquidity_ratio, RESILIENCE_TARGETS['liquidity_ratio']),
        'defensive': _ratio_score(defensive_ratio, RESILIENCE_TARGETS['defensive_ratio']),
        'emergency': emergency_score(months),
    }
    score = sum(components[name] * weight for name, weight in RESILIENCE_WEIGHTS.items())

    return ResilienceReport(
        score=max(0.0, min(100.0, score)),
        liquidity_ratio=liquidity_ratio,
        defensive_ratio=defensive_ratio,
        emergency_fund_months=months,
        liquidity_score=components['liquidity'],
        defensive_score=components['defensive'],
        emergency_score=components['emergency'],
        details=_details(liquidity_ratio, defensive_ratio, months, expenses),
    )
