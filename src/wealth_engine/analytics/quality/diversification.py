"""
Diversification Sub-Score
=========================
Herfindahl-Hirschman Index on five axes, combined into one weighted HHI.

HHI = sum(pct^2) with pct in [0, 100]: 10000 means everything in a single
bucket, 10000/N for N equal buckets. Score = 100 * (1 - weighted_hhi / 10000).
"""

from typing import List, Sequence

import numpy as np

from wealth_engine.analytics.valuation import (
    asset_value,
    group_assets,
    investible_assets,
    total_value,
)
from wealth_engine.config.defaults import EQUITY_ASSET_CLASSES
from wealth_engine.config.thresholds import (
    HHI_AXIS_WEIGHTS,
    HHI_MAX,
    HHI_WEAK_AXIS,
    LARGEST_POSITION_WARNING,
    NEUTRAL_SECTOR_HHI,
)
from wealth_engine.models.portfolio import (
    Asset,
    Dimension,
    DiversificationReport,
    LargestPosition,
    Settings,
)


def hhi(values: Sequence[float]) -> float:
    """
    HHI of a set of bucket values on the 0-10000 scale.

    Returns HHI_MAX (maximal concentration) when there is nothing to spread.
    """
    arr = np.asarray(values, dtype=float)
    total = arr.sum() if arr.size else 0.0
    if total <= 0:
        return HHI_MAX
    shares = arr / total * 100
    return float(np.sum(shares ** 2))


def hhi_to_score(weighted_hhi: float) -> float:
    return float(np.clip(100 * (1 - weighted_hhi / HHI_MAX), 0, 100))


def _axis_hhi(assets: Sequence[Asset], settings: Settings, dimension: Dimension) -> float:
    return hhi([g.value for g in group_assets(assets, settings, dimension)])


def _details(axes: dict, largest: LargestPosition) -> str:
    issues: List[str] = []
    if largest.percentage > LARGEST_POSITION_WARNING:
        issues.append(f"{largest.name} is {largest.percentage:.0f}% of the portfolio")
    elif axes['individual'] > HHI_WEAK_AXIS['individual']:
        issues.append("portfolio concentrated in few holdings")
    if axes['asset_class'] > HHI_WEAK_AXIS['asset_class']:
        issues.append("concentrated in few asset classes")
    if axes['currency'] > HHI_WEAK_AXIS['currency']:
        issues.append("heavy single-currency exposure")
    if axes['region'] > HHI_WEAK_AXIS['region']:
        issues.append("limited geographic diversification")
    if axes['sector'] > HHI_WEAK_AXIS['sector']:
        issues.append("equities concentrated in few sectors")

    if not issues:
        return "Well diversified across dimensions"
    return "Consider: " + ", ".join(issues)


def diversification_score(assets: Sequence[Asset], settings: Settings) -> DiversificationReport:
    """
    Diversification sub-score over investible assets.

    Sector HHI is measured over equity holdings only; a portfolio without
    equities gets the neutral NEUTRAL_SECTOR_HHI on that axis.
    """
    portfolio = investible_assets(assets)
    total = total_value(portfolio, settings)

    if total <= 0:
        return DiversificationReport(
            score=0.0,
            individual_hhi=HHI_MAX,
            asset_class_hhi=HHI_MAX,
            currency_hhi=HHI_MAX,
            region_hhi=HHI_MAX,
            sector_hhi=HHI_MAX,
            weighted_hhi=HHI_MAX,
            largest_position=None,
            holdings_count=len(portfolio),
            details="No investible assets",
        )

    values = [asset_value(a, settings) for a in portfolio]
    equities = [a for a in portfolio if a.asset_class in EQUITY_ASSET_CLASSES]
    if equities and total_value(equities, settings) > 0:
        sector = _axis_hhi(equities, settings, Dimension.SECTOR)
    else:
        sector = NEUTRAL_SECTOR_HHI

    axes = {
        'individual': hhi(values),
        'asset_class': _axis_hhi(portfolio, settings, Dimension.ASSET_CLASS),
        'currency': _axis_hhi(portfolio, settings, Dimension.CURRENCY),
        'region': _axis_hhi(portfolio, settings, Dimension.REGION),
        'sector': sector,
    }
    weighted = float(sum(axes[name] * weight for name, weight in HHI_AXIS_WEIGHTS.items()))

    # First asset wins ties
    top = int(np.argmax(values))
    largest = LargestPosition(name=portfolio[top].name, percentage=values[top] / total * 100)

    return DiversificationReport(
        score=hhi_to_score(weighted),
        individual_hhi=axes['individual'],
        asset_class_hhi=axes['asset_class'],
        currency_hhi=axes['currency'],
        region_hhi=axes['region'],
        sector_hhi=axes['sector'],
        weighted_hhi=weighted,
        largest_position=largest,
        holdings_count=len(portfolio),
        details=_details(axes, largest),
    )
