"""
Valuation & Aggregation
=======================
Per-asset value/gain figures in the reporting currency, the generic grouping
function every allocation table is built on, and the portfolio totals.

Every reduction uses math.fsum, which is correctly rounded and independent of
input order, so identical snapshots give bit-identical totals.
"""

from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence
import math

import pandas as pd

from wealth_engine.config.defaults import UNCATEGORIZED
from wealth_engine.data.fx import to_currency, to_reporting
from wealth_engine.models.portfolio import (
    Asset,
    AssetGroup,
    AssetValuation,
    Dimension,
    Liability,
    PortfolioTotals,
    Settings,
)
from wealth_engine.utils.costs import annual_fee_cost, net_proceeds
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


# ================================================================================
# PER-ASSET FIGURES
# ================================================================================

def asset_value(asset: Asset, settings: Settings) -> float:
    """units * current_price, converted at the asset's own currency rate."""
    return to_reporting(asset.units * asset.current_price, asset.currency,
                        settings.reporting_currency, settings.exchange_rates)


def cost_basis(asset: Asset, settings: Settings) -> float:
    return to_reporting(asset.units * asset.cost_price, asset.currency,
                        settings.reporting_currency, settings.exchange_rates)


def unrealized_gain(asset: Asset, settings: Settings) -> float:
    return asset_value(asset, settings) - cost_basis(asset, settings)


def gain_percentage(asset: Asset, settings: Settings) -> float:
    """Gain as % of cost basis; 0 when the cost basis is 0."""
    basis = cost_basis(asset, settings)
    if basis <= 0:
        return 0.0
    return (asset_value(asset, settings) - basis) / basis * 100


def value_asset(asset: Asset, settings: Settings) -> AssetValuation:
    """
    Value, gain, yearly TER cost and the after-CGT cash a full sale would
    raise today.
    """
    value = asset_value(asset, settings)
    basis = cost_basis(asset, settings)
    gain = value - basis
    valuation = AssetValuation(
        asset_id=asset.id,
        name=asset.name,
        asset_class=asset.asset_class,
        asset_type=asset.asset_type,
        currency=asset.currency,
        account_type=asset.account_type,
        value=value,
        cost_basis=basis,
        unrealized_gain=gain,
        gain_percentage=(gain / basis * 100) if basis > 0 else 0.0,
        annual_fee=annual_fee_cost(value, asset.ter),
    )
    return replace(valuation, net_proceeds=net_proceeds(valuation, settings))


def value_assets(assets: Iterable[Asset], settings: Settings) -> List[AssetValuation]:
    """Valuations in input order."""
    return [value_asset(a, settings) for a in assets]


def valuation_frame(valuations: Sequence[AssetValuation]) -> pd.DataFrame:
    """Tabular view of valuations, one row per asset, for reporting/export."""
    columns = ['asset_id', 'name', 'asset_class', 'asset_type', 'currency', 'account_type',
               'value', 'cost_basis', 'unrealized_gain', 'gain_percentage', 'annual_fee',
               'net_proceeds']
    if not valuations:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([v.to_dict() for v in valuations], columns=columns)


# ================================================================================
# GENERIC AGGREGATION
# ================================================================================

KeyFunc = Callable[[Asset], Optional[str]]

KEY_EXTRACTORS: Dict[Dimension, KeyFunc] = {
    Dimension.ASSET_CLASS: lambda a: a.asset_class,
    Dimension.CURRENCY: lambda a: a.currency,
    Dimension.REGION: lambda a: a.region,
    Dimension.SECTOR: lambda a: a.sector,
    Dimension.PLATFORM: lambda a: a.platform,
    Dimension.ASSET_TYPE: lambda a: a.asset_type.value,
}


def bucket_name(key: Optional[str]) -> str:
    if key is None:
        return UNCATEGORIZED
    key = str(key).strip()
    return key or UNCATEGORIZED


def aggregate(assets: Iterable[Asset], settings: Settings, key: KeyFunc) -> List[AssetGroup]:
    """
    Group assets by key(asset) and sum their reporting-currency values.

    Empty or missing keys land in an explicit "Uncategorized" bucket. Groups
    are returned in first-seen order; callers sort for display.
    """
    values: Dict[str, List[float]] = {}
    members: Dict[str, List[str]] = {}

    for asset in assets:
        name = bucket_name(key(asset))
        if name not in values:
            values[name] = []
            members[name] = []
        values[name].append(asset_value(asset, settings))
        members[name].append(asset.id)

    return [
        AssetGroup(name=name, value=math.fsum(values[name]), count=len(members[name]),
                   asset_ids=tuple(members[name]))
        for name in values
    ]


def group_assets(assets: Iterable[Asset], settings: Settings, dimension) -> List[AssetGroup]:
    """aggregate() with the extractor selected by a Dimension (or its value)."""
    return aggregate(assets, settings, KEY_EXTRACTORS[Dimension(dimension)])


# ================================================================================
# TOTALS
# ================================================================================

def investible_assets(assets: Iterable[Asset]) -> List[Asset]:
    return [a for a in assets if a.is_investible]


def total_value(assets: Iterable[Asset], settings: Settings) -> float:
    return math.fsum(asset_value(a, settings) for a in assets)


def total_liabilities(liabilities: Iterable[Liability], settings: Settings) -> float:
    return math.fsum(
        to_reporting(liability.principal, liability.currency, settings.reporting_currency,
                     settings.exchange_rates)
        for liability in liabilities
    )


def portfolio_totals(assets: Sequence[Asset], liabilities: Sequence[Liability],
                     settings: Settings) -> PortfolioTotals:
    """
    Investible / non-investible split, gross assets and net worth.

    gross is the correctly rounded sum of every asset value, the same figure
    total_value gives, so percentage tables and the totals share one
    denominator. investible + non_investible matches it to within one
    rounding step.
    """
    inv_values: List[float] = []
    non_values: List[float] = []
    for asset in assets:
        bucket = inv_values if asset.is_investible else non_values
        bucket.append(asset_value(asset, settings))

    investible = math.fsum(inv_values)
    non_investible = math.fsum(non_values)
    gross = math.fsum(inv_values + non_values)
    debt = total_liabilities(liabilities, settings)
    logger.debug(f"Totals: investible={investible:.2f} non_investible={non_investible:.2f} debt={debt:.2f}")

    return PortfolioTotals(
        investible=investible,
        non_investible=non_investible,
        gross=gross,
        liabilities=debt,
        net_worth=gross - debt,
    )


def net_worth_in(totals: PortfolioTotals, currency: str, settings: Settings) -> float:
    """Net worth expressed in another currency (display only)."""
    return to_currency(totals.net_worth, currency.upper(),
                       settings.reporting_currency, settings.exchange_rates)


# ================================================================================
# PORTFOLIO-LEVEL FIGURES (investible assets only)
# ================================================================================

def _weighted(assets: Sequence[Asset], settings: Settings, metric: Callable[[Asset], float]) -> float:
    investible = investible_assets(assets)
    total = total_value(investible, settings)
    if total <= 0:
        return 0.0
    weighted = 0.0
    for asset in investible:
        weighted += asset_value(asset, settings) / total * metric(asset)
    return weighted


def expected_return_of(asset: Asset, settings: Settings) -> float:
    """Per-asset override, else the class default, else 0."""
    if asset.expected_return is not None:
        return asset.expected_return
    return settings.expected_returns.get(asset.asset_class, 0.0)


def portfolio_expected_return(assets: Sequence[Asset], settings: Settings) -> float:
    """Value-weighted expected return (% p.a.)."""
    return _weighted(assets, settings, lambda a: expected_return_of(a, settings))


def income_yield(assets: Sequence[Asset], settings: Settings) -> float:
    """Value-weighted dividend + interest yield (%)."""
    return _weighted(assets, settings, lambda a: a.dividend_yield + a.interest_yield)


def weighted_ter(assets: Sequence[Asset], settings: Settings) -> float:
    """Value-weighted total expense ratio (%)."""
    return _weighted(assets, settings, lambda a: a.ter)


def annual_ter_cost(assets: Sequence[Asset], settings: Settings) -> float:
    """Yearly TER drag on the investible assets, in the reporting currency."""
    return math.fsum(
        annual_fee_cost(asset_value(a, settings), a.ter) for a in investible_assets(assets)
    )


def withdrawal_amounts(investible_total: float, settings: Settings) -> Dict[str, float]:
    """Annual drawdown at the conservative / safe / aggressive withdrawal rates."""
    rates = settings.withdrawal_rates
    return {
        'conservative': investible_total * rates.conservative / 100,
        'safe': investible_total * rates.safe / 100,
        'aggressive': investible_total * rates.aggressive / 100,
    }
