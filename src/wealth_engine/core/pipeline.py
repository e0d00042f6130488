"""
Analysis Pipeline
=================
One pure pass from a holdings snapshot to a complete PortfolioReport.

ORDER:
1. Rate check     - every referenced currency must have a rate (fail fast)
2. Valuation      - per-asset figures, totals, allocation tables
3. Drift          - actual vs target over investible assets
4. Concentration  - risk flags over all assets
5. Quality score  - four sub-scores, grade, recommendations
6. Rebalancing    - tax-aware trades from the same drift report

Call it again whenever assets, liabilities or settings change; identical
inputs give identical reports. For memoization see core.cache.PortfolioEngine.
"""

from typing import Iterable

from wealth_engine.analytics.allocation import all_allocations, calculate_drift
from wealth_engine.analytics.quality.score import calculate_quality_score
from wealth_engine.analytics.valuation import (
    annual_ter_cost,
    income_yield,
    portfolio_expected_return,
    portfolio_totals,
    value_assets,
    weighted_ter,
    withdrawal_amounts,
)
from wealth_engine.data.fx import ensure_rates
from wealth_engine.decision.concentration import detect_concentration_risks
from wealth_engine.decision.rebalancing import generate_rebalancing_advice
from wealth_engine.models.portfolio import Asset, Liability, PortfolioReport, Settings
from wealth_engine.utils.logger import get_logger, log_performance

logger = get_logger(__name__)


@log_performance(logger)
def analyze_portfolio(assets: Iterable[Asset], liabilities: Iterable[Liability],
                      settings: Settings) -> PortfolioReport:
    """
    Run the full analysis.

    Raises:
        MissingRateError: before any computation, naming every currency
            referenced by an asset or liability that has no usable rate
    """
    assets = list(assets)
    liabilities = list(liabilities)

    currencies = [a.currency for a in assets] + [l.currency for l in liabilities]
    ensure_rates(currencies, settings.reporting_currency, settings.exchange_rates)

    valuations = value_assets(assets, settings)
    totals = portfolio_totals(assets, liabilities, settings)
    allocations = all_allocations(assets, settings)

    drift = calculate_drift(assets, settings)
    concentration = detect_concentration_risks(assets, settings)
    quality = calculate_quality_score(assets, settings, drift=drift)
    rebalancing = generate_rebalancing_advice(assets, settings, drift=drift)

    logger.info(
        f"Analysed {len(assets)} assets: net worth {totals.net_worth:,.2f} {settings.reporting_currency}, "
        f"quality {quality.overall:.1f} ({quality.grade}), {rebalancing.summary.total_actions} actions"
    )

    return PortfolioReport(
        reporting_currency=settings.reporting_currency,
        valuations=valuations,
        totals=totals,
        allocations=allocations,
        drift=drift,
        concentration=concentration,
        quality=quality,
        rebalancing=rebalancing,
        expected_return=portfolio_expected_return(assets, settings),
        income_yield=income_yield(assets, settings),
        weighted_ter=weighted_ter(assets, settings),
        annual_fees=annual_ter_cost(assets, settings),
        withdrawal_amounts=withdrawal_amounts(totals.investible, settings),
    )
