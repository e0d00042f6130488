"""
Console Report
==============
Text rendering of a PortfolioReport.

Include:
- print_report: full report (calls every section below)
- print_net_worth: totals and withdrawal amounts
- print_allocation: one allocation table per dimension
- print_drift / print_concentration / print_quality / print_rebalancing

Rounding happens only here; the report itself carries full-precision floats.
"""

from typing import Iterable, Optional

import pandas as pd

from wealth_engine.analytics.allocation import allocation_frame, drift_frame
from wealth_engine.analytics.valuation import valuation_frame
from wealth_engine.models.portfolio import (
    ConcentrationReport,
    Dimension,
    DriftReport,
    PortfolioReport,
    QualityScore,
    RebalancingAdvice,
    Severity,
)

WIDTH = 70


def _header(title: str) -> None:
    print(f"\n{title}")
    print("-" * WIDTH)


def _money(amount: float, currency: str) -> str:
    return f"{currency} {amount:,.0f}"


def _table(frame: pd.DataFrame) -> str:
    return frame.to_string(float_format=lambda x: f"{x:,.1f}")


# ================================================================================
# SECTIONS
# ================================================================================

def print_net_worth(report: PortfolioReport) -> None:
    cur = report.reporting_currency
    t = report.totals
    _header("💰 NET WORTH")
    print(f"  Investible assets:      {_money(t.investible, cur):>22}")
    print(f"  Non-investible assets:  {_money(t.non_investible, cur):>22}")
    print(f"  Gross assets:           {_money(t.gross, cur):>22}")
    print(f"  Liabilities:            {_money(t.liabilities, cur):>22}")
    print(f"  Net worth:              {_money(t.net_worth, cur):>22}")
    print(f"\n  Expected return:        {report.expected_return:>21.2f}%")
    print(f"  Income yield:           {report.income_yield:>21.2f}%")
    print(f"  Weighted TER:           {report.weighted_ter:>21.2f}%")
    print(f"  Annual TER cost:        {_money(report.annual_fees, cur):>22}")
    print("\n  Annual withdrawal at:")
    for label, amount in report.withdrawal_amounts.items():
        print(f"    {label:<20} {_money(amount, cur):>22}")


def print_holdings(report: PortfolioReport) -> None:
    _header("📋 HOLDINGS")
    frame = valuation_frame(report.valuations)
    if frame.empty:
        print("  No assets")
        return
    view = frame[['name', 'asset_class', 'currency', 'account_type', 'value', 'unrealized_gain',
                  'gain_percentage', 'net_proceeds']].set_index('name')
    print(_table(view))


def print_allocation(report: PortfolioReport,
                     dimensions: Optional[Iterable[Dimension]] = None) -> None:
    dims = list(dimensions) if dimensions is not None else [
        Dimension.ASSET_CLASS, Dimension.CURRENCY, Dimension.REGION, Dimension.PLATFORM,
    ]
    for dim in dims:
        slices = report.allocations.get(dim.value, [])
        _header(f"📊 ALLOCATION BY {dim.value.replace('_', ' ').upper()}")
        if not slices:
            print("  No assets")
            continue
        print(_table(allocation_frame(slices)))


def print_drift(drift: DriftReport) -> None:
    _header("🎯 TARGET DRIFT (investible assets)")
    if not drift.drifts:
        print("  No targets and no holdings")
        return
    view = drift_frame(drift)[['current_pct', 'target_pct', 'drift', 'urgency']]
    print(_table(view))
    print(f"\n  Total drift: {drift.total_drift:.1f}  |  Max drift: {drift.max_drift:.1f}"
          f"  |  Urgency: {drift.urgency.value}")


def print_concentration(report: ConcentrationReport) -> None:
    _header("⚠️  CONCENTRATION RISKS")
    if not report.evaluated:
        print("  Not evaluated (no asset value)")
        return
    if not report.risks:
        axes = ", ".join(a.value for a in report.axes)
        print(f"  ✓ None flagged ({axes})")
        return
    for risk in report.risks:
        icon = "🔴" if risk.severity is Severity.CRITICAL else "🟡"
        print(f"  {icon} {risk.type.value:<13} {risk.name:<28} "
              f"{risk.percentage:>5.1f}% (limit {risk.threshold:.0f}%)")


def print_quality(quality: QualityScore) -> None:
    _header(f"🏅 PORTFOLIO QUALITY: {quality.overall:.0f}/100 (grade {quality.grade})")
    for area, score in quality.sub_scores().items():
        print(f"  {area.capitalize():<18} {score:>5.1f}")
    print(f"\n  Diversification: {quality.diversification.details}")
    print(f"  Balance:         {quality.balance.details}")
    print(f"  Resilience:      {quality.resilience.details}")
    print(f"  Risk:            {quality.risk.details}")

    if quality.recommendations:
        print("\n  Recommendations (worst first):")
        for i, rec in enumerate(quality.recommendations, 1):
            print(f"    {i}. [{rec.priority.value.upper()}] {rec.area}: {rec.suggestion}")


def print_rebalancing(advice: RebalancingAdvice, currency: str) -> None:
    _header("🔄 REBALANCING")
    if not advice.actions:
        print("  ✓ No trades needed")
        return
    for action in advice.actions:
        target = action.asset_name or action.asset_class
        tax = f"  CGT ≈ {_money(action.estimated_cgt, currency)}" if action.estimated_cgt > 0 else ""
        print(f"  {action.direction.value.upper():<4} {_money(action.amount, currency):>16}  "
              f"{target:<30} [{action.urgency.value}]{tax}")
    s = advice.summary
    print(f"\n  {s.sell_count} sells ({_money(s.total_to_sell, currency)}), "
          f"{s.buy_count} buys ({_money(s.total_to_buy, currency)}), "
          f"{s.high_priority_count} high priority")
    print(f"  Estimated tax impact: {_money(advice.total_tax_impact, currency)}")


# ================================================================================
# FULL REPORT
# ================================================================================

def print_report(report: PortfolioReport) -> None:
    print("\n" + "=" * WIDTH)
    print("                    WEALTH PORTFOLIO REPORT")
    print(f"                  (reporting currency: {report.reporting_currency})")
    print("=" * WIDTH)

    print_net_worth(report)
    print_holdings(report)
    print_allocation(report)
    print_drift(report.drift)
    print_concentration(report.concentration)
    print_quality(report.quality)
    print_rebalancing(report.rebalancing, report.reporting_currency)
    print("\n" + "=" * WIDTH)
