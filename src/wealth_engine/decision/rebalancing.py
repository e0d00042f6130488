"""
Rebalancing Advisor
===================
Turns allocation drift into concrete, tax-aware trade instructions.

POLICY:
- A class is traded when |drift| > thresholds.rebalancing_drift (strict)
- Overweight: sell exactly (current - target) value, taken from the class's
  holdings in sell-priority order
- Underweight: one buy for the shortfall; buys never carry tax
- Sell priority: Taxable before TFSA before RA, then lowest gain % first,
  then name and id. Lowest gain first minimizes the CGT triggered; TFSA and
  RA wrappers are only sold once taxable holdings in the class run out
- CGT per sell = max(0, pro-rata gain) * inclusion * marginal rate; 0 in
  TFSA / RA
"""

from typing import List, Optional, Sequence, Tuple

from wealth_engine.analytics.allocation import calculate_drift
from wealth_engine.analytics.valuation import bucket_name, investible_assets, value_assets
from wealth_engine.config.thresholds import ACCOUNT_SELL_RANK
from wealth_engine.models.portfolio import (
    Asset,
    AssetValuation,
    ClassDrift,
    Direction,
    DriftReport,
    RebalancingAction,
    RebalancingAdvice,
    RebalancingSummary,
    Settings,
    Urgency,
)
from wealth_engine.utils.costs import disposal_cgt, realized_gain
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)

# Residual below this is float noise, not an amount left to sell
_EPSILON = 1e-9


def sell_priority(valuation: AssetValuation) -> Tuple[int, float, str, str]:
    """Sort key for sell candidates; lower sorts first."""
    return (
        ACCOUNT_SELL_RANK[valuation.account_type.value],
        valuation.gain_percentage,
        valuation.name,
        valuation.asset_id,
    )


def rank_sell_candidates(valuations: Sequence[AssetValuation]) -> List[AssetValuation]:
    return sorted((v for v in valuations if v.value > 0), key=sell_priority)


def plan_sells(candidates: Sequence[AssetValuation], amount: float, item: ClassDrift,
               settings: Settings) -> List[RebalancingAction]:
    """Walk the ranked candidates until `amount` is covered."""
    actions: List[RebalancingAction] = []
    remaining = amount

    for valuation in rank_sell_candidates(candidates):
        if remaining <= _EPSILON:
            break
        sell = min(valuation.value, remaining)
        actions.append(RebalancingAction(
            asset_class=item.asset_class,
            direction=Direction.SELL,
            amount=sell,
            urgency=item.urgency,
            drift=item.drift,
            asset_id=valuation.asset_id,
            asset_name=valuation.name,
            estimated_cgt=disposal_cgt(valuation, sell, settings),
            realized_gain=realized_gain(valuation.unrealized_gain, valuation.value, sell),
        ))
        remaining -= sell

    return actions


def _action_order(action: RebalancingAction) -> Tuple[int, float, str]:
    return (-action.urgency.rank, -abs(action.drift), action.asset_class)


def summarize(actions: Sequence[RebalancingAction]) -> RebalancingSummary:
    sells = [a for a in actions if a.direction is Direction.SELL]
    buys = [a for a in actions if a.direction is Direction.BUY]

    gains = 0.0
    losses = 0.0
    for action in sells:
        if action.realized_gain > 0:
            gains += action.realized_gain
        else:
            losses += -action.realized_gain

    return RebalancingSummary(
        total_actions=len(actions),
        sell_count=len(sells),
        buy_count=len(buys),
        total_to_sell=sum(a.amount for a in sells),
        total_to_buy=sum(a.amount for a in buys),
        high_priority_count=sum(1 for a in actions if a.urgency is Urgency.HIGH),
        gains_realized=gains,
        losses_realized=losses,
    )


def generate_rebalancing_advice(assets: Sequence[Asset], settings: Settings,
                                drift: Optional[DriftReport] = None) -> RebalancingAdvice:
    """
    Trade list that brings every out-of-band class back to target.

    Actions are ordered by class urgency (high first), then |drift|
    descending, then class name; sells within a class keep their priority
    order. An empty investible portfolio yields no actions.
    """
    report = drift if drift is not None else calculate_drift(assets, settings)
    actions: List[RebalancingAction] = []

    if report.total_value > 0:
        valuations = value_assets(investible_assets(assets), settings)

        for item in report.drifts:
            if not item.needs_rebalancing:
                continue
            if item.drift > 0:
                amount = min(item.current_value - item.target_value, item.current_value)
                in_class = [v for v in valuations if bucket_name(v.asset_class) == item.asset_class]
                actions.extend(plan_sells(in_class, amount, item, settings))
            else:
                actions.append(RebalancingAction(
                    asset_class=item.asset_class,
                    direction=Direction.BUY,
                    amount=item.target_value - item.current_value,
                    urgency=item.urgency,
                    drift=item.drift,
                ))

        actions.sort(key=_action_order)

    total_tax = 0.0
    for action in actions:
        total_tax += action.estimated_cgt

    summary = summarize(actions)
    logger.debug(
        f"Rebalancing: {summary.sell_count} sells, {summary.buy_count} buys, tax {total_tax:.2f}"
    )
    return RebalancingAdvice(actions=actions, total_tax_impact=total_tax, summary=summary, drift=report)
