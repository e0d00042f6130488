"""
Tax & Cost Model
================
Capital gains tax on disposals and fee drag.

CGT model (SA individual):
    tax = gain * inclusion_rate/100 * marginal_tax_rate/100

Gains <= 0 cost nothing and produce no credit: loss harvesting is not
modelled. Disposals inside TFSA / RA wrappers are not CGT events.
"""

from wealth_engine.config.defaults import DEFAULT_CGT_INCLUSION_RATE
from wealth_engine.models.portfolio import AssetValuation, Settings


def calculate_cgt(gain: float, marginal_tax_rate: float,
                  inclusion_rate: float = DEFAULT_CGT_INCLUSION_RATE) -> float:
    """
    Estimated capital gains tax on a realized gain.

    >>> calculate_cgt(1000, 39)
    156.0
    """
    if gain <= 0:
        return 0.0
    return gain * (inclusion_rate / 100) * (marginal_tax_rate / 100)


def realized_gain(unrealized_gain: float, position_value: float, sell_amount: float) -> float:
    """Gain realized by selling `sell_amount` of a position, pro-rata."""
    if position_value <= 0:
        return 0.0
    fraction = min(1.0, sell_amount / position_value)
    return unrealized_gain * fraction


def disposal_cgt(valuation: AssetValuation, sell_amount: float, settings: Settings) -> float:
    """CGT for selling `sell_amount` of one position; 0 in CGT-exempt accounts."""
    if valuation.account_type.is_cgt_exempt:
        return 0.0
    gain = realized_gain(valuation.unrealized_gain, valuation.value, sell_amount)
    return calculate_cgt(gain, settings.profile.marginal_tax_rate, settings.cgt_inclusion_rate)


def net_proceeds(valuation: AssetValuation, settings: Settings) -> float:
    """Cash left after selling the whole position and paying CGT."""
    return valuation.value - disposal_cgt(valuation, valuation.value, settings)


def annual_fee_cost(value: float, ter: float) -> float:
    """Yearly cost of a total expense ratio (%) on a holding."""
    return value * ter / 100
