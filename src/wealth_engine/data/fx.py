"""
Currency Normalizer
===================
Every monetary conversion in the engine goes through to_reporting().

Rate table shape: bare currency code -> units of reporting currency per 1
unit of that currency, e.g. {"USD": 18.50, "EUR": 19.80} for a ZAR report.
The reporting currency is implicitly 1.0.

A currency without a usable rate raises MissingRateError: no silent 1:1
fallback and no built-in default rates.
"""

import math
from typing import Dict, Iterable, List, Mapping

from wealth_engine.utils.exceptions import MissingRateError
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


def _usable(rate) -> bool:
    if rate is None or isinstance(rate, bool):
        return False
    try:
        rate = float(rate)
    except (TypeError, ValueError):
        return False
    return math.isfinite(rate) and rate > 0


def rate_for(currency: str, reporting_currency: str, rates: Mapping[str, float]) -> float:
    """
    Reporting-currency units per 1 unit of `currency`.

    Raises:
        MissingRateError: rate absent, zero, negative or not finite
    """
    if currency == reporting_currency:
        return 1.0
    rate = rates.get(currency)
    if not _usable(rate):
        raise MissingRateError([currency], reporting_currency)
    return float(rate)


def to_reporting(amount: float, currency: str, reporting_currency: str,
                 rates: Mapping[str, float]) -> float:
    """Convert an amount held in `currency` into the reporting currency."""
    return amount * rate_for(currency, reporting_currency, rates)


def to_currency(reporting_amount: float, target_currency: str, reporting_currency: str,
                rates: Mapping[str, float]) -> float:
    """
    Express a reporting-currency amount in `target_currency`.

    Display only (e.g. net worth in USD). Tax and scoring paths stay in the
    reporting currency.
    """
    return reporting_amount / rate_for(target_currency, reporting_currency, rates)


def convert(amount: float, from_currency: str, to_currency_code: str,
            reporting_currency: str, rates: Mapping[str, float]) -> float:
    """Cross-convert between two currencies via the reporting currency."""
    if from_currency == to_currency_code:
        return amount
    in_reporting = to_reporting(amount, from_currency, reporting_currency, rates)
    return to_currency(in_reporting, to_currency_code, reporting_currency, rates)


def missing_rates(currencies: Iterable[str], reporting_currency: str,
                  rates: Mapping[str, float]) -> List[str]:
    """Sorted, de-duplicated list of currencies without a usable rate."""
    return sorted({
        c for c in currencies
        if c != reporting_currency and not _usable(rates.get(c))
    })


def ensure_rates(currencies: Iterable[str], reporting_currency: str,
                 rates: Mapping[str, float]) -> None:
    """
    Check the whole rate table up front.

    Raises:
        MissingRateError: naming every currency without a usable rate
    """
    missing = missing_rates(currencies, reporting_currency, rates)
    if missing:
        logger.error(f"Missing exchange rates for {missing} -> {reporting_currency}")
        raise MissingRateError(missing, reporting_currency)


# =========================
# LEGACY TABLE MIGRATION
# =========================

def is_legacy_table(rates: Mapping[str, float]) -> bool:
    return any("/" in str(key) for key in rates)


def migrate_legacy_rates(legacy: Mapping[str, float],
                         reporting_currency: str = "ZAR") -> Dict[str, float]:
    """
    Normalize a pair-keyed table ({"USD/ZAR": 18.5}) into the bare-code shape.

    Pairs quoted in another currency are dropped. Bare-code keys already in
    the new shape are kept as-is, so mixed tables normalize too.

    >>> migrate_legacy_rates({"USD/ZAR": 18.5, "EUR/USD": 1.08}, "ZAR")
    {'USD': 18.5}
    """
    reporting = reporting_currency.upper()
    migrated: Dict[str, float] = {}
    dropped: List[str] = []

    for key, rate in legacy.items():
        key = str(key).strip().upper()
        if "/" not in key:
            migrated[key] = rate
            continue
        base, _, quote = key.partition("/")
        if quote.strip() == reporting and base.strip():
            migrated[base.strip()] = rate
        else:
            dropped.append(key)

    if dropped:
        logger.warning(f"Dropped rate pairs not quoted in {reporting}: {dropped}")
    return migrated
