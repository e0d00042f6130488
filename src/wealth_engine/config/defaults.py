"""
Default Settings
================
Known classification values and the default settings used when a profile
file leaves a section out.

Exchange rates have NO defaults: a currency without a configured rate is an
error (see MissingRateError), never a silent 1:1 or a stale built-in rate.
"""

# =========================
# CLASSIFICATIONS
# =========================

ASSET_CLASSES = [
    "Offshore Equity",
    "SA Equity",
    "SA Bonds",
    "Offshore Bonds",
    "Cash",
    "Money Market",
    "Property",
    "Crypto",
]

ACCOUNT_TYPES = ["TFSA", "RA", "Taxable"]

ASSET_TYPES = ["Investible", "Non-Investible"]

# Liquid = available within days at par (emergency-fund eligible)
LIQUID_ASSET_CLASSES = frozenset({"Cash", "Money Market"})

# Defensive = bonds + cash-like holdings
DEFENSIVE_ASSET_CLASSES = frozenset({
    "SA Bonds",
    "Offshore Bonds",
    "Bonds",
    "Cash",
    "Money Market",
})

# Sector diversification is measured over equity holdings only
EQUITY_ASSET_CLASSES = frozenset({"Offshore Equity", "SA Equity", "Equity"})

UNCATEGORIZED = "Uncategorized"


# =========================
# DEFAULT SETTINGS SECTIONS
# =========================

DEFAULT_REPORTING_CURRENCY = "ZAR"

DEFAULT_TARGET_ALLOCATION = {
    "Offshore Equity": 40.0,
    "SA Equity": 20.0,
    "SA Bonds": 15.0,
    "Offshore Bonds": 10.0,
    "Cash": 10.0,
    "Property": 5.0,
    "Crypto": 0.0,
}

DEFAULT_THRESHOLDS = {
    "single_asset": 10.0,       # % of portfolio in one holding
    "asset_class": 50.0,        # % of portfolio in one asset class
    "currency": 70.0,           # % of portfolio in one currency
    "platform": None,           # % on one platform; None = not evaluated
    "rebalancing_drift": 5.0,   # |drift| that triggers a trade
    "display_drift": 3.0,       # |drift| flagged in the balance breakdown
    "urgency_medium": 5.0,      # max |drift| above this -> medium
    "urgency_high": 10.0,       # max |drift| above this -> high
}

DEFAULT_EXPECTED_RETURNS = {
    "Offshore Equity": 11.0,
    "SA Equity": 12.0,
    "SA Bonds": 8.5,
    "Offshore Bonds": 6.5,
    "Cash": 5.0,
    "Money Market": 5.5,
    "Property": 9.0,
    "Crypto": 15.0,
}

DEFAULT_WITHDRAWAL_RATES = {
    "conservative": 3.0,
    "safe": 4.0,
    "aggressive": 5.0,
}

DEFAULT_PROFILE = {
    "marginal_tax_rate": 39.0,
    "annual_expenses": 0.0,
}

# SA individual inclusion rate (% of the gain added to taxable income)
DEFAULT_CGT_INCLUSION_RATE = 40.0
