"""
Deterministic portfolio fixtures.

Values are chosen so every sum is exact in floating point:
USD rate 18.5, EUR rate 20.0, reporting currency ZAR.
"""

from wealth_engine.models.portfolio import Asset, Liability, Settings, Thresholds

SAMPLE_RATES = {"USD": 18.5, "EUR": 20.0}


def make_asset(asset_id: str = "a1", **overrides) -> Asset:
    fields = dict(
        id=asset_id,
        name=f"Asset {asset_id}",
        asset_class="SA Equity",
        asset_type="Investible",
        currency="ZAR",
        units=100,
        current_price=10,
        cost_price=10,
        account_type="Taxable",
    )
    fields.update(overrides)
    return Asset(**fields)


def make_settings(**overrides) -> Settings:
    fields = dict(reporting_currency="ZAR", exchange_rates=dict(SAMPLE_RATES))
    fields.update(overrides)
    return Settings(**fields)


def loose_thresholds(**overrides) -> Thresholds:
    """Thresholds that flag nothing unless overridden."""
    fields = dict(single_asset=100, asset_class=100, currency=100)
    fields.update(overrides)
    return Thresholds(**fields)


def sample_assets():
    """
    Investible 560,000 + non-investible 2,500,000 = 3,060,000 ZAR.
    """
    return [
        make_asset("sa-eq", name="Satrix Top 40", asset_class="SA Equity", currency="ZAR",
                   units=1000, current_price=80, cost_price=60, sector="Diversified",
                   region="South Africa", platform="EasyEquities", dividend_yield=3.0, ter=0.1),
        make_asset("world", name="Vanguard World", asset_class="Offshore Equity", currency="USD",
                   units=200, current_price=100, cost_price=80, account_type="TFSA",
                   sector="Diversified", region="Global", platform="IBKR", dividend_yield=2.0, ter=0.2),
        make_asset("bond", name="SA Govt Bond ETF", asset_class="SA Bonds", currency="ZAR",
                   units=500, current_price=100, cost_price=110, account_type="RA",
                   region="South Africa", platform="EasyEquities", interest_yield=9.0, ter=0.25),
        make_asset("mm", name="Money Market", asset_class="Money Market", currency="ZAR",
                   units=1, current_price=60000, cost_price=60000,
                   region="South Africa", platform="Bank", interest_yield=8.0),
        make_asset("home", name="Primary Residence", asset_class="Property",
                   asset_type="Non-Investible", currency="ZAR",
                   units=1, current_price=2500000, cost_price=1800000, region="South Africa"),
    ]


def sample_liabilities():
    """1,000,000 + 500 USD (9,250) = 1,009,250 ZAR."""
    return [
        Liability(id="bond-loan", name="Home Loan", principal=1000000, currency="ZAR",
                  interest_rate=11.75, monthly_payment=10800),
        Liability(id="card", name="US Credit Card", principal=500, currency="USD"),
    ]


def two_class_portfolio():
    """1,000 SA Equity + 1,000 Offshore Equity, targets 30 / 70."""
    assets = [
        make_asset("sa", name="SA Fund", asset_class="SA Equity", units=100,
                   current_price=10, cost_price=8),
        make_asset("off", name="Offshore Fund", asset_class="Offshore Equity", units=100,
                   current_price=10, cost_price=10),
    ]
    settings = make_settings(target_allocation={"Offshore Equity": 70, "SA Equity": 30})
    return assets, settings


SAMPLE_PROFILE = {
    "settings": {
        "reporting_currency": "ZAR",
        "exchange_rates": {"USD": 18.5, "EUR": 20.0},
        "thresholds": {"single_asset": 15, "rebalancing_drift": 5},
        "target_allocation": {"Offshore Equity": 50, "SA Equity": 30, "SA Bonds": 10, "Money Market": 10},
        "profile": {"marginal_tax_rate": 41, "annual_expenses": 240000},
    },
    "assets": [
        {"id": "sa-eq", "name": "Satrix Top 40", "asset_class": "SA Equity", "asset_type": "Investible",
         "currency": "ZAR", "units": 1000, "current_price": 80, "cost_price": 60},
        {"id": "world", "name": "Vanguard World", "asset_class": "Offshore Equity",
         "asset_type": "Investible", "currency": "USD", "units": 200, "current_price": 100,
         "cost_price": 80, "account_type": "TFSA"},
    ],
    "liabilities": [
        {"id": "loan", "name": "Car Loan", "principal": 150000, "currency": "ZAR"},
    ],
}

# Export format of the original budgeting app: camelCase keys and the
# legacy pair-keyed rate table under settings.currency
APP_BACKUP = {
    "version": "3.0",
    "settings": {
        "profile": {"name": "Default", "age": 55, "marginalTaxRate": 45, "annualExpenses": 360000},
        "currency": {"reporting": "ZAR", "exchangeRates": {"USD/ZAR": 18.5, "GBP/ZAR": 23.2, "EUR/USD": 1.08}},
        "thresholds": {"singleAsset": 10, "assetClass": 50, "currency": 70, "sector": 30,
                       "platform": 40, "staleness": 7, "rebalancingDrift": 5},
        "targetAllocation": {"Offshore Equity": 60, "SA Equity": 40},
        "taxConfig": {"cgt": {"inclusionRate": 40}},
    },
    "assets": [
        {"id": "x1", "name": "S&P 500 ETF", "ticker": "CSPX", "assetClass": "Offshore Equity",
         "assetType": "Investible", "currency": "USD", "units": 10, "currentPrice": 500,
         "costPrice": 400, "accountType": "Taxable", "platform": "IBKR", "isLiquid": True},
        {"id": "x2", "name": "FTSE 100 Tracker", "assetClass": "Offshore Equity",
         "assetType": "Investible", "currency": "GBP", "units": 100, "currentPrice": 10,
         "costPrice": 10, "accountType": "TFSA", "TER": 0.07},
    ],
    "liabilities": [],
}
