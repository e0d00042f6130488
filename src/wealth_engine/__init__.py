"""
Wealth Analytics Engine
=======================
Multi-currency portfolio analytics for personal financial planning:
valuation, concentration-risk detection, a composite quality score and
tax-aware rebalancing advice.

Main Components:
    - data: Currency normalization, record loading
    - analytics: Valuation, allocation/drift, quality sub-scores
    - decision: Concentration risks, rebalancing advice
    - core: Full analysis pass, memoized engine
    - reporting: Console report, JSON/CSV export
    - config: Defaults, scoring policy, profile file loader
    - models: Immutable input and result records
    - utils: Logging, exceptions, tax/cost model

Example:
    >>> from wealth_engine import analyze_portfolio
    >>> from wealth_engine.config.loader import load_profile
    >>> profile = load_profile("profile.yaml")
    >>> report = analyze_portfolio(profile.assets, profile.liabilities, profile.settings)
"""

__version__ = "1.0.0"

from wealth_engine.core.cache import PortfolioEngine
from wealth_engine.core.pipeline import analyze_portfolio
from wealth_engine.models.portfolio import (
    AccountType,
    Asset,
    AssetClass,
    AssetType,
    Dimension,
    Liability,
    PortfolioReport,
    Profile,
    Settings,
    Thresholds,
    WithdrawalRates,
)
from wealth_engine.utils.exceptions import (
    ConfigFileError,
    InvalidAssetError,
    InvalidSettingsError,
    MissingRateError,
    WealthEngineError,
)

__all__ = [
    'AccountType',
    'Asset',
    'AssetClass',
    'AssetType',
    'ConfigFileError',
    'Dimension',
    'InvalidAssetError',
    'InvalidSettingsError',
    'Liability',
    'MissingRateError',
    'PortfolioEngine',
    'PortfolioReport',
    'Profile',
    'Settings',
    'Thresholds',
    'WealthEngineError',
    'WithdrawalRates',
    'analyze_portfolio',
]
