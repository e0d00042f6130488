"""
Models Module
=============
Dataclasses for the engine's inputs (holdings snapshot, settings) and its
outputs (valuations, allocations, risks, scores, rebalancing actions).

Inputs validate themselves on construction: an invalid record raises
InvalidAssetError / InvalidSettingsError at the boundary, so the computation
never sees negative units or prices.

Every output record exposes to_dict() for JSON serialization.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple
from enum import Enum
import math

from wealth_engine.config.defaults import (
    ASSET_TYPES,
    ACCOUNT_TYPES,
    DEFAULT_CGT_INCLUSION_RATE,
    DEFAULT_EXPECTED_RETURNS,
    DEFAULT_PROFILE,
    DEFAULT_REPORTING_CURRENCY,
    DEFAULT_TARGET_ALLOCATION,
    DEFAULT_THRESHOLDS,
    DEFAULT_WITHDRAWAL_RATES,
)
from wealth_engine.config.thresholds import CGT_EXEMPT_ACCOUNTS
from wealth_engine.utils.exceptions import InvalidAssetError, InvalidSettingsError


# ================================================================================
# ENUMS
# ================================================================================

class AssetClass(str, Enum):
    """Known asset classes. Free-form class names are accepted as plain strings."""
    OFFSHORE_EQUITY = "Offshore Equity"
    SA_EQUITY = "SA Equity"
    SA_BONDS = "SA Bonds"
    OFFSHORE_BONDS = "Offshore Bonds"
    CASH = "Cash"
    MONEY_MARKET = "Money Market"
    PROPERTY = "Property"
    CRYPTO = "Crypto"


class AssetType(str, Enum):
    """Investible assets generate returns; non-investible ones are lifestyle assets."""
    INVESTIBLE = "Investible"
    NON_INVESTIBLE = "Non-Investible"


class AccountType(str, Enum):
    """Tax wrapper holding the asset."""
    TFSA = "TFSA"          # tax-free savings account
    RA = "RA"              # retirement annuity
    TAXABLE = "Taxable"

    @property
    def is_cgt_exempt(self) -> bool:
        return self.value in CGT_EXEMPT_ACCOUNTS


class Dimension(str, Enum):
    """Grouping dimension for aggregation and allocation tables."""
    ASSET_CLASS = "asset_class"
    CURRENCY = "currency"
    REGION = "region"
    SECTOR = "sector"
    PLATFORM = "platform"
    ASSET_TYPE = "asset_type"


class RiskType(str, Enum):
    SINGLE_ASSET = "Single Asset"
    ASSET_CLASS = "Asset Class"
    CURRENCY = "Currency"
    PLATFORM = "Platform"


class Severity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {"low": 0, "medium": 1, "high": 2}[self.value]


class Direction(str, Enum):
    BUY = "buy"
    SELL = "sell"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ================================================================================
# SERIALIZATION
# ================================================================================

def _to_plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Mapping):
        return {str(_to_plain(k)): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


class Serializable:
    """Mixin: dataclass -> JSON-compatible dict (enums become their values)."""

    def to_dict(self) -> Dict[str, Any]:
        return _to_plain(self)


# ================================================================================
# VALIDATION HELPERS
# ================================================================================

def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value).strip()


def _number(record_id: str, name: str, value: Any, *, allow_negative: bool = False) -> float:
    if isinstance(value, bool):
        raise InvalidAssetError(record_id, name, value, "must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidAssetError(record_id, name, value, "must be a number") from None
    if not math.isfinite(number):
        raise InvalidAssetError(record_id, name, value, "must be finite")
    if number < 0 and not allow_negative:
        raise InvalidAssetError(record_id, name, value, "cannot be negative")
    return number


def _setting_number(name: str, value: Any, *, low: float = 0.0, high: Optional[float] = None) -> float:
    if isinstance(value, bool):
        raise InvalidSettingsError(name, f"expected a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidSettingsError(name, f"expected a number, got {value!r}") from None
    if not math.isfinite(number) or number < low or (high is not None and number > high):
        bounds = f"[{low}, {high}]" if high is not None else f">= {low}"
        raise InvalidSettingsError(name, f"{number} outside {bounds}")
    return number


# ================================================================================
# INPUT RECORDS
# ================================================================================

@dataclass(frozen=True)
class Asset(Serializable):
    """
    Immutable holding snapshot.

    Prices are in the asset's own currency. A zero current/cost price is valid
    (newly added, unpriced) and yields 0 gain %.
    """
    id: str
    name: str
    asset_class: str
    asset_type: AssetType
    currency: str
    units: float
    current_price: float
    cost_price: float
    dividend_yield: float = 0.0
    interest_yield: float = 0.0
    ter: float = 0.0
    expected_return: Optional[float] = None
    account_type: AccountType = AccountType.TAXABLE
    sector: str = ""
    region: str = ""
    platform: str = ""
    is_liquid: Optional[bool] = None

    def __post_init__(self):
        set_ = object.__setattr__
        record_id = _text(self.id)
        set_(self, "id", record_id)

        if not _text(self.name):
            raise InvalidAssetError(record_id, "name", self.name, "name is required")
        set_(self, "name", _text(self.name))
        set_(self, "asset_class", _text(self.asset_class))

        try:
            set_(self, "asset_type", AssetType(self.asset_type))
        except ValueError:
            raise InvalidAssetError(
                record_id, "asset_type", self.asset_type, f"expected one of {ASSET_TYPES}"
            ) from None
        try:
            set_(self, "account_type", AccountType(self.account_type))
        except ValueError:
            raise InvalidAssetError(
                record_id, "account_type", self.account_type, f"expected one of {ACCOUNT_TYPES}"
            ) from None

        currency = _text(self.currency).upper()
        if not currency:
            raise InvalidAssetError(record_id, "currency", self.currency, "currency code is required")
        set_(self, "currency", currency)

        for name in ("units", "current_price", "cost_price", "dividend_yield", "interest_yield", "ter"):
            set_(self, name, _number(record_id, name, getattr(self, name)))

        if self.expected_return is not None:
            set_(self, "expected_return",
                 _number(record_id, "expected_return", self.expected_return, allow_negative=True))

        for name in ("sector", "region", "platform"):
            set_(self, name, _text(getattr(self, name)))

        if self.is_liquid is not None and not isinstance(self.is_liquid, bool):
            raise InvalidAssetError(record_id, "is_liquid", self.is_liquid, "must be true, false or empty")

    @property
    def is_investible(self) -> bool:
        return self.asset_type is AssetType.INVESTIBLE


@dataclass(frozen=True)
class Liability(Serializable):
    """Outstanding debt, in its own currency."""
    id: str
    name: str
    principal: float
    currency: str
    interest_rate: float = 0.0
    monthly_payment: float = 0.0

    def __post_init__(self):
        set_ = object.__setattr__
        record_id = _text(self.id)
        set_(self, "id", record_id)
        set_(self, "name", _text(self.name))
        currency = _text(self.currency).upper()
        if not currency:
            raise InvalidAssetError(record_id, "currency", self.currency, "currency code is required")
        set_(self, "currency", currency)
        for name in ("principal", "interest_rate", "monthly_payment"):
            set_(self, name, _number(record_id, name, getattr(self, name)))


@dataclass(frozen=True)
class Thresholds(Serializable):
    """
    Concentration limits and drift thresholds, all in percent.

    platform=None leaves the platform axis out of concentration detection.
    """
    single_asset: float = DEFAULT_THRESHOLDS["single_asset"]
    asset_class: float = DEFAULT_THRESHOLDS["asset_class"]
    currency: float = DEFAULT_THRESHOLDS["currency"]
    platform: Optional[float] = DEFAULT_THRESHOLDS["platform"]
    rebalancing_drift: float = DEFAULT_THRESHOLDS["rebalancing_drift"]
    display_drift: float = DEFAULT_THRESHOLDS["display_drift"]
    urgency_medium: float = DEFAULT_THRESHOLDS["urgency_medium"]
    urgency_high: float = DEFAULT_THRESHOLDS["urgency_high"]

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.name == "platform":
                continue
            object.__setattr__(self, f.name, _setting_number(f"thresholds.{f.name}", value))
        if self.urgency_high < self.urgency_medium:
            raise InvalidSettingsError(
                "thresholds.urgency_high",
                f"{self.urgency_high} is below urgency_medium {self.urgency_medium}",
            )


@dataclass(frozen=True)
class Profile(Serializable):
    marginal_tax_rate: float = DEFAULT_PROFILE["marginal_tax_rate"]
    annual_expenses: float = DEFAULT_PROFILE["annual_expenses"]

    def __post_init__(self):
        object.__setattr__(self, "marginal_tax_rate",
                           _setting_number("profile.marginal_tax_rate", self.marginal_tax_rate, high=100.0))
        object.__setattr__(self, "annual_expenses",
                           _setting_number("profile.annual_expenses", self.annual_expenses))


@dataclass(frozen=True)
class WithdrawalRates(Serializable):
    conservative: float = DEFAULT_WITHDRAWAL_RATES["conservative"]
    safe: float = DEFAULT_WITHDRAWAL_RATES["safe"]
    aggressive: float = DEFAULT_WITHDRAWAL_RATES["aggressive"]

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name,
                               _setting_number(f"withdrawal_rates.{f.name}", getattr(self, f.name), high=100.0))


@dataclass(frozen=True)
class Settings(Serializable):
    """
    Engine configuration.

    exchange_rates maps a bare currency code to the number of reporting-currency
    units per 1 unit of that currency. The reporting currency is implicitly 1
    and need not be listed. Legacy pair keys ("USD/ZAR") must be normalized at
    the boundary (see data.fx.migrate_legacy_rates).
    """
    reporting_currency: str = DEFAULT_REPORTING_CURRENCY
    exchange_rates: Dict[str, float] = field(default_factory=dict)
    thresholds: Thresholds = field(default_factory=Thresholds)
    target_allocation: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TARGET_ALLOCATION))
    withdrawal_rates: WithdrawalRates = field(default_factory=WithdrawalRates)
    profile: Profile = field(default_factory=Profile)
    expected_returns: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_EXPECTED_RETURNS))
    cgt_inclusion_rate: float = DEFAULT_CGT_INCLUSION_RATE

    def __post_init__(self):
        set_ = object.__setattr__
        reporting = _text(self.reporting_currency).upper()
        if not reporting:
            raise InvalidSettingsError("reporting_currency", "currency code is required")
        set_(self, "reporting_currency", reporting)

        rates: Dict[str, float] = {}
        for code, rate in dict(self.exchange_rates).items():
            key = _text(code).upper()
            if "/" in key:
                raise InvalidSettingsError(
                    f"exchange_rates.{key}",
                    "pair-keyed rates are a legacy shape; normalize with migrate_legacy_rates()",
                )
            if isinstance(rate, bool):
                raise InvalidSettingsError(f"exchange_rates.{key}", f"expected a number, got {rate!r}")
            try:
                rates[key] = float(rate)
            except (TypeError, ValueError):
                raise InvalidSettingsError(f"exchange_rates.{key}", f"expected a number, got {rate!r}") from None
        set_(self, "exchange_rates", rates)

        set_(self, "target_allocation", {
            _text(cls): _setting_number(f"target_allocation.{cls}", pct, high=100.0)
            for cls, pct in dict(self.target_allocation).items()
        })
        set_(self, "expected_returns", {
            _text(cls): _setting_number(f"expected_returns.{cls}", pct, low=-100.0)
            for cls, pct in dict(self.expected_returns).items()
        })
        set_(self, "cgt_inclusion_rate",
             _setting_number("cgt_inclusion_rate", self.cgt_inclusion_rate, high=100.0))

        for name, kind in (("thresholds", Thresholds), ("withdrawal_rates", WithdrawalRates), ("profile", Profile)):
            if not isinstance(getattr(self, name), kind):
                raise InvalidSettingsError(name, f"expected {kind.__name__}")


# ================================================================================
# VALUATION OUTPUT
# ================================================================================

@dataclass(frozen=True)
class AssetValuation(Serializable):
    """Per-asset figures in the reporting currency."""
    asset_id: str
    name: str
    asset_class: str
    asset_type: AssetType
    currency: str
    account_type: AccountType
    value: float
    cost_basis: float
    unrealized_gain: float
    gain_percentage: float
    annual_fee: float = 0.0
    net_proceeds: float = 0.0


@dataclass(frozen=True)
class AssetGroup(Serializable):
    """Sum of asset values sharing one dimension key."""
    name: str
    value: float
    count: int
    asset_ids: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PortfolioTotals(Serializable):
    """gross is the fsum of every asset value; investible + non_investible equals it to rounding."""
    investible: float
    non_investible: float
    gross: float
    liabilities: float
    net_worth: float


# ================================================================================
# ALLOCATION OUTPUT
# ================================================================================

@dataclass(frozen=True)
class AllocationSlice(Serializable):
    name: str
    value: float
    percentage: float
    count: int


@dataclass(frozen=True)
class ClassDrift(Serializable):
    """Actual vs target for one asset class (percent of investible assets)."""
    asset_class: str
    current_value: float
    current_pct: float
    target_pct: float
    target_value: float
    drift: float
    urgency: Urgency
    needs_attention: bool
    needs_rebalancing: bool


@dataclass(frozen=True)
class DriftReport(Serializable):
    total_value: float
    drifts: List[ClassDrift]
    total_drift: float
    max_drift: float
    urgency: Urgency

    def get(self, asset_class: str) -> Optional[ClassDrift]:
        for item in self.drifts:
            if item.asset_class == asset_class:
                return item
        return None


# ================================================================================
# CONCENTRATION OUTPUT
# ================================================================================

@dataclass(frozen=True)
class ConcentrationRisk(Serializable):
    type: RiskType
    name: str
    percentage: float
    threshold: float
    severity: Severity

    @property
    def excess(self) -> float:
        """Percentage points above the threshold."""
        return self.percentage - self.threshold


@dataclass(frozen=True)
class ConcentrationReport(Serializable):
    """
    evaluated=False means nothing was measured (zero total value); an evaluated
    report with no risks is clean on every axis in `axes`.
    """
    risks: List[ConcentrationRisk]
    axes: Tuple[RiskType, ...]
    total_value: float
    evaluated: bool

    @property
    def is_clean(self) -> bool:
        return self.evaluated and not self.risks

    def of_type(self, risk_type: RiskType) -> List[ConcentrationRisk]:
        return [r for r in self.risks if r.type is risk_type]


# ================================================================================
# QUALITY SCORE OUTPUT
# ================================================================================

@dataclass(frozen=True)
class LargestPosition(Serializable):
    name: str
    percentage: float


@dataclass(frozen=True)
class DiversificationReport(Serializable):
    """HHI values on the 0-10000 scale."""
    score: float
    individual_hhi: float
    asset_class_hhi: float
    currency_hhi: float
    region_hhi: float
    sector_hhi: float
    weighted_hhi: float
    largest_position: Optional[LargestPosition]
    holdings_count: int
    details: str


@dataclass(frozen=True)
class BalanceReport(Serializable):
    score: float
    total_drift: float
    max_drift: float
    urgency: Urgency
    drifts: List[ClassDrift]
    details: str


@dataclass(frozen=True)
class ResilienceReport(Serializable):
    """Ratios are fractions in [0, 1]; component scores are 0-100."""
    score: float
    liquidity_ratio: float
    defensive_ratio: float
    emergency_fund_months: float
    liquidity_score: float
    defensive_score: float
    emergency_score: float
    details: str


@dataclass(frozen=True)
class RiskReport(Serializable):
    score: float
    risks: List[ConcentrationRisk]
    risk_count: int
    max_single_asset_pct: float
    max_currency_pct: float
    details: str


@dataclass(frozen=True)
class Recommendation(Serializable):
    area: str
    factor: str
    suggestion: str
    priority: Priority


@dataclass(frozen=True)
class QualityScore(Serializable):
    overall: float
    grade: str
    diversification: DiversificationReport
    balance: BalanceReport
    resilience: ResilienceReport
    risk: RiskReport
    recommendations: List[Recommendation]

    def sub_scores(self) -> Dict[str, float]:
        return {
            'diversification': self.diversification.score,
            'balance': self.balance.score,
            'resilience': self.resilience.score,
            'risk': self.risk.score,
        }


# ================================================================================
# REBALANCING OUTPUT
# ================================================================================

@dataclass(frozen=True)
class RebalancingAction(Serializable):
    """
    One trade instruction. Sells name the asset to sell; buys target the class.
    Buys never carry tax.
    """
    asset_class: str
    direction: Direction
    amount: float
    urgency: Urgency
    drift: float
    asset_id: Optional[str] = None
    asset_name: Optional[str] = None
    estimated_cgt: float = 0.0
    realized_gain: float = 0.0


@dataclass(frozen=True)
class RebalancingSummary(Serializable):
    total_actions: int
    sell_count: int
    buy_count: int
    total_to_sell: float
    total_to_buy: float
    high_priority_count: int
    gains_realized: float
    losses_realized: float


@dataclass(frozen=True)
class RebalancingAdvice(Serializable):
    actions: List[RebalancingAction]
    total_tax_impact: float
    summary: RebalancingSummary
    drift: DriftReport


# ================================================================================
# FULL REPORT
# ================================================================================

@dataclass(frozen=True)
class PortfolioReport(Serializable):
    """Everything one analysis pass produces, in the reporting currency."""
    reporting_currency: str
    valuations: List[AssetValuation]
    totals: PortfolioTotals
    allocations: Dict[str, List[AllocationSlice]]
    drift: DriftReport
    concentration: ConcentrationReport
    quality: QualityScore
    rebalancing: RebalancingAdvice
    expected_return: float
    income_yield: float
    weighted_ter: float
    annual_fees: float
    withdrawal_amounts: Dict[str, float]
