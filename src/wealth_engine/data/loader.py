"""
Record Loader
=============
Boundary layer: turns raw mappings (parsed profile files, exported app
backups, spreadsheet rows) into validated Asset / Liability / Settings
records.

Accepted key styles: snake_case ("asset_class") and the camelCase used by
app exports ("assetClass"). Unknown keys are ignored. Legacy pair-keyed
exchange-rate tables are normalized here, never inside the engine.
"""

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional
import re

import pandas as pd

from wealth_engine.config.defaults import DEFAULT_REPORTING_CURRENCY
from wealth_engine.data.fx import is_legacy_table, migrate_legacy_rates
from wealth_engine.models.portfolio import (
    Asset,
    Liability,
    Profile,
    Settings,
    Thresholds,
    WithdrawalRates,
)
from wealth_engine.utils.exceptions import ConfigFileError, InvalidAssetError, InvalidSettingsError
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)

_CAMEL = re.compile(r'(?<!^)(?=[A-Z])')

# Export-format names that do not map by case conversion alone
_ALIASES = {
    'type': 'asset_type',
    'price': 'current_price',
    'ticker': None,
    'last_updated': None,
    'notes': None,
}


def snake_key(key: Any) -> str:
    """'assetClass' -> 'asset_class'; 'TER' -> 'ter'."""
    key = str(key).strip()
    if key.isupper():
        return key.lower()
    return _CAMEL.sub('_', key).lower().replace(' ', '_').replace('-', '_')


def normalize_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in raw.items():
        name = snake_key(key)
        name = _ALIASES.get(name, name)
        if name is not None:
            normalized[name] = value
    return normalized


def _known(cls, data: Dict[str, Any], context: str) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - names)
    if unknown:
        logger.debug(f"Ignoring unknown {context} keys: {unknown}")
    return {k: v for k, v in data.items() if k in names}


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and value != value:
        return True
    return isinstance(value, str) and not value.strip()


# =========================
# ASSETS / LIABILITIES
# =========================

_REQUIRED_ASSET_FIELDS = ('name', 'asset_type', 'currency', 'units', 'current_price')
_OPTIONAL_NUMERIC = ('cost_price', 'dividend_yield', 'interest_yield', 'ter')


def asset_from_dict(raw: Mapping[str, Any], index: Optional[int] = None) -> Asset:
    """
    Build one Asset from a raw mapping.

    Blank optional numbers become 0; a missing cost price defaults to 0
    (newly added, unpriced holding). Raises InvalidAssetError.
    """
    data = _known(Asset, normalize_keys(raw), "asset")
    asset_id = str(data.get('id') or (f"asset-{index + 1}" if index is not None else ""))
    data['id'] = asset_id

    for name in _REQUIRED_ASSET_FIELDS:
        if _blank(data.get(name)):
            raise InvalidAssetError(asset_id, name, data.get(name), "required field is missing")
    for name in _OPTIONAL_NUMERIC:
        if _blank(data.get(name)):
            data[name] = 0.0
    for name in ('expected_return', 'is_liquid'):
        if _blank(data.get(name)):
            data[name] = None
    if _blank(data.get('account_type')):
        data.pop('account_type', None)
    # Empty spreadsheet cells arrive as NaN
    for name in ('asset_class', 'sector', 'region', 'platform'):
        if _blank(data.get(name)):
            data[name] = ""

    return Asset(**data)


def liability_from_dict(raw: Mapping[str, Any], index: Optional[int] = None) -> Liability:
    data = _known(Liability, normalize_keys(raw), "liability")
    liability_id = str(data.get('id') or (f"liability-{index + 1}" if index is not None else ""))
    data['id'] = liability_id
    for name in ('principal', 'currency'):
        if _blank(data.get(name)):
            raise InvalidAssetError(liability_id, name, data.get(name), "required field is missing")
    data.setdefault('name', liability_id)
    return Liability(**data)


def load_assets(rows: Iterable[Mapping[str, Any]]) -> List[Asset]:
    """Build every asset; ids must be unique."""
    assets: List[Asset] = []
    seen = set()
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise InvalidAssetError("", f"assets[{i}]", row, "expected a mapping")
        asset = asset_from_dict(row, index=i)
        if asset.id in seen:
            raise InvalidAssetError(asset.id, "id", asset.id, "duplicate asset id")
        seen.add(asset.id)
        assets.append(asset)
    logger.debug(f"Loaded {len(assets)} assets")
    return assets


def load_liabilities(rows: Iterable[Mapping[str, Any]]) -> List[Liability]:
    liabilities: List[Liability] = []
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise InvalidAssetError("", f"liabilities[{i}]", row, "expected a mapping")
        liabilities.append(liability_from_dict(row, index=i))
    return liabilities


def assets_from_frame(frame: pd.DataFrame) -> List[Asset]:
    """Spreadsheet import: one asset per row, column names as in asset_from_dict."""
    rows = frame.where(pd.notna(frame), None).to_dict(orient='records')
    return load_assets(rows)


def read_assets_csv(path: str) -> List[Asset]:
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigFileError(f"Asset file not found: {path}")
    try:
        frame = pd.read_csv(file_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise ConfigFileError(f"Cannot parse asset CSV {path}: {exc}") from exc
    return assets_from_frame(frame)


# =========================
# SETTINGS
# =========================

def _section(data: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise InvalidSettingsError(name, f"expected a mapping, got {type(value).__name__}")
    return normalize_keys(value)


def _rates(data: Mapping[str, Any], reporting_currency: str) -> Dict[str, float]:
    rates = data.get('exchange_rates')
    legacy = data.get('currency')
    if isinstance(legacy, Mapping):
        legacy = normalize_keys(legacy)
        legacy_rates = legacy.get('exchange_rates')
        # The bare-code table wins when both shapes are present
        if not rates and isinstance(legacy_rates, Mapping):
            logger.info("Migrating legacy pair-keyed exchange rates")
            return migrate_legacy_rates(legacy_rates, reporting_currency)

    if rates is None:
        return {}
    if not isinstance(rates, Mapping):
        raise InvalidSettingsError('exchange_rates', "expected a mapping of currency -> rate")
    if is_legacy_table(rates):
        logger.info("Migrating legacy pair-keyed exchange rates")
        return migrate_legacy_rates(rates, reporting_currency)
    return {str(k).strip().upper(): v for k, v in rates.items()}


def settings_from_dict(raw: Optional[Mapping[str, Any]]) -> Settings:
    """
    Build Settings; sections left out fall back to the defaults.

    A target_allocation given in the file replaces the default one entirely
    (classes are not merged).
    """
    data = normalize_keys(raw or {})

    legacy = data.get('currency')
    reporting = data.get('reporting_currency')
    if _blank(reporting) and isinstance(legacy, Mapping):
        reporting = normalize_keys(legacy).get('reporting')
    reporting = str(reporting or DEFAULT_REPORTING_CURRENCY).strip().upper()

    kwargs: Dict[str, Any] = {
        'reporting_currency': reporting,
        'exchange_rates': _rates(data, reporting),
        'thresholds': Thresholds(**_known(Thresholds, _section(data, 'thresholds'), "thresholds")),
        'withdrawal_rates': WithdrawalRates(**_known(WithdrawalRates, _section(data, 'withdrawal_rates'),
                                                     "withdrawal_rates")),
        'profile': Profile(**_known(Profile, _section(data, 'profile'), "profile")),
    }

    for name in ('target_allocation', 'expected_returns'):
        value = data.get(name)
        if value is not None:
            if not isinstance(value, Mapping):
                raise InvalidSettingsError(name, "expected a mapping of asset class -> percent")
            kwargs[name] = dict(value)

    inclusion = data.get('cgt_inclusion_rate')
    tax_config = data.get('tax_config')
    if inclusion is None and isinstance(tax_config, Mapping):
        cgt = normalize_keys(tax_config).get('cgt')
        if isinstance(cgt, Mapping):
            inclusion = normalize_keys(cgt).get('inclusion_rate')
    if inclusion is not None:
        kwargs['cgt_inclusion_rate'] = inclusion

    return Settings(**kwargs)
