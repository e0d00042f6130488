"""
Profile File Loader
===================
Load a portfolio profile (assets, liabilities, settings) from a JSON or
YAML file and build the validated records the engine consumes.

File shape:

    settings:
      reporting_currency: ZAR
      exchange_rates: {USD: 18.5, EUR: 19.8}
      thresholds: {single_asset: 10, rebalancing_drift: 5}
      target_allocation: {Offshore Equity: 40, SA Equity: 20, ...}
      profile: {marginal_tax_rate: 39, annual_expenses: 240000}
    assets:
      - {id: a1, name: ..., asset_class: SA Equity, asset_type: Investible, ...}
    liabilities:
      - {id: l1, name: Bond, principal: 850000, currency: ZAR}

App backups (camelCase keys, top-level "settings"/"assets"/"liabilities")
load unchanged.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from wealth_engine.data.loader import load_assets, load_liabilities, settings_from_dict
from wealth_engine.models.portfolio import Asset, Liability, Settings
from wealth_engine.utils.exceptions import ConfigFileError
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PortfolioProfile:
    """Everything one analysis needs, as loaded from a profile file."""
    assets: List[Asset]
    settings: Settings
    liabilities: List[Liability] = field(default_factory=list)
    source: str = ""


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigFileError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigFileError("YAML config must be a mapping at top level.")
    return data


def load_config_file(path: str) -> Dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        raise ConfigFileError(f"Config file not found: {path}")

    suffix = file_path.suffix.lower()
    if suffix in {".yml", ".yaml"}:
        return _load_yaml(file_path)
    if suffix == ".json":
        try:
            with file_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigFileError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigFileError("JSON config must be an object at top level.")
        return data

    raise ConfigFileError(f"Unsupported config format: {suffix}. Use .json or .yaml/.yml.")


def _rows(raw: Dict[str, Any], key: str) -> list:
    rows = raw.get(key)
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise ConfigFileError(f"'{key}' must be a list, got {type(rows).__name__}")
    return rows


def build_profile(raw: Dict[str, Any], source: str = "") -> PortfolioProfile:
    """
    Normalize a parsed profile into validated records.

    Raises:
        InvalidAssetError / InvalidSettingsError: malformed records
        ConfigFileError: wrong top-level shape
    """
    settings_raw = raw.get("settings", {})
    if not isinstance(settings_raw, dict):
        raise ConfigFileError("'settings' must be a mapping")

    profile = PortfolioProfile(
        assets=load_assets(_rows(raw, "assets")),
        liabilities=load_liabilities(_rows(raw, "liabilities")),
        settings=settings_from_dict(settings_raw),
        source=source,
    )
    logger.info(
        f"Profile loaded{f' from {source}' if source else ''}: "
        f"{len(profile.assets)} assets, {len(profile.liabilities)} liabilities, "
        f"reporting in {profile.settings.reporting_currency}"
    )
    return profile


def load_profile(path: str) -> PortfolioProfile:
    return build_profile(load_config_file(path), source=str(path))
