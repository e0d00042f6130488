"""
Exception Hierarchy for the Analytics Engine
============================================
Named errors raised when a snapshot cannot be analysed.

Critical Rule: a malformed input aborts the whole report. The engine never
returns a partial result and never falls back to a default silently; the
caller decides whether to substitute defaults or surface a message.

Zero totals (no assets, zero cost basis, zero expenses) are NOT errors:
they resolve to 0 inside the computation.
"""

from typing import Any, Iterable, List, Optional


# =============================================================================
# BASE EXCEPTION HIERARCHY
# =============================================================================

class WealthEngineError(Exception):
    """
    Base exception for the analytics engine.

    Catch this to handle every engine failure with a single except clause.
    """
    pass


class MissingRateError(WealthEngineError, KeyError):
    """
    Raised when a referenced currency has no usable entry in the rate table.

    Fatal to the computation path that needed the conversion. A rate that is
    absent, zero, negative or not finite counts as missing.

    Args:
        currencies: Currency codes without a usable rate
        reporting_currency: Reporting currency of the rate table
    """

    def __init__(self, currencies: Iterable[str], reporting_currency: Optional[str] = None):
        self.currencies: List[str] = sorted(set(currencies))
        self.reporting_currency = reporting_currency

        target = f" -> {reporting_currency}" if reporting_currency else ""
        message = (
            f"No exchange rate for {', '.join(self.currencies)}{target}. "
            f"Add the missing entries to the rate table before analysing."
        )
        # KeyError repr-quotes its argument; keep the readable message in args[0]
        Exception.__init__(self, message)

    def __str__(self) -> str:
        return self.args[0]


class InvalidAssetError(WealthEngineError, ValueError):
    """
    Raised when an asset or liability record violates its invariants.

    Rejected at the boundary (record construction / loading), never inside
    the computation.

    Args:
        asset_id: Identifier of the offending record ("" when unknown)
        field: Name of the invalid field
        value: Offending value
        reason: Human-readable explanation
    """

    def __init__(self, asset_id: str, field: str, value: Any, reason: str):
        self.asset_id = asset_id
        self.field = field
        self.value = value
        self.reason = reason
        label = f"'{asset_id}'" if asset_id else "<unknown>"
        super().__init__(f"Invalid record {label}: {field}={value!r} ({reason})")


class InvalidSettingsError(WealthEngineError, ValueError):
    """
    Raised when settings are malformed (negative thresholds, tax rate outside
    0-100, unknown enum values, non-numeric targets).
    """

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid settings: {field} ({reason})")


class ConfigFileError(WealthEngineError):
    """Raised when a profile file cannot be read or has an unsupported shape."""
    pass
