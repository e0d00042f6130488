"""
Snapshot Hashing & Memoized Engine
==================================
PortfolioEngine memoizes analyze_portfolio() on a SHA-256 content hash of
(assets, liabilities, settings). The hash covers every field of every
record, including the exchange-rate table, so any edit yields a new key.

Each engine owns its cache; nothing is shared at module level.
"""

from collections import OrderedDict
from typing import Any, Sequence
import hashlib
import json

from wealth_engine.core.pipeline import analyze_portfolio
from wealth_engine.models.portfolio import Asset, Liability, PortfolioReport, Settings
from wealth_engine.utils.logger import get_logger

logger = get_logger(__name__)


def _normalize_for_hash(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _normalize_for_hash(v) for k, v in sorted(value.items(), key=lambda x: str(x[0]))}
    if isinstance(value, (list, tuple)):
        return [_normalize_for_hash(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [_normalize_for_hash(v) for v in sorted(value, key=lambda x: str(x))]
    return value


def _canonical_json(data: Any) -> str:
    normalized = _normalize_for_hash(data)
    return json.dumps(normalized, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def snapshot_hash(assets: Sequence[Asset], liabilities: Sequence[Liability], settings: Settings) -> str:
    """
    Content hash of one analysis input.

    Asset order is part of the key (reductions run in input order), and so is
    the declared order of target classes (it fixes the drift table order).
    """
    payload = {
        "assets": [a.to_dict() for a in assets],
        "liabilities": [l.to_dict() for l in liabilities],
        "settings": settings.to_dict(),
        "target_order": list(settings.target_allocation),
    }
    return hashlib.sha256(_canonical_json(payload).encode("utf-8")).hexdigest()


class PortfolioEngine:
    """
    analyze_portfolio() with a bounded LRU cache.

    Cached reports are returned as-is on a hit: treat them as read-only.

    Usage:
        engine = PortfolioEngine(max_entries=16)
        report = engine.analyze(assets, liabilities, settings)
    """

    def __init__(self, max_entries: int = 32):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._cache: "OrderedDict[str, PortfolioReport]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    def analyze(self, assets: Sequence[Asset], liabilities: Sequence[Liability],
                settings: Settings) -> PortfolioReport:
        assets = list(assets)
        liabilities = list(liabilities)
        key = snapshot_hash(assets, liabilities, settings)

        cached = self._cache.get(key)
        if cached is not None:
            self._cache.move_to_end(key)
            self.hits += 1
            logger.debug(f"Cache hit {key[:12]}")
            return cached

        self.misses += 1
        report = analyze_portfolio(assets, liabilities, settings)
        self._cache[key] = report
        if len(self._cache) > self.max_entries:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug(f"Cache evicted {evicted[:12]}")
        return report

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0
