import logging

import pytest

from wealth_engine.decision.concentration import (
    classify_severity,
    detect_concentration_risks,
    evaluated_axes,
)
from wealth_engine.models.portfolio import RiskType, Severity, Thresholds
from tests.fixtures.sample_portfolio import loose_thresholds, make_asset, make_settings


def _ten_percent_portfolio(lead_units=100):
    """One asset of lead_units * 10 next to ten assets of 900 each."""
    lead = make_asset("lead", name="Lead", units=lead_units)
    rest = [make_asset(f"r{i}", name=f"Rest {i}", units=90) for i in range(10)]
    return [lead] + rest


class TestSeverity:
    @pytest.mark.parametrize("pct,expected", [
        (9.9, None),
        (10.0, None),
        (10.1, Severity.WARNING),
        (15.0, Severity.WARNING),
        (15.1, Severity.CRITICAL),
    ])
    def test_strict_boundaries(self, pct, expected):
        assert classify_severity(pct, 10.0) is expected


class TestSingleAsset:
    def test_exactly_at_threshold_not_flagged(self):
        settings = make_settings(thresholds=loose_thresholds(single_asset=10))
        report = detect_concentration_risks(_ten_percent_portfolio(), settings)
        assert report.evaluated
        assert report.is_clean

    def test_just_over_threshold_flagged(self):
        settings = make_settings(thresholds=loose_thresholds(single_asset=10))
        report = detect_concentration_risks(_ten_percent_portfolio(101), settings)
        risks = report.of_type(RiskType.SINGLE_ASSET)
        assert [r.name for r in risks] == ["Lead"]
        assert risks[0].severity is Severity.WARNING
        assert risks[0].percentage == pytest.approx(1010 / 10010 * 100)

    def test_single_holding_is_critical(self):
        report = detect_concentration_risks([make_asset(name="Only")], make_settings())
        single = report.of_type(RiskType.SINGLE_ASSET)
        assert single[0].percentage == 100.0
        assert single[0].severity is Severity.CRITICAL

    def test_input_order_kept(self):
        settings = make_settings(thresholds=loose_thresholds(single_asset=10))
        assets = [make_asset("s", name="Small", units=20), make_asset("b", name="Big", units=80)]
        names = [r.name for r in detect_concentration_risks(assets, settings).risks]
        assert names == ["Small", "Big"]


class TestGroupAxes:
    def test_sample_portfolio(self, assets, settings):
        report = detect_concentration_risks(assets, settings)
        by_type = {t: report.of_type(t) for t in RiskType}

        assert [r.name for r in by_type[RiskType.SINGLE_ASSET]] == ["Vanguard World", "Primary Residence"]
        assert by_type[RiskType.SINGLE_ASSET][0].severity is Severity.WARNING
        assert by_type[RiskType.SINGLE_ASSET][1].severity is Severity.CRITICAL

        assert [r.name for r in by_type[RiskType.ASSET_CLASS]] == ["Property"]
        assert by_type[RiskType.ASSET_CLASS][0].severity is Severity.CRITICAL

        currency = by_type[RiskType.CURRENCY]
        assert [r.name for r in currency] == ["ZAR"]
        assert currency[0].severity is Severity.WARNING
        assert currency[0].percentage == pytest.approx(2690000 / 3060000 * 100)

    def test_platform_skipped_without_threshold(self, assets, settings):
        report = detect_concentration_risks(assets, settings)
        assert RiskType.PLATFORM not in report.axes
        assert report.of_type(RiskType.PLATFORM) == []

    def test_platform_evaluated_when_configured(self):
        settings = make_settings(thresholds=loose_thresholds(platform=40))
        assets = [
            make_asset("a", platform="IBKR", units=50),
            make_asset("b", platform="Bank", units=30),
            make_asset("c", platform="EasyEquities", units=20),
        ]
        report = detect_concentration_risks(assets, settings)
        assert RiskType.PLATFORM in report.axes
        risks = report.of_type(RiskType.PLATFORM)
        assert [(r.name, r.percentage) for r in risks] == [("IBKR", 50.0)]

    def test_group_risks_sorted_by_value(self):
        settings = make_settings(thresholds=loose_thresholds(currency=20))
        assets = [
            make_asset("a", currency="ZAR", units=300),
            make_asset("b", currency="USD", units=20, current_price=10),
            make_asset("c", currency="EUR", units=25, current_price=10),
        ]
        names = [r.name for r in detect_concentration_risks(assets, settings).of_type(RiskType.CURRENCY)]
        # 3000 ZAR, 3700 USD, 5000 EUR
        assert names == ["EUR", "USD", "ZAR"]


def test_zero_total_is_not_evaluated():
    report = detect_concentration_risks([make_asset(current_price=0)], make_settings())
    assert not report.evaluated
    assert report.risks == []
    assert report.total_value == 0.0


def test_empty_portfolio_is_not_evaluated():
    report = detect_concentration_risks([], make_settings())
    assert not report.evaluated
    assert not report.is_clean


def test_evaluated_axes():
    assert evaluated_axes(make_settings()) == (RiskType.SINGLE_ASSET, RiskType.ASSET_CLASS, RiskType.CURRENCY)
    with_platform = make_settings(thresholds=Thresholds(platform=30))
    assert evaluated_axes(with_platform)[-1] is RiskType.PLATFORM


def test_critical_risk_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="wealth_engine.decision.concentration"):
        detect_concentration_risks([make_asset(name="Only")], make_settings())
    assert "Critical" in caplog.text
    assert "Only" in caplog.text
