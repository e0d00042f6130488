"""
Tests for the four quality sub-scores and the combined score.
"""

import pytest

from wealth_engine.analytics.allocation import calculate_drift
from wealth_engine.analytics.quality import (
    balance_score,
    calculate_quality_score,
    diversification_score,
    drift_to_score,
    hhi,
    letter_grade,
    resilience_score,
    risk_score,
)
from wealth_engine.analytics.quality.resilience import emergency_score, is_liquid
from wealth_engine.analytics.quality.score import recommendation_priority
from wealth_engine.config.thresholds import HHI_MAX, NEUTRAL_SECTOR_HHI, validate_policy
from wealth_engine.models.portfolio import Priority, Profile, Severity
from tests.fixtures.sample_portfolio import loose_thresholds, make_asset, make_settings

FLAT_RATES = {"USD": 1.0, "GBP": 1.0, "EUR": 1.0}


def _spread_portfolio(lead_units=40):
    lead = make_asset("x", name="X", asset_class="Offshore Equity", currency="USD",
                      region="Global", sector="Tech", units=lead_units)
    return [
        lead,
        make_asset("y", name="Y", asset_class="SA Equity", currency="ZAR",
                   region="South Africa", sector="Financials", units=20),
        make_asset("z", name="Z", asset_class="SA Bonds", currency="GBP", region="UK", units=20),
        make_asset("w", name="W", asset_class="Cash", currency="EUR", region="Europe", units=20),
    ]


# =========================
# DIVERSIFICATION
# =========================

class TestHHI:
    def test_equal_buckets(self):
        assert hhi([1, 1, 1, 1]) == pytest.approx(2500.0)

    def test_single_bucket(self):
        assert hhi([42]) == pytest.approx(10000.0)

    @pytest.mark.parametrize("values", [[], [0, 0]])
    def test_nothing_to_spread_is_maximal(self, values):
        assert hhi(values) == HHI_MAX


class TestDiversification:
    def test_single_holding_scores_zero(self):
        report = diversification_score([make_asset()], make_settings())
        assert report.score == 0.0
        assert report.largest_position.percentage == 100.0

    def test_more_concentration_never_scores_higher(self):
        settings = make_settings(exchange_rates=FLAT_RATES)
        previous = None
        for units in (40, 60, 100, 200, 400):
            score = diversification_score(_spread_portfolio(units), settings).score
            if previous is not None:
                assert score <= previous
            previous = score

    def test_sector_measured_over_equities_only(self):
        settings = make_settings(exchange_rates=FLAT_RATES)
        report = diversification_score(_spread_portfolio(20), settings)
        assert report.sector_hhi == pytest.approx(5000.0)

    def test_no_equities_gives_neutral_sector(self):
        assets = [make_asset("b", asset_class="SA Bonds"), make_asset("c", asset_class="Cash")]
        report = diversification_score(assets, make_settings())
        assert report.sector_hhi == NEUTRAL_SECTOR_HHI

    def test_largest_position_first_wins_ties(self):
        assets = [make_asset("a", name="First"), make_asset("b", name="Second")]
        report = diversification_score(assets, make_settings())
        assert report.largest_position.name == "First"
        assert report.largest_position.percentage == 50.0
        assert report.holdings_count == 2

    def test_non_investible_excluded(self):
        assets = [make_asset("a"), make_asset("b", asset_type="Non-Investible", units=10000)]
        assert diversification_score(assets, make_settings()).holdings_count == 1

    def test_no_investible_value(self):
        report = diversification_score([make_asset(asset_type="Non-Investible")], make_settings())
        assert report.score == 0.0
        assert report.weighted_hhi == HHI_MAX
        assert report.largest_position is None


# =========================
# BALANCE
# =========================

class TestBalance:
    @pytest.mark.parametrize("total_drift,expected", [
        (0.0, 100.0),
        (50.0, 90.0),
        (40.0, 92.84),
        (300.0, 0.0),
    ])
    def test_curve(self, total_drift, expected):
        assert drift_to_score(total_drift) == pytest.approx(expected, abs=0.01)

    def test_curve_is_monotonic(self):
        scores = [drift_to_score(d) for d in range(0, 250, 5)]
        assert scores == sorted(scores, reverse=True)

    def test_on_target_portfolio(self, two_class):
        _, settings = two_class
        assets = [
            make_asset("off", asset_class="Offshore Equity", units=70),
            make_asset("sa", asset_class="SA Equity", units=30),
        ]
        report = balance_score(assets, settings)
        assert report.score == pytest.approx(100.0)
        assert report.details == "Portfolio is well balanced"

    def test_precomputed_drift_is_reused(self, two_class):
        assets, settings = two_class
        drift = calculate_drift(assets, settings)
        assert balance_score(assets, settings, drift=drift) == balance_score(assets, settings)

    def test_two_class_scenario(self, two_class):
        assets, settings = two_class
        report = balance_score(assets, settings)
        assert report.total_drift == 40.0
        assert report.score == pytest.approx(drift_to_score(40.0))
        assert "Rebalancing needed" in report.details

    def test_no_investible_value(self):
        assert balance_score([], make_settings()).score == 0.0


# =========================
# RESILIENCE
# =========================

class TestResilience:
    @pytest.mark.parametrize("months,expected", [
        (0, 0.0),
        (1.5, 35.0),
        (3, 70.0),
        (4.5, 85.0),
        (6, 100.0),
        (24, 100.0),
    ])
    def test_emergency_curve(self, months, expected):
        assert emergency_score(months) == pytest.approx(expected)

    def test_balanced_profile(self):
        settings = make_settings(profile=Profile(annual_expenses=24000))
        assets = [
            make_asset("c", asset_class="Cash", units=1000),
            make_asset("b", asset_class="SA Bonds", units=1500),
            make_asset("e", asset_class="SA Equity", units=7500),
        ]
        report = resilience_score(assets, settings)
        assert report.liquidity_ratio == pytest.approx(0.10)
        assert report.defensive_ratio == pytest.approx(0.25)
        assert report.emergency_fund_months == pytest.approx(5.0)
        assert report.emergency_score == pytest.approx(90.0)
        assert report.score == pytest.approx(96.0)

    def test_zero_expenses_give_zero_months(self):
        report = resilience_score([make_asset(asset_class="Cash")], make_settings())
        assert report.emergency_fund_months == 0.0
        assert report.emergency_score == 0.0
        assert "not set" in report.details

    def test_explicit_liquid_flag_wins(self):
        assert is_liquid(make_asset(asset_class="Offshore Equity", is_liquid=True))
        assert not is_liquid(make_asset(asset_class="Cash", is_liquid=False))
        assert is_liquid(make_asset(asset_class="Money Market"))

    def test_no_investible_value(self):
        assert resilience_score([], make_settings()).score == 0.0


# =========================
# RISK
# =========================

class TestRisk:
    def test_no_risks_scores_100(self):
        settings = make_settings(thresholds=loose_thresholds())
        report = risk_score([make_asset("a"), make_asset("b")], settings)
        assert report.score == 100.0
        assert report.risk_count == 0

    def test_warning_penalty(self):
        settings = make_settings(thresholds=loose_thresholds(single_asset=60))
        assets = [make_asset("a", units=75), make_asset("b", units=25)]
        report = risk_score(assets, settings)
        assert report.risk_count == 1
        assert report.risks[0].severity is Severity.WARNING
        # 10 base + 0.5 per point over
        assert report.score == pytest.approx(82.5)
        assert report.max_single_asset_pct == 75.0

    def test_measured_over_investible_assets(self, assets, settings):
        report = risk_score(assets, settings)
        names = {r.name for r in report.risks}
        assert "Primary Residence" not in names
        assert "Property" not in names
        assert report.risk_count == 4
        assert report.score == 0.0

    def test_no_investible_value(self):
        report = risk_score([make_asset(asset_type="Non-Investible")], make_settings())
        assert report.score == 0.0
        assert report.risks == []


# =========================
# OVERALL
# =========================

@pytest.mark.parametrize("score,grade", [
    (100, "A"), (90, "A"), (89.99, "B"), (75, "B"), (60, "C"), (40, "D"), (39.9, "F"), (0, "F"),
])
def test_letter_grade(score, grade):
    assert letter_grade(score) == grade


@pytest.mark.parametrize("score,priority", [
    (0, Priority.HIGH), (49.9, Priority.HIGH), (50, Priority.MEDIUM), (70, Priority.LOW), (79.9, Priority.LOW),
])
def test_recommendation_priority(score, priority):
    assert recommendation_priority(score) is priority


def test_single_holding_quality():
    quality = calculate_quality_score([make_asset()], make_settings())
    assert quality.diversification.score == 0.0
    assert quality.resilience.score == 0.0
    assert quality.risk.score == 0.0
    assert quality.balance.total_drift == pytest.approx(160.0)
    assert quality.balance.score == pytest.approx(42.76, abs=0.01)
    assert quality.overall == pytest.approx(quality.balance.score / 4)
    assert quality.grade == "F"

    areas = [r.area for r in quality.recommendations]
    assert areas == ["diversification", "resilience", "risk", "balance"]
    assert all(r.priority is Priority.HIGH for r in quality.recommendations)
    assert quality.recommendations[-1].factor == "SA Equity"


def test_sub_scores_in_range(assets, settings):
    quality = calculate_quality_score(assets, settings)
    for name, value in quality.sub_scores().items():
        assert 0.0 <= value <= 100.0, name
    assert 0.0 <= quality.overall <= 100.0


def test_quality_is_deterministic(assets, settings):
    assert calculate_quality_score(assets, settings) == calculate_quality_score(assets, settings)


def test_healthy_areas_get_no_recommendation(two_class):
    _, settings = two_class
    assets = [
        make_asset("off", asset_class="Offshore Equity", units=70),
        make_asset("sa", asset_class="SA Equity", units=30),
    ]
    quality = calculate_quality_score(assets, settings)
    assert "balance" not in {r.area for r in quality.recommendations}


def test_scoring_weights_sum_to_one():
    validate_policy()
