import pytest

from wealth_engine.analytics.allocation import (
    all_allocations,
    allocation,
    allocation_frame,
    calculate_drift,
    classify_urgency,
    drift_frame,
)
from wealth_engine.models.portfolio import Dimension, Thresholds, Urgency
from tests.fixtures.sample_portfolio import make_asset, make_settings


class TestAllocation:
    def test_sorted_by_value_descending(self, assets, settings):
        names = [s.name for s in allocation(assets, settings, Dimension.ASSET_CLASS)]
        assert names == ["Property", "Offshore Equity", "SA Equity", "Money Market", "SA Bonds"]

    def test_percentages_sum_to_100(self, assets, settings):
        for dimension in Dimension:
            slices = allocation(assets, settings, dimension)
            assert sum(s.percentage for s in slices) == pytest.approx(100.0)

    def test_ties_broken_by_name(self, settings):
        assets = [make_asset("1", asset_class="Cash"), make_asset("2", asset_class="Bonds")]
        assert [s.name for s in allocation(assets, settings, "asset_class")] == ["Bonds", "Cash"]

    def test_zero_total_gives_zero_percentages(self, settings):
        slices = allocation([make_asset(current_price=0)], settings, Dimension.CURRENCY)
        assert [(s.name, s.percentage) for s in slices] == [("ZAR", 0.0)]

    def test_empty_portfolio(self, settings):
        assert allocation([], settings, Dimension.REGION) == []

    def test_counts(self, assets, settings):
        by_platform = {s.name: s for s in allocation(assets, settings, Dimension.PLATFORM)}
        assert by_platform["EasyEquities"].count == 2
        assert by_platform["Uncategorized"].count == 1

    def test_every_dimension_present(self, assets, settings):
        tables = all_allocations(assets, settings)
        assert set(tables) == {d.value for d in Dimension}

    def test_frame_indexed_by_name(self, assets, settings):
        frame = allocation_frame(allocation(assets, settings, Dimension.ASSET_TYPE))
        assert frame.loc["Non-Investible", "value"] == 2500000
        assert frame.loc["Investible", "count"] == 4


class TestUrgency:
    @pytest.mark.parametrize("drift,expected", [
        (0.0, Urgency.LOW),
        (5.0, Urgency.LOW),
        (5.01, Urgency.MEDIUM),
        (10.0, Urgency.MEDIUM),
        (10.01, Urgency.HIGH),
    ])
    def test_boundaries_are_strict(self, drift, expected):
        assert classify_urgency(drift, Thresholds()) is expected


class TestDrift:
    def test_two_class_scenario(self, two_class):
        assets, settings = two_class
        report = calculate_drift(assets, settings)

        offshore = report.get("Offshore Equity")
        sa = report.get("SA Equity")
        assert offshore.current_pct == 50.0
        assert offshore.drift == -20.0
        assert offshore.target_value == 1400.0
        assert sa.drift == 20.0
        assert report.total_drift == 40.0
        assert report.max_drift == 20.0
        assert report.urgency is Urgency.HIGH
        assert offshore.needs_rebalancing and sa.needs_attention

    def test_class_order_targets_then_untargeted(self, two_class):
        assets, settings = two_class
        assets = assets + [make_asset("c", asset_class="Crypto"), make_asset("b", asset_class="Bonds")]
        report = calculate_drift(assets, settings)
        assert [d.asset_class for d in report.drifts] == ["Offshore Equity", "SA Equity", "Bonds", "Crypto"]
        assert report.get("Crypto").target_pct == 0.0
        assert report.get("Crypto").drift == 25.0

    def test_non_investible_assets_excluded(self, assets, settings):
        report = calculate_drift(assets, settings)
        assert report.total_value == 560000
        assert report.get("Property").current_value == 0.0
        assert report.get("Property").drift == -5.0

    def test_no_investible_value(self):
        settings = make_settings()
        report = calculate_drift([make_asset(asset_type="Non-Investible")], settings)
        assert report.total_value == 0.0
        assert all(d.drift == -d.target_pct for d in report.drifts)
        assert report.total_drift == pytest.approx(100.0)
        assert report.max_drift == 40.0

    def test_within_band_needs_no_rebalancing(self, two_class):
        assets, settings = two_class
        assets = [
            make_asset("off", asset_class="Offshore Equity", units=75),
            make_asset("sa", asset_class="SA Equity", units=25),
        ]
        report = calculate_drift(assets, settings)
        assert report.get("Offshore Equity").drift == pytest.approx(5.0)
        assert not any(d.needs_rebalancing for d in report.drifts)
        assert all(d.needs_attention for d in report.drifts)

    def test_missing_class_listed_when_targeted(self):
        settings = make_settings(target_allocation={"Cash": 20, "SA Equity": 80})
        report = calculate_drift([make_asset()], settings)
        assert report.get("Cash").current_value == 0.0
        assert report.get("Cash").drift == -20.0

    def test_get_unknown_class(self, two_class):
        assets, settings = two_class
        assert calculate_drift(assets, settings).get("Gold") is None


def test_drift_frame(two_class):
    assets, settings = two_class
    frame = drift_frame(calculate_drift(assets, settings))
    assert list(frame.index) == ["Offshore Equity", "SA Equity"]
    assert frame.loc["SA Equity", "urgency"] == "high"
