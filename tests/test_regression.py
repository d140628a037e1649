# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for the OLS fit and the balance-point regression loop."""

from __future__ import annotations

import pytest

from heat_load.analysis.ols import fit_balance_point
from heat_load.analysis.outliers import OutlierDetector
from heat_load.analysis.regression import BalancePointRegressor, ua_conversion_factor
from heat_load.errors import AnalysisCancelled, RegressionNonConvergence, ValidationError


class TestFitBalancePoint:
    """Tests for the single-candidate OLS fit."""

    def test_requires_three_records(self, heating_records):
        with pytest.raises(ValueError):
            fit_balance_point(heating_records[:2], 58.0)

    def test_recovers_line(self, heating_records):
        fit = fit_balance_point(heating_records, 58.0)
        assert fit.slope == pytest.approx(2.0, rel=0.01)
        assert fit.intercept == pytest.approx(1.0, abs=0.1)
        assert fit.sample_size == len(heating_records)

    def test_flat_degree_days_fall_back_to_mean(self, make_record):
        # Every period is warmer than the candidate: no degree-days at all.
        records = [make_record(i, 59.0, u) for i, u in enumerate([1.0, 2.0, 3.0])]
        fit = fit_balance_point(records, 55.0)
        assert fit.slope == 0.0
        assert fit.intercept == pytest.approx(2.0)
        assert fit.residual_std == pytest.approx(2 ** 0.5)


class TestBalancePointRegressor:
    """Tests for BalancePointRegressor."""

    def test_invalid_range(self):
        with pytest.raises(ValueError):
            BalancePointRegressor(min_balance_point=70, max_balance_point=60)
        with pytest.raises(ValueError):
            BalancePointRegressor(step=0)

    def test_candidates_inclusive(self):
        regressor = BalancePointRegressor(min_balance_point=55, max_balance_point=70)
        assert regressor.candidates[0] == 55
        assert regressor.candidates[-1] == 70
        assert len(regressor.candidates) == 16

    def test_three_period_scan(self, profile, make_record):
        records = [
            make_record(0, 40.0, 20 / 30),
            make_record(1, 35.0, 25 / 30),
            make_record(2, 30.0, 30 / 30),
        ]
        regressor = BalancePointRegressor(min_balance_point=55, max_balance_point=70)
        result = regressor.regress(records, profile)

        assert 55 <= result.fit.balance_point <= 70
        assert result.fit.slope * ua_conversion_factor(profile) > 0
        assert len(result.graph) == 16
        assert [g.balance_point for g in result.graph] == list(range(55, 71))

    def test_selects_minimum_std(self, profile, heating_records):
        result = BalancePointRegressor().regress(heating_records, profile)
        smallest = min(g.standard_deviation for g in result.graph)
        assert result.fit.residual_std == smallest
        assert result.fit.balance_point == 58.0

    def test_equal_std_resolves_to_lowest_balance_point(self, profile, make_record):
        # Warmer than every candidate: each fit is the same flat line.
        records = [make_record(i, 80.0, u) for i, u in enumerate([1.0, 2.0, 3.0])]
        regressor = BalancePointRegressor()
        result = regressor.regress(records, profile)

        assert len({g.standard_deviation for g in result.graph}) == 1
        assert result.fit.balance_point == 55.0

        summary = regressor.summarize(
            regressor.apply(records, result, profile), result, profile
        )
        smallest = min(g.standard_deviation for g in result.graph)
        tied = [g.balance_point for g in result.graph if g.standard_deviation == smallest]
        assert summary.estimated_balance_point == min(tied)

    def test_selected_is_lowest_of_minimum_std(self, profile, heating_records):
        result = BalancePointRegressor().regress(heating_records, profile)
        smallest = min(g.standard_deviation for g in result.graph)
        tied = [g.balance_point for g in result.graph if g.standard_deviation == smallest]
        assert result.fit.balance_point == min(tied)

    def test_heat_loss_rate(self, profile, heating_records):
        result = BalancePointRegressor().regress(heating_records, profile)
        summary = BalancePointRegressor().summarize(
            BalancePointRegressor().apply(heating_records, result, profile),
            result,
            profile,
        )
        # factor = 100000 * 0.9 / 24 = 3750 and the true slope is 2
        assert summary.whole_home_heat_loss_rate == pytest.approx(7500, rel=0.02)
        assert summary.estimated_balance_point == 58.0
        assert summary.converged is True

    def test_graph_changes(self, profile, heating_records):
        result = BalancePointRegressor().regress(heating_records, profile)
        graph = result.graph
        assert graph[0].change_in_heat_loss_rate == 0.0
        expected = graph[1].heat_loss_rate - graph[0].heat_loss_rate
        assert graph[1].change_in_heat_loss_rate == pytest.approx(expected)
        assert graph[1].percent_change_in_heat_loss_rate == pytest.approx(
            expected / graph[0].heat_loss_rate * 100
        )

    def test_deterministic(self, profile, heating_records, outlier_record):
        records = heating_records + [outlier_record]
        first = BalancePointRegressor().regress(records, profile)
        second = BalancePointRegressor().regress(records, profile)
        assert first == second

    def test_outlier_eliminated(self, profile, heating_records, outlier_record):
        records = heating_records + [outlier_record]
        regressor = BalancePointRegressor()
        result = regressor.regress(records, profile)

        assert result.outliers == frozenset({outlier_record.key})
        assert result.converged is True
        assert result.iterations == 2
        assert result.fit.balance_point == 58.0

        applied = regressor.apply(records, result, profile)
        flagged = [r for r in applied if r.eliminated_as_outlier]
        assert [r.key for r in flagged] == [outlier_record.key]
        assert flagged[0].whole_home_heat_loss_rate is None

    def test_non_convergence_warns(self, profile, heating_records, outlier_record):
        records = heating_records + [outlier_record]
        regressor = BalancePointRegressor(max_iterations=1)
        with pytest.warns(RegressionNonConvergence):
            result = regressor.regress(records, profile)
        assert result.converged is False
        assert result.iterations == 1

        summary = regressor.summarize(
            regressor.apply(records, result, profile), result, profile
        )
        assert summary.converged is False

    def test_cancellation(self, profile, heating_records):
        with pytest.raises(AnalysisCancelled):
            BalancePointRegressor().regress(
                heating_records, profile, should_cancel=lambda: True
            )

    def test_cancellation_between_iterations(self, profile, heating_records, outlier_record):
        calls = []

        def cancel_on_second() -> bool:
            calls.append(1)
            return len(calls) > 1

        with pytest.raises(AnalysisCancelled):
            BalancePointRegressor().regress(
                heating_records + [outlier_record], profile, should_cancel=cancel_on_second
            )

    def test_too_few_records(self, profile, heating_records):
        with pytest.raises(ValidationError) as exc_info:
            BalancePointRegressor().regress(heating_records[:2], profile)
        assert exc_info.value.field == "records"

    def test_excluded_records_ignored(self, profile, heating_records, outlier_record):
        excluded = outlier_record.model_copy(update={"default_inclusion": False})
        result = BalancePointRegressor().regress(heating_records + [excluded], profile)
        assert result.outliers == frozenset()
        assert result.iterations == 1

    def test_detector_threshold_used(self, profile, heating_records, outlier_record):
        regressor = BalancePointRegressor(
            outlier_detector=OutlierDetector(threshold=100.0)
        )
        result = regressor.regress(heating_records + [outlier_record], profile)
        assert result.outliers == frozenset()


class TestSummary:
    """Tests for BalancePointRegressor.summarize."""

    def test_heat_load_formulas(self, profile, heating_records):
        regressor = BalancePointRegressor()
        result = regressor.regress(heating_records, profile)
        applied = regressor.apply(heating_records, result, profile)
        summary = regressor.summarize(applied, result, profile)

        ua = summary.whole_home_heat_loss_rate
        diff = summary.average_indoor_temperature - summary.estimated_balance_point
        assert summary.difference_between_ti_and_tbp == pytest.approx(diff)
        assert summary.average_heat_load == pytest.approx(ua * (70 - diff - 1))
        assert summary.maximum_heat_load == pytest.approx(ua * (70 - 1))
        assert summary.other_fuel_usage == pytest.approx(result.fit.intercept)

    def test_per_period_rates(self, profile, heating_records):
        regressor = BalancePointRegressor()
        result = regressor.regress(heating_records, profile)
        applied = regressor.apply(heating_records, result, profile)

        # The warmest period has no degree-days at 58°F and carries no rate.
        warmest = applied[-1]
        assert warmest.mean_temperature == 59.0
        assert warmest.whole_home_heat_loss_rate is None
        rates = [r.whole_home_heat_loss_rate for r in applied[:-1]]
        assert all(r == pytest.approx(7500, rel=0.1) for r in rates)

        summary = regressor.summarize(applied, result, profile)
        assert 0 <= summary.standard_deviation_of_heat_loss_rate < 0.1
