# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for the heat-load curve builder."""

from __future__ import annotations

import pytest

from heat_load.analysis.heat_load_curve import HeatLoadCurveBuilder, round_half_up
from heat_load.analysis.roundtrip import RoundTripRecalculator
from heat_load.data.models import HeatLoadSummary, HomeThermalProfile


@pytest.fixture()
def summary() -> HeatLoadSummary:
    return HeatLoadSummary(
        estimated_balance_point=60.0,
        other_fuel_usage=1.2,
        average_indoor_temperature=67.0,
        difference_between_ti_and_tbp=7.0,
        design_temperature=1.0,
        whole_home_heat_loss_rate=48000.0,
        standard_deviation_of_heat_loss_rate=0.05,
        average_heat_load=48000.0 * 62,
        maximum_heat_load=48000.0 * 69,
    )


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value, expected",
        [(2.5, 3.0), (2.4, 2.0), (-2.5, -3.0), (0.0, 0.0), (1234.5, 1235.0)],
    )
    def test_rounding(self, value: float, expected: float):
        assert round_half_up(value) == expected


class TestHeatLoadCurveBuilder:
    """Tests for HeatLoadCurveBuilder.build."""

    def test_six_points_in_order(self, summary):
        points = HeatLoadCurveBuilder().build(summary)
        assert [p.temperature for p in points] == [-9, 1, 70, -9, 1, 70]
        assert all(p.avg_line is not None for p in points[:3])
        assert all(p.max_line is None for p in points[:3])
        assert all(p.max_line is not None for p in points[3:])
        assert all(p.avg_line is None for p in points[3:])

    def test_average_line(self, summary):
        points = HeatLoadCurveBuilder().build(summary)
        start, design, end = points[:3]

        assert start.avg_line == pytest.approx(48000 * 76)
        assert start.avg_point is None
        assert design.avg_line == pytest.approx(48000 * 66)
        assert design.avg_point == 3_168_000
        assert end.avg_line == pytest.approx(48000 * -3)
        assert end.avg_point is None

    def test_max_line_without_profile(self, summary):
        points = HeatLoadCurveBuilder().build(summary)
        start, design, end = points[3:]

        assert start.max_line == pytest.approx(48000 * 79)
        assert design.max_line == pytest.approx(48000 * 69)
        assert design.max_point == 3_312_000
        assert end.max_line == pytest.approx(0.0)

    def test_max_line_with_setback(self, summary):
        home = HomeThermalProfile(
            living_area=2000,
            heating_system_efficiency=0.9,
            design_temperature=1,
            thermostat_set_point=68,
            setback_temperature=62,
            setback_hours_per_day=8,
        )
        points = HeatLoadCurveBuilder().build(summary, home)
        design_indoor = (70 * 16 + 62 * 8) / 24
        assert points[4].max_line == pytest.approx(48000 * (design_indoor - 1))
        assert points[4].max_point == round_half_up(48000 * (design_indoor - 1))

    def test_point_rounding(self, summary):
        odd = summary.model_copy(update={"whole_home_heat_loss_rate": 100.25})
        points = HeatLoadCurveBuilder().build(odd)
        # 100.25 * 66 = 6616.5 rounds away from zero
        assert points[1].avg_point == 6617.0

    def test_custom_set_point(self, summary):
        points = HeatLoadCurveBuilder(set_point=72).build(summary)
        assert points[2].temperature == 72
        assert points[4].max_line == pytest.approx(48000 * 71)


class TestCurveMatchesSummary:
    """The marked design points must agree with the summary's heat loads."""

    def test_max_point_matches_summary_with_setback(self, demo_case, demo_result):
        assert demo_case.home.setback_temperature is not None
        summary = demo_result.heat_load_output
        curve = demo_result.heat_load_curve
        assert curve[4].max_point == round_half_up(summary.maximum_heat_load)

    def test_max_point_matches_summary_custom_set_point(self, heating_records):
        home = HomeThermalProfile(
            living_area=2000,
            heating_system_efficiency=0.9,
            design_temperature=1,
            thermostat_set_point=68,
            setback_temperature=60,
            setback_hours_per_day=10,
        )
        recalculator = RoundTripRecalculator(curve_builder=HeatLoadCurveBuilder(set_point=72))
        result = recalculator.run(heating_records, home)

        summary = result.heat_load_output
        design_indoor = home.design_indoor_temperature(72)
        assert summary.maximum_heat_load == pytest.approx(
            summary.whole_home_heat_loss_rate * (design_indoor - 1)
        )
        assert result.heat_load_curve[4].max_point == round_half_up(summary.maximum_heat_load)
