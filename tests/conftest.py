# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Shared test fixtures for the heat-load test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, timedelta

import pytest

from heat_load.analysis.engine import HeatLoadEngine
from heat_load.data.generator import CaseGenerator
from heat_load.data.models import (
    AnalysisCase,
    AnalysisResult,
    AnalysisType,
    BillingRecord,
    FuelType,
    HomeThermalProfile,
    WeatherSeries,
)
from heat_load.data.profiles import get_profile

FIRST_PERIOD_START = date(2023, 1, 1)

# Mean outdoor temperatures of a clean heating season; all below 60°F.
HEATING_MEANS = [28.0, 32.0, 36.0, 40.0, 44.0, 47.0, 50.0, 52.0, 54.0, 56.0, 57.0, 59.0]

# Daily usage model baked into the clean records: 1 + 2 * max(0, 58 - mean)
TRUE_BALANCE_POINT = 58.0
TRUE_SLOPE = 2.0
TRUE_BASELOAD = 1.0


def _daily_usage(mean: float) -> float:
    return TRUE_BASELOAD + TRUE_SLOPE * max(0.0, TRUE_BALANCE_POINT - mean)


@pytest.fixture()
def profile() -> HomeThermalProfile:
    """Gas-heated home with a UA conversion factor of exactly 3750."""
    return HomeThermalProfile(
        living_area=2000,
        fuel_type=FuelType.GAS,
        heating_system_efficiency=0.9,
        design_temperature=1,
        thermostat_set_point=70,
    )


@pytest.fixture()
def make_record() -> Callable[..., BillingRecord]:
    """Factory for heating-season BillingRecords in consecutive 30-day slots."""

    def _make(
        index: int,
        mean_temperature: float | None,
        usage_per_day: float,
        days: int = 30,
        **overrides,
    ) -> BillingRecord:
        start = FIRST_PERIOD_START + timedelta(days=30 * index)
        fields = {
            "period_start_date": start,
            "period_end_date": start + timedelta(days=days - 1),
            "usage": usage_per_day * days,
            "analysis_type": AnalysisType.heating,
            "default_inclusion": True,
            "mean_temperature": mean_temperature,
        }
        fields.update(overrides)
        return BillingRecord(**fields)

    return _make


@pytest.fixture()
def heating_records(make_record) -> list[BillingRecord]:
    """Twelve heating periods following the true model with +/-0.05 noise."""
    records = []
    for i, mean in enumerate(HEATING_MEANS):
        noise = 0.05 if i % 2 == 0 else -0.05
        records.append(make_record(i, mean, _daily_usage(mean) + noise))
    return records


@pytest.fixture()
def outlier_record(make_record) -> BillingRecord:
    """A heating period billed at nearly twice the modelled usage."""
    return make_record(len(HEATING_MEANS), 42.0, 60.0)


@pytest.fixture()
def make_weather() -> Callable[..., WeatherSeries]:
    """Factory for daily weather at a constant temperature, with optional gaps."""

    def _make(
        start: date,
        end: date,
        temperature: float = 40.0,
        skip: set[date] | None = None,
    ) -> WeatherSeries:
        skip = skip or set()
        dates, temps = [], []
        day = start
        while day <= end:
            if day not in skip:
                dates.append(day)
                temps.append(temperature)
            day += timedelta(days=1)
        return WeatherSeries.from_pairs(dates, temps)

    return _make


@pytest.fixture()
def demo_case() -> AnalysisCase:
    """A new_england_gas case generated with seed 42."""
    return CaseGenerator(get_profile("new_england_gas"), seed=42).generate()


@pytest.fixture()
def demo_result(demo_case: AnalysisCase) -> AnalysisResult:
    """The engine's analysis of the seed-42 new_england_gas case."""
    return HeatLoadEngine().analyze(demo_case.bills, demo_case.weather, demo_case.home)
