# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Synthetic analysis case generator.

Given a :class:`CaseProfile` and an optional random seed, this module
generates a complete :class:`AnalysisCase`: a daily weather series from a
seasonal temperature model and a run of contiguous monthly bills whose
usage follows the same degree-day model the engine fits.

All randomness flows through a seeded :class:`numpy.random.Generator`
so that identical seeds always produce identical cases.
"""

from __future__ import annotations

import math
from datetime import date, timedelta

import numpy as np

from heat_load.data.models import (
    AnalysisCase,
    RawBillingPeriod,
    WeatherObservation,
    WeatherSeries,
)
from heat_load.data.profiles import CaseProfile

# Day of year with the coldest mean temperature in the northern hemisphere.
_COLDEST_DAY_OF_YEAR = 20


class CaseGenerator:
    """Generate a fully-populated :class:`AnalysisCase` from a preset.

    Parameters
    ----------
    profile:
        The preset that governs climate, home data and building physics.
    seed:
        Optional RNG seed for reproducibility.
    start:
        First day of the first billing period.
    months:
        Number of billing periods to generate.
    """

    def __init__(
        self,
        profile: CaseProfile,
        seed: int | None = None,
        start: date = date(2022, 10, 3),
        months: int = 24,
    ) -> None:
        if months < 1:
            raise ValueError(f"months must be at least 1, got {months}")
        self.profile = profile
        self.seed = seed
        self.start = start
        self.months = months
        self.rng = np.random.default_rng(seed)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self) -> AnalysisCase:
        """Generate the billing periods and the weather that covers them."""
        spans = self._billing_spans()
        weather = self._generate_weather(spans[0][0], spans[-1][1])
        bills = self._generate_bills(spans, weather)
        return AnalysisCase(
            name=self.profile.name,
            home=self.profile.home,
            bills=bills,
            weather=weather,
        )

    # ------------------------------------------------------------------
    # Billing calendar
    # ------------------------------------------------------------------

    def _billing_spans(self) -> list[tuple[date, date]]:
        """Contiguous 28-33 day billing periods starting at ``start``."""
        spans = []
        period_start = self.start
        for _ in range(self.months):
            length = int(self.rng.integers(28, 34))
            period_end = period_start + timedelta(days=length - 1)
            spans.append((period_start, period_end))
            period_start = period_end + timedelta(days=1)
        return spans

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------

    def _seasonal_mean(self, day: date) -> float:
        p = self.profile
        phase = 2 * math.pi * (day.timetuple().tm_yday - _COLDEST_DAY_OF_YEAR) / 365.25
        return p.mean_annual_temperature - p.seasonal_amplitude * math.cos(phase)

    def _generate_weather(self, first: date, last: date) -> WeatherSeries:
        days = (last - first).days + 1
        noise = self.rng.normal(0.0, self.profile.daily_noise, size=days)
        observations = []
        for offset in range(days):
            day = first + timedelta(days=offset)
            observations.append(
                WeatherObservation(
                    date=day,
                    mean_temperature=round(self._seasonal_mean(day) + float(noise[offset]), 1),
                )
            )
        return WeatherSeries(observations=observations)

    # ------------------------------------------------------------------
    # Bills
    # ------------------------------------------------------------------

    def _generate_bills(
        self, spans: list[tuple[date, date]], weather: WeatherSeries
    ) -> list[RawBillingPeriod]:
        p = self.profile
        home = p.home
        factor = home.fuel_type.heat_content_btu * home.heating_system_efficiency / 24
        slope = p.true_heat_loss_rate / factor
        lookup = weather.temperature_by_date()

        bills = []
        for first, last in spans:
            days = (last - first).days + 1
            mean = weather.mean_temperature_between(first, last, lookup)
            hdd = max(0.0, p.true_balance_point - mean) * days
            expected = p.baseload_per_day * days + slope * hdd
            noisy = expected * (1 + float(self.rng.normal(0.0, p.usage_noise)))
            bills.append(
                RawBillingPeriod(
                    start_date=first,
                    end_date=last,
                    usage=max(0.0, round(noisy)),
                    unit=home.fuel_type.unit,
                )
            )
        return bills
