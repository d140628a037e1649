# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Master orchestrator for the heat-load analysis pipeline.

Wires the billing processor, the balance-point regressor, the outlier
detector and the heat-load curve builder together from one
:class:`EngineSettings` instance.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from heat_load.analysis.billing import BillingRecordProcessor
from heat_load.analysis.heat_load_curve import HeatLoadCurveBuilder
from heat_load.analysis.outliers import OutlierDetector
from heat_load.analysis.regression import BalancePointRegressor
from heat_load.analysis.roundtrip import RoundTripRecalculator
from heat_load.config import EngineSettings
from heat_load.data.models import (
    AnalysisResult,
    BillingRecord,
    HomeThermalProfile,
    RawBillingPeriod,
    RecordKey,
    RecordOverride,
    WeatherSeries,
)


class HeatLoadEngine:
    """Runs the full analysis and override-driven recomputations.

    The engine keeps no state between calls; one instance may serve any
    number of independent analyses.

    Usage::

        engine = HeatLoadEngine()
        result = engine.analyze(bills, weather, profile)
        result = engine.recompute(result, overrides, profile)
    """

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()
        s = self.settings
        self.processor = BillingRecordProcessor(
            min_period_length_days=s.min_period_length_days
        )
        self.regressor = BalancePointRegressor(
            min_balance_point=s.min_balance_point,
            max_balance_point=s.max_balance_point,
            step=s.balance_point_step,
            max_iterations=s.max_iterations,
            outlier_detector=OutlierDetector(threshold=s.outlier_threshold),
        )
        self.curve_builder = HeatLoadCurveBuilder(set_point=s.comparison_set_point)
        self.recalculator = RoundTripRecalculator(self.regressor, self.curve_builder)

    def analyze(
        self,
        periods: Iterable[RawBillingPeriod],
        weather: WeatherSeries,
        profile: HomeThermalProfile,
        should_cancel: Callable[[], bool] | None = None,
    ) -> AnalysisResult:
        """Process raw bills and run the regression and curve stages.

        Args:
            periods: Raw billing periods in any order.
            weather: Daily mean temperatures covering the billing span.
            profile: The home's thermal profile.
            should_cancel: Optional callable polled between regression
                iterations; returning true aborts with
                :class:`~heat_load.errors.AnalysisCancelled`.

        Returns:
            The summary, balance-point graph, processed bills and curve.
        """
        records = self.processor.process(periods, weather, profile)
        return self.recalculator.run(records, profile, should_cancel)

    def recompute(
        self,
        previous: AnalysisResult | Iterable[BillingRecord],
        overrides: Mapping[RecordKey, RecordOverride],
        profile: HomeThermalProfile,
        should_cancel: Callable[[], bool] | None = None,
    ) -> AnalysisResult:
        """Apply auditor overrides to a prior result and recompute it."""
        if isinstance(previous, AnalysisResult):
            records = previous.processed_energy_bills
        else:
            records = list(previous)
        return self.recalculator.recompute(records, overrides, profile, should_cancel)
