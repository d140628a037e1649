# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Balance-point regression with iterative outlier elimination.

For every candidate balance point the daily usage of the included billing
periods is regressed against their daily heating degree-days.  The
candidate whose fit leaves the smallest residual standard deviation is the
estimated balance point and its slope, converted to BTU/h-°F, is the
whole-home heat-loss rate (UA).

The scan runs inside a bounded fixed-point loop with the
:class:`OutlierDetector`: regress, detect outliers, and re-regress until
the outlier set stops changing or the iteration cap is reached.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Callable, Sequence

import numpy as np
from pydantic import BaseModel

from heat_load.analysis.ols import RegressionFit, fit_balance_point
from heat_load.analysis.outliers import OutlierDetector
from heat_load.analysis.thresholds import (
    BALANCE_POINT_STEP,
    COMPARISON_SET_POINT,
    HOURS_PER_DAY,
    MAX_BALANCE_POINT,
    MAX_OUTLIER_ITERATIONS,
    MIN_BALANCE_POINT,
    MIN_REGRESSION_RECORDS,
)
from heat_load.data.models import (
    BalancePointGraphRecord,
    BillingRecord,
    HeatLoadSummary,
    HomeThermalProfile,
    RecordKey,
)
from heat_load.errors import AnalysisCancelled, RegressionNonConvergence, ValidationError

logger = logging.getLogger(__name__)


class RegressionResult(BaseModel):
    """Outcome of the regress / detect-outliers loop."""

    model_config = {"frozen": True}

    fit: RegressionFit
    graph: list[BalancePointGraphRecord]
    outliers: frozenset[RecordKey]
    converged: bool
    iterations: int


def ua_conversion_factor(profile: HomeThermalProfile) -> float:
    """BTU/h-°F of heat loss per unit of fuel per °F-day."""
    return (
        profile.fuel_type.heat_content_btu
        * profile.heating_system_efficiency
        / HOURS_PER_DAY
    )


class BalancePointRegressor:
    """Scan candidate balance points and select the best-fitting one.

    Usage::

        regressor = BalancePointRegressor()
        result = regressor.regress(records, profile)
        records = regressor.apply(records, result, profile)
        summary = regressor.summarize(records, result, profile)
    """

    def __init__(
        self,
        min_balance_point: float = MIN_BALANCE_POINT,
        max_balance_point: float = MAX_BALANCE_POINT,
        step: float = BALANCE_POINT_STEP,
        max_iterations: int = MAX_OUTLIER_ITERATIONS,
        outlier_detector: OutlierDetector | None = None,
    ) -> None:
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        if max_balance_point < min_balance_point:
            raise ValueError(
                f"max_balance_point {max_balance_point} is below "
                f"min_balance_point {min_balance_point}"
            )
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
        self.min_balance_point = min_balance_point
        self.max_balance_point = max_balance_point
        self.step = step
        self.max_iterations = max_iterations
        self.outlier_detector = outlier_detector or OutlierDetector()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def candidates(self) -> list[float]:
        """Candidate balance points in ascending order, both ends included."""
        count = int(round((self.max_balance_point - self.min_balance_point) / self.step))
        return [self.min_balance_point + i * self.step for i in range(count + 1)]

    def scan(
        self, records: Sequence[BillingRecord], factor: float
    ) -> tuple[RegressionFit, list[BalancePointGraphRecord]]:
        """Fit every candidate and return the best fit plus the graph.

        The best fit is the one with the smallest residual standard
        deviation; ties go to the lowest balance point.
        """
        fits = [fit_balance_point(records, bp) for bp in self.candidates]

        graph: list[BalancePointGraphRecord] = []
        previous: float | None = None
        for fit in fits:
            rate = fit.slope * factor
            change = 0.0 if previous is None else rate - previous
            percent = 0.0 if not previous else change / previous * 100
            graph.append(
                BalancePointGraphRecord(
                    balance_point=fit.balance_point,
                    heat_loss_rate=rate,
                    change_in_heat_loss_rate=change,
                    percent_change_in_heat_loss_rate=percent,
                    standard_deviation=fit.residual_std,
                    intercept=fit.intercept,
                )
            )
            previous = rate

        # min() keeps the first of equal keys, i.e. the lowest balance point
        best = min(fits, key=lambda f: f.residual_std)
        return best, graph

    def regress(
        self,
        records: Sequence[BillingRecord],
        profile: HomeThermalProfile,
        should_cancel: Callable[[], bool] | None = None,
    ) -> RegressionResult:
        """Run the regress / detect-outliers loop over *records*.

        Raises :class:`ValidationError` when fewer than three periods are
        eligible for the regression and :class:`AnalysisCancelled` when
        *should_cancel* returns true at an iteration boundary.
        """
        candidates = [r for r in records if r.is_regression_candidate]
        if len(candidates) < MIN_REGRESSION_RECORDS:
            raise ValidationError(
                "records",
                f"at least {MIN_REGRESSION_RECORDS} included heating periods "
                f"are required, got {len(candidates)}",
            )

        factor = ua_conversion_factor(profile)
        outliers: frozenset[RecordKey] = frozenset()
        converged = False
        iteration = 0

        while iteration < self.max_iterations:
            if should_cancel is not None and should_cancel():
                raise AnalysisCancelled(
                    f"regression cancelled before iteration {iteration + 1}"
                )
            iteration += 1

            active = [r for r in candidates if r.key not in outliers]
            best, graph = self.scan(active, factor)
            detected = self.outlier_detector.detect(candidates, best)
            logger.debug(
                "Iteration %d: balance point %.1f, %d outlier(s)",
                iteration, best.balance_point, len(detected),
            )
            if detected == outliers:
                converged = True
                break
            if iteration == self.max_iterations:
                break
            outliers = detected

        if not converged:
            message = (
                f"outlier set did not stabilize within {self.max_iterations} "
                f"iterations; using the last estimate"
            )
            logger.warning(message)
            warnings.warn(message, RegressionNonConvergence, stacklevel=2)

        return RegressionResult(
            fit=best,
            graph=graph,
            outliers=outliers,
            converged=converged,
            iterations=iteration,
        )

    def apply(
        self,
        records: Sequence[BillingRecord],
        result: RegressionResult,
        profile: HomeThermalProfile,
    ) -> list[BillingRecord]:
        """Attach outlier flags and per-period UA to fresh record copies."""
        factor = ua_conversion_factor(profile)
        fit = result.fit
        updated = []
        for record in records:
            eliminated = record.is_regression_candidate and record.key in result.outliers
            record = record.model_copy(
                update={"eliminated_as_outlier": eliminated, "whole_home_heat_loss_rate": None}
            )
            hdd = record.heating_degree_days(fit.balance_point)
            if record.is_included and hdd > 0:
                heating_usage = record.usage - fit.intercept * record.period_length_days
                record = record.model_copy(
                    update={"whole_home_heat_loss_rate": heating_usage * factor / hdd}
                )
            updated.append(record)
        return updated

    def summarize(
        self,
        records: Sequence[BillingRecord],
        result: RegressionResult,
        profile: HomeThermalProfile,
        set_point: float = COMPARISON_SET_POINT,
    ) -> HeatLoadSummary:
        """Build the :class:`HeatLoadSummary` for a finished regression.

        *records* must already carry per-period UA (see :meth:`apply`).
        """
        fit = result.fit
        ua = fit.slope * ua_conversion_factor(profile)
        indoor = profile.average_indoor_temperature
        design = profile.effective_design_temperature
        design_indoor = profile.design_indoor_temperature(set_point)
        difference = indoor - fit.balance_point

        rates = [
            r.whole_home_heat_loss_rate for r in records
            if r.whole_home_heat_loss_rate is not None
        ]
        if rates and ua != 0:
            spread = float(np.std(np.array(rates, dtype=float))) / abs(ua)
        else:
            spread = 0.0

        return HeatLoadSummary(
            estimated_balance_point=fit.balance_point,
            other_fuel_usage=fit.intercept,
            average_indoor_temperature=indoor,
            difference_between_ti_and_tbp=difference,
            design_temperature=design,
            whole_home_heat_loss_rate=ua,
            standard_deviation_of_heat_loss_rate=spread,
            average_heat_load=ua * (set_point - difference - design),
            maximum_heat_load=ua * (design_indoor - design),
            converged=result.converged,
            iterations=result.iterations,
        )
