# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Override-driven recomputation of a previously processed analysis.

Auditors review the processed billing table, force periods in or out and
reclassify them, then ask for the numbers again.  Overrides are matched by
``(period_start_date, period_end_date)`` and are written onto the output
records, so feeding a recomputed result back in with the same overrides
reproduces it exactly.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from heat_load.analysis.heat_load_curve import HeatLoadCurveBuilder
from heat_load.analysis.regression import BalancePointRegressor
from heat_load.data.models import (
    AnalysisResult,
    BillingRecord,
    HomeThermalProfile,
    RecordKey,
    RecordOverride,
)

logger = logging.getLogger(__name__)


def apply_overrides(
    records: Sequence[BillingRecord],
    overrides: Mapping[RecordKey, RecordOverride],
) -> list[BillingRecord]:
    """Return copies of *records* with matching overrides applied.

    Engine-computed outlier flags and per-period UA are cleared so the
    regression starts from the same state on every call.
    """
    known = {r.key for r in records}
    for key in overrides:
        if key not in known:
            logger.warning(
                "Ignoring override for unknown period %s to %s",
                key[0].isoformat(), key[1].isoformat(),
            )

    updated = []
    for record in records:
        changes: dict = {"eliminated_as_outlier": False, "whole_home_heat_loss_rate": None}
        override = overrides.get(record.key)
        if override is not None:
            changes["inclusion_override"] = override.inclusion_override
            changes["analysis_type_override"] = override.analysis_type_override
        updated.append(record.model_copy(update=changes))
    return updated


class RoundTripRecalculator:
    """Re-run the regression and curve stages after auditor overrides.

    Usage::

        recalculator = RoundTripRecalculator()
        result = recalculator.recompute(result.processed_energy_bills, overrides, profile)
    """

    def __init__(
        self,
        regressor: BalancePointRegressor | None = None,
        curve_builder: HeatLoadCurveBuilder | None = None,
    ) -> None:
        self.regressor = regressor or BalancePointRegressor()
        self.curve_builder = curve_builder or HeatLoadCurveBuilder()

    def recompute(
        self,
        records: Sequence[BillingRecord],
        overrides: Mapping[RecordKey, RecordOverride],
        profile: HomeThermalProfile,
        should_cancel: Callable[[], bool] | None = None,
    ) -> AnalysisResult:
        """Apply *overrides* to *records* and rebuild the full result."""
        prepared = apply_overrides(records, overrides)
        return self.run(prepared, profile, should_cancel)

    def run(
        self,
        records: Sequence[BillingRecord],
        profile: HomeThermalProfile,
        should_cancel: Callable[[], bool] | None = None,
    ) -> AnalysisResult:
        """Regress *records* as they are and assemble an :class:`AnalysisResult`."""
        regression = self.regressor.regress(records, profile, should_cancel)
        processed = self.regressor.apply(records, regression, profile)
        summary = self.regressor.summarize(
            processed, regression, profile, set_point=self.curve_builder.set_point
        )
        curve = self.curve_builder.build(summary, profile)
        return AnalysisResult(
            heat_load_output=summary,
            balance_point_graph=regression.graph,
            processed_energy_bills=processed,
            heat_load_curve=curve,
        )
