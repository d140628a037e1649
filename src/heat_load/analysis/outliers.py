# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Standardized-residual outlier detection for billing periods.

A period is an outlier when its daily usage sits more than
``threshold`` residual standard deviations away from the fitted line.
Periods the auditor force-included are never flagged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from heat_load.analysis.ols import RegressionFit
from heat_load.analysis.thresholds import MIN_REGRESSION_RECORDS, OUTLIER_Z_THRESHOLD
from heat_load.data.models import BillingRecord, InclusionOverride, RecordKey

logger = logging.getLogger(__name__)


class OutlierDetector:
    """Flag billing periods whose regression residual is anomalous."""

    def __init__(
        self,
        threshold: float = OUTLIER_Z_THRESHOLD,
        min_remaining: int = MIN_REGRESSION_RECORDS,
    ) -> None:
        if threshold <= 0:
            raise ValueError(f"threshold must be positive, got {threshold}")
        self.threshold = threshold
        self.min_remaining = min_remaining

    def z_scores(
        self, records: Sequence[BillingRecord], fit: RegressionFit
    ) -> dict[RecordKey, float]:
        """Standardized residual for each record, keyed by period."""
        if fit.residual_std == 0:
            return {r.key: 0.0 for r in records}
        return {r.key: fit.residual(r) / fit.residual_std for r in records}

    def detect(
        self, records: Sequence[BillingRecord], fit: RegressionFit
    ) -> frozenset[RecordKey]:
        """Return the keys of the records to eliminate as outliers.

        *records* is the full regression candidate set, including periods
        flagged on an earlier pass so that they can be reinstated.
        Candidates are ranked by descending ``|z|`` and then by ascending
        start date; the ranking decides which ones are dropped when
        flagging all of them would leave fewer than ``min_remaining``
        periods in the regression.
        """
        scores = self.z_scores(records, fit)
        flagged = [
            r for r in records
            if r.inclusion_override is not InclusionOverride.force_include
            and abs(scores[r.key]) > self.threshold
        ]
        flagged.sort(key=lambda r: (-abs(scores[r.key]), r.period_start_date))

        budget = max(len(records) - self.min_remaining, 0)
        if len(flagged) > budget:
            logger.debug(
                "Keeping %d of %d outliers to retain %d periods",
                budget, len(flagged), self.min_remaining,
            )
            flagged = flagged[:budget]

        return frozenset(r.key for r in flagged)
