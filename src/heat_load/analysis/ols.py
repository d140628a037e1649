# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Ordinary least squares on daily usage versus daily degree-day rates."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
from pydantic import BaseModel, Field

from heat_load.data.models import BillingRecord


class RegressionFit(BaseModel):
    """A single-candidate fit of daily usage against daily degree-days."""

    model_config = {"frozen": True}

    balance_point: float
    slope: float = Field(..., description="Usage per °F-day (heat-loss rate)")
    intercept: float = Field(..., description="Baseload usage per day")
    residual_std: float = Field(..., ge=0, description="Residual standard deviation")
    sample_size: int = Field(..., ge=0)

    def predict(self, degree_day_rate: float) -> float:
        return self.intercept + self.slope * degree_day_rate

    def residual(self, record: BillingRecord) -> float:
        """Observed minus fitted daily usage for *record*."""
        days = record.period_length_days
        x = record.heating_degree_days(self.balance_point) / days
        return record.daily_usage - self.predict(x)


def fit_balance_point(
    records: Sequence[BillingRecord], balance_point: float
) -> RegressionFit:
    """Fit ``usage/day = intercept + slope * hdd/day`` at *balance_point*.

    The residual standard deviation uses ``n - 2`` degrees of freedom.
    When every period has the same degree-day rate the slope is not
    identifiable; the fit then degrades to a flat line through the mean,
    whose residual spread is never smaller than a proper fit's.
    """
    n = len(records)
    if n < 3:
        raise ValueError(f"need at least 3 records to fit, got {n}")

    days = np.array([r.period_length_days for r in records], dtype=float)
    y = np.array([r.usage for r in records], dtype=float) / days
    x = np.array(
        [r.heating_degree_days(balance_point) for r in records], dtype=float
    ) / days

    x_mean = float(np.mean(x))
    y_mean = float(np.mean(y))
    dx = x - x_mean
    sxx = float(np.dot(dx, dx))

    if sxx == 0.0:
        slope = 0.0
        intercept = y_mean
    else:
        slope = float(np.dot(dx, y - y_mean)) / sxx
        intercept = y_mean - slope * x_mean

    residuals = y - (intercept + slope * x)
    rss = float(np.dot(residuals, residuals))

    return RegressionFit(
        balance_point=balance_point,
        slope=slope,
        intercept=intercept,
        residual_std=math.sqrt(rss / (n - 2)),
        sample_size=n,
    )
