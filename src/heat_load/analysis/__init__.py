# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Billing processing, balance-point regression, and heat-load curves."""

from heat_load.analysis.billing import BillingRecordProcessor, classify_period
from heat_load.analysis.outliers import OutlierDetector
from heat_load.analysis.regression import BalancePointRegressor, RegressionResult
from heat_load.analysis.heat_load_curve import HeatLoadCurveBuilder
from heat_load.analysis.roundtrip import RoundTripRecalculator, apply_overrides
from heat_load.analysis.engine import HeatLoadEngine

__all__ = [
    "BalancePointRegressor",
    "BillingRecordProcessor",
    "HeatLoadCurveBuilder",
    "HeatLoadEngine",
    "OutlierDetector",
    "RegressionResult",
    "RoundTripRecalculator",
    "apply_overrides",
    "classify_period",
]
