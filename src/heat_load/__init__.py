# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Heat Load - balance-point heat-loss analysis from utility bills."""

__version__ = "0.1.0"

from heat_load.data.models import (
    AnalysisResult,
    BalancePointGraphRecord,
    BillingRecord,
    HeatLoadGraphPoint,
    HeatLoadSummary,
    HomeThermalProfile,
    InclusionOverride,
    RawBillingPeriod,
    RecordOverride,
    WeatherSeries,
)
from heat_load.analysis.engine import HeatLoadEngine
from heat_load.config import EngineSettings, load_settings
from heat_load.errors import (
    AnalysisCancelled,
    DataGapError,
    HeatLoadError,
    RegressionNonConvergence,
    ValidationError,
)

__all__ = [
    "AnalysisCancelled",
    "AnalysisResult",
    "BalancePointGraphRecord",
    "BillingRecord",
    "DataGapError",
    "EngineSettings",
    "HeatLoadEngine",
    "HeatLoadError",
    "HeatLoadGraphPoint",
    "HeatLoadSummary",
    "HomeThermalProfile",
    "InclusionOverride",
    "RawBillingPeriod",
    "RecordOverride",
    "RegressionNonConvergence",
    "ValidationError",
    "WeatherSeries",
    "load_settings",
]
