# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Data models, tagged codec, case presets, and synthetic case generator."""

from heat_load.data.models import (
    AnalysisCase,
    AnalysisResult,
    AnalysisType,
    BalancePointGraphRecord,
    BillingRecord,
    ExclusionReason,
    FuelType,
    HeatLoadGraphPoint,
    HeatLoadSummary,
    HomeThermalProfile,
    InclusionOverride,
    RawBillingPeriod,
    RecordOverride,
    WeatherObservation,
    WeatherSeries,
)
from heat_load.data.codec import decode, encode
from heat_load.data.profiles import CaseProfile, PROFILES, get_profile
from heat_load.data.generator import CaseGenerator

__all__ = [
    "AnalysisCase",
    "AnalysisResult",
    "AnalysisType",
    "BalancePointGraphRecord",
    "BillingRecord",
    "CaseGenerator",
    "CaseProfile",
    "ExclusionReason",
    "FuelType",
    "HeatLoadGraphPoint",
    "HeatLoadSummary",
    "HomeThermalProfile",
    "InclusionOverride",
    "PROFILES",
    "RawBillingPeriod",
    "RecordOverride",
    "WeatherObservation",
    "WeatherSeries",
    "decode",
    "encode",
    "get_profile",
]
