# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Core Pydantic v2 data models for the heat-load analytics engine.

This module defines the complete data contract shared by the billing
processor, the balance-point regression, the heat-load curve builder, the
round-trip recalculator, the serialization boundary and the CLI.

Engine records are frozen: every analysis produces fresh instances and
derived values are attached with ``model_copy(update=...)``.
"""

from __future__ import annotations

import datetime as dt
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field, model_validator

from heat_load.errors import DataGapError, ValidationError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class AnalysisType(str, Enum):
    """How a billing period participates in the analysis."""

    heating = "heating"
    cooling = "cooling"
    base_load = "base_load"


class InclusionOverride(str, Enum):
    """Auditor decision that trumps the engine's inclusion logic.

    An unset override is represented by ``None``.
    """

    force_include = "force_include"
    force_exclude = "force_exclude"


class ExclusionReason(str, Enum):
    """Reason code attached to a record that is excluded by default."""

    short_period = "short_period"
    data_gap = "data_gap"
    not_heating_season = "not_heating_season"


class FuelType(str, Enum):
    """Heating fuel billed by the utility."""

    GAS = "GAS"
    OIL = "OIL"
    PROPANE = "PROPANE"

    @property
    def heat_content_btu(self) -> float:
        """Heat content in BTU per billed unit (therm or gallon)."""
        return _HEAT_CONTENT_BTU[self]

    @property
    def unit(self) -> str:
        """Billing unit for this fuel."""
        if self is FuelType.GAS:
            return "therms"
        return "gallons"


_HEAT_CONTENT_BTU: dict[FuelType, float] = {
    FuelType.GAS: 100_000.0,
    FuelType.OIL: 139_600.0,
    FuelType.PROPANE: 91_333.0,
}

_FROZEN = {"frozen": True}

RecordKey = tuple[date, date]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class RawBillingPeriod(BaseModel):
    """A billing period as supplied by an upstream bill parser.

    Values are intentionally unconstrained here; the billing processor
    rejects malformed periods with a field-level :class:`ValidationError`.
    """

    model_config = _FROZEN

    start_date: date = Field(..., description="First day of the billing period")
    end_date: date = Field(..., description="Last day of the billing period")
    usage: float = Field(..., description="Fuel billed over the period")
    unit: str = Field(default="therms", description="Billing unit")


class WeatherObservation(BaseModel):
    """Mean outdoor temperature for one calendar day."""

    model_config = _FROZEN

    date: dt.date
    mean_temperature: float = Field(..., description="Daily mean temperature in °F")


class WeatherSeries(BaseModel):
    """Daily mean temperatures in strictly ascending date order."""

    model_config = _FROZEN

    observations: list[WeatherObservation] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_order(self) -> WeatherSeries:
        for prev, cur in zip(self.observations, self.observations[1:]):
            if cur.date <= prev.date:
                raise ValidationError(
                    "weather",
                    f"dates must be strictly ascending ({prev.date.isoformat()} "
                    f"followed by {cur.date.isoformat()})",
                )
        return self

    @classmethod
    def from_pairs(
        cls, dates: list[date | str], temperatures: list[float]
    ) -> WeatherSeries:
        """Build a series from parallel ``dates`` / ``temperatures`` lists."""
        if len(dates) != len(temperatures):
            raise ValidationError(
                "weather",
                f"{len(dates)} dates but {len(temperatures)} temperatures",
            )
        return cls(
            observations=[
                {"date": d, "mean_temperature": t}
                for d, t in zip(dates, temperatures)
            ]
        )

    @property
    def start_date(self) -> date | None:
        return self.observations[0].date if self.observations else None

    @property
    def end_date(self) -> date | None:
        return self.observations[-1].date if self.observations else None

    def temperature_by_date(self) -> dict[date, float]:
        """Return a date -> mean temperature lookup table."""
        return {o.date: o.mean_temperature for o in self.observations}

    def mean_temperature_between(
        self,
        start: date,
        end: date,
        lookup: dict[date, float] | None = None,
    ) -> float:
        """Average the daily means over the closed interval ``[start, end]``.

        Raises :class:`DataGapError` when any day in the interval is absent.
        """
        lookup = lookup if lookup is not None else self.temperature_by_date()
        days = (end - start).days + 1
        temps: list[float] = []
        missing = 0
        for offset in range(days):
            value = lookup.get(start + timedelta(days=offset))
            if value is None:
                missing += 1
            else:
                temps.append(value)
        if missing:
            raise DataGapError(start, end, missing)
        return sum(temps) / len(temps)


class HomeThermalProfile(BaseModel):
    """Thermal characteristics of the home entered by the auditor."""

    model_config = _FROZEN

    living_area: float = Field(..., gt=0, description="Conditioned floor area in sq ft")
    fuel_type: FuelType = Field(default=FuelType.GAS, description="Heating fuel")
    heating_system_efficiency: float = Field(
        ..., gt=0, le=1.0,
        description="Seasonal heating system efficiency (0.0-1.0)",
    )
    design_temperature: float = Field(
        ..., description="99% design outdoor temperature for the location in °F"
    )
    design_temperature_override: Optional[float] = Field(
        default=None, description="Auditor-supplied design temperature in °F"
    )
    thermostat_set_point: float = Field(..., description="Occupied set point in °F")
    setback_temperature: Optional[float] = Field(
        default=None, description="Setback set point in °F, if any"
    )
    setback_hours_per_day: float = Field(
        default=0.0, ge=0, le=24,
        description="Hours per day spent at the setback temperature",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_design_temperature(self) -> float:
        """Design temperature, honoring the auditor override when present."""
        if self.design_temperature_override is not None:
            return self.design_temperature_override
        return self.design_temperature

    @computed_field  # type: ignore[prop-decorator]
    @property
    def average_indoor_temperature(self) -> float:
        """Time-weighted blend of the set point and the setback temperature."""
        return self._blend(self.thermostat_set_point)

    def design_indoor_temperature(self, set_point: float) -> float:
        """Indoor temperature on the design day for a given set point.

        The setback schedule still applies on the design day, so the
        setback hours are blended in the same way as for the average.
        """
        return self._blend(set_point)

    def _blend(self, set_point: float) -> float:
        if self.setback_temperature is None or self.setback_hours_per_day == 0:
            return set_point
        hours = self.setback_hours_per_day
        return (
            set_point * (24 - hours) + self.setback_temperature * hours
        ) / 24


# ---------------------------------------------------------------------------
# Engine records
# ---------------------------------------------------------------------------

class BillingRecord(BaseModel):
    """A validated billing period with engine-computed classification."""

    model_config = _FROZEN

    period_start_date: date = Field(..., description="First day of the period")
    period_end_date: date = Field(..., description="Last day of the period")
    usage: float = Field(..., description="Fuel billed over the period")
    analysis_type: AnalysisType = Field(
        ..., description="Engine classification of the period"
    )
    analysis_type_override: Optional[AnalysisType] = Field(
        default=None, description="Auditor classification; wins when set"
    )
    inclusion_override: Optional[InclusionOverride] = Field(
        default=None, description="Auditor inclusion decision; wins when set"
    )
    default_inclusion: bool = Field(
        default=False, description="Engine's inclusion decision before overrides"
    )
    eliminated_as_outlier: bool = Field(
        default=False, description="Excluded by the outlier detector"
    )
    whole_home_heat_loss_rate: Optional[float] = Field(
        default=None, description="Per-period UA in BTU/h-°F once regressed"
    )
    mean_temperature: Optional[float] = Field(
        default=None, description="Mean outdoor temperature over the period in °F"
    )
    exclusion_reason: Optional[ExclusionReason] = Field(
        default=None, description="Why the engine excluded this period by default"
    )

    @model_validator(mode="after")
    def _check_period(self) -> BillingRecord:
        if self.period_end_date <= self.period_start_date:
            raise ValidationError(
                "period_end_date",
                f"must be after period_start_date "
                f"({self.period_start_date.isoformat()})",
            )
        if self.usage < 0:
            raise ValidationError("usage", f"must be non-negative, got {self.usage}")
        return self

    @property
    def key(self) -> RecordKey:
        """Identity of the period, used to match auditor overrides."""
        return (self.period_start_date, self.period_end_date)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def period_length_days(self) -> int:
        """Number of calendar days in the closed billing interval."""
        return (self.period_end_date - self.period_start_date).days + 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_analysis_type(self) -> AnalysisType:
        """Classification after applying the auditor override."""
        return self.analysis_type_override or self.analysis_type

    @property
    def is_regression_candidate(self) -> bool:
        """Whether the period enters the regression before outlier checks."""
        if self.mean_temperature is None:
            return False
        if self.inclusion_override is InclusionOverride.force_include:
            return True
        if self.inclusion_override is InclusionOverride.force_exclude:
            return False
        if self.analysis_type_override is not None:
            return (
                self.analysis_type_override is AnalysisType.heating
                and self.exclusion_reason
                in (None, ExclusionReason.not_heating_season)
            )
        return self.default_inclusion

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_included(self) -> bool:
        """Final inclusion: overrides beat both defaults and outlier flags."""
        if not self.is_regression_candidate:
            return False
        if self.inclusion_override is InclusionOverride.force_include:
            return True
        return not self.eliminated_as_outlier

    @property
    def daily_usage(self) -> float:
        return self.usage / self.period_length_days

    def heating_degree_days(self, balance_point: float) -> float:
        """Degree-days below *balance_point* accumulated over the period."""
        if self.mean_temperature is None:
            return 0.0
        return max(0.0, balance_point - self.mean_temperature) * self.period_length_days


class RecordOverride(BaseModel):
    """Auditor overrides for one billing period."""

    model_config = _FROZEN

    inclusion_override: Optional[InclusionOverride] = None
    analysis_type_override: Optional[AnalysisType] = None


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------

class BalancePointGraphRecord(BaseModel):
    """Regression outcome for one candidate balance point."""

    model_config = _FROZEN

    balance_point: float = Field(..., description="Candidate balance point in °F")
    heat_loss_rate: float = Field(
        ..., description="Whole-home UA at this candidate in BTU/h-°F"
    )
    change_in_heat_loss_rate: float = Field(
        default=0.0, description="Change relative to the previous candidate"
    )
    percent_change_in_heat_loss_rate: float = Field(
        default=0.0, description="Percent change relative to the previous candidate"
    )
    standard_deviation: float = Field(
        ..., ge=0, description="Residual standard deviation of the fit"
    )
    intercept: float = Field(
        default=0.0, description="Baseload usage per day of this candidate's fit"
    )


class HeatLoadSummary(BaseModel):
    """Headline heat-load figures for the home."""

    model_config = _FROZEN

    estimated_balance_point: float = Field(..., description="Balance point in °F")
    other_fuel_usage: float = Field(
        ..., description="Non-heating (baseload) usage per day"
    )
    average_indoor_temperature: float = Field(..., description="Ti in °F")
    difference_between_ti_and_tbp: float = Field(
        ..., description="Ti minus the balance point in °F"
    )
    design_temperature: float = Field(..., description="Design temperature in °F")
    whole_home_heat_loss_rate: float = Field(..., description="UA in BTU/h-°F")
    standard_deviation_of_heat_loss_rate: float = Field(
        ..., ge=0,
        description="Spread of per-period UA relative to the whole-home UA",
    )
    average_heat_load: float = Field(
        ..., description="Heat load at the design temperature in BTU/h"
    )
    maximum_heat_load: float = Field(
        ..., description="Heat load at the design temperature without gains in BTU/h"
    )
    converged: bool = Field(
        default=True, description="False when the outlier loop hit its cap"
    )
    iterations: int = Field(
        default=1, ge=1, description="Regression passes run by the outlier loop"
    )


class HeatLoadGraphPoint(BaseModel):
    """One point of the heat-load chart handed to a charting collaborator."""

    model_config = _FROZEN

    temperature: float = Field(..., description="Outdoor temperature in °F")
    avg_line: Optional[float] = None
    avg_point: Optional[float] = None
    max_line: Optional[float] = None
    max_point: Optional[float] = None


class AnalysisResult(BaseModel):
    """Complete output of one analysis or round-trip recomputation."""

    model_config = _FROZEN

    heat_load_output: HeatLoadSummary
    balance_point_graph: list[BalancePointGraphRecord] = Field(default_factory=list)
    processed_energy_bills: list[BillingRecord] = Field(default_factory=list)
    heat_load_curve: list[HeatLoadGraphPoint] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def included_bill_count(self) -> int:
        """Number of billing periods that fed the final regression."""
        return sum(1 for b in self.processed_energy_bills if b.is_included)


class AnalysisCase(BaseModel):
    """Everything the engine needs for one home: profile, bills and weather."""

    model_config = _FROZEN

    name: str = Field(default="", description="Case label shown in reports")
    home: HomeThermalProfile
    bills: list[RawBillingPeriod] = Field(default_factory=list)
    weather: WeatherSeries = Field(default_factory=WeatherSeries)
