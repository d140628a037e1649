# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Billing period validation, weather matching and classification.

Turns raw billing periods into :class:`BillingRecord` instances carrying
the mean outdoor temperature of each period, an analysis type and the
engine's default inclusion decision.  Degree-days are left to the
regressor because they depend on the candidate balance point.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from heat_load.analysis.thresholds import (
    COOLING_MIN_MEAN_TEMPERATURE,
    HEATING_MAX_MEAN_TEMPERATURE,
    MIN_PERIOD_LENGTH_DAYS,
)
from heat_load.data.models import (
    AnalysisType,
    BillingRecord,
    ExclusionReason,
    HomeThermalProfile,
    RawBillingPeriod,
    WeatherSeries,
)
from heat_load.errors import DataGapError, ValidationError

logger = logging.getLogger(__name__)


def classify_period(mean_temperature: float) -> AnalysisType:
    """Classify a period by its mean outdoor temperature.

    - below 60°F -- heating
    - above 70°F -- cooling
    - otherwise -- base load
    """
    if mean_temperature < HEATING_MAX_MEAN_TEMPERATURE:
        return AnalysisType.heating
    if mean_temperature > COOLING_MIN_MEAN_TEMPERATURE:
        return AnalysisType.cooling
    return AnalysisType.base_load


def validate_period(period: RawBillingPeriod, index: int) -> None:
    """Raise :class:`ValidationError` for a malformed billing period."""
    if period.end_date <= period.start_date:
        raise ValidationError(
            f"bills[{index}].end_date",
            f"{period.end_date.isoformat()} is not after start_date "
            f"{period.start_date.isoformat()}",
        )
    if period.usage < 0:
        raise ValidationError(
            f"bills[{index}].usage",
            f"must be non-negative, got {period.usage}",
        )


class BillingRecordProcessor:
    """Validate and normalize raw billing periods against a weather series.

    Usage::

        processor = BillingRecordProcessor()
        records = processor.process(periods, weather, profile)
    """

    def __init__(self, min_period_length_days: int = MIN_PERIOD_LENGTH_DAYS) -> None:
        self.min_period_length_days = min_period_length_days

    def process(
        self,
        periods: Iterable[RawBillingPeriod],
        weather: WeatherSeries,
        profile: HomeThermalProfile,
    ) -> list[BillingRecord]:
        """Return one :class:`BillingRecord` per period, sorted by date.

        Every period is validated before any record is built, so a
        :class:`ValidationError` never leaves partial output behind.  A
        period without full weather coverage is kept but excluded with
        the ``data_gap`` reason code.
        """
        periods = list(periods)
        for index, period in enumerate(periods):
            validate_period(period, index)

        expected_unit = profile.fuel_type.unit
        lookup = weather.temperature_by_date()
        records = []
        for period in periods:
            if period.unit != expected_unit:
                logger.debug(
                    "Bill %s billed in %s, profile fuel uses %s",
                    period.start_date, period.unit, expected_unit,
                )
            records.append(self._build_record(period, weather, lookup))

        records.sort(key=lambda r: r.key)
        excluded = sum(1 for r in records if not r.default_inclusion)
        logger.info(
            "Processed %d billing periods (%d excluded by default)",
            len(records), excluded,
        )
        return records

    def _build_record(
        self,
        period: RawBillingPeriod,
        weather: WeatherSeries,
        lookup: dict,
    ) -> BillingRecord:
        try:
            mean_temperature = weather.mean_temperature_between(
                period.start_date, period.end_date, lookup
            )
        except DataGapError as exc:
            logger.warning("Excluding bill %s: %s", period.start_date, exc)
            return BillingRecord(
                period_start_date=period.start_date,
                period_end_date=period.end_date,
                usage=period.usage,
                analysis_type=AnalysisType.base_load,
                default_inclusion=False,
                exclusion_reason=ExclusionReason.data_gap,
            )

        analysis_type = classify_period(mean_temperature)
        length = (period.end_date - period.start_date).days + 1

        reason = None
        if length < self.min_period_length_days:
            reason = ExclusionReason.short_period
        elif analysis_type is not AnalysisType.heating:
            reason = ExclusionReason.not_heating_season

        return BillingRecord(
            period_start_date=period.start_date,
            period_end_date=period.end_date,
            usage=period.usage,
            analysis_type=analysis_type,
            default_inclusion=reason is None,
            mean_temperature=mean_temperature,
            exclusion_reason=reason,
        )
