# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for override application and round-trip recomputation."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from heat_load.analysis.engine import HeatLoadEngine
from heat_load.analysis.roundtrip import RoundTripRecalculator, apply_overrides
from heat_load.data.models import (
    AnalysisType,
    ExclusionReason,
    InclusionOverride,
    RecordOverride,
)

FORCE_IN = RecordOverride(inclusion_override=InclusionOverride.force_include)
FORCE_OUT = RecordOverride(inclusion_override=InclusionOverride.force_exclude)


@pytest.fixture()
def records(heating_records, outlier_record):
    return heating_records + [outlier_record]


class TestApplyOverrides:
    """Tests for apply_overrides."""

    def test_sets_override_fields(self, records):
        key = records[0].key
        updated = apply_overrides(records, {key: FORCE_OUT})
        assert updated[0].inclusion_override is InclusionOverride.force_exclude
        assert updated[1].inclusion_override is None

    def test_resets_engine_flags(self, records):
        flagged = [
            r.model_copy(update={"eliminated_as_outlier": True, "whole_home_heat_loss_rate": 1.0})
            for r in records
        ]
        updated = apply_overrides(flagged, {})
        assert not any(r.eliminated_as_outlier for r in updated)
        assert all(r.whole_home_heat_loss_rate is None for r in updated)

    def test_existing_overrides_kept_without_entry(self, records):
        pinned = [records[0].model_copy(update={"inclusion_override": InclusionOverride.force_exclude})]
        updated = apply_overrides(pinned + records[1:], {})
        assert updated[0].inclusion_override is InclusionOverride.force_exclude

    def test_entry_replaces_both_fields(self, records):
        key = records[0].key
        pinned = records[0].model_copy(
            update={"inclusion_override": InclusionOverride.force_exclude}
        )
        override = RecordOverride(analysis_type_override=AnalysisType.heating)
        updated = apply_overrides([pinned] + records[1:], {key: override})
        assert updated[0].inclusion_override is None
        assert updated[0].analysis_type_override is AnalysisType.heating

    def test_unknown_key_ignored(self, records, caplog):
        unknown = (date(1999, 1, 1), date(1999, 1, 31))
        with caplog.at_level(logging.WARNING, logger="heat_load.analysis.roundtrip"):
            updated = apply_overrides(records, {unknown: FORCE_IN})
        assert [r.key for r in updated] == [r.key for r in records]
        assert all(r.inclusion_override is None for r in updated)
        assert "1999-01-01" in caplog.text


class TestRoundTripRecalculator:
    """Tests for RoundTripRecalculator.recompute."""

    def test_idempotent(self, profile, records):
        recalculator = RoundTripRecalculator()
        overrides = {records[3].key: FORCE_OUT}
        first = recalculator.recompute(records, overrides, profile)
        second = recalculator.recompute(first.processed_energy_bills, overrides, profile)
        assert second == first

    def test_no_overrides_matches_fresh_run(self, profile, records):
        recalculator = RoundTripRecalculator()
        fresh = recalculator.run(records, profile)
        again = recalculator.recompute(fresh.processed_energy_bills, {}, profile)
        assert again == fresh

    def test_force_include_outlier(self, profile, records, outlier_record):
        recalculator = RoundTripRecalculator()
        baseline = recalculator.run(records, profile)
        flagged = {r.key: r for r in baseline.processed_energy_bills}
        assert flagged[outlier_record.key].eliminated_as_outlier is True

        result = recalculator.recompute(
            baseline.processed_energy_bills, {outlier_record.key: FORCE_IN}, profile
        )
        forced = {r.key: r for r in result.processed_energy_bills}[outlier_record.key]
        assert forced.eliminated_as_outlier is False
        assert forced.is_included is True
        assert forced.whole_home_heat_loss_rate is not None

    def test_force_include_persists(self, profile, records, outlier_record):
        recalculator = RoundTripRecalculator()
        first = recalculator.recompute(records, {outlier_record.key: FORCE_IN}, profile)
        second = recalculator.recompute(first.processed_energy_bills, {}, profile)

        forced = {r.key: r for r in second.processed_energy_bills}[outlier_record.key]
        assert forced.inclusion_override is InclusionOverride.force_include
        assert forced.is_included is True
        assert second == first

    def test_force_exclude(self, profile, records):
        key = records[0].key
        result = RoundTripRecalculator().recompute(records, {key: FORCE_OUT}, profile)
        excluded = {r.key: r for r in result.processed_energy_bills}[key]
        assert excluded.is_included is False
        assert excluded.eliminated_as_outlier is False
        assert result.included_bill_count == len(records) - 2

    def test_heating_type_override_adds_period(self, profile, make_record, records):
        shoulder = make_record(
            20, 63.0, 1.0,
            analysis_type=AnalysisType.base_load,
            default_inclusion=False,
            exclusion_reason=ExclusionReason.not_heating_season,
        )
        all_records = records + [shoulder]
        recalculator = RoundTripRecalculator()
        before = recalculator.run(all_records, profile)

        override = RecordOverride(analysis_type_override=AnalysisType.heating)
        after = recalculator.recompute(all_records, {shoulder.key: override}, profile)
        assert after.included_bill_count == before.included_bill_count + 1


class TestEngineRecompute:
    """Tests for HeatLoadEngine.recompute on full results."""

    def test_accepts_result(self, demo_case, demo_result):
        engine = HeatLoadEngine()
        again = engine.recompute(demo_result, {}, demo_case.home)
        assert again == demo_result

    def test_override_on_demo_case(self, demo_case, demo_result):
        engine = HeatLoadEngine()
        included = [b for b in demo_result.processed_energy_bills if b.is_included]
        key = included[0].key
        result = engine.recompute(demo_result, {key: FORCE_OUT}, demo_case.home)
        excluded = {r.key: r for r in result.processed_energy_bills}[key]
        assert excluded.is_included is False
        assert engine.recompute(result, {key: FORCE_OUT}, demo_case.home) == result
