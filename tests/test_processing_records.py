"""
Tests for raw row decoding and the demographic record store.
"""

import math

import pytest

from conftest import GEOID_CENTER, GEOID_EAST_4MI, GEOID_NORTH_10MI, make_demographic_row, make_rate_row
from src.processing.diagnostics import Diagnostics, SkipReason
from src.processing.records import (
    DemographicRecordStore,
    coerce_number,
    process_demographic_row,
    process_rate_row,
)


class TestCoerceNumber:
    """Tests for cell coercion."""

    @pytest.mark.parametrize("value", [None, "", "  ", "null", "NULL", "N/A", "nan", "-666666666", "abc"])
    def test_null_like_values_are_zero(self, value):
        """Null tokens, sentinels and garbage coerce to 0."""
        assert coerce_number(value) == 0.0

    def test_numeric_strings(self):
        assert coerce_number("1234") == 1234.0
        assert coerce_number(" 12.5 ") == 12.5
        assert coerce_number('"42"') == 42.0

    def test_numbers_pass_through(self):
        assert coerce_number(7) == 7.0
        assert coerce_number(-3.5) == -3.5

    def test_non_finite_and_sentinel_numbers_are_zero(self):
        assert coerce_number(float("nan")) == 0.0
        assert coerce_number(math.inf) == 0.0
        assert coerce_number(-666666666) == 0.0

    def test_bool_is_not_a_count(self):
        assert coerce_number(True) == 0.0


class TestProcessDemographicRow:
    """Tests for canonical record construction."""

    def test_core_fields(self):
        record = process_demographic_row(GEOID_CENTER, make_demographic_row(1000))

        assert record.geoid == GEOID_CENTER
        assert record.population == 1000
        assert record.households == 400
        assert record.families == 250
        assert record.median_income == 50000
        assert record.housing_units == 420
        assert record.homeownership_rate == 55.0

    def test_income_brackets_sum_disjoint_columns(self):
        """Each B19001 column lands in exactly one bracket."""
        record = process_demographic_row(GEOID_CENTER, make_demographic_row(1000))

        assert record.income_brackets == {
            "Under $25,000": 40,
            "$25,000 - $49,999": 40,
            "$50,000 - $74,999": 30,
            "$75,000 - $99,999": 10,
            "$100,000 - $149,999": 20,
            "$150,000+": 20,
        }
        assert sum(record.income_brackets.values()) == 160

    def test_age_cohorts_and_growth(self):
        record = process_demographic_row(GEOID_CENTER, make_demographic_row(1000))

        assert record.age_current["0_17"] == 200
        assert record.age_prior["0_17"] == 180
        assert record.growth["population"].change == 50
        assert record.growth["population"].projected == 1050
        assert record.growth["median_income"].cagr == pytest.approx(0.02)

    def test_sentinel_median_income_is_zero(self):
        row = make_demographic_row(1000, B19013_001E_curr="-666666666")
        assert process_demographic_row(GEOID_CENTER, row).median_income == 0.0

    def test_missing_columns_default_to_zero(self):
        record = process_demographic_row(GEOID_CENTER, {"B01003_001E_curr": "12"})

        assert record.population == 12
        assert record.median_rent == 0.0
        assert all(v == 0.0 for v in record.age_current.values())
        assert record.growth["families"].projected == 0.0


class TestProcessRateRow:
    def test_local_and_national(self):
        record = process_rate_row(GEOID_CENTER, make_rate_row(labor_force=61.5))

        assert record.rates["labor_force"] == 61.5
        assert record.national["labor_force"] == 63.44
        assert record.national["management"] == 41.8

    def test_without_national_columns(self):
        record = process_rate_row(GEOID_CENTER, make_rate_row(national=False))
        assert all(v == 0.0 for v in record.national.values())


class TestDemographicRecordStore:
    """Tests for record lookups and their diagnostics."""

    def test_build_record_map_excludes_and_reports_misses(self, record_store):
        diagnostics = Diagnostics()
        records = record_store.build_record_map(
            [GEOID_CENTER, GEOID_EAST_4MI, GEOID_NORTH_10MI], diagnostics
        )

        assert set(records) == {GEOID_CENTER, GEOID_EAST_4MI}
        misses = diagnostics.by_reason(SkipReason.LOOKUP_MISS)
        assert [e.geoid for e in misses] == [GEOID_NORTH_10MI]

    def test_rate_lookup_miss(self, demographic_rows):
        store = DemographicRecordStore(demographic_rows, {GEOID_CENTER: make_rate_row()})
        diagnostics = Diagnostics()

        store.build_record_map(list(demographic_rows), diagnostics)

        assert diagnostics.counts()[SkipReason.RATE_LOOKUP_MISS.value] == 2

    def test_no_rate_table_is_not_a_rate_miss(self, demographic_rows):
        store = DemographicRecordStore(demographic_rows)
        diagnostics = Diagnostics()

        store.build_record_map(list(demographic_rows), diagnostics)

        assert len(diagnostics) == 0
        assert store.rate_records == {}

    def test_has_demographics(self, demographic_rows):
        assert DemographicRecordStore(demographic_rows).has_demographics
        assert not DemographicRecordStore({}).has_demographics
        assert not DemographicRecordStore(None).has_demographics
