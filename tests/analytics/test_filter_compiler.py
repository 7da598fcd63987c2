"""Tests for filter compilation, SQL rendering and in-memory filtering."""

from datetime import date

import pytest

from src.analytics.errors import InvalidFilterRange
from src.analytics.filters import (
    build_predicates,
    compile_query,
    filter_entries,
    matches,
    render_sql,
)
from src.analytics.models import FilterSpec, Measure, Predicate, ReportType
from tests.analytics.helpers import make_entry

# ---------------------------------------------------------------------------
# build_predicates / compile_query
# ---------------------------------------------------------------------------


class TestCompileQuery:
    def test_no_filters_is_unfiltered_master_fetch(self):
        plan = compile_query()
        assert plan.predicates == ()
        assert plan.is_unfiltered
        assert plan.report_type == ReportType.MASTER_DATA
        assert plan.non_null == ()

    def test_empty_spec_same_as_none(self):
        assert compile_query(FilterSpec()) == compile_query(None)

    def test_one_predicate_per_present_field(self):
        spec = FilterSpec(
            crop_class_code="CWRS",
            region_id="north",
            elevator_id="alpha",
            town_id="saskatoon",
            date_from=date(2024, 1, 1),
            date_to=date(2024, 1, 31),
        )
        plan = compile_query(spec)
        assert list(plan.predicates) == [
            Predicate("crop_class_code", "eq", "CWRS"),
            Predicate("region_id", "eq", "north"),
            Predicate("elevator_id", "eq", "alpha"),
            Predicate("town_id", "eq", "saskatoon"),
            Predicate("date", "ge", date(2024, 1, 1)),
            Predicate("date", "le", date(2024, 1, 31)),
        ]

    def test_omitted_fields_emit_nothing(self):
        plan = compile_query(FilterSpec(elevator_id="alpha"))
        assert list(plan.predicates) == [Predicate("elevator_id", "eq", "alpha")]

    def test_blank_strings_are_absent(self):
        plan = compile_query(FilterSpec(crop_class_code="", region_id="  "))
        assert plan.predicates == ()

    def test_inverted_range_raises(self):
        spec = FilterSpec(date_from=date(2024, 2, 1), date_to=date(2024, 1, 1))
        with pytest.raises(InvalidFilterRange) as exc_info:
            compile_query(spec)
        assert exc_info.value.date_from == date(2024, 2, 1)
        assert exc_info.value.date_to == date(2024, 1, 1)

    def test_inverted_range_is_a_value_error(self):
        with pytest.raises(ValueError, match="Invalid date range"):
            build_predicates(FilterSpec(date_from="2024-03-02", date_to="2024-03-01"))

    def test_same_day_range_is_valid(self):
        plan = compile_query(FilterSpec(date_from="2024-03-01", date_to="2024-03-01"))
        assert len(plan.predicates) == 2

    def test_open_ended_ranges(self):
        assert list(compile_query(FilterSpec(date_from="2024-03-01")).predicates) == [
            Predicate("date", "ge", date(2024, 3, 1))
        ]
        assert list(compile_query(FilterSpec(date_to="2024-03-01")).predicates) == [
            Predicate("date", "le", date(2024, 3, 1))
        ]

    def test_trend_reports_require_their_measure(self):
        assert compile_query(None, ReportType.BASIS_TREND).non_null == (Measure.BASIS,)
        assert compile_query(None, ReportType.PRICE_TREND).non_null == (Measure.CASH_PRICE,)

    def test_order_is_always_date_ascending(self):
        for report_type in ReportType:
            assert compile_query(None, report_type).order_by == ("date", "ASC")


# ---------------------------------------------------------------------------
# render_sql
# ---------------------------------------------------------------------------


class TestRenderSql:
    def test_unfiltered_sql_selects_active_rows_ordered_by_date(self):
        sql, params = render_sql(compile_query())
        assert "WHERE ge.is_active = :active" in sql
        assert sql.rstrip().endswith("ORDER BY ge.date ASC")
        assert params == {"active": True}

    def test_values_are_bound_not_interpolated(self):
        hostile = "CWRS' OR '1'='1"
        sql, params = render_sql(compile_query(FilterSpec(crop_class_code=hostile)))
        assert hostile not in sql
        assert "cc.code = :crop_class_code_eq" in sql
        assert params["crop_class_code_eq"] == hostile

    def test_dates_bound_as_iso_strings(self):
        spec = FilterSpec(date_from=date(2024, 1, 1), date_to=date(2024, 1, 31))
        sql, params = render_sql(compile_query(spec))
        assert "ge.date >= :date_ge" in sql
        assert "ge.date <= :date_le" in sql
        assert params["date_ge"] == "2024-01-01"
        assert params["date_le"] == "2024-01-31"

    def test_region_filters_on_linked_region(self):
        sql, params = render_sql(compile_query(FilterSpec(region_id="north")))
        assert "mr.id = :region_id_eq" in sql
        assert params["region_id_eq"] == "north"

    def test_basis_trend_adds_not_null_clause(self):
        sql, _ = render_sql(compile_query(None, ReportType.BASIS_TREND))
        assert "ge.basis IS NOT NULL" in sql
        assert "ge.cash_price IS NOT NULL" not in sql

    def test_master_data_has_no_not_null_clause(self):
        sql, _ = render_sql(compile_query(None, ReportType.MASTER_DATA))
        assert "IS NOT NULL" not in sql


# ---------------------------------------------------------------------------
# filter_entries
# ---------------------------------------------------------------------------


class TestFilterEntries:
    @pytest.fixture
    def entries(self):
        return [
            make_entry("2024-01-01", basis=10, class_code="CWRS", region_id="north", elevator_id="alpha"),
            make_entry("2024-01-02", basis=11, class_code="CPSR", region_id="south", elevator_id="beta"),
            make_entry("2024-01-03", basis=12, class_code="CWRS", region_id=None, elevator_id="beta"),
        ]

    def test_no_filters_keeps_everything(self, entries):
        assert filter_entries(entries) == entries

    def test_equality_filter(self, entries):
        result = filter_entries(entries, FilterSpec(crop_class_code="CWRS"))
        assert [e.basis for e in result] == [10, 12]

    def test_missing_attribute_never_matches(self, entries):
        result = filter_entries(entries, FilterSpec(region_id="north"))
        assert [e.basis for e in result] == [10]

    def test_inclusive_date_bounds(self, entries):
        result = filter_entries(entries, FilterSpec(date_from="2024-01-02", date_to="2024-01-03"))
        assert [e.basis for e in result] == [11, 12]

    def test_filters_are_conjunctive(self, entries):
        result = filter_entries(entries, FilterSpec(crop_class_code="CWRS", elevator_id="beta"))
        assert [e.basis for e in result] == [12]

    def test_inverted_range_raises(self, entries):
        with pytest.raises(InvalidFilterRange):
            filter_entries(entries, FilterSpec(date_from="2024-01-03", date_to="2024-01-01"))

    def test_matches_with_no_predicates(self, entries):
        assert matches(entries[0], [])
