"""
Filter Compiler

Turns a sparse FilterSpec into a conjunctive predicate list and a
parameterized QueryPlan. This is the only place where filter values meet
SQL, and they only ever travel as bound parameters.
"""

import logging
import operator
from collections.abc import Iterable
from typing import Any, Optional

from .errors import InvalidFilterRange
from .models import Entry, FilterSpec, Measure, Predicate, QueryPlan, ReportType

logger = logging.getLogger(__name__)

# Whitelisted predicate fields -> (SQL column expression, Entry attribute)
FIELD_COLUMNS = {
    "crop_class_code": ("cc.code", "class_code"),
    "region_id": ("mr.id", "region_id"),
    "elevator_id": ("ge.elevator_id", "elevator_id"),
    "town_id": ("ge.town_id", "town_id"),
    "date": ("ge.date", "date"),
}

# Whitelisted operators -> (SQL operator, Python comparison)
OPERATORS = {
    "eq": ("=", operator.eq),
    "ge": (">=", operator.ge),
    "le": ("<=", operator.le),
}

MEASURE_COLUMNS = {
    Measure.BASIS: "ge.basis",
    Measure.CASH_PRICE: "ge.cash_price",
    Measure.FUTURES: "ge.futures",
}

_EQUALITY_FIELDS = ("crop_class_code", "region_id", "elevator_id", "town_id")

SOURCE_SQL = """
    SELECT
        ge.id,
        ge.date,
        ge.crop_id,
        ge.class_id,
        ge.elevator_id,
        ge.town_id,
        ge.basis,
        ge.cash_price,
        ge.futures,
        ge.notes,
        mc.name AS crop_name,
        cc.name AS class_name,
        cc.code AS class_code,
        me.name AS elevator_name,
        mt.name AS town_name,
        mr.id AS region_id,
        mr.name AS region_name
    FROM grain_entries ge
    LEFT JOIN master_crops mc ON ge.crop_id = mc.id
    LEFT JOIN crop_classes cc ON ge.class_id = cc.id
    LEFT JOIN master_elevators me ON ge.elevator_id = me.id
    LEFT JOIN master_towns mt ON ge.town_id = mt.id
    LEFT JOIN master_regions mr ON mr.id = (
        SELECT MIN(tr.region_id)
        FROM town_regions tr
        WHERE tr.town_id = mt.id AND tr.is_active = :active
    )
    WHERE ge.is_active = :active
"""


def build_predicates(filters: FilterSpec) -> list[Predicate]:
    """
    Emit exactly one predicate per present filter field.

    Raises:
        InvalidFilterRange: if date_from is after date_to
    """
    if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
        raise InvalidFilterRange(filters.date_from, filters.date_to)

    predicates = []
    for name in _EQUALITY_FIELDS:
        value = getattr(filters, name)
        if value is not None:
            predicates.append(Predicate(name, "eq", value))

    if filters.date_from is not None:
        predicates.append(Predicate("date", "ge", filters.date_from))
    if filters.date_to is not None:
        predicates.append(Predicate("date", "le", filters.date_to))

    return predicates


def compile_query(
    filters: Optional[FilterSpec] = None,
    report_type: ReportType = ReportType.MASTER_DATA,
) -> QueryPlan:
    """
    Compile a filter spec into a query plan.

    Args:
        filters: Constraints to apply; None or an empty spec fetches every active entry
        report_type: Report variant; trend reports only fetch rows with their measure set

    Returns:
        QueryPlan ordered by date ascending

    Raises:
        InvalidFilterRange: if date_from is after date_to (no plan is produced)
    """
    filters = filters or FilterSpec()
    predicates = build_predicates(filters)

    required = report_type.required_measure
    plan = QueryPlan(
        report_type=report_type,
        predicates=tuple(predicates),
        non_null=(required,) if required else (),
    )
    logger.debug(
        f"Compiled {report_type.value} plan with {len(plan.predicates)} predicates: {filters.active_fields()}"
    )
    return plan


def render_sql(plan: QueryPlan) -> tuple[str, dict[str, Any]]:
    """
    Render a plan to SQL with :name placeholders and its bound parameters.

    Returns:
        (sql, params) ready for src.db.execute
    """
    query = SOURCE_SQL
    params: dict[str, Any] = {"active": True}

    for measure in plan.non_null:
        query += f" AND {MEASURE_COLUMNS[measure]} IS NOT NULL"

    for predicate in plan.predicates:
        column, _ = FIELD_COLUMNS[predicate.field]
        sql_op, _ = OPERATORS[predicate.operator]
        param_name = f"{predicate.field}_{predicate.operator}"
        query += f" AND {column} {sql_op} :{param_name}"
        value = predicate.value
        params[param_name] = value.isoformat() if hasattr(value, "isoformat") else value

    order_field, direction = plan.order_by
    query += f" ORDER BY {FIELD_COLUMNS[order_field][0]} {direction}"
    return query, params


def matches(entry: Entry, predicates: Iterable[Predicate]) -> bool:
    """True when the entry satisfies every predicate. Missing attributes never match."""
    for predicate in predicates:
        _, attribute = FIELD_COLUMNS[predicate.field]
        _, compare = OPERATORS[predicate.operator]
        actual = getattr(entry, attribute, None)
        if actual is None or not compare(actual, predicate.value):
            return False
    return True


def filter_entries(entries: Iterable[Entry], filters: Optional[FilterSpec] = None) -> list[Entry]:
    """
    Apply filter semantics in memory to an already-fetched snapshot.

    Raises:
        InvalidFilterRange: if date_from is after date_to
    """
    predicates = build_predicates(filters or FilterSpec())
    if not predicates:
        return list(entries)
    return [entry for entry in entries if matches(entry, predicates)]
