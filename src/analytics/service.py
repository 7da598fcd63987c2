"""
Analytics Report Service

Composes fetch, daily aggregation, trend summary and elevator breakdown
into one report payload per report type.
"""

import logging
from collections.abc import Iterable
from typing import Any, Optional

from ..analytics_config import DEFAULT_TOP_N
from .aggregator import aggregate_daily
from .breakdown import GroupKey, top_groups
from .errors import DataUnavailable
from .fetcher import ReportDataStore
from .filters import filter_entries
from .models import Entry, FilterSpec, ReportType
from .trend import summarize_trend

logger = logging.getLogger(__name__)


def analyze_entries(
    entries: Iterable[Entry],
    report_type: ReportType,
    top_n: int = DEFAULT_TOP_N,
    group_key: GroupKey = "elevator_name",
) -> dict[str, Any]:
    """
    Run the aggregation stages over an in-memory snapshot.

    Returns:
        Dict with daily series, trend summary (None when empty) and top groups
    """
    entries = list(entries)
    measure = report_type.measure
    daily = aggregate_daily(entries, measure, report_type.secondary_measure)
    summary = summarize_trend(daily)
    groups = top_groups(entries, group_key, measure, top_n)

    return {
        "type": report_type.value,
        "measure": measure.value,
        "measure_label": measure.label,
        "secondary_measure": report_type.secondary_measure.value if report_type.secondary_measure else None,
        "daily": [point.to_dict() for point in daily],
        "summary": summary.to_dict() if summary else None,
        "top_elevators": [stat.to_dict() for stat in groups],
        "count": len(entries),
    }


def build_report(
    report_type: ReportType,
    filters: Optional[FilterSpec] = None,
    store: Optional[ReportDataStore] = None,
    top_n: int = DEFAULT_TOP_N,
) -> dict[str, Any]:
    """
    Fetch and analyze one report type.

    A failed or superseded fetch does not raise: the report is built from the
    entries the store already held for this report type. "filters" then
    describes those entries rather than this request, and a failure also
    carries the error message.

    Raises:
        InvalidFilterRange: if date_from is after date_to
    """
    store = store or ReportDataStore()
    filters = filters or FilterSpec()
    error = None
    applied = False

    try:
        result = store.fetch(report_type, filters)
        applied = result.applied
    except DataUnavailable as exc:
        logger.warning(f"Serving retained {report_type.value} data after fetch failure")
        error = exc.message

    state = store.state(report_type)
    if applied:
        entries, served_filters = result.entries, filters
    else:
        entries, served_filters = state.data, state.data_filters
    report = analyze_entries(entries, report_type, top_n)
    report.update(
        {
            "filters": served_filters.to_dict(),
            "last_fetched": state.last_fetched,
            "error": error,
        }
    )
    return report


def build_report_from_master(
    master: Iterable[Entry],
    report_type: ReportType,
    filters: Optional[FilterSpec] = None,
    top_n: int = DEFAULT_TOP_N,
) -> dict[str, Any]:
    """
    Analyze a previously fetched master snapshot under new filters, without
    another round-trip to the record store. Rows a database fetch for this
    report type would skip (measure unset) are skipped here too.

    Raises:
        InvalidFilterRange: if date_from is after date_to
    """
    filters = filters or FilterSpec()
    entries = filter_entries(master, filters)
    required = report_type.required_measure
    if required:
        entries = [entry for entry in entries if required.value_of(entry) is not None]
    report = analyze_entries(entries, report_type, top_n)
    report["filters"] = filters.to_dict()
    return report
