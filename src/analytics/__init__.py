"""
Grain Analytics Module

Filtered time-series aggregation over grain market entries:
- Filter compilation into parameterized queries
- Daily averages of basis / cash price / futures
- Trend summary via least-squares slope
- Top elevator breakdown
"""

from .aggregator import aggregate_daily
from .breakdown import group_stats, top_groups
from .errors import AnalyticsError, DataUnavailable, InvalidFilterRange
from .fetcher import ReportDataStore
from .filters import compile_query, filter_entries, render_sql
from .models import (
    DailyAggregate,
    Entry,
    FilterSpec,
    GroupStat,
    Measure,
    Predicate,
    QueryPlan,
    ReportType,
    Trend,
    TrendSummary,
)
from .queries import fetch_entries, fetch_filter_options
from .service import analyze_entries, build_report, build_report_from_master
from .trend import classify_slope, regression_slope, summarize_trend

__all__ = [
    "aggregate_daily",
    "group_stats",
    "top_groups",
    "AnalyticsError",
    "DataUnavailable",
    "InvalidFilterRange",
    "ReportDataStore",
    "compile_query",
    "filter_entries",
    "render_sql",
    "DailyAggregate",
    "Entry",
    "FilterSpec",
    "GroupStat",
    "Measure",
    "Predicate",
    "QueryPlan",
    "ReportType",
    "Trend",
    "TrendSummary",
    "fetch_entries",
    "fetch_filter_options",
    "analyze_entries",
    "build_report",
    "build_report_from_master",
    "classify_slope",
    "regression_slope",
    "summarize_trend",
]
