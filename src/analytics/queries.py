"""
Analytics Query Functions

Executes compiled query plans against the record store. Any failure on the
way (connection, SQL, malformed row) surfaces as DataUnavailable.
"""

import logging
from typing import Any

from ..db import connect, fetch_dicts, get_filter_options
from .errors import DataUnavailable
from .filters import render_sql
from .models import Entry, QueryPlan

logger = logging.getLogger(__name__)


def fetch_rows(plan: QueryPlan) -> list[dict[str, Any]]:
    """
    Run a query plan and return raw rows keyed by column name.

    Raises:
        DataUnavailable: if the record store could not return rows
    """
    sql, params = render_sql(plan)
    try:
        con = connect()
        try:
            rows = fetch_dicts(con, sql, params)
        finally:
            con.close()
    except Exception as exc:
        logger.exception(f"Analytics data fetch failed for {plan.report_type.value}")
        raise DataUnavailable() from exc

    logger.info(f"Fetched {len(rows)} {plan.report_type.value} rows")
    return rows


def fetch_entries(plan: QueryPlan) -> list[Entry]:
    """
    Run a query plan and return immutable entries in date order.

    Raises:
        DataUnavailable: if the record store could not return rows
    """
    rows = fetch_rows(plan)
    try:
        return [Entry.from_row(row) for row in rows]
    except (TypeError, ValueError) as exc:
        logger.error(f"Malformed grain entry row: {exc}")
        raise DataUnavailable() from exc


def fetch_filter_options() -> dict[str, list[dict[str, Any]]]:
    """
    Get active crop classes, regions, elevators and towns for filter widgets.

    Raises:
        DataUnavailable: if the record store could not return rows
    """
    try:
        return get_filter_options()
    except Exception as exc:
        logger.exception("Filter options fetch failed")
        raise DataUnavailable("Failed to load filter options") from exc
