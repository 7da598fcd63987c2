"""
Daily Aggregator

Groups entries by calendar date and averages a measure per date.

Averages are rounded half-up to 2 decimals on their decimal representation
(0.125 -> 0.13). Sums use math.fsum, so the result does not depend on the
order entries arrive in.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, Optional

from ..analytics_config import VALUE_DECIMALS
from .models import DailyAggregate, Measure, parse_date, round_half_up

logger = logging.getLogger(__name__)


def _entry_date(entry: Any) -> Optional[date]:
    raw = entry.get("date") if isinstance(entry, Mapping) else getattr(entry, "date", None)
    try:
        return parse_date(raw)
    except (TypeError, ValueError):
        return None


def _mean(values: list[float]) -> Optional[float]:
    if not values:
        return None
    return round_half_up(math.fsum(values) / len(values), VALUE_DECIMALS)


def aggregate_daily(
    entries: Iterable[Any],
    measure: Measure,
    secondary: Optional[Measure] = None,
) -> list[DailyAggregate]:
    """
    Average a measure per date.

    Args:
        entries: Entries (or row dicts) to aggregate
        measure: Measure averaged into DailyAggregate.value
        secondary: Optional measure averaged independently into DailyAggregate.secondary

    Returns:
        One DailyAggregate per date with at least one non-null primary value,
        ascending by date
    """
    primary_values: dict[date, list[float]] = defaultdict(list)
    secondary_values: dict[date, list[float]] = defaultdict(list)
    skipped = 0

    for entry in entries:
        entry_date = _entry_date(entry)
        if entry_date is None:
            skipped += 1
            continue

        value = measure.value_of(entry)
        if value is not None:
            primary_values[entry_date].append(value)

        if secondary is not None:
            secondary_value = secondary.value_of(entry)
            if secondary_value is not None:
                secondary_values[entry_date].append(secondary_value)

    if skipped:
        logger.warning(f"Skipped {skipped} entries without a usable date")

    results = []
    for entry_date in sorted(primary_values):
        values = primary_values[entry_date]
        extra = secondary_values.get(entry_date, [])
        results.append(
            DailyAggregate(
                date=entry_date,
                value=_mean(values),
                count=len(values),
                secondary=_mean(extra),
                secondary_count=len(extra),
            )
        )

    logger.debug(f"Aggregated {measure.value} into {len(results)} daily points")
    return results
