"""Per-group breakdown ranked by average measure value."""

import logging
import math
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Union

from ..analytics_config import DEFAULT_TOP_N, VALUE_DECIMALS
from .models import GroupStat, Measure, round_half_up

logger = logging.getLogger(__name__)

GroupKey = Union[str, Callable[[Any], Any]]


def _key_getter(group_key: GroupKey) -> Callable[[Any], Any]:
    if callable(group_key):
        return group_key

    def getter(entry):
        if isinstance(entry, Mapping):
            return entry.get(group_key)
        return getattr(entry, group_key, None)

    return getter


def group_stats(entries: Iterable[Any], group_key: GroupKey, measure: Measure) -> list[GroupStat]:
    """
    Compute average/min/max/count per group, ranked.

    Entries with a null measure or a null group key are left out. Ranking is
    by average descending, then count descending, then key ascending.
    """
    get_key = _key_getter(group_key)
    grouped: dict[str, list[float]] = defaultdict(list)

    for entry in entries:
        value = measure.value_of(entry)
        if value is None:
            continue
        key = get_key(entry)
        if key is None:
            continue
        grouped[str(key)].append(value)

    stats = [
        GroupStat(
            group_key=key,
            average=round_half_up(math.fsum(values) / len(values), VALUE_DECIMALS),
            minimum=round_half_up(min(values), VALUE_DECIMALS),
            maximum=round_half_up(max(values), VALUE_DECIMALS),
            count=len(values),
        )
        for key, values in grouped.items()
    ]
    stats.sort(key=lambda stat: (-stat.average, -stat.count, stat.group_key))
    return stats


def top_groups(
    entries: Iterable[Any],
    group_key: GroupKey,
    measure: Measure,
    n: int = DEFAULT_TOP_N,
) -> list[GroupStat]:
    """
    Get the top N groups by average measure value.

    Args:
        entries: Raw entries
        group_key: Entry attribute name (e.g. "elevator_name") or a callable
        measure: Measure to rank by
        n: Number of groups to keep

    Returns:
        Up to n GroupStat records; empty when nothing contributes
    """
    if n <= 0:
        return []
    ranked = group_stats(entries, group_key, measure)
    logger.debug(f"Ranked {len(ranked)} groups by {measure.value}, keeping {min(n, len(ranked))}")
    return ranked[:n]
