"""
Trend Analyzer

Summary statistics and a least-squares trend over a daily aggregate series.

The regression runs against the zero-based position in the series, not the
elapsed days between dates: unevenly spaced dates count as equal steps.
"""

import logging
import math
from collections.abc import Sequence
from typing import Optional

from ..analytics_config import SLOPE_DECIMALS, TREND_THRESHOLD, VALUE_DECIMALS
from .models import DailyAggregate, Trend, TrendSummary, round_half_up

logger = logging.getLogger(__name__)


def regression_slope(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of values against their index.

    slope = (n*sum(i*y) - sum(i)*sum(y)) / (n*sum(i^2) - sum(i)^2)

    Series with fewer than two points have slope 0.
    """
    n = len(values)
    if n <= 1:
        return 0.0

    sum_x = math.fsum(range(n))
    sum_y = math.fsum(values)
    sum_xy = math.fsum(i * y for i, y in enumerate(values))
    sum_xx = math.fsum(i * i for i in range(n))

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def classify_slope(slope: float, threshold: float = TREND_THRESHOLD) -> Trend:
    if slope > threshold:
        return Trend.UP
    if slope < -threshold:
        return Trend.DOWN
    return Trend.STABLE


def summarize_trend(
    daily: Sequence[DailyAggregate],
    threshold: float = TREND_THRESHOLD,
) -> Optional[TrendSummary]:
    """
    Summarize a daily aggregate series.

    Args:
        daily: DailyAggregate series, ascending by date
        threshold: Absolute slope above which the series counts as moving

    Returns:
        TrendSummary, or None when the series is empty
    """
    values = [point.value for point in daily if point.value is not None]
    if not values:
        return None

    slope = regression_slope(values)
    summary = TrendSummary(
        average=round_half_up(math.fsum(values) / len(values), VALUE_DECIMALS),
        minimum=round_half_up(min(values), VALUE_DECIMALS),
        maximum=round_half_up(max(values), VALUE_DECIMALS),
        trend=classify_slope(slope, threshold),
        trend_value=round_half_up(slope, SLOPE_DECIMALS),
    )
    logger.debug(f"Trend over {len(values)} points: {summary.trend.value} ({summary.trend_value})")
    return summary
