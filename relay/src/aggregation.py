"""
Pure hourly aggregation of buffered statistic readings.

Groups readings into clock-hour buckets (UTC) and rolls each bucket up into
an HourlySummary: mean/min/max over readings carrying a mean, and the
arithmetic sum over readings carrying a sum. Readings carrying neither
contribute nothing; NaN and infinite values count as absent.

This module has no side effects, no I/O and no clock.

CHANGELOG:
- 2026-10-19: Skip non-finite values (STORY-111)
- 2026-10-12: Initial creation (STORY-103)

TODO:
- None
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from relay.src.models import HourlySummary, StatisticReading

HOUR = timedelta(hours=1)


def truncate_to_hour(ts: datetime) -> datetime:
    """Return the start of the UTC clock hour containing *ts*."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).replace(minute=0, second=0, microsecond=0)


def _finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _summarize(start: datetime, readings: list[StatisticReading]) -> HourlySummary:
    summary = HourlySummary(start=start, end=start + HOUR)

    means = [r.mean for r in readings if _finite(r.mean)]
    if means:
        summary.mean = sum(means) / len(means)
        summary.min = min(means)
        summary.max = max(means)

    sums = [r.sum for r in readings if _finite(r.sum)]
    if sums:
        summary.sum = sum(sums)

    return summary


def aggregate_by_hour(readings: Iterable[StatisticReading]) -> list[HourlySummary]:
    """Roll readings up into hourly summaries.

    Args:
        readings: Readings for a single statistic, in any order.

    Returns:
        One HourlySummary per distinct clock hour, sorted by ascending start.
        Empty list when *readings* is empty.
    """
    buckets: dict[datetime, list[StatisticReading]] = defaultdict(list)
    for reading in readings:
        buckets[truncate_to_hour(reading.start)].append(reading)

    return [_summarize(start, buckets[start]) for start in sorted(buckets)]
