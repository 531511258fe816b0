"""
Period Comparator

Computes a metric over a current period and the equal-length period right
before it, and the growth between the two.

Growth is deliberately zero-guarded: whenever the previous value is not
positive the growth is reported as 0% rather than undefined or infinite.
"""

from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Iterable, Optional

import structlog

from streamdash.records import GrowthResult, Period

logger = structlog.get_logger(__name__)

MeasureFn = Callable[[Any], float]
TimestampFn = Callable[[Any], Any]

_default_timestamp = attrgetter("timestamp")


class Aggregation(str, Enum):
    """How a measure is folded over the records of a period"""
    SUM = "sum"
    PEAK = "peak"  # Maximum single value
    MEAN = "mean"  # Sum divided by record count


def growth_percent(current: float, previous: float) -> float:
    """
    Percentage change from ``previous`` to ``current``.

    Returns 0 when ``previous <= 0``, regardless of ``current``.
    """
    if previous > 0:
        return (current - previous) / previous * 100
    return 0.0


def aggregate_window(
    records: Iterable[Any],
    measure_fn: MeasureFn,
    period: Period,
    aggregation: Aggregation = Aggregation.SUM,
    timestamp_fn: TimestampFn = _default_timestamp,
) -> float:
    """
    Fold ``measure_fn`` over the records whose timestamp falls in ``period``.

    Empty windows yield 0 for every aggregation.
    """
    total = 0.0
    peak = 0.0
    count = 0

    for record in records:
        if not period.contains(timestamp_fn(record)):
            continue
        value = measure_fn(record) or 0.0
        total += value
        peak = value if count == 0 else max(peak, value)
        count += 1

    if count == 0:
        return 0.0
    if aggregation == Aggregation.PEAK:
        return peak
    if aggregation == Aggregation.MEAN:
        return total / count
    return total


def compare(
    records: Iterable[Any],
    measure_fn: MeasureFn,
    period: Period,
    aggregation: Aggregation = Aggregation.SUM,
    timestamp_fn: TimestampFn = _default_timestamp,
    previous_period: Optional[Period] = None,
) -> GrowthResult:
    """
    Compare a metric between ``period`` and the period preceding it.

    Args:
        records: Records exposing a timestamp (``.timestamp`` by default)
        measure_fn: Extracts the numeric measure from a record
        period: The current window
        aggregation: Sum (default), peak or mean of the measure
        timestamp_fn: Extracts the instant used for window matching
        previous_period: Override of the comparison window, defaults to
            ``period.previous()``

    Returns:
        GrowthResult with current, previous and the guarded growth percent
    """
    records = tuple(records)
    aggregation = Aggregation(aggregation)
    previous_period = previous_period or period.previous()

    current = aggregate_window(records, measure_fn, period, aggregation, timestamp_fn)
    previous = aggregate_window(records, measure_fn, previous_period, aggregation, timestamp_fn)

    result = GrowthResult(
        current=current,
        previous=previous,
        growth_percent=growth_percent(current, previous),
    )
    logger.debug(
        "Period comparison computed",
        aggregation=aggregation.value,
        records=len(records),
        current=current,
        previous=previous,
        growth_percent=result.growth_percent,
    )
    return result


def compare_values(current: float, previous: float) -> GrowthResult:
    """Wrap an already computed pair of values into a GrowthResult."""
    return GrowthResult(
        current=current,
        previous=previous,
        growth_percent=growth_percent(current, previous),
    )
