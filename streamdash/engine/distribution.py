"""
Distribution Aggregator

Groups records by a categorical key and ranks the categories by a summed
measure. Used for the genre, language, platform and region splits.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

import structlog

from streamdash.records import UNKNOWN, DistributionBucket

logger = structlog.get_logger(__name__)

KeyFn = Callable[[Any], Union[str, Sequence[str], None]]
MeasureFn = Callable[[Any], float]


def count_measure(record: Any) -> float:
    """Measure that counts each record once"""
    return 1.0


def normalize_key(key: Any) -> str:
    """Missing or blank keys collapse into ``"Unknown"``."""
    if key is None:
        return UNKNOWN
    key = str(key).strip()
    return key or UNKNOWN


def _keys_of(raw: Union[str, Sequence[str], None]) -> List[str]:
    # A plain string is a single key; any other sequence credits each entry
    if raw is None or isinstance(raw, str):
        return [normalize_key(raw)]
    keys = [normalize_key(item) for item in raw]
    return keys or [UNKNOWN]


def aggregate(
    records: Iterable[Any],
    key_fn: KeyFn,
    measure_fn: Optional[MeasureFn] = None,
    top_n: Optional[int] = None,
) -> List[DistributionBucket]:
    """
    Build a ranked distribution of ``records`` by ``key_fn``.

    Args:
        records: Records to group
        key_fn: Extracts the category; a sequence of categories credits the
            record to each of them
        measure_fn: Extracts the measure summed per bucket; ``None`` counts
            records instead
        top_n: Keep only the first ``top_n`` buckets after ranking

    Returns:
        Buckets sorted by measure descending, ties broken by key. Percentages
        are always relative to the full population, truncation never
        re-normalizes them.
    """
    if top_n is not None and top_n < 0:
        raise ValueError(f"top_n must be non-negative, got {top_n}")

    measure_fn = measure_fn or count_measure
    counts: Dict[str, int] = defaultdict(int)
    measures: Dict[str, float] = defaultdict(float)

    for record in records:
        value = measure_fn(record) or 0.0
        for key in _keys_of(key_fn(record)):
            counts[key] += 1
            measures[key] += value

    total = sum(measures.values())
    buckets = [
        DistributionBucket(
            key=key,
            count=counts[key],
            measure=measure,
            percent_of_total=(measure / total * 100) if total > 0 else 0.0,
        )
        for key, measure in measures.items()
    ]
    buckets.sort(key=lambda bucket: (-bucket.measure, bucket.key))

    logger.debug(
        "Distribution aggregated",
        buckets=len(buckets),
        total=total,
        top_n=top_n,
    )

    if top_n is not None:
        return buckets[:top_n]
    return buckets
