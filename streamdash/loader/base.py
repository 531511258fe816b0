"""
Record Snapshot Loader

Interface between the metrics engine and the document store. A loader
returns a finite, fully materialized tuple of typed records; it never
streams or paginates. Filters, ordering and limits are applied to the parsed
records, with field names referring to record attributes (snake_case).
"""

import operator
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import structlog

from streamdash.records import EntityKind, ensure_utc, parse_record

logger = structlog.get_logger(__name__)


def _contains(value: Any, candidates: Any) -> bool:
    return value in candidates


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": _contains,
}


@dataclass(frozen=True)
class FilterClause:
    """A ``field op value`` predicate on record attributes"""
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")

    def matches(self, record: Any) -> bool:
        actual = getattr(record, self.field, None)
        expected = self.value
        if actual is None:
            return False
        if isinstance(expected, datetime):
            expected = ensure_utc(expected)
        return _OPERATORS[self.op](actual, expected)


def apply_filters(records: Iterable[Any], filters: Optional[Sequence[FilterClause]]) -> List[Any]:
    """Keep records matching every clause."""
    if not filters:
        return list(records)
    return [record for record in records if all(clause.matches(record) for clause in filters)]


def apply_ordering(records: List[Any], order_by: Optional[str]) -> List[Any]:
    """Sort by ``order_by``; a leading ``-`` sorts descending. Missing values sort last."""
    if not order_by:
        return records
    descending = order_by.startswith("-")
    field = order_by.lstrip("-")

    present = [record for record in records if getattr(record, field, None) is not None]
    missing = [record for record in records if getattr(record, field, None) is None]
    present.sort(key=lambda record: getattr(record, field), reverse=descending)
    return present + missing


class SnapshotLoader(ABC):
    """
    Base snapshot loader.

    Subclasses only fetch raw documents; parsing through the record schemas,
    filtering, ordering and limiting are shared.

    Example:
        loader = InMemorySnapshotLoader({EntityKind.USERS: user_documents})
        users = await loader.load(
            EntityKind.USERS,
            filters=[FilterClause("created_at", ">=", since)],
        )
    """

    @abstractmethod
    async def _fetch_documents(self, kind: EntityKind) -> Sequence[Dict[str, Any]]:
        """Return the raw documents of ``kind``"""

    async def load(
        self,
        kind: EntityKind,
        filters: Optional[Sequence[FilterClause]] = None,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Tuple[Any, ...]:
        """
        Load an immutable snapshot of ``kind`` records.

        Args:
            kind: Entity collection to load
            filters: Clauses every returned record satisfies
            order_by: Record attribute to sort by, ``-attr`` for descending
            limit: Maximum number of records returned

        Returns:
            Tuple of parsed records
        """
        kind = EntityKind(kind)
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        documents = await self._fetch_documents(kind)
        records = [parse_record(kind, document) for document in documents]
        records = apply_filters(records, filters)
        records = apply_ordering(records, order_by)
        if limit is not None:
            records = records[:limit]

        logger.info(
            "Snapshot loaded",
            kind=kind.value,
            documents=len(documents),
            records=len(records),
        )
        return tuple(records)
