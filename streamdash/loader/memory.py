"""
In-Memory Snapshot Loader

Serves documents handed over by the caller, e.g. inline request payloads or
test fixtures.
"""

from typing import Any, Dict, Mapping, Sequence

from streamdash.records import EntityKind

from .base import SnapshotLoader


class InMemorySnapshotLoader(SnapshotLoader):
    """Snapshot loader over documents kept in memory, keyed by entity kind"""

    def __init__(self, documents: Mapping[Any, Sequence[Dict[str, Any]]] = None):
        self._documents = {
            EntityKind(kind): tuple(items) for kind, items in (documents or {}).items()
        }

    async def _fetch_documents(self, kind: EntityKind) -> Sequence[Dict[str, Any]]:
        return self._documents.get(kind, ())
