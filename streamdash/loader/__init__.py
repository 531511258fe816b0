"""
Record Snapshot Loaders
"""
from .base import FilterClause, SnapshotLoader, apply_filters, apply_ordering
from .files import FileFormat, FileSnapshotLoader
from .memory import InMemorySnapshotLoader

__all__ = [
    "FilterClause",
    "SnapshotLoader",
    "apply_filters",
    "apply_ordering",
    "FileFormat",
    "FileSnapshotLoader",
    "InMemorySnapshotLoader",
]
