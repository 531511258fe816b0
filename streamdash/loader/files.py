"""
File Snapshot Loader

Reads exported document snapshots, one file per entity kind, with Polars.
Supports CSV, JSON, JSON Lines and Parquet.
"""

import asyncio
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

import polars as pl
import structlog

from streamdash.config import get_settings
from streamdash.records import EntityKind

from .base import SnapshotLoader

logger = structlog.get_logger(__name__)


class FileFormat(str, Enum):
    """Supported snapshot file formats"""
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"


class FileSnapshotLoader(SnapshotLoader):
    """
    Loads ``<base_path>/<kind>.<format>`` snapshot files.

    Example:
        loader = FileSnapshotLoader("data/snapshots", FileFormat.PARQUET)
        rollups = await loader.load(EntityKind.DAILY_ROLLUPS)
    """

    def __init__(
        self,
        base_path: Optional[Union[str, Path]] = None,
        file_format: Optional[Union[str, FileFormat]] = None,
    ):
        settings = get_settings()
        self.base_path = Path(base_path or settings.snapshot.path)
        self.file_format = FileFormat(file_format or settings.snapshot.file_format)

    def path_for(self, kind: EntityKind) -> Path:
        return self.base_path / f"{EntityKind(kind).value}.{self.file_format.value}"

    def _read_file(self, path: Path) -> pl.DataFrame:
        """Read a snapshot file based on format"""
        readers = {
            FileFormat.CSV: lambda p: pl.read_csv(p, try_parse_dates=True),
            FileFormat.JSON: pl.read_json,
            FileFormat.JSONL: pl.read_ndjson,
            FileFormat.PARQUET: pl.read_parquet,
        }
        return readers[self.file_format](path)

    def _read_documents(self, kind: EntityKind) -> Sequence[Dict[str, Any]]:
        path = self.path_for(kind)
        if not path.exists():
            raise FileNotFoundError(f"Snapshot file not found: {path}")

        df = self._read_file(path)
        logger.debug("Snapshot file read", path=str(path), rows=len(df), columns=df.columns)
        return df.to_dicts()

    async def _fetch_documents(self, kind: EntityKind) -> Sequence[Dict[str, Any]]:
        return await asyncio.to_thread(self._read_documents, kind)
