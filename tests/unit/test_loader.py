"""
Unit Tests - Snapshot Loaders
"""
from datetime import datetime, timedelta, timezone

import polars as pl
import pytest

from streamdash.loader import (
    FileFormat,
    FileSnapshotLoader,
    FilterClause,
    InMemorySnapshotLoader,
)
from streamdash.records import ContentRecord, DailyRollupRecord, EntityKind, UserRecord

UTC = timezone.utc


class TestFilterClause:
    """Tests for record predicates"""

    def test_unknown_operator(self):
        with pytest.raises(ValueError):
            FilterClause("views", "~=", 1)

    def test_none_attribute_never_matches(self):
        content = ContentRecord.model_validate({"id": "a"})
        assert not FilterClause("created_at", "<", datetime(2030, 1, 1, tzinfo=UTC)).matches(content)

    def test_naive_datetime_value_is_utc(self):
        user = UserRecord.model_validate({"id": "u", "createdAt": "2024-01-02T00:00:00Z"})
        assert FilterClause("created_at", ">", datetime(2024, 1, 1)).matches(user)

    def test_in_operator(self):
        user = UserRecord.model_validate({"id": "u", "location": "Goa"})
        assert FilterClause("location", "in", {"Goa", "Pune"}).matches(user)
        assert not FilterClause("location", "in", ["Delhi"]).matches(user)


class TestInMemorySnapshotLoader:
    """Tests for the in-memory loader"""

    @pytest.mark.asyncio
    async def test_load_parses_records(self, memory_loader):
        users = await memory_loader.load(EntityKind.USERS)

        assert isinstance(users, tuple)
        assert len(users) == 6
        assert all(isinstance(user, UserRecord) for user in users)

    @pytest.mark.asyncio
    async def test_filters(self, memory_loader, now):
        users = await memory_loader.load(
            "users",
            filters=[
                FilterClause("created_at", "<=", now),
                FilterClause("location", "==", "Mumbai"),
            ],
        )

        assert sorted(user.id for user in users) == ["u1", "u5"]

    @pytest.mark.asyncio
    async def test_order_and_limit(self, memory_loader):
        titles = await memory_loader.load(EntityKind.CONTENT, order_by="-views", limit=2)

        assert [title.id for title in titles] == ["c2", "c1"]

    @pytest.mark.asyncio
    async def test_order_puts_missing_values_last(self, memory_loader):
        titles = await memory_loader.load(EntityKind.CONTENT, order_by="created_at")
        assert len(titles) == 3

    @pytest.mark.asyncio
    async def test_order_by_property(self, memory_loader, now):
        rollups = await memory_loader.load(
            EntityKind.DAILY_ROLLUPS,
            filters=[FilterClause("timestamp", ">=", now - timedelta(days=3))],
            order_by="-date",
        )

        assert [r.date for r in rollups] == [
            (now - timedelta(days=d)).date() for d in (1, 2, 3)
        ]

    @pytest.mark.asyncio
    async def test_negative_limit(self, memory_loader):
        with pytest.raises(ValueError):
            await memory_loader.load(EntityKind.USERS, limit=-1)

    @pytest.mark.asyncio
    async def test_unknown_kind_is_empty(self):
        assert await InMemorySnapshotLoader().load(EntityKind.CONTENT) == ()


class TestFileSnapshotLoader:
    """Tests for the Polars file loader"""

    @pytest.fixture
    def rollups_df(self) -> pl.DataFrame:
        return pl.DataFrame({
            "date": ["2024-06-01", "2024-06-02", "2024-06-03"],
            "revenue": [10.0, 20.0, 30.0],
            "peakUsers": [100, 110, None],
        })

    def test_path_for(self, tmp_path):
        loader = FileSnapshotLoader(tmp_path, "jsonl")
        assert loader.path_for(EntityKind.DAILY_ROLLUPS) == tmp_path / "daily_rollups.jsonl"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_format", list(FileFormat))
    async def test_reads_every_format(self, tmp_path, rollups_df, file_format):
        loader = FileSnapshotLoader(tmp_path, file_format)
        path = loader.path_for(EntityKind.DAILY_ROLLUPS)
        writers = {
            FileFormat.CSV: rollups_df.write_csv,
            FileFormat.JSON: rollups_df.write_json,
            FileFormat.JSONL: rollups_df.write_ndjson,
            FileFormat.PARQUET: rollups_df.write_parquet,
        }
        writers[file_format](path)

        rollups = await loader.load(EntityKind.DAILY_ROLLUPS, order_by="-revenue")

        assert all(isinstance(r, DailyRollupRecord) for r in rollups)
        assert [r.revenue for r in rollups] == [30.0, 20.0, 10.0]
        assert rollups[0].peak_users == 0

    @pytest.mark.asyncio
    async def test_parquet_datetimes_and_lists(self, tmp_path):
        created = datetime(2024, 5, 1, 8, 30, tzinfo=UTC)
        pl.DataFrame({
            "id": ["c1"],
            "type": ["series"],
            "views": [10],
            "genres": [["Drama", "Romance"]],
            "createdAt": [created],
        }).write_parquet(tmp_path / "content.parquet")

        (content,) = await FileSnapshotLoader(tmp_path, "parquet").load(EntityKind.CONTENT)

        assert content.genres == ("Drama", "Romance")
        assert content.created_at == created

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await FileSnapshotLoader(tmp_path, "parquet").load(EntityKind.USERS)

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            FileSnapshotLoader(tmp_path, "xlsx")
