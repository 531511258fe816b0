"""
Test Suite Configuration
"""
import fnmatch
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest

from streamdash.config import MetricsSettings
from streamdash.loader import InMemorySnapshotLoader
from streamdash.records import EntityKind

NOW = datetime(2024, 6, 15, tzinfo=timezone.utc)


def days_ago(days: float, hours: float = 0) -> datetime:
    return NOW - timedelta(days=days, hours=hours)


@pytest.fixture
def now() -> datetime:
    """Reference instant shared by the fixtures (midnight UTC)"""
    return NOW


@pytest.fixture
def metrics_settings() -> MetricsSettings:
    return MetricsSettings()


@pytest.fixture
def user_documents() -> List[Dict[str, Any]]:
    """Raw user documents in the document store's camelCase shape"""
    return [
        {
            "id": "u1",
            "createdAt": days_ago(7),
            "lastActive": days_ago(1),
            "subscriptionStatus": "active",
            "deviceType": "Android",
            "location": "Mumbai",
        },
        {
            "id": "u2",
            "createdAt": days_ago(7, hours=1),
            "lastActive": days_ago(7, hours=1),
            "subscriptionStatus": "inactive",
            "deviceType": "desktop",
            "location": "Pune",
        },
        {
            "id": "u3",
            "createdAt": days_ago(30),
            "lastLogin": days_ago(0, hours=2),
            "subscription": {"status": "cancelled"},
            "deviceType": "Smart TV",
            "city": "Delhi",
        },
        {
            "id": "u4",
            "createdAt": days_ago(100),
            "lastActive": days_ago(40),
            "subscriptionStatus": "expired",
            "deviceType": "web",
        },
        {
            "id": "u5",
            "createdAt": days_ago(1),
            "lastActive": days_ago(0, hours=1),
            "subscriptionStatus": "trial",
            "deviceType": "iOS",
            "location": "Mumbai",
        },
        {
            # Signs up after the reference instant
            "id": "u6",
            "createdAt": NOW + timedelta(days=1),
            "lastActive": NOW + timedelta(days=1),
            "subscriptionStatus": "active",
            "deviceType": "Android",
            "location": "Chennai",
        },
    ]


@pytest.fixture
def content_documents() -> List[Dict[str, Any]]:
    """Raw catalogue documents"""
    return [
        {
            "id": "c1",
            "type": "movie",
            "title": "Alpha",
            "views": 1000,
            "watchCount": 400,
            "watchTime": 600,
            "likes": 50,
            "comments": 10,
            "shares": 5,
            "rating": 4.6,
            "genre": ["Action", "Drama"],
            "language": "Hindi",
            "isPremium": True,
            "createdAt": days_ago(2),
        },
        {
            "id": "c2",
            "type": "webseries",
            "title": "Beta",
            "views": 3000,
            "watchCount": 1500,
            "watchTime": 1200,
            "likes": 100,
            "commentsCount": 20,
            "shares": 10,
            "rating": {"average": 3.4},
            "genre": "Drama",
            "language": "English",
            "createdAt": days_ago(1, hours=12),
        },
        {
            "id": "c3",
            "type": "shortfilm",
            "title": "Gamma",
            "views": None,
            "rating": None,
        },
    ]


@pytest.fixture
def rollup_documents() -> List[Dict[str, Any]]:
    """
    Sixty daily rollups ending the day before ``NOW`` plus one older day.

    The first thirty days form the previous 30-day window, the last thirty
    the current one.
    """
    documents = [
        {
            "date": (NOW - timedelta(days=90)).date().isoformat(),
            "revenue": 99999,
            "peakUsers": 99999,
        }
    ]
    for index in range(60):
        day = (NOW - timedelta(days=60 - index)).date()
        current = index >= 30
        documents.append({
            "date": day.isoformat(),
            "revenue": 40.0 if current else 100.0 / 3,
            "peakUsers": 120 if current else 100,
            "views": 330 if current else 300,
            "engagementScore": 60.0 if current else 50.0,
            "peakPremiumUsers": 30 if current else 20,
            "watchTimeMinutes": 1200 if current else 600,
        })
    return documents


@pytest.fixture
def snapshot_documents(user_documents, content_documents, rollup_documents):
    return {
        EntityKind.USERS: user_documents,
        EntityKind.CONTENT: content_documents,
        EntityKind.DAILY_ROLLUPS: rollup_documents,
    }


@pytest.fixture
def memory_loader(snapshot_documents) -> InMemorySnapshotLoader:
    return InMemorySnapshotLoader(snapshot_documents)


class FakeRedis:
    """Minimal in-memory stand-in for the async Redis client"""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail = False

    def _check(self):
        if self.fail:
            from redis.exceptions import ConnectionError
            raise ConnectionError("redis unavailable")

    async def ping(self):
        self._check()
        return True

    async def get(self, key):
        self._check()
        return self.store.get(key)

    async def set(self, key, value):
        self._check()
        self.store[key] = value
        self.ttls.pop(key, None)
        return True

    async def setex(self, key, ttl, value):
        self._check()
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def delete(self, *keys):
        self._check()
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def keys(self, pattern):
        self._check()
        return [key for key in self.store if fnmatch.fnmatch(key, pattern)]

    def expire_fresh(self):
        """Drop every key that carries a TTL, as if it had expired"""
        for key in list(self.ttls):
            self.store.pop(key, None)
            self.ttls.pop(key, None)


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    from streamdash.serving import cache

    client = FakeRedis()
    monkeypatch.setattr(cache, "_redis_client", client)
    return client
