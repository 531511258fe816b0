"""
Synthetic Snapshot Generator

Writes users, content and daily_rollups snapshots that the file loader and
the dashboard API can serve. Values are vectorized with numpy, then written
with polars.

Usage:
    python scripts/generate_snapshot.py --users 20000 --content 1500 --days 400
"""

import argparse
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

import numpy as np
import polars as pl
from faker import Faker

from streamdash.config import get_settings

fake = Faker("en_IN")
np.random.seed(42)
Faker.seed(42)

GENRES = ["Drama", "Comedy", "Thriller", "Action", "Romance", "Horror", "Documentary", "Family"]
LANGUAGES = ["Hindi", "English", "Tamil", "Telugu", "Malayalam", "Bengali", "Marathi"]
DEVICES = ["android", "ios", "web", "smart_tv", "mobile_web", "desktop"]
STATUSES = ["active", "inactive", "cancelled", "expired"]


def generate_users(n: int, now: datetime) -> pl.DataFrame:
    print(f"Generating {n:,} users...")

    age_days = np.random.exponential(scale=120, size=n).clip(0, 720)
    created = [now - timedelta(days=float(d)) for d in age_days]
    # Activity decays with account age; some users never come back
    idle_days = np.minimum(age_days, np.random.exponential(scale=20, size=n))
    last_active = [now - timedelta(days=float(d)) for d in idle_days]
    never_returned = np.random.random(n) < 0.15
    last_active = [c if gone else a for c, a, gone in zip(created, last_active, never_returned)]

    cities = [fake.city() for _ in range(40)]
    return pl.DataFrame({
        "id": [str(uuid.uuid4()) for _ in range(n)],
        "createdAt": created,
        "lastActive": last_active,
        "subscriptionStatus": np.random.choice(STATUSES, n, p=[0.35, 0.45, 0.12, 0.08]),
        "deviceType": np.random.choice(DEVICES, n, p=[0.40, 0.20, 0.15, 0.12, 0.08, 0.05]),
        "location": np.random.choice(cities, n),
    })


def generate_content(n: int, now: datetime) -> pl.DataFrame:
    print(f"Generating {n:,} content titles...")

    views = np.random.lognormal(mean=8, sigma=1.5, size=n).astype(int)
    genre_counts = np.random.randint(1, 4, n)
    rated = np.random.random(n) < 0.8

    return pl.DataFrame({
        "id": [str(uuid.uuid4()) for _ in range(n)],
        "type": np.random.choice(["movie", "series", "short_film"], n, p=[0.5, 0.3, 0.2]),
        "title": [fake.catch_phrase() for _ in range(n)],
        "views": views,
        "watchCount": (views * np.random.uniform(0.2, 0.8, n)).astype(int),
        "watchTime": np.round(views * np.random.uniform(5, 90, n), 1),
        "likes": (views * np.random.uniform(0.01, 0.1, n)).astype(int),
        "comments": (views * np.random.uniform(0.001, 0.02, n)).astype(int),
        "shares": (views * np.random.uniform(0.001, 0.01, n)).astype(int),
        "rating": np.where(rated, np.round(np.random.uniform(1, 5, n), 1), 0.0),
        "genres": [list(np.random.choice(GENRES, k, replace=False)) for k in genre_counts],
        "language": np.random.choice(LANGUAGES, n),
        "isPremium": np.random.random(n) < 0.3,
        "createdAt": [now - timedelta(days=int(d)) for d in np.random.randint(0, 720, n)],
    })


def generate_rollups(days: int, now: datetime) -> pl.DataFrame:
    print(f"Generating {days:,} daily rollups...")

    trend = np.linspace(0.6, 1.0, days)
    weekly = 1 + 0.15 * np.sin(np.arange(days) * 2 * np.pi / 7)
    peak_users = (20000 * trend * weekly * np.random.uniform(0.9, 1.1, days)).astype(int)
    premium = (peak_users * np.random.uniform(0.2, 0.3, days)).astype(int)
    views = (peak_users * np.random.uniform(3, 6, days)).astype(int)
    start = (now - timedelta(days=days)).date()

    return pl.DataFrame({
        "date": [start + timedelta(days=i) for i in range(days)],
        "revenue": np.round(premium * np.random.uniform(8, 12, days), 2),
        "peakUsers": peak_users,
        "views": views,
        "engagementScore": np.round(np.random.uniform(55, 85, days), 1),
        "peakPremiumUsers": premium,
        "watchTimeMinutes": np.round(views * np.random.uniform(20, 40, days), 1),
        "newUsers": (peak_users * np.random.uniform(0.01, 0.03, days)).astype(int),
        "activeUsers": (peak_users * np.random.uniform(0.5, 0.7, days)).astype(int),
    })


def write(df: pl.DataFrame, path: Path) -> None:
    fmt = path.suffix.lstrip(".")
    if fmt == "parquet":
        df.write_parquet(path)
    elif fmt == "json":
        df.write_json(path)
    elif fmt == "jsonl":
        df.write_ndjson(path)
    else:
        df.write_csv(path)
    print(f"   {path.name}: {len(df):,} rows")


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Generate synthetic dashboard snapshots")
    parser.add_argument("--users", type=int, default=20000)
    parser.add_argument("--content", type=int, default=1500)
    parser.add_argument("--days", type=int, default=400)
    parser.add_argument("--output", type=Path, default=Path(settings.snapshot.path))
    parser.add_argument("--format", default=settings.snapshot.file_format,
                        choices=["parquet", "json", "jsonl", "csv"])
    args = parser.parse_args()

    if args.format == "csv":
        # genres is a list column
        parser.error("csv cannot hold the content genres list; use parquet or json")

    now = datetime.now(timezone.utc).replace(microsecond=0)
    args.output.mkdir(parents=True, exist_ok=True)

    write(generate_users(args.users, now), args.output / f"users.{args.format}")
    write(generate_content(args.content, now), args.output / f"content.{args.format}")
    write(generate_rollups(args.days, now), args.output / f"daily_rollups.{args.format}")
    print(f"Snapshots written to {args.output}")


if __name__ == "__main__":
    main()
