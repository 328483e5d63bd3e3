"""Tests for the leaderboard cache projection."""

from datetime import datetime, timezone

import pytest

from app.models.leaderboard import LeaderboardEntry
from app.services.leaderboard import LeaderboardAggregator, LeaderboardCache
from app.services.leaderboard.cache import CACHE_TABLE
from tests.conftest import days_ago, seed_challenge, seed_participant, seed_workout


def _entry(user_id, volume, rank, change=0.0):
    return LeaderboardEntry(
        user_id=user_id,
        username=user_id,
        current_volume=volume,
        percentage_change=change,
        rank=rank,
    )


@pytest.mark.asyncio
async def test_upserting_twice_keeps_one_row_with_latest_values(supabase):
    cache = LeaderboardCache(supabase)

    await cache.write("challenge-1", [_entry("user-a", 600, 1)])
    await cache.write("challenge-1", [_entry("user-a", 900, 1, change=50.0)])

    rows = [r for r in supabase.rows(CACHE_TABLE) if r["user_id"] == "user-a"]
    assert len(rows) == 1
    assert rows[0]["current_volume"] == 900
    assert rows[0]["percentage_change"] == 50.0


@pytest.mark.asyncio
async def test_rows_are_scoped_per_challenge(supabase):
    cache = LeaderboardCache(supabase)

    await cache.write("challenge-1", [_entry("user-a", 600, 1)])
    await cache.write("challenge-2", [_entry("user-a", 100, 1)])

    assert len(supabase.rows(CACHE_TABLE)) == 2
    [entry] = await cache.read("challenge-2")
    assert entry.current_volume == 100


@pytest.mark.asyncio
async def test_read_orders_by_volume_then_stored_rank(supabase):
    cache = LeaderboardCache(supabase)
    await cache.write(
        "challenge-1",
        [_entry("user-b", 500, 1), _entry("user-a", 500, 2), _entry("user-c", 700, 3)],
    )

    entries = await cache.read("challenge-1", viewer_id="user-a")

    assert [e.user_id for e in entries] == ["user-c", "user-b", "user-a"]
    assert [e.rank for e in entries] == [1, 2, 3]
    assert [e.is_you for e in entries] == [False, False, True]


@pytest.mark.asyncio
async def test_read_applies_limit_after_ordering(supabase):
    cache = LeaderboardCache(supabase)
    await cache.write("challenge-1", [_entry("user-a", 100, 1), _entry("user-b", 900, 2)])

    [top] = await cache.read("challenge-1", limit=1)

    assert top.user_id == "user-b"


@pytest.mark.asyncio
async def test_writing_no_entries_leaves_cache_untouched(supabase):
    cache = LeaderboardCache(supabase)
    await cache.write("challenge-1", [_entry("user-a", 100, 1)])

    await cache.write("challenge-1", [])

    assert len(supabase.rows(CACHE_TABLE)) == 1


@pytest.mark.asyncio
async def test_departed_participants_are_not_deleted(supabase):
    cache = LeaderboardCache(supabase)
    await cache.write("challenge-1", [_entry("user-a", 100, 1), _entry("user-b", 50, 2)])

    await cache.write("challenge-1", [_entry("user-a", 200, 1)])

    assert {e.user_id for e in await cache.read("challenge-1")} == {"user-a", "user-b"}


@pytest.mark.asyncio
async def test_cache_round_trip_matches_direct_aggregation(supabase):
    seed_challenge(supabase, "challenge-1")
    for index, user_id in enumerate(["user-d", "user-a", "user-c", "user-b", "user-e"]):
        seed_participant(supabase, "challenge-1", user_id, user_id, joined_at=days_ago(6 - index * 0.1))
    # user-a and user-c tie at 800, user-d and user-e tie at 0
    seed_workout(supabase, "user-a", days_ago(2), [[(10, 80)]])
    seed_workout(supabase, "user-c", days_ago(2), [[(8, 100)]])
    seed_workout(supabase, "user-b", days_ago(4), [[(10, 40)]])
    seed_workout(supabase, "user-b", days_ago(1), [[(10, 30)], [(5, 20)]])

    aggregator = LeaderboardAggregator(supabase)
    cache = LeaderboardCache(supabase)
    stamp = datetime.now(timezone.utc)

    direct = await aggregator.aggregate("challenge-1", updated_at=stamp)
    await cache.write("challenge-1", direct, updated_at=stamp)
    cached = await cache.read("challenge-1")

    def project(entries):
        return [(e.user_id, e.current_volume, e.percentage_change, e.rank) for e in entries]

    assert project(cached) == project(direct)
    assert [e.user_id for e in direct] == ["user-a", "user-c", "user-b", "user-d", "user-e"]


@pytest.mark.asyncio
async def test_rows_without_rank_sort_after_ranked_ties_by_user_id(supabase):
    stamp = datetime.now(timezone.utc).isoformat()
    supabase.tables[CACHE_TABLE] = [
        {"challenge_id": "challenge-1", "user_id": uid, "username": uid,
         "current_volume": 400, "percentage_change": 0, "rank": rank, "updated_at": stamp}
        for uid, rank in [("user-z", None), ("user-m", 2), ("user-b", None)]
    ]

    entries = await LeaderboardCache(supabase).read("challenge-1")

    assert [e.user_id for e in entries] == ["user-m", "user-b", "user-z"]
    assert [e.rank for e in entries] == [1, 2, 3]
