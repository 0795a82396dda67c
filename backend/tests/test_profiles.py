import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm.exc import StaleDataError

from quizhub import database, profiles
from quizhub.errors import ConflictError, NotFoundError
from quizhub.schemas import ProfileCreate, ProfileSyncRequest, ProfileUpdate

MONDAY = datetime(2026, 5, 4, 9, 0, tzinfo=timezone.utc)


async def test_update_stats_unknown_profile(session):
    with pytest.raises(NotFoundError):
        await profiles.update_stats(session, uuid.uuid4(), 10)


async def test_update_stats_tracks_points_and_streak(session, make_profile):
    profile = await make_profile()

    await profiles.update_stats(session, profile.id, 40, now=MONDAY)
    await profiles.update_stats(session, profile.id, 15, completed=False, now=MONDAY)
    await profiles.update_stats(session, profile.id, 25, now=MONDAY + timedelta(days=1))
    updated = await profiles.update_stats(session, profile.id, 20, now=MONDAY + timedelta(days=1, hours=2))

    assert updated.total_points == 100
    assert updated.quizzes_completed == 3
    assert updated.current_streak == 2
    assert updated.longest_streak == 2


async def test_update_stats_persists(session, make_profile):
    profile = await make_profile()
    await profiles.update_stats(session, profile.id, 10, now=MONDAY)

    async with database.get_session_factory()() as fresh:
        stored = await profiles.get_profile(fresh, profile.id)

    assert stored.total_points == 10
    assert stored.current_streak == 1
    assert stored.last_quiz_date.date() == MONDAY.date()


async def test_stats_resume_after_gap(session, make_profile):
    profile = await make_profile()
    for offset in range(4):
        await profiles.update_stats(session, profile.id, 10, now=MONDAY + timedelta(days=offset))

    updated = await profiles.update_stats(session, profile.id, 10, now=MONDAY + timedelta(days=6))

    assert updated.current_streak == 1
    assert updated.longest_streak == 4


async def test_stale_profile_write_is_rejected(session, make_profile):
    profile = await make_profile()
    user_id = profile.id

    async with database.get_session_factory()() as other:
        await profiles.update_stats(other, user_id, 5, now=MONDAY)

    # ``profile`` still holds the pre-update version
    profile.total_points = profile.total_points + 100
    with pytest.raises(StaleDataError):
        await session.commit()
    await session.rollback()

    stored = await profiles.get_profile(session, user_id)
    await session.refresh(stored)
    assert stored.total_points == 5


async def test_profile_update_retries_after_stale_write(session):
    calls = []

    async def operation():
        calls.append(1)
        if len(calls) == 1:
            raise StaleDataError("version mismatch")
        return "done"

    result = await profiles.run_profile_update(session, operation, user_id="u1")

    assert result == "done"
    assert len(calls) == 2


async def test_profile_update_gives_up(session, monkeypatch):
    monkeypatch.setattr(profiles.settings, "stats_update_retries", 2)

    async def operation():
        raise StaleDataError("version mismatch")

    with pytest.raises(ConflictError):
        await profiles.run_profile_update(session, operation)


async def test_leaderboards_sorted_and_limited(session, make_profile):
    for points, streak in [(50, 1), (300, 2), (10, 9), (120, 4), (90, 0)]:
        await make_profile(total_points=points, current_streak=streak, longest_streak=streak)

    by_points = await profiles.get_leaderboard(session, 3)
    assert [p.total_points for p in by_points] == [300, 120, 90]

    by_streak = await profiles.get_streak_leaderboard(session, 0)
    assert [p.current_streak for p in by_streak] == [9, 4, 2, 1, 0]

    everyone = await profiles.get_leaderboard(session, -1)
    assert len(everyone) == 5


async def test_create_profile_rejects_duplicates(session, make_profile):
    existing = await make_profile(email="taken@example.com")

    with pytest.raises(ConflictError):
        await profiles.create_profile(session, ProfileCreate(id=uuid.uuid4(), email="taken@example.com"))
    with pytest.raises(ConflictError):
        await profiles.create_profile(session, ProfileCreate(id=existing.id, email="other@example.com"))


async def test_sync_creates_then_updates_only_changed_fields(session):
    user_id = uuid.uuid4()

    profile, created = await profiles.sync_profile_after_signup(
        session, ProfileSyncRequest(user_id=user_id, email="sync@example.com", full_name="Sam")
    )
    assert created is True
    assert profile.total_points == 0
    assert profile.full_name == "Sam"

    await profiles.update_stats(session, user_id, 30, now=MONDAY)

    profile, created = await profiles.sync_profile_after_signup(
        session,
        ProfileSyncRequest(
            user_id=user_id,
            email="changed@example.com",
            full_name="Samantha",
            avatar_url="https://img.example.com/sam.png",
        ),
    )
    assert created is False
    assert profile.full_name == "Samantha"
    assert profile.avatar_url == "https://img.example.com/sam.png"
    assert profile.email == "sync@example.com"
    assert profile.total_points == 30


async def test_sync_without_changes_keeps_timestamp(session):
    user_id = uuid.uuid4()
    profile, _ = await profiles.sync_profile_after_signup(
        session, ProfileSyncRequest(user_id=user_id, email="same@example.com", full_name="Kim")
    )
    before = profile.updated_at

    profile, created = await profiles.sync_profile_after_signup(
        session, ProfileSyncRequest(user_id=user_id, email="same@example.com", full_name="Kim")
    )

    assert created is False
    assert profile.updated_at == before


async def test_update_and_delete_profile(session, make_profile):
    profile = await make_profile(full_name="Old")

    updated = await profiles.update_profile(session, profile.id, ProfileUpdate(full_name="New"))
    assert updated.full_name == "New"

    await profiles.delete_profile(session, profile.id)
    assert await profiles.get_profile(session, profile.id) is None

    with pytest.raises(NotFoundError):
        await profiles.delete_profile(session, profile.id)
    with pytest.raises(NotFoundError):
        await profiles.update_profile(session, profile.id, ProfileUpdate(full_name="Gone"))


async def test_sync_rejects_email_of_another_profile(session, make_profile):
    await make_profile(email="carol@example.com")

    with pytest.raises(ConflictError):
        await profiles.sync_profile_after_signup(
            session, ProfileSyncRequest(user_id=uuid.uuid4(), email="carol@example.com")
        )
